from richoz_api import models
from richoz_api.services.regie_matcher import (
    active_regies, clean_title, extract_title_keyword, find_regie_by_keyword, match_regie,
)


def _regie(id, name, contact=None, domains=None, active=True):
    return models.Regie(id=id, name=name, keyword=name.upper(), email_contact=contact,
                        email_domains=domains or [], is_active=active)


def test_exact_contact_wins_over_domain_of_earlier_regie():
    regies = [
        _regie("r1", "Alpha", domains=["gerance.ch"]),
        _regie("r2", "Beta", contact="jean@gerance.ch"),
    ]
    assert match_regie("Jean@Gerance.ch", regies) == "r2"


def test_domain_match_is_case_insensitive():
    regies = [_regie("r1", "Alpha", domains=["Acme-Immo.CH"])]
    assert match_regie("someone@acme-immo.ch", regies) == "r1"


def test_first_regie_wins_on_shared_domain():
    regies = [_regie("r1", "Alpha", domains=["shared.ch"]), _regie("r2", "Beta", domains=["shared.ch"])]
    assert match_regie("x@shared.ch", regies) == "r1"


def test_no_match_and_malformed_sender():
    regies = [_regie("r1", "Alpha", domains=["acme.ch"])]
    assert match_regie("x@other.ch", regies) is None
    assert match_regie("not-an-email", regies) is None
    assert match_regie("", regies) is None
    assert match_regie(None, regies) is None


def test_inactive_regie_is_skipped():
    regies = [_regie("r1", "Alpha", contact="a@acme.ch", domains=["acme.ch"], active=False)]
    assert match_regie("a@acme.ch", regies) is None


def test_active_regies_are_ordered_by_name(db, regies):
    db.add(models.Regie(name="Zeta", keyword="ZETA", is_active=False))
    db.commit()
    names = [r.name for r in active_regies(db)]
    assert names == ["ACME Immobilier", "Beta Gérance"]


def test_find_regie_by_keyword(db, regies):
    assert find_regie_by_keyword(db, "acme").id == regies["acme"].id
    assert find_regie_by_keyword(db, " BETA ").id == regies["beta"].id
    assert find_regie_by_keyword(db, "UNKNOWN") is None
    assert find_regie_by_keyword(db, None) is None


def test_title_keyword():
    assert extract_title_keyword("[ACME] Fuite cuisine") == "ACME"
    assert extract_title_keyword("Fuite cuisine") is None
    assert extract_title_keyword("[acme] minuscules") is None
    assert clean_title("[ACME] Fuite cuisine") == "Fuite cuisine"
    assert clean_title("Fuite cuisine") == "Fuite cuisine"


def test_title_keyword_only_as_prefix():
    assert extract_title_keyword("  [ACME] Fuite cuisine") == "ACME"
    assert extract_title_keyword("Fuite cuisine [ACME]") is None
    assert clean_title("Fuite [ACME] cuisine") == "Fuite [ACME] cuisine"

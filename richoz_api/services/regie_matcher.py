"""
Rattachement d'un email ou d'un événement d'agenda à une régie.
"""
import re
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from .. import models

TITLE_KEYWORD_RE = re.compile(r"^\s*\[([A-Z]+)\]")
TITLE_PREFIX_RE = re.compile(r"^\s*\[[A-Z]+\]\s*")


def match_regie(from_email: Optional[str], regies: Iterable[models.Regie]) -> Optional[str]:
    """
    Retourne l'id de la régie correspondant à l'expéditeur, ou None.

    1. adresse de contact identique (insensible à la casse), toutes régies confondues ;
    2. sinon, domaine de l'expéditeur présent dans email_domains.
    Premier trouvé gagne, dans l'ordre fourni (voir active_regies).
    """
    if not from_email or "@" not in from_email:
        return None
    address = from_email.strip().lower()
    domain = address.rsplit("@", 1)[1]
    if not domain:
        return None

    candidates = [r for r in regies if r.is_active]
    for regie in candidates:
        if regie.email_contact and regie.email_contact.strip().lower() == address:
            return regie.id
    for regie in candidates:
        domains = [d.strip().lower().lstrip("@") for d in (regie.email_domains or [])]
        if domain in domains:
            return regie.id
    return None


def active_regies(db: Session) -> List[models.Regie]:
    # Ordre stable (nom puis id) pour départager deux régies sur le même domaine
    return (
        db.query(models.Regie)
        .filter(models.Regie.is_active == True)
        .order_by(models.Regie.name, models.Regie.id)
        .all()
    )


def find_regie_by_keyword(db: Session, keyword: Optional[str]) -> Optional[models.Regie]:
    if not keyword or not keyword.strip():
        return None
    return (
        db.query(models.Regie)
        .filter(func.lower(models.Regie.keyword) == keyword.strip().lower(), models.Regie.is_active == True)
        .first()
    )


def extract_title_keyword(title: str) -> Optional[str]:
    """"[ACME] Fuite cuisine" -> "ACME"."""
    match = TITLE_KEYWORD_RE.match(title or "")
    return match.group(1) if match else None


def clean_title(title: str) -> str:
    return TITLE_PREFIX_RE.sub("", title or "", count=1).strip()

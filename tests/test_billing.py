import pytest
from datetime import timedelta

from richoz_api import models
from richoz_api.errors import BusinessRuleError
from richoz_api.schemas import LineItem
from richoz_api.services import billing
from richoz_api.utils import utcnow


def test_totals_with_swiss_vat():
    items = [LineItem(description="Main d'oeuvre", quantity=1, unit_price=150)]
    totals = billing.compute_totals(items, 7.7)
    assert totals["subtotal"] == 150.0
    assert totals["discount_amount"] == 0.0
    assert totals["vat_amount"] == 11.55
    assert totals["total"] == 161.55


def test_totals_with_percentage_discount():
    items = [LineItem(description="A", quantity=2, unit_price=50), LineItem(description="B", quantity=1, unit_price=100)]
    totals = billing.compute_totals(items, 7.7, discount_percentage=10)
    assert totals["subtotal"] == 200.0
    assert totals["discount_amount"] == 20.0
    assert totals["vat_amount"] == 13.86
    assert totals["total"] == 193.86


def test_explicit_discount_takes_precedence():
    items = [LineItem(description="A", quantity=1, unit_price=100)]
    totals = billing.compute_totals(items, 7.7, discount_amount=5, discount_percentage=50)
    assert totals["discount_amount"] == 5.0
    assert totals["total"] == 102.32


def test_vat_rounds_half_up():
    # 25 * 7.7% = 1.925 -> 1.93
    items = [LineItem(description="A", quantity=1, unit_price=25)]
    totals = billing.compute_totals(items, 7.7)
    assert totals["vat_amount"] == 1.93
    assert totals["total"] == 26.93


def test_discount_larger_than_subtotal_is_refused():
    items = [LineItem(description="A", quantity=1, unit_price=10)]
    with pytest.raises(BusinessRuleError):
        billing.compute_totals(items, 7.7, discount_amount=11)


def test_line_total_is_computed():
    assert LineItem(description="A", quantity=3, unit_price=12.5).total == 37.5


def test_next_number_sequence(db):
    year = utcnow().year
    assert billing.next_number(db, models.Invoice.invoice_number, "F") == f"F-{year}-0001"
    db.add(models.Invoice(invoice_number=f"F-{year}-0007", vat_rate=7.7))
    db.add(models.Invoice(invoice_number=f"F-{year - 1}-0042", vat_rate=7.7))
    db.commit()
    assert billing.next_number(db, models.Invoice.invoice_number, "F") == f"F-{year}-0008"
    assert billing.next_number(db, models.Quote.quote_number, "D") == f"D-{year}-0001"


def test_is_overdue():
    now = utcnow()
    old_sent = models.Invoice(status="sent", date=now - timedelta(days=31))
    recent_sent = models.Invoice(status="sent", date=now - timedelta(days=5))
    old_paid = models.Invoice(status="paid", date=now - timedelta(days=90))
    assert billing.is_overdue(old_sent, 30, now)
    assert not billing.is_overdue(recent_sent, 30, now)
    assert not billing.is_overdue(old_paid, 30, now)

"""
Facturation : totaux (rabais, TVA), numérotation, statut "en retard" calculé.
"""
import logging
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from .. import models
from ..config import Settings
from ..errors import BusinessRuleError, ConflictError, NotFoundError
from ..models.billing import (
    INVOICE_SENT, QUOTE_DRAFT, QUOTE_SENT, QUOTE_ACCEPTED, QUOTE_REJECTED, QUOTE_EXPIRED,
)
from ..models.interventions import BILLED
from ..models.reports import VALIDATED
from ..schemas.billing import LineItem, QuoteCreate
from ..utils import utcnow
from . import audit, workflow

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

QUOTE_TRANSITIONS = {
    QUOTE_DRAFT: {QUOTE_SENT, QUOTE_EXPIRED},
    QUOTE_SENT: {QUOTE_ACCEPTED, QUOTE_REJECTED, QUOTE_EXPIRED},
}


def compute_totals(line_items: Iterable[LineItem], vat_rate: float,
                   discount_amount: Optional[float] = None, discount_percentage: float = 0) -> dict:
    """
    Sous-total = somme des lignes ; rabais en montant (prioritaire) ou en pourcentage ;
    TVA appliquée au montant après rabais, arrondie au centime.
    """
    subtotal = sum((Decimal(str(item.total)) for item in line_items), Decimal("0"))
    if discount_amount is not None:
        discount = Decimal(str(discount_amount))
    else:
        discount = subtotal * Decimal(str(discount_percentage or 0)) / 100
    discount = discount.quantize(CENT, rounding=ROUND_HALF_UP)
    subtotal = subtotal.quantize(CENT, rounding=ROUND_HALF_UP)
    if discount > subtotal:
        raise BusinessRuleError("Le rabais dépasse le sous-total")

    taxable = subtotal - discount
    vat_amount = (taxable * Decimal(str(vat_rate)) / 100).quantize(CENT, rounding=ROUND_HALF_UP)
    total = (taxable + vat_amount).quantize(CENT, rounding=ROUND_HALF_UP)
    return {
        "subtotal": float(subtotal),
        "discount_amount": float(discount),
        "vat_rate": vat_rate,
        "vat_amount": float(vat_amount),
        "total": float(total),
    }


def next_number(db: Session, column, prefix: str) -> str:
    """F-2026-0001, F-2026-0002... (séquence par année)."""
    year_prefix = f"{prefix}-{utcnow().year}-"
    numbers = [n for (n,) in db.query(column).filter(column.like(f"{year_prefix}%")).all()]
    last = 0
    for n in numbers:
        try:
            last = max(last, int(n[len(year_prefix):]))
        except ValueError:
            continue
    return f"{year_prefix}{last + 1:04d}"


def is_overdue(invoice: models.Invoice, overdue_days: int, now: Optional[datetime] = None) -> bool:
    if invoice.status != INVOICE_SENT or invoice.date is None:
        return False
    now = now or utcnow()
    return invoice.date < now - timedelta(days=overdue_days)


def default_line_items(report: models.Report) -> list:
    """Lignes proposées à partir du matériel saisi par le technicien."""
    items = []
    for m in report.materials_used or []:
        items.append(LineItem(
            description=m.get("name", ""),
            quantity=m.get("quantity", 1),
            unit_price=m.get("unit_price", 0),
        ))
    return items


def create_invoice_for_report(db: Session, report: models.Report, line_items: list, settings: Settings,
                              discount_amount: Optional[float] = None, notes: Optional[str] = None,
                              user: Optional[models.User] = None):
    """
    Crée la facture d'un rapport validé et facturable ; intervention -> billed.
    Retourne (facture, créée). Une facture existante est renvoyée telle quelle.
    """
    existing = db.query(models.Invoice).filter(models.Invoice.report_id == report.id).first()
    if existing:
        return existing, False

    if report.status != VALIDATED:
        raise ConflictError("Le rapport doit être validé avant facturation")
    if not report.is_billable:
        raise BusinessRuleError("Ce rapport n'est pas facturable")
    if not line_items:
        raise BusinessRuleError("Aucune ligne à facturer")

    intervention = report.intervention
    if intervention is None:
        raise NotFoundError("Intervention non trouvée")
    workflow.ensure_transition(intervention, BILLED)

    regie = intervention.regie
    totals = compute_totals(
        line_items,
        settings.vat_rate,
        discount_amount=discount_amount,
        discount_percentage=regie.discount_percentage if regie else 0,
    )
    client_name = regie.name if regie else (intervention.client_info or {}).get("name", "")

    invoice = models.Invoice(
        invoice_number=next_number(db, models.Invoice.invoice_number, "F"),
        report_id=report.id,
        intervention_id=intervention.id,
        client_name=client_name or "",
        client_address=intervention.address or "",
        line_items=[item.model_dump(mode="json") for item in line_items],
        notes=notes,
        **totals,
    )
    db.add(invoice)
    db.flush()

    workflow.transition_intervention(db, intervention, BILLED, user)
    audit.record(db, "invoice_created", "invoices", invoice.id, user, None,
                 {"invoice_number": invoice.invoice_number, "total": invoice.total})
    db.commit()
    db.refresh(invoice)
    logger.info("Facture %s créée (%s CHF) pour le rapport %s", invoice.invoice_number, invoice.total, report.id)
    return invoice, True


def update_invoice_status(db: Session, invoice: models.Invoice, status: str,
                          user: Optional[models.User] = None) -> models.Invoice:
    old_status = invoice.status
    if old_status == status:
        return invoice
    invoice.status = status
    if status == INVOICE_SENT and invoice.sent_at is None:
        invoice.sent_at = utcnow()
    audit.record(db, "status_change", "invoices", invoice.id, user, {"status": old_status}, {"status": status})
    db.commit()
    db.refresh(invoice)
    return invoice


# ==========================================
# DEVIS
# ==========================================

def create_quote(db: Session, payload: QuoteCreate, settings: Settings,
                 user: Optional[models.User] = None) -> models.Quote:
    regie = None
    if payload.regie_id:
        regie = db.query(models.Regie).filter(models.Regie.id == str(payload.regie_id)).first()
        if not regie:
            raise NotFoundError("Régie non trouvée")

    percentage = regie.discount_percentage if (payload.discount_regie and regie) else 0
    totals = compute_totals(payload.items, settings.vat_rate, discount_percentage=percentage)

    quote = models.Quote(
        quote_number=next_number(db, models.Quote.quote_number, "D"),
        client_name=payload.client_name,
        client_email=payload.client_email,
        client_phone=payload.client_phone,
        client_address=payload.client_address,
        regie_id=regie.id if regie else None,
        title=payload.title,
        description=payload.description,
        items=[item.model_dump(mode="json") for item in payload.items],
        discount_regie=payload.discount_regie,
        discount_percentage=percentage,
        valid_until=payload.valid_until,
        created_by=user.id if user else None,
        **totals,
    )
    db.add(quote)
    db.commit()
    db.refresh(quote)
    return quote


def update_quote_status(db: Session, quote: models.Quote, status: str,
                        rejection_reason: Optional[str] = None,
                        user: Optional[models.User] = None) -> models.Quote:
    if status not in QUOTE_TRANSITIONS.get(quote.status, set()):
        raise ConflictError(f"Transition impossible pour le devis : {quote.status} -> {status}")

    old_status = quote.status
    quote.status = status
    if status == QUOTE_ACCEPTED:
        quote.accepted_at = utcnow()
    elif status == QUOTE_REJECTED:
        quote.rejected_at = utcnow()
        quote.rejection_reason = rejection_reason
    audit.record(db, "status_change", "quotes", quote.id, user, {"status": old_status}, {"status": status})
    db.commit()
    db.refresh(quote)
    return quote

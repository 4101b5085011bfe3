from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status as http_status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..config import Settings
from ..database import get_db
from ..dependencies import get_settings, require_office
from ..errors import NotFoundError
from ..models.billing import INVOICE_OVERDUE, INVOICE_SENT, INVOICE_STATUSES
from ..services import billing, workflow
from ..utils import utcnow

router = APIRouter(
    prefix="/invoices",
    tags=["Factures"],
)


def _to_out(invoice: models.Invoice, settings: Settings) -> schemas.InvoiceOut:
    out = schemas.InvoiceOut.model_validate(invoice)
    out.is_overdue = billing.is_overdue(invoice, settings.invoice_overdue_days)
    return out


def _get_invoice(db: Session, invoice_id: str) -> models.Invoice:
    invoice = db.query(models.Invoice).filter(models.Invoice.id == invoice_id).first()
    if not invoice:
        raise NotFoundError("Facture non trouvée")
    return invoice


@router.get("", response_model=List[schemas.InvoiceOut])
def read_invoices(status: Optional[str] = None,
                  db: Session = Depends(get_db),
                  settings: Settings = Depends(get_settings),
                  current_user: models.User = Depends(require_office)):
    query = db.query(models.Invoice)
    if status and status != INVOICE_OVERDUE:
        if status not in INVOICE_STATUSES:
            raise HTTPException(status_code=400, detail=f"Statut inconnu : {status}")
        query = query.filter(models.Invoice.status == status)
    elif status == INVOICE_OVERDUE:
        query = query.filter(models.Invoice.status == INVOICE_SENT)

    now = utcnow()
    invoices = query.order_by(models.Invoice.date.desc()).all()
    if status == INVOICE_OVERDUE:
        invoices = [i for i in invoices if billing.is_overdue(i, settings.invoice_overdue_days, now)]
    return [_to_out(i, settings) for i in invoices]


@router.get("/{invoice_id}", response_model=schemas.InvoiceOut)
def read_invoice(invoice_id: str, db: Session = Depends(get_db),
                 settings: Settings = Depends(get_settings),
                 current_user: models.User = Depends(require_office)):
    return _to_out(_get_invoice(db, invoice_id), settings)


@router.post("", response_model=schemas.InvoiceOut)
def create_invoice(data: schemas.InvoiceCreate, response: Response,
                   db: Session = Depends(get_db),
                   settings: Settings = Depends(get_settings),
                   current_user: models.User = Depends(require_office)):
    report = workflow.get_report(db, data.report_id)
    # Sans lignes explicites : le matériel saisi dans le rapport
    line_items = data.line_items or billing.default_line_items(report)
    invoice, created = billing.create_invoice_for_report(
        db, report, line_items, settings,
        discount_amount=data.discount_amount, notes=data.notes, user=current_user,
    )
    response.status_code = http_status.HTTP_201_CREATED if created else http_status.HTTP_200_OK
    return _to_out(invoice, settings)


@router.put("/{invoice_id}/status", response_model=schemas.InvoiceOut)
def update_invoice_status(invoice_id: str, data: schemas.InvoiceStatusUpdate,
                          db: Session = Depends(get_db),
                          settings: Settings = Depends(get_settings),
                          current_user: models.User = Depends(require_office)):
    invoice = billing.update_invoice_status(db, _get_invoice(db, invoice_id), data.status, current_user)
    return _to_out(invoice, settings)

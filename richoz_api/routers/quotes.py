from typing import List, Optional

from fastapi import APIRouter, Depends, status as http_status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..config import Settings
from ..database import get_db
from ..dependencies import get_automation, get_settings, require_office
from ..errors import NotFoundError
from ..services import billing
from ..services.automation import AutomationClient

router = APIRouter(
    prefix="/quotes",
    tags=["Devis"],
)


@router.post("/draft")
def draft_quote(data: schemas.QuoteDraftRequest,
                automation: AutomationClient = Depends(get_automation),
                current_user: models.User = Depends(require_office)):
    """Rédaction d'un devis par l'agent IA (n8n) à partir d'un texte libre."""
    result = automation.draft_quote(data.text)
    return {"success": True, **result}


@router.get("", response_model=List[schemas.QuoteOut])
def read_quotes(status: Optional[str] = None,
                db: Session = Depends(get_db),
                current_user: models.User = Depends(require_office)):
    query = db.query(models.Quote)
    if status:
        query = query.filter(models.Quote.status == status)
    return query.order_by(models.Quote.created_at.desc()).all()


@router.get("/{quote_id}", response_model=schemas.QuoteOut)
def read_quote(quote_id: str, db: Session = Depends(get_db),
               current_user: models.User = Depends(require_office)):
    quote = db.query(models.Quote).filter(models.Quote.id == quote_id).first()
    if not quote:
        raise NotFoundError("Devis non trouvé")
    return quote


@router.post("", response_model=schemas.QuoteOut, status_code=http_status.HTTP_201_CREATED)
def create_quote(data: schemas.QuoteCreate,
                 db: Session = Depends(get_db),
                 settings: Settings = Depends(get_settings),
                 current_user: models.User = Depends(require_office)):
    return billing.create_quote(db, data, settings, current_user)


@router.put("/{quote_id}/status", response_model=schemas.QuoteOut)
def update_quote_status(quote_id: str, data: schemas.QuoteStatusUpdate,
                        db: Session = Depends(get_db),
                        current_user: models.User = Depends(require_office)):
    quote = read_quote(quote_id, db, current_user)
    return billing.update_quote_status(db, quote, data.status, data.rejection_reason, current_user)

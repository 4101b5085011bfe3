from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..dependencies import require_office
from ..models.emails import EMAIL_NEW
from ..services import inbox

router = APIRouter(
    prefix="/inbox",
    tags=["Boîte de réception"],
)


@router.get("", response_model=List[schemas.EmailOut])
def read_inbox(status: Optional[str] = EMAIL_NEW,
               db: Session = Depends(get_db),
               current_user: models.User = Depends(require_office)):
    # status vide ("?status=") = tous les emails
    return inbox.list_inbox(db, status or None)


@router.get("/{email_id}", response_model=schemas.EmailOut)
def read_email(email_id: str, db: Session = Depends(get_db),
               current_user: models.User = Depends(require_office)):
    return inbox.get_email(db, email_id)


@router.post("/{email_id}/plan", response_model=schemas.InterventionOut)
def plan_email(email_id: str, plan: schemas.EmailPlan,
               db: Session = Depends(get_db),
               current_user: models.User = Depends(require_office)):
    return inbox.plan_email(db, email_id, plan, current_user)


@router.post("/{email_id}/ignore", response_model=schemas.EmailOut)
def ignore_email(email_id: str, db: Session = Depends(get_db),
                 current_user: models.User = Depends(require_office)):
    return inbox.ignore_email(db, email_id, current_user)

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..dependencies import get_current_user, require_admin

router = APIRouter(prefix="/settings", tags=["Entreprise"])


def _get_or_create(db: Session) -> models.CompanySettings:
    # Une seule ligne de paramètres, créée au premier accès
    company = db.query(models.CompanySettings).first()
    if company is None:
        company = models.CompanySettings()
        db.add(company)
        db.commit()
        db.refresh(company)
    return company


@router.get("", response_model=schemas.CompanySettingsOut)
def read_settings(db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    return _get_or_create(db)


@router.put("", response_model=schemas.CompanySettingsOut)
def update_settings(data: schemas.CompanySettingsUpdate, db: Session = Depends(get_db),
                    current_user: models.User = Depends(require_admin)):
    company = _get_or_create(db)
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(company, key, value)
    db.commit()
    db.refresh(company)
    return company

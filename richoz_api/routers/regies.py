from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..dependencies import get_current_user, require_office

router = APIRouter(prefix="/regies", tags=["Régies"])


def _normalize(values: dict) -> dict:
    if values.get("keyword"):
        values["keyword"] = values["keyword"].strip().upper()
    if values.get("email_domains") is not None:
        values["email_domains"] = [d.strip().lower().lstrip("@") for d in values["email_domains"] if d.strip()]
    if values.get("email_contact"):
        values["email_contact"] = values["email_contact"].strip().lower()
    return values


def _check_keyword(db: Session, keyword: str, exclude_id: str = None):
    query = db.query(models.Regie).filter(func.lower(models.Regie.keyword) == keyword.lower())
    if exclude_id:
        query = query.filter(models.Regie.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=409, detail="Ce mot-clé est déjà utilisé par une autre régie")


@router.get("", response_model=List[schemas.RegieOut])
def read_regies(include_inactive: bool = False, db: Session = Depends(get_db),
                current_user: models.User = Depends(get_current_user)):
    query = db.query(models.Regie)
    if not include_inactive:
        query = query.filter(models.Regie.is_active == True)
    return query.order_by(models.Regie.name, models.Regie.id).all()


@router.post("", response_model=schemas.RegieOut, status_code=201)
def create_regie(data: schemas.RegieCreate, db: Session = Depends(get_db),
                 current_user: models.User = Depends(require_office)):
    values = _normalize(data.model_dump())
    _check_keyword(db, values["keyword"])
    regie = models.Regie(**values)
    db.add(regie)
    db.commit()
    db.refresh(regie)
    return regie


@router.put("/{regie_id}", response_model=schemas.RegieOut)
def update_regie(regie_id: str, data: schemas.RegieUpdate, db: Session = Depends(get_db),
                 current_user: models.User = Depends(require_office)):
    regie = db.query(models.Regie).filter(models.Regie.id == regie_id).first()
    if not regie:
        raise HTTPException(status_code=404, detail="Régie introuvable")

    values = _normalize(data.model_dump(exclude_unset=True))
    if values.get("keyword"):
        _check_keyword(db, values["keyword"], exclude_id=regie.id)
    for key, value in values.items():
        setattr(regie, key, value)
    db.commit()
    db.refresh(regie)
    return regie

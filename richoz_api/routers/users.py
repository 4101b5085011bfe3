from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from .. import models, schemas, security
from ..database import get_db
from ..dependencies import get_current_user, require_admin, require_office
from ..models.users import ROLE_TECHNICIAN

router = APIRouter(prefix="/users", tags=["Utilisateurs"])


@router.get("/me", response_model=schemas.UserOut)
def read_users_me(current_user: models.User = Depends(get_current_user)):
    """Retourne les infos de l'utilisateur connecté."""
    return current_user


@router.get("/technicians", response_model=List[schemas.UserOut])
def read_technicians(db: Session = Depends(get_db), current_user: models.User = Depends(require_office)):
    return (
        db.query(models.User)
        .filter(models.User.role == ROLE_TECHNICIAN, models.User.is_active == True)
        .order_by(models.User.last_name, models.User.first_name)
        .all()
    )


@router.get("", response_model=List[schemas.UserOut])
def read_team(db: Session = Depends(get_db), current_user: models.User = Depends(require_admin)):
    return db.query(models.User).order_by(models.User.email).all()


@router.post("", response_model=schemas.UserOut, status_code=201)
def create_user(user: schemas.UserCreate, db: Session = Depends(get_db),
                current_user: models.User = Depends(require_admin)):
    # 1. Vérifier si l'email existe déjà
    if db.query(models.User).filter(func.lower(models.User.email) == user.email.lower()).first():
        raise HTTPException(status_code=409, detail="Cet email est déjà utilisé")

    # 2. Création de l'utilisateur
    new_user = models.User(
        email=user.email.lower(),
        hashed_password=security.get_password_hash(user.password),
        role=user.role,
        first_name=user.first_name,
        last_name=user.last_name,
        phone=user.phone,
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)
    return new_user


@router.put("/{user_id}", response_model=schemas.UserOut)
def update_user(user_id: str, data: schemas.UserUpdate, db: Session = Depends(get_db),
                current_user: models.User = Depends(require_admin)):
    user = db.query(models.User).filter(models.User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="Utilisateur introuvable")

    updates = data.model_dump(exclude_unset=True)
    password = updates.pop("password", None)
    if password:
        user.hashed_password = security.get_password_hash(password)
    for key, value in updates.items():
        setattr(user, key, value)

    db.commit()
    db.refresh(user)
    return user

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy import func
from sqlalchemy.orm import Session

from .. import models, schemas, security
from ..config import Settings
from ..database import get_db
from ..dependencies import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentification"])


@router.post("/token", response_model=schemas.Token)
def login_for_access_token(form_data: OAuth2PasswordRequestForm = Depends(),
                           db: Session = Depends(get_db),
                           settings: Settings = Depends(get_settings)):
    # 1. Chercher l'utilisateur par email
    user = db.query(models.User).filter(func.lower(models.User.email) == form_data.username.lower()).first()

    # 2. Vérification du mot de passe
    if not user or not user.is_active or not security.verify_password(form_data.password, user.hashed_password):
        logger.info("Connexion refusée pour %s", form_data.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Email ou mot de passe incorrect",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # 3. Création du Token
    access_token = security.create_access_token(data={"sub": user.email, "role": user.role}, settings=settings.auth)
    return {"access_token": access_token, "token_type": "bearer"}

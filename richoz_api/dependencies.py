from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from . import models, security
from .config import Settings
from .database import get_db
from .services.automation import AutomationClient
from .services.storage import MediaStorage

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> MediaStorage:
    return request.app.state.storage


def get_automation(request: Request) -> AutomationClient:
    return request.app.state.automation


def verify_webhook(
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
):
    """Bloque toute requête webhook sans le secret partagé, avant la moindre logique métier."""
    if not security.check_webhook_secret(authorization, settings.webhook_secret):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Non autorisé")


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> models.User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Impossible de valider les identifiants",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = security.decode_access_token(token, settings.auth)
    if payload is None:
        raise credentials_exception

    email: str = payload.get("sub")
    if email is None:
        raise credentials_exception

    user = db.query(models.User).filter(models.User.email == email).first()
    if user is None or not user.is_active:
        raise credentials_exception
    return user


def require_roles(*roles: str):
    def checker(current_user: models.User = Depends(get_current_user)) -> models.User:
        if current_user.role not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Accès refusé")
        return current_user
    return checker


require_office = require_roles(*models.users.OFFICE_ROLES)
require_admin = require_roles(models.users.ROLE_ADMIN)

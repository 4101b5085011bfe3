"""
Configuration de l'application.
Les variables d'environnement (.env) sont lues une seule fois dans des structures
explicites, passées ensuite aux fabriques de clients (base, stockage, n8n).
"""
import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

DEFAULT_VAT_RATE = 7.7
INVOICE_OVERDUE_DAYS = 30
DEFAULT_STAFF_DOMAINS = ["richoz-sanitaire.ch", "richoz.ch", "lxstudio.ch"]


class DatabaseSettings(BaseModel):
    url: str = "sqlite:///./richoz.db"
    echo: bool = False


class StorageSettings(BaseModel):
    cloud_name: Optional[str] = None
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
    photos_folder: str = "richoz/photos"
    signatures_folder: str = "richoz/signatures"


class AutomationSettings(BaseModel):
    base_url: Optional[str] = None
    transcribe_webhook_url: Optional[str] = None
    timeout: float = 15.0


class AuthSettings(BaseModel):
    secret_key: str = "change-me"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7


class Settings(BaseModel):
    app_name: str = "Richoz Sanitaire API"
    app_url: str = "http://localhost:8000"
    webhook_secret: Optional[str] = None
    log_level: str = "INFO"
    vat_rate: float = DEFAULT_VAT_RATE
    invoice_overdue_days: int = INVOICE_OVERDUE_DAYS
    staff_email_domains: List[str] = DEFAULT_STAFF_DOMAINS

    database: DatabaseSettings = DatabaseSettings()
    storage: StorageSettings = StorageSettings()
    automation: AutomationSettings = AutomationSettings()
    auth: AuthSettings = AuthSettings()


def normalize_database_url(url: str) -> str:
    # Render/Heroku donnent "postgres://", SQLAlchemy veut "postgresql://"
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


def _split_list(value: Optional[str], default: List[str]) -> List[str]:
    if not value:
        return list(default)
    return [v.strip().lower() for v in value.split(",") if v.strip()]


def load_settings() -> Settings:
    """Construit les Settings à partir de l'environnement (et du fichier .env)."""
    load_dotenv()

    return Settings(
        app_url=os.getenv("APP_URL", "http://localhost:8000"),
        webhook_secret=os.getenv("N8N_WEBHOOK_SECRET"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        vat_rate=float(os.getenv("VAT_RATE", DEFAULT_VAT_RATE)),
        invoice_overdue_days=int(os.getenv("INVOICE_OVERDUE_DAYS", INVOICE_OVERDUE_DAYS)),
        staff_email_domains=_split_list(os.getenv("STAFF_EMAIL_DOMAINS"), DEFAULT_STAFF_DOMAINS),
        database=DatabaseSettings(
            url=normalize_database_url(os.getenv("DATABASE_URL", "sqlite:///./richoz.db")),
            echo=os.getenv("SQL_ECHO", "0") == "1",
        ),
        storage=StorageSettings(
            cloud_name=os.getenv("CLOUDINARY_CLOUD_NAME"),
            api_key=os.getenv("CLOUDINARY_API_KEY"),
            api_secret=os.getenv("CLOUDINARY_API_SECRET"),
        ),
        automation=AutomationSettings(
            base_url=os.getenv("N8N_BASE_URL"),
            transcribe_webhook_url=os.getenv("N8N_TRANSCRIBE_WEBHOOK_URL"),
            timeout=float(os.getenv("AUTOMATION_TIMEOUT", "15")),
        ),
        auth=AuthSettings(
            secret_key=os.getenv("SECRET_KEY", "change-me"),
        ),
    )

"""
Point d'entrée de l'API Richoz Sanitaire.

    uvicorn richoz_api.main:create_app --factory --reload
"""
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, load_settings
from .database import Base, create_db_engine, create_session_factory
from .errors import register_exception_handlers
from .routers import (
    auth, inbox, interventions, invoices, products, quotes, regies, reports, settings as settings_router,
    users, webhooks,
)
from .services.automation import create_automation_client
from .services.storage import create_storage_client

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    engine = create_db_engine(settings.database)
    # Import des modèles pour que toutes les tables soient connues du metadata
    from . import models  # noqa: F401
    Base.metadata.create_all(bind=engine)

    app = FastAPI(title=settings.app_name)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.storage = create_storage_client(settings.storage)
    app.state.automation = create_automation_client(settings.automation)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(webhooks.router)
    app.include_router(inbox.router)
    app.include_router(interventions.router)
    app.include_router(reports.router)
    app.include_router(invoices.router)
    app.include_router(quotes.router)
    app.include_router(users.router)
    app.include_router(regies.router)
    app.include_router(products.router)
    app.include_router(settings_router.router)

    @app.get("/")
    def root():
        return {"message": "Richoz Sanitaire API Ready 🚀"}

    if not settings.webhook_secret:
        logger.warning("N8N_WEBHOOK_SECRET absent : tous les webhooks seront refusés")
    logger.info("API démarrée (base: %s)", engine.url.get_backend_name())
    return app

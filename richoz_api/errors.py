"""
Erreurs métier et gestionnaires d'exceptions.
Toute erreur est renvoyée au client sous la forme {"success": false, "error": ..., "details": ...}.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class WorkflowError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Erreur"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)


class BusinessRuleError(WorkflowError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Données invalides"


class NotFoundError(WorkflowError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Ressource introuvable"


class ConflictError(WorkflowError):
    status_code = status.HTTP_409_CONFLICT
    message = "Conflit"


class InvalidTransitionError(ConflictError):
    def __init__(self, entity: str, current: str, target: str):
        super().__init__(
            f"Transition impossible pour {entity} : {current} -> {target}",
            details={"entity": entity, "current_status": current, "target_status": target},
        )


class UpstreamError(WorkflowError):
    status_code = status.HTTP_502_BAD_GATEWAY
    message = "Service externe indisponible"


class ConfigurationError(WorkflowError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Configuration manquante"


def error_body(message: str, details: Any = None) -> Dict[str, Any]:
    body = {"success": False, "error": message}
    if details:
        body["details"] = details
    return body


async def workflow_error_handler(request: Request, exc: WorkflowError):
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.details))


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Erreur"
    details = None if isinstance(exc.detail, str) else exc.detail
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message, details),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        # On retire "body" du chemin : seul le champ intéresse le client
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        errors.append({"field": ".".join(loc), "message": err.get("msg"), "type": err.get("type")})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Données invalides", errors),
    )


async def stale_data_handler(request: Request, exc: StaleDataError):
    logger.warning("Écriture concurrente détectée sur %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=error_body("Le rapport a été modifié entre-temps, rechargez-le"),
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Erreur base de données sur %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Erreur lors de l'enregistrement"),
    )


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(WorkflowError, workflow_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(StaleDataError, stale_data_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)

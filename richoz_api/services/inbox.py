"""
Boîte de réception : ingestion des emails extraits par n8n, puis tri par le secrétariat.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from .. import models
from ..errors import ConflictError, NotFoundError
from ..models.emails import EMAIL_NEW, EMAIL_PROCESSED, EMAIL_IGNORED
from ..models.interventions import SOURCE_EMAIL
from ..schemas.emails import EmailPlan
from ..schemas.webhooks import EmailIngestionPayload
from ..utils import utcnow, to_naive_utc
from . import audit
from .email_classifier import classify_email, detect_priority
from .regie_matcher import active_regies, find_regie_by_keyword, match_regie

logger = logging.getLogger(__name__)


def resolve_regie_id(db: Session, from_email: Optional[str], keyword: Optional[str] = None) -> Optional[str]:
    regie = find_regie_by_keyword(db, keyword)
    if regie:
        return regie.id
    return match_regie(from_email, active_regies(db))


def ingest_email(db: Session, payload: EmailIngestionPayload):
    """Retourne (email, dupliqué). Un même gmail_message_id n'est jamais inséré deux fois."""
    existing = (
        db.query(models.EmailInbox)
        .filter(models.EmailInbox.gmail_message_id == payload.gmail_message_id)
        .first()
    )
    if existing:
        logger.info("Email %s déjà reçu", payload.gmail_message_id)
        return existing, True

    regie_id = resolve_regie_id(db, payload.from_email, payload.regie_keyword)
    extracted = payload.extracted_data.model_dump(exclude_none=True) if payload.extracted_data else {}

    email = models.EmailInbox(
        gmail_message_id=payload.gmail_message_id,
        received_at=to_naive_utc(payload.received_at),
        from_email=payload.from_email,
        from_name=payload.from_name,
        subject=payload.subject,
        body_text=payload.body_text,
        body_html=payload.body_html,
        extracted_data=extracted,
        email_type=payload.email_type,
        regie_id=regie_id,
        confidence_score=payload.confidence_score,
        work_order_number=payload.work_order_number,
        status=EMAIL_NEW,
    )
    db.add(email)
    db.commit()
    db.refresh(email)
    logger.info("Email %s enregistré (régie: %s)", email.id, regie_id or "aucune")
    return email, False


def list_inbox(db: Session, status: Optional[str] = EMAIL_NEW) -> List[models.EmailInbox]:
    """
    Liste les emails ; le type et la régie sont recalculés à la lecture pour
    profiter des régies ajoutées après la réception.
    """
    query = db.query(models.EmailInbox)
    if status:
        query = query.filter(models.EmailInbox.status == status)
    emails = query.order_by(models.EmailInbox.received_at.desc()).all()

    regies = active_regies(db)
    for email in emails:
        email.email_type = classify_email(email)
        if not email.regie_id:
            email.regie_id = match_regie(email.from_email, regies)
    # Valeurs d'affichage uniquement
    db.expunge_all()
    return emails


def get_email(db: Session, email_id: str) -> models.EmailInbox:
    email = db.query(models.EmailInbox).filter(models.EmailInbox.id == email_id).first()
    if not email:
        raise NotFoundError("Email non trouvé")
    return email


def plan_email(db: Session, email_id: str, plan: EmailPlan,
               user: Optional[models.User] = None) -> models.Intervention:
    """Transforme un email en intervention ; l'email passe en processed."""
    email = get_email(db, email_id)
    if email.status != EMAIL_NEW:
        raise ConflictError("Cet email a déjà été traité")

    extracted = email.extracted_data or {}
    regie_id = str(plan.regie_id) if plan.regie_id else (
        email.regie_id or match_regie(email.from_email, active_regies(db))
    )
    if plan.technician_id:
        technician = db.query(models.User).filter(models.User.id == str(plan.technician_id)).first()
        if not technician:
            raise NotFoundError("Technicien non trouvé")

    if plan.client_info is not None:
        client_info = plan.client_info.model_dump(exclude_none=True)
    else:
        client_info = {
            "name": extracted.get("tenant_name") or extracted.get("client_name") or email.from_name,
            "phone": extracted.get("tenant_phone") or extracted.get("phone"),
            "email": email.from_email,
            "apartment": extracted.get("apartment"),
        }
        client_info = {k: v for k, v in client_info.items() if v}

    intervention = models.Intervention(
        title=plan.title or extracted.get("title") or email.subject or "Intervention",
        description=plan.description or extracted.get("description")
        or extracted.get("issue_description") or email.body_text,
        address=plan.address or extracted.get("address") or "",
        date_planned=to_naive_utc(plan.date_planned),
        estimated_duration_minutes=plan.estimated_duration_minutes,
        status=plan.status,
        priority=plan.priority if plan.priority is not None else detect_priority(email.subject, extracted),
        technician_id=str(plan.technician_id) if plan.technician_id else None,
        regie_id=regie_id,
        client_info=client_info,
        source_type=SOURCE_EMAIL,
        source_email_id=email.id,
        work_order_number=plan.work_order_number or email.work_order_number,
    )
    db.add(intervention)
    db.flush()

    email.status = EMAIL_PROCESSED
    email.processed_at = utcnow()
    email.intervention_id = intervention.id
    email.regie_id = regie_id
    audit.record(db, "create", "interventions", intervention.id, user, None,
                 {"status": intervention.status, "source_email_id": email.id})
    db.commit()
    db.refresh(intervention)
    logger.info("Email %s planifié -> intervention %s", email.id, intervention.id)
    return intervention


def ignore_email(db: Session, email_id: str, user: Optional[models.User] = None) -> models.EmailInbox:
    email = get_email(db, email_id)
    if email.status == EMAIL_IGNORED:
        return email
    if email.status != EMAIL_NEW:
        raise ConflictError("Cet email a déjà été traité")
    email.status = EMAIL_IGNORED
    email.processed_at = utcnow()
    db.commit()
    db.refresh(email)
    return email

"""
Cycle de vie des interventions et des rapports d'intervention.

Intervention : nouveau -> planifie -> en_cours -> termine -> ready_to_bill | archived -> billed,
annulation (annule) possible depuis tout état non terminal.
Rapport : draft -> submitted -> validated | rejected ; un rapport validé est figé.
"""
import logging
from typing import NamedTuple, Optional

from sqlalchemy.orm import Session

from .. import models
from ..errors import BusinessRuleError, ConflictError, InvalidTransitionError, NotFoundError
from ..models.interventions import (
    NOUVEAU, PLANIFIE, EN_COURS, TERMINE, READY_TO_BILL, ARCHIVED, BILLED, ANNULE,
)
from ..models.reports import DRAFT, SUBMITTED, VALIDATED, REJECTED
from ..schemas.reports import ReportSubmit
from ..utils import utcnow
from . import audit
from .automation import AutomationClient
from .storage import MediaStorage

logger = logging.getLogger(__name__)

INTERVENTION_TRANSITIONS = {
    NOUVEAU: {PLANIFIE, EN_COURS, ANNULE},
    PLANIFIE: {EN_COURS, TERMINE, ANNULE},
    EN_COURS: {TERMINE, ANNULE},
    # termine -> termine : nouvelle soumission après un rejet
    TERMINE: {TERMINE, READY_TO_BILL, ARCHIVED, ANNULE},
    READY_TO_BILL: {BILLED, ANNULE},
    BILLED: set(),
    ARCHIVED: set(),
    ANNULE: set(),
}
TERMINAL_STATUSES = {BILLED, ARCHIVED, ANNULE}


class ValidationOutcome(NamedTuple):
    report: models.Report
    intervention: models.Intervention
    already_validated: bool


# ==========================================
# INTERVENTIONS
# ==========================================

def can_transition(current: str, target: str) -> bool:
    return target in INTERVENTION_TRANSITIONS.get(current, set())


def ensure_transition(intervention: models.Intervention, target: str):
    if not can_transition(intervention.status, target):
        raise InvalidTransitionError("l'intervention", intervention.status, target)


def transition_intervention(db: Session, intervention: models.Intervention, target: str,
                            user: Optional[models.User] = None) -> models.Intervention:
    ensure_transition(intervention, target)
    current = intervention.status
    if current != target:
        intervention.status = target
        audit.record(db, "status_change", "interventions", intervention.id, user,
                     {"status": current}, {"status": target})
        logger.info("Intervention %s : %s -> %s", intervention.id, current, target)
    return intervention


def cancel_intervention(db: Session, intervention: models.Intervention,
                        user: Optional[models.User] = None) -> models.Intervention:
    if intervention.status == ANNULE:
        return intervention
    return transition_intervention(db, intervention, ANNULE, user)


def get_intervention(db: Session, intervention_id) -> models.Intervention:
    intervention = db.query(models.Intervention).filter(models.Intervention.id == str(intervention_id)).first()
    if not intervention:
        raise NotFoundError("Intervention non trouvée")
    return intervention


# ==========================================
# RAPPORTS
# ==========================================

def get_report(db: Session, report_id) -> models.Report:
    report = db.query(models.Report).filter(models.Report.id == str(report_id)).first()
    if not report:
        raise NotFoundError("Rapport non trouvé")
    return report


def _has_narrative(payload: ReportSubmit) -> bool:
    return bool((payload.text_content or "").strip() or (payload.vocal_transcription or "").strip())


def _upsert_report(db: Session, intervention: models.Intervention, payload: ReportSubmit,
                   storage: MediaStorage, status: str) -> models.Report:
    technician = db.query(models.User).filter(models.User.id == str(payload.technician_id)).first()
    if not technician:
        raise NotFoundError("Technicien non trouvé")

    report = db.query(models.Report).filter(models.Report.intervention_id == intervention.id).first()
    if report and report.status == VALIDATED:
        raise ConflictError("Ce rapport a déjà été validé et ne peut plus être modifié")

    if payload.expected_revision is not None:
        current_revision = report.revision if report else 0
        if current_revision != payload.expected_revision:
            raise ConflictError(
                "Le rapport a été modifié entre-temps, rechargez-le",
                details={"expected_revision": payload.expected_revision, "current_revision": current_revision},
            )

    # Médias stockés AVANT l'écriture de la ligne : un échec d'upload n'écrit rien
    photos = storage.persist_photos([p.model_dump(mode="json") for p in payload.photos])
    signature = storage.persist_signature(payload.client_signature, intervention.id)

    values = {
        "text_content": payload.text_content or None,
        "vocal_url": payload.vocal_url or None,
        "vocal_transcription": payload.vocal_transcription or None,
        "photos": photos,
        "checklist": [c.model_dump(mode="json") for c in payload.checklist],
        "is_billable": payload.is_billable,
        "billable_reason": None if payload.is_billable else payload.billable_reason,
        "work_duration_minutes": payload.work_duration_minutes,
        "materials_used": [m.model_dump(mode="json") for m in payload.materials_used],
        "supplies_note": payload.supplies_note or None,
        "client_signature": signature,
        "status": status,
    }

    if report is None:
        report = models.Report(intervention_id=intervention.id, technician_id=technician.id, **values)
        db.add(report)
    else:
        for key, value in values.items():
            setattr(report, key, value)
    return report


def save_draft(db: Session, payload: ReportSubmit, storage: MediaStorage,
               user: Optional[models.User] = None) -> models.Report:
    intervention = get_intervention(db, payload.intervention_id)
    if intervention.status in TERMINAL_STATUSES:
        raise ConflictError("Intervention clôturée : le rapport ne peut plus être modifié")

    report = _upsert_report(db, intervention, payload, storage, DRAFT)
    db.commit()
    db.refresh(report)
    return report


def submit_report(db: Session, payload: ReportSubmit, storage: MediaStorage,
                  user: Optional[models.User] = None):
    """
    Soumission technicien : upsert du rapport (une ligne par intervention),
    puis intervention -> termine avec date de fin.
    """
    if not _has_narrative(payload):
        raise BusinessRuleError("Le rapport doit contenir un texte ou une transcription vocale")

    intervention = get_intervention(db, payload.intervention_id)
    ensure_transition(intervention, TERMINE)

    report = _upsert_report(db, intervention, payload, storage, SUBMITTED)
    report.rejection_reason = None
    db.flush()

    transition_intervention(db, intervention, TERMINE, user)
    intervention.date_completed = utcnow()
    audit.record(db, "report_submitted", "reports", report.id, user, None,
                 {"status": SUBMITTED, "is_billable": report.is_billable})

    db.commit()
    db.refresh(report)
    db.refresh(intervention)
    logger.info("Rapport %s soumis pour l'intervention %s", report.id, intervention.id)
    return report, intervention


def validate_report(db: Session, report: models.Report, validator_id: Optional[str],
                    automation: AutomationClient, user: Optional[models.User] = None) -> ValidationOutcome:
    """
    Validation bureau. Sans effet si le rapport est déjà validé.
    Facturable -> intervention ready_to_bill, sinon archived (une seule branche).
    Le PDF est demandé ensuite à n8n ; son échec ne remet pas en cause la validation.
    """
    intervention = report.intervention
    if intervention is None:
        raise NotFoundError("Intervention non trouvée")

    if report.status == VALIDATED:
        logger.info("Rapport %s déjà validé, rien à faire", report.id)
        return ValidationOutcome(report, intervention, True)

    if validator_id is not None:
        validator = db.query(models.User).filter(models.User.id == str(validator_id)).first()
        if not validator:
            raise NotFoundError("Validateur non trouvé")

    target = READY_TO_BILL if report.is_billable else ARCHIVED
    transition_intervention(db, intervention, target, user)

    old_status = report.status
    report.status = VALIDATED
    report.validated_at = utcnow()
    report.validated_by = str(validator_id) if validator_id else None
    report.rejection_reason = None
    audit.record(db, "report_validated", "reports", report.id, user,
                 {"status": old_status}, {"status": VALIDATED})
    db.commit()

    pdf_url = automation.generate_report_pdf(report.id)
    if pdf_url:
        report.pdf_url = pdf_url
        db.commit()

    db.refresh(report)
    db.refresh(intervention)
    return ValidationOutcome(report, intervention, False)


def reject_report(db: Session, report: models.Report, reason: str,
                  user: Optional[models.User] = None) -> models.Report:
    """Renvoie le rapport au technicien. L'intervention reste en termine."""
    if not (reason or "").strip():
        raise BusinessRuleError("Veuillez indiquer une raison")
    if report.status == VALIDATED:
        raise ConflictError("Ce rapport a déjà été validé")

    old_status = report.status
    report.status = REJECTED
    report.rejection_reason = reason.strip()
    audit.record(db, "report_rejected", "reports", report.id, user,
                 {"status": old_status}, {"status": REJECTED, "reason": report.rejection_reason})
    db.commit()
    db.refresh(report)
    return report


def save_transcription(db: Session, report_id, transcription: str) -> models.Report:
    report = get_report(db, report_id)
    if report.status == VALIDATED:
        raise ConflictError("Ce rapport a déjà été validé")
    report.vocal_transcription = transcription
    db.commit()
    db.refresh(report)
    return report

"""
Synchronisation Google Agenda -> interventions (un événement = une intervention).
"""
import logging
from typing import Iterable, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from .. import models
from ..config import Settings
from ..models.interventions import NOUVEAU, PLANIFIE, SOURCE_CALENDAR
from ..models.users import ROLE_TECHNICIAN
from ..schemas.webhooks import Attendee, CalendarEventPayload
from ..utils import to_naive_utc
from . import workflow
from .regie_matcher import clean_title, extract_title_keyword, find_regie_by_keyword

logger = logging.getLogger(__name__)


def find_technician(db: Session, attendees: Iterable[Attendee], staff_domains: Iterable[str]) -> Optional[models.User]:
    """Premier invité sur un domaine interne correspondant à un technicien."""
    domains = {d.lower() for d in staff_domains}
    for attendee in attendees:
        address = str(attendee.email).lower()
        if address.rsplit("@", 1)[-1] not in domains:
            continue
        user = (
            db.query(models.User)
            .filter(func.lower(models.User.email) == address, models.User.role == ROLE_TECHNICIAN)
            .first()
        )
        if user:
            return user
    return None


def _find_by_event(db: Session, event_id: str) -> Optional[models.Intervention]:
    return (
        db.query(models.Intervention)
        .filter(models.Intervention.google_calendar_event_id == event_id)
        .first()
    )


def sync_event(db: Session, payload: CalendarEventPayload, settings: Settings) -> dict:
    if payload.action == "deleted":
        return _cancel_event(db, payload.event_id)

    technician = find_technician(db, payload.attendees, settings.staff_email_domains)
    keyword = payload.regie_keyword or extract_title_keyword(payload.title)
    regie = find_regie_by_keyword(db, keyword)

    start = to_naive_utc(payload.start_datetime)
    end = to_naive_utc(payload.end_datetime)
    duration = max(int((end - start).total_seconds() // 60), 0)

    intervention = _find_by_event(db, payload.event_id)
    action = "updated" if intervention else "created"
    if intervention is None:
        intervention = models.Intervention(
            google_calendar_event_id=payload.event_id,
            source_type=SOURCE_CALENDAR,
            status=PLANIFIE,
        )
        db.add(intervention)
    elif intervention.status == NOUVEAU:
        workflow.transition_intervention(db, intervention, PLANIFIE)

    intervention.title = clean_title(payload.title) or payload.title
    intervention.description = payload.description
    intervention.address = payload.location or ""
    intervention.date_planned = start
    intervention.estimated_duration_minutes = duration
    # On ne désassigne pas un technicien choisi au bureau si l'agenda n'en contient aucun
    if technician:
        intervention.technician_id = technician.id
    if regie:
        intervention.regie_id = regie.id

    db.commit()
    db.refresh(intervention)
    logger.info("Agenda %s : intervention %s %s", payload.event_id, intervention.id, action)
    return {
        "success": True,
        "intervention_id": intervention.id,
        "action": action,
        "technician_assigned": technician is not None,
        "regie_matched": regie is not None,
    }


def _cancel_event(db: Session, event_id: str) -> dict:
    intervention = _find_by_event(db, event_id)
    if intervention is None:
        return {"success": True, "action": "ignored", "event_id": event_id, "intervention_id": None}

    if intervention.status not in workflow.TERMINAL_STATUSES:
        workflow.cancel_intervention(db, intervention)
        db.commit()
        logger.info("Agenda %s supprimé : intervention %s annulée", event_id, intervention.id)
    return {"success": True, "action": "cancelled", "event_id": event_id, "intervention_id": intervention.id}

"""
Webhooks appelés par n8n (Gmail, Google Agenda, app technicien, transcription).
Tous exigent l'en-tête Authorization: Bearer <N8N_WEBHOOK_SECRET>.
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import schemas
from ..config import Settings
from ..database import get_db
from ..dependencies import get_automation, get_settings, get_storage, verify_webhook
from ..services import billing, calendar_sync, inbox, workflow
from ..services.automation import AutomationClient
from ..services.storage import MediaStorage

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/webhooks",
    tags=["Webhooks"],
    dependencies=[Depends(verify_webhook)],
)


@router.post("/email-ingestion")
def email_ingestion(payload: schemas.EmailIngestionPayload, db: Session = Depends(get_db)):
    email, duplicate = inbox.ingest_email(db, payload)
    if duplicate:
        return {"success": True, "message": "Email déjà enregistré", "email_id": email.id, "duplicate": True}
    return {
        "success": True,
        "email_id": email.id,
        "regie_matched": email.regie_id is not None,
        "regie_id": email.regie_id,
    }


@router.post("/calendar-sync")
def calendar_sync_event(payload: schemas.CalendarEventPayload,
                        db: Session = Depends(get_db),
                        settings: Settings = Depends(get_settings)):
    return calendar_sync.sync_event(db, payload, settings)


@router.post("/report-submit")
def report_submit(payload: schemas.ReportSubmit,
                  db: Session = Depends(get_db),
                  storage: MediaStorage = Depends(get_storage)):
    report, intervention = workflow.submit_report(db, payload, storage)
    return {
        "success": True,
        "report_id": report.id,
        "is_billable": report.is_billable,
        "intervention_status": intervention.status,
    }


@router.post("/invoice-validate")
def invoice_validate(payload: schemas.InvoiceValidatePayload,
                     db: Session = Depends(get_db),
                     settings: Settings = Depends(get_settings),
                     automation: AutomationClient = Depends(get_automation)):
    report = workflow.get_report(db, payload.report_id)

    if payload.action == "reject":
        workflow.reject_report(db, report, payload.rejection_reason)
        return {"success": True, "action": "rejected", "report_id": report.id, "reason": report.rejection_reason}

    outcome = workflow.validate_report(db, report, payload.validated_by, automation)
    report = outcome.report
    result = {"success": True, "action": "validated", "report_id": report.id}

    if not report.is_billable:
        return {**result, "invoice_created": False, "reason": "non_billable"}
    if not payload.line_items:
        return {**result, "invoice_created": False, "reason": "no_line_items"}

    invoice, created = billing.create_invoice_for_report(
        db, report, payload.line_items, settings,
        discount_amount=payload.discount_amount, notes=payload.notes,
    )
    if not created:
        logger.info("Facture %s déjà existante pour le rapport %s", invoice.invoice_number, report.id)
    return {
        **result,
        "invoice_created": True,
        "invoice_id": invoice.id,
        "invoice_number": invoice.invoice_number,
        "total": invoice.total,
    }


@router.post("/transcribe-audio")
def transcribe_audio(payload: schemas.TranscribePayload,
                     db: Session = Depends(get_db),
                     settings: Settings = Depends(get_settings),
                     automation: AutomationClient = Depends(get_automation)):
    if payload.transcription is not None:
        report = workflow.save_transcription(db, payload.report_id, payload.transcription)
        return {"success": True, "report_id": report.id, "transcription_saved": True}

    callback_url = f"{settings.app_url.rstrip('/')}/webhooks/transcribe-audio"
    automation.request_transcription(
        payload.audio_url,
        callback_url,
        report_id=str(payload.report_id) if payload.report_id else None,
        intervention_id=str(payload.intervention_id) if payload.intervention_id else None,
    )
    return {"success": True, "message": "Transcription lancée", "audio_url": payload.audio_url}

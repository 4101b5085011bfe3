from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..dependencies import get_automation, get_current_user, get_storage, require_office
from ..models.reports import SUBMITTED
from ..models.users import ROLE_TECHNICIAN
from ..services import workflow
from ..services.automation import AutomationClient
from ..services.storage import MediaStorage

router = APIRouter(
    prefix="/reports",
    tags=["Rapports"],
)


def _check_author(payload: schemas.ReportSubmit, user: models.User):
    # Un technicien ne rédige que ses propres rapports
    if user.role == ROLE_TECHNICIAN and str(payload.technician_id) != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Accès refusé")


@router.get("/pending", response_model=List[schemas.ReportOut])
def read_pending_reports(db: Session = Depends(get_db),
                         current_user: models.User = Depends(require_office)):
    return (
        db.query(models.Report)
        .filter(models.Report.status == SUBMITTED)
        .order_by(models.Report.updated_at.desc())
        .all()
    )


@router.get("/{report_id}", response_model=schemas.ReportOut)
def read_report(report_id: str, db: Session = Depends(get_db),
                current_user: models.User = Depends(get_current_user)):
    report = workflow.get_report(db, report_id)
    if current_user.role == ROLE_TECHNICIAN and report.technician_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Accès refusé")
    return report


@router.put("/draft", response_model=schemas.ReportOut)
def save_draft(payload: schemas.ReportSubmit,
               db: Session = Depends(get_db),
               storage: MediaStorage = Depends(get_storage),
               current_user: models.User = Depends(get_current_user)):
    _check_author(payload, current_user)
    return workflow.save_draft(db, payload, storage, current_user)


@router.post("/submit", response_model=schemas.ReportOut)
def submit_report(payload: schemas.ReportSubmit,
                  db: Session = Depends(get_db),
                  storage: MediaStorage = Depends(get_storage),
                  current_user: models.User = Depends(get_current_user)):
    _check_author(payload, current_user)
    report, _ = workflow.submit_report(db, payload, storage, current_user)
    return report


@router.post("/{report_id}/validate", response_model=schemas.ValidationResult)
def validate_report(report_id: str,
                    db: Session = Depends(get_db),
                    automation: AutomationClient = Depends(get_automation),
                    current_user: models.User = Depends(require_office)):
    report = workflow.get_report(db, report_id)
    outcome = workflow.validate_report(db, report, current_user.id, automation, current_user)
    return {
        "success": True,
        "report_id": outcome.report.id,
        "already_validated": outcome.already_validated,
        "intervention_status": outcome.intervention.status,
        "pdf_url": outcome.report.pdf_url,
    }


@router.post("/{report_id}/reject", response_model=schemas.ReportOut)
def reject_report(report_id: str, data: schemas.ReportReject,
                  db: Session = Depends(get_db),
                  current_user: models.User = Depends(require_office)):
    report = workflow.get_report(db, report_id)
    return workflow.reject_report(db, report, data.reason, current_user)

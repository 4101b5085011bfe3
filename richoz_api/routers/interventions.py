from datetime import date, datetime, time, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status as http_status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..dependencies import get_current_user, require_office
from ..errors import NotFoundError
from ..models.interventions import EN_COURS, INTERVENTION_STATUSES, SOURCE_MANUAL
from ..models.users import ROLE_TECHNICIAN
from ..services import audit, workflow
from ..utils import to_naive_utc

router = APIRouter(
    prefix="/interventions",
    tags=["Interventions"],
)


def _check_access(intervention: models.Intervention, user: models.User):
    # Un technicien ne voit que ses interventions
    if user.role == ROLE_TECHNICIAN and intervention.technician_id != user.id:
        raise HTTPException(status_code=http_status.HTTP_403_FORBIDDEN, detail="Accès refusé")


def _check_references(db: Session, technician_id, regie_id):
    if technician_id and not db.query(models.User).filter(models.User.id == str(technician_id)).first():
        raise NotFoundError("Technicien non trouvé")
    if regie_id and not db.query(models.Regie).filter(models.Regie.id == str(regie_id)).first():
        raise NotFoundError("Régie non trouvée")


@router.get("", response_model=List[schemas.InterventionOut])
def read_interventions(status: Optional[str] = None,
                       technician_id: Optional[str] = None,
                       day: Optional[date] = None,
                       db: Session = Depends(get_db),
                       current_user: models.User = Depends(get_current_user)):
    query = db.query(models.Intervention)
    if status:
        if status not in INTERVENTION_STATUSES:
            raise HTTPException(status_code=400, detail=f"Statut inconnu : {status}")
        query = query.filter(models.Intervention.status == status)
    if current_user.role == ROLE_TECHNICIAN:
        query = query.filter(models.Intervention.technician_id == current_user.id)
    elif technician_id:
        query = query.filter(models.Intervention.technician_id == technician_id)
    if day:
        start = datetime.combine(day, time.min)
        query = query.filter(
            models.Intervention.date_planned >= start,
            models.Intervention.date_planned < start + timedelta(days=1),
        )
    return query.order_by(models.Intervention.date_planned.asc(), models.Intervention.created_at.desc()).all()


@router.get("/{intervention_id}", response_model=schemas.InterventionOut)
def read_intervention(intervention_id: str, db: Session = Depends(get_db),
                      current_user: models.User = Depends(get_current_user)):
    intervention = workflow.get_intervention(db, intervention_id)
    _check_access(intervention, current_user)
    return intervention


@router.post("", response_model=schemas.InterventionOut, status_code=http_status.HTTP_201_CREATED)
def create_intervention(data: schemas.InterventionCreate, db: Session = Depends(get_db),
                        current_user: models.User = Depends(require_office)):
    _check_references(db, data.technician_id, data.regie_id)
    values = data.model_dump(exclude={"client_info", "technician_id", "regie_id", "date_planned"})
    intervention = models.Intervention(
        **values,
        date_planned=to_naive_utc(data.date_planned),
        technician_id=str(data.technician_id) if data.technician_id else None,
        regie_id=str(data.regie_id) if data.regie_id else None,
        client_info=data.client_info.model_dump(exclude_none=True) if data.client_info else {},
        source_type=SOURCE_MANUAL,
    )
    db.add(intervention)
    db.flush()
    audit.record(db, "create", "interventions", intervention.id, current_user, None, {"status": intervention.status})
    db.commit()
    db.refresh(intervention)
    return intervention


@router.put("/{intervention_id}", response_model=schemas.InterventionOut)
def update_intervention(intervention_id: str, data: schemas.InterventionUpdate,
                        db: Session = Depends(get_db),
                        current_user: models.User = Depends(require_office)):
    intervention = workflow.get_intervention(db, intervention_id)
    updates = data.model_dump(exclude_unset=True)
    _check_references(db, updates.get("technician_id"), updates.get("regie_id"))

    for key, value in updates.items():
        if key in ("technician_id", "regie_id"):
            value = str(value) if value else None
        elif key == "date_planned":
            value = to_naive_utc(value)
        elif key == "client_info":
            value = {k: v for k, v in (value or {}).items() if v is not None}
        setattr(intervention, key, value)

    db.commit()
    db.refresh(intervention)
    return intervention


@router.post("/{intervention_id}/start", response_model=schemas.InterventionOut)
def start_intervention(intervention_id: str, db: Session = Depends(get_db),
                       current_user: models.User = Depends(get_current_user)):
    intervention = workflow.get_intervention(db, intervention_id)
    _check_access(intervention, current_user)
    workflow.transition_intervention(db, intervention, EN_COURS, current_user)
    db.commit()
    db.refresh(intervention)
    return intervention


@router.post("/{intervention_id}/cancel", response_model=schemas.InterventionOut)
def cancel_intervention(intervention_id: str, db: Session = Depends(get_db),
                        current_user: models.User = Depends(require_office)):
    intervention = workflow.get_intervention(db, intervention_id)
    workflow.cancel_intervention(db, intervention, current_user)
    db.commit()
    db.refresh(intervention)
    return intervention


@router.get("/{intervention_id}/report", response_model=schemas.ReportOut)
def read_intervention_report(intervention_id: str, db: Session = Depends(get_db),
                             current_user: models.User = Depends(get_current_user)):
    intervention = workflow.get_intervention(db, intervention_id)
    _check_access(intervention, current_user)
    if intervention.report is None:
        raise NotFoundError("Aucun rapport pour cette intervention")
    return intervention.report

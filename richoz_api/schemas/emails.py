from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, Literal
from datetime import datetime
from uuid import UUID

from .interventions import ClientInfo


class EmailOut(BaseModel):
    id: str
    gmail_message_id: str
    received_at: datetime
    from_email: str
    from_name: Optional[str] = None
    subject: Optional[str] = None
    body_text: Optional[str] = None
    extracted_data: Optional[Dict[str, Any]] = None
    email_type: Optional[str] = None
    regie_id: Optional[str] = None
    confidence_score: Optional[float] = None
    work_order_number: Optional[str] = None
    status: str
    processed_at: Optional[datetime] = None
    intervention_id: Optional[str] = None
    class Config:
        from_attributes = True


class EmailPlan(BaseModel):
    """Champs saisis par le secrétariat ; vides = pré-remplis depuis l'email."""
    title: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    date_planned: Optional[datetime] = None
    estimated_duration_minutes: int = Field(default=60, gt=0)
    status: Literal["nouveau", "planifie", "en_cours"] = "planifie"
    priority: Optional[int] = Field(default=None, ge=0, le=2)
    technician_id: Optional[UUID] = None
    regie_id: Optional[UUID] = None
    work_order_number: Optional[str] = None
    client_info: Optional[ClientInfo] = None

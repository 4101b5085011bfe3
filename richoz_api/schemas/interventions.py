from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, Literal
from datetime import datetime
from uuid import UUID


class ClientInfo(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    apartment: Optional[str] = None
    access_code: Optional[str] = None
    notes: Optional[str] = None


class InterventionCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    address: str = ""
    date_planned: Optional[datetime] = None
    estimated_duration_minutes: int = Field(default=60, gt=0)
    technician_id: Optional[UUID] = None
    regie_id: Optional[UUID] = None
    client_info: Optional[ClientInfo] = None
    priority: int = Field(default=0, ge=0, le=2)
    work_order_number: Optional[str] = None
    notes: Optional[str] = None
    status: Literal["nouveau", "planifie"] = "planifie"


class InterventionUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    date_planned: Optional[datetime] = None
    estimated_duration_minutes: Optional[int] = Field(default=None, gt=0)
    technician_id: Optional[UUID] = None
    regie_id: Optional[UUID] = None
    client_info: Optional[ClientInfo] = None
    priority: Optional[int] = Field(default=None, ge=0, le=2)
    work_order_number: Optional[str] = None
    notes: Optional[str] = None


class InterventionOut(BaseModel):
    id: str
    status: str
    title: str
    description: Optional[str] = None
    address: Optional[str] = None
    date_planned: Optional[datetime] = None
    estimated_duration_minutes: Optional[int] = None
    date_completed: Optional[datetime] = None
    technician_id: Optional[str] = None
    regie_id: Optional[str] = None
    client_info: Optional[Dict[str, Any]] = None
    priority: int = 0
    source_type: str
    source_email_id: Optional[str] = None
    google_calendar_event_id: Optional[str] = None
    work_order_number: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    class Config:
        from_attributes = True

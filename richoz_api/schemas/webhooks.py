from pydantic import BaseModel, EmailStr, Field, model_validator
from typing import List, Optional, Literal
from datetime import datetime
from uuid import UUID

from .billing import LineItem


class ExtractedEmailData(BaseModel):
    # Champs best-effort renvoyés par l'extraction n8n ; les clés inconnues sont conservées
    title: Optional[str] = None
    address: Optional[str] = None
    tenant_name: Optional[str] = None
    tenant_phone: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    email_type: Optional[str] = None
    client_name: Optional[str] = None
    phone: Optional[str] = None
    issue_description: Optional[str] = None
    urgency: Optional[str] = None
    apartment: Optional[str] = None
    model_config = {"extra": "allow"}


class EmailIngestionPayload(BaseModel):
    gmail_message_id: str = Field(min_length=1)
    received_at: datetime
    from_email: EmailStr
    from_name: Optional[str] = None
    subject: Optional[str] = None
    body_text: Optional[str] = None
    body_html: Optional[str] = None
    extracted_data: Optional[ExtractedEmailData] = None
    regie_keyword: Optional[str] = None
    confidence_score: Optional[float] = Field(default=None, ge=0, le=1)
    work_order_number: Optional[str] = None
    email_type: Optional[Literal["intervention", "info"]] = None


class Attendee(BaseModel):
    email: EmailStr
    name: Optional[str] = None


class CalendarEventPayload(BaseModel):
    event_id: str = Field(min_length=1)
    action: Literal["created", "updated", "deleted"]
    title: str
    description: Optional[str] = None
    start_datetime: datetime
    end_datetime: datetime
    location: Optional[str] = None
    attendees: List[Attendee] = []
    regie_keyword: Optional[str] = None


class InvoiceValidatePayload(BaseModel):
    report_id: UUID
    action: Literal["validate", "reject"]
    validated_by: UUID
    line_items: List[LineItem] = []
    rejection_reason: Optional[str] = None
    discount_amount: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def reject_needs_reason(self):
        if self.action == "reject" and not (self.rejection_reason or "").strip():
            raise ValueError("rejection_reason est obligatoire pour un rejet")
        return self


class TranscribePayload(BaseModel):
    """Déclenchement {audio_url, ...} ou retour de n8n {transcription, report_id}."""
    audio_url: Optional[str] = None
    report_id: Optional[UUID] = None
    intervention_id: Optional[UUID] = None
    transcription: Optional[str] = None

    @model_validator(mode="after")
    def trigger_or_callback(self):
        if self.transcription is not None:
            if self.report_id is None:
                raise ValueError("report_id est obligatoire avec une transcription")
        elif not self.audio_url or not self.audio_url.startswith(("http://", "https://")):
            raise ValueError("audio_url (URL http) est obligatoire")
        return self

from pydantic import BaseModel, Field, model_validator
from typing import List, Optional, Literal
from datetime import datetime
from uuid import UUID


class PhotoItem(BaseModel):
    url: str
    category: Optional[Literal["before", "after"]] = None
    caption: Optional[str] = None


class ChecklistItem(BaseModel):
    item: str
    done: bool = False


class MaterialUsed(BaseModel):
    product_id: Optional[UUID] = None
    name: str
    quantity: float = Field(ge=0)
    unit_price: float = Field(ge=0)


class ReportSubmit(BaseModel):
    intervention_id: UUID
    technician_id: UUID
    text_content: Optional[str] = None
    vocal_url: Optional[str] = None
    vocal_transcription: Optional[str] = None
    photos: List[PhotoItem] = []
    checklist: List[ChecklistItem] = []
    is_billable: bool = True
    billable_reason: Optional[str] = None
    work_duration_minutes: Optional[int] = Field(default=None, ge=0)
    materials_used: List[MaterialUsed] = []
    supplies_note: Optional[str] = None
    client_signature: Optional[str] = None
    # Révision lue par le client ; si elle a bougé entre-temps -> 409
    expected_revision: Optional[int] = None

    @model_validator(mode="after")
    def non_billable_needs_reason(self):
        if not self.is_billable and not (self.billable_reason or "").strip():
            raise ValueError("Une raison est obligatoire pour un rapport non facturable")
        return self


class ReportReject(BaseModel):
    reason: str = Field(min_length=1)


class ReportOut(BaseModel):
    id: str
    intervention_id: str
    technician_id: str
    text_content: Optional[str] = None
    vocal_url: Optional[str] = None
    vocal_transcription: Optional[str] = None
    photos: List[PhotoItem] = []
    checklist: List[ChecklistItem] = []
    is_billable: bool
    billable_reason: Optional[str] = None
    rejection_reason: Optional[str] = None
    work_duration_minutes: Optional[int] = None
    materials_used: List[MaterialUsed] = []
    supplies_note: Optional[str] = None
    client_signature: Optional[str] = None
    status: str
    validated_at: Optional[datetime] = None
    validated_by: Optional[str] = None
    pdf_url: Optional[str] = None
    revision: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    class Config:
        from_attributes = True


class ValidationResult(BaseModel):
    success: bool = True
    report_id: str
    already_validated: bool = False
    intervention_status: str
    pdf_url: Optional[str] = None

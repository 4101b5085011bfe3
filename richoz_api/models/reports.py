from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from .base import Base
from ..utils import new_id, utcnow

DRAFT = "draft"
SUBMITTED = "submitted"
VALIDATED = "validated"
REJECTED = "rejected"
REPORT_STATUSES = (DRAFT, SUBMITTED, VALIDATED, REJECTED)


class Report(Base):
    __tablename__ = "reports"

    id = Column(String(36), primary_key=True, default=new_id)
    # Un seul rapport par intervention (upsert sur intervention_id)
    intervention_id = Column(String(36), ForeignKey("interventions.id"), unique=True, nullable=False)
    technician_id = Column(String(36), ForeignKey("users.id"), nullable=False)

    text_content = Column(String, nullable=True)
    vocal_url = Column(String, nullable=True)
    vocal_transcription = Column(String, nullable=True)
    photos = Column(JSON, default=list)
    checklist = Column(JSON, default=list)

    is_billable = Column(Boolean, default=True)
    billable_reason = Column(String, nullable=True)
    rejection_reason = Column(String, nullable=True)
    work_duration_minutes = Column(Integer, nullable=True)
    materials_used = Column(JSON, default=list)
    supplies_note = Column(String, nullable=True)
    client_signature = Column(String, nullable=True)

    status = Column(String, default=DRAFT, nullable=False, index=True)
    validated_at = Column(DateTime, nullable=True)
    validated_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    pdf_url = Column(String, nullable=True)

    revision = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    intervention = relationship("Intervention", back_populates="report")
    technician = relationship("User", foreign_keys=[technician_id])
    validator = relationship("User", foreign_keys=[validated_by])

    __mapper_args__ = {"version_id_col": revision}

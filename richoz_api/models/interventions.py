from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from .base import Base
from ..utils import new_id, utcnow

# Statuts d'une intervention
NOUVEAU = "nouveau"
PLANIFIE = "planifie"
EN_COURS = "en_cours"
TERMINE = "termine"
READY_TO_BILL = "ready_to_bill"
ARCHIVED = "archived"
BILLED = "billed"
ANNULE = "annule"
INTERVENTION_STATUSES = (NOUVEAU, PLANIFIE, EN_COURS, TERMINE, READY_TO_BILL, ARCHIVED, BILLED, ANNULE)

SOURCE_MANUAL = "manual"
SOURCE_EMAIL = "email"
SOURCE_CALENDAR = "calendar"

PRIORITY_NORMAL = 0
PRIORITY_URGENT = 1
PRIORITY_CRITICAL = 2


class Intervention(Base):
    __tablename__ = "interventions"

    id = Column(String(36), primary_key=True, default=new_id)
    status = Column(String, default=NOUVEAU, nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    address = Column(String, default="")

    date_planned = Column(DateTime, nullable=True)
    estimated_duration_minutes = Column(Integer, default=60)
    date_completed = Column(DateTime, nullable=True)

    technician_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    regie_id = Column(String(36), ForeignKey("regies.id"), nullable=True)

    client_info = Column(JSON, default=dict)
    priority = Column(Integer, default=PRIORITY_NORMAL)
    source_type = Column(String, default=SOURCE_MANUAL)
    source_email_id = Column(String(36), nullable=True)
    google_calendar_event_id = Column(String, unique=True, nullable=True, index=True)
    work_order_number = Column(String, nullable=True)
    notes = Column(String, nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    technician = relationship("User", back_populates="interventions")
    regie = relationship("Regie", back_populates="interventions")
    report = relationship("Report", uselist=False, back_populates="intervention")

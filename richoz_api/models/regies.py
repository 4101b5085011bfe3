from sqlalchemy import Column, String, Boolean, DateTime, Float, JSON
from sqlalchemy.orm import relationship
from .base import Base
from ..utils import new_id, utcnow


class Regie(Base):
    __tablename__ = "regies"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False, index=True)
    # Mot-clé utilisé dans les emails et les titres d'agenda ([KEYWORD] Titre)
    keyword = Column(String, nullable=False, unique=True)
    email_contact = Column(String, nullable=True)
    email_domains = Column(JSON, default=list)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    discount_percentage = Column(Float, default=0)
    billing_email = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)

    interventions = relationship("Intervention", back_populates="regie")

from sqlalchemy import Column, String, DateTime, Float, ForeignKey, JSON
from sqlalchemy.orm import relationship
from .base import Base
from ..utils import new_id, utcnow

EMAIL_NEW = "new"
EMAIL_PROCESSED = "processed"
EMAIL_IGNORED = "ignored"
EMAIL_STATUSES = (EMAIL_NEW, EMAIL_PROCESSED, EMAIL_IGNORED)

TYPE_INTERVENTION = "intervention"
TYPE_INFO = "info"


class EmailInbox(Base):
    __tablename__ = "email_inbox"

    id = Column(String(36), primary_key=True, default=new_id)
    gmail_message_id = Column(String, unique=True, nullable=False, index=True)
    received_at = Column(DateTime, nullable=False)
    from_email = Column(String, nullable=False)
    from_name = Column(String, nullable=True)
    subject = Column(String, nullable=True)
    body_text = Column(String, nullable=True)
    body_html = Column(String, nullable=True)
    extracted_data = Column(JSON, default=dict)
    email_type = Column(String, nullable=True)

    regie_id = Column(String(36), ForeignKey("regies.id"), nullable=True)
    confidence_score = Column(Float, nullable=True)
    work_order_number = Column(String, nullable=True)

    status = Column(String, default=EMAIL_NEW, nullable=False, index=True)
    processed_at = Column(DateTime, nullable=True)
    intervention_id = Column(String(36), ForeignKey("interventions.id"), nullable=True)
    error_message = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    regie = relationship("Regie")

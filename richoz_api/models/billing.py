from sqlalchemy import Column, String, Boolean, DateTime, Date, Float, ForeignKey, JSON
from sqlalchemy.orm import relationship
from .base import Base
from ..utils import new_id, utcnow

INVOICE_GENERATED = "generated"
INVOICE_SENT = "sent"
INVOICE_PAID = "paid"
INVOICE_STATUSES = (INVOICE_GENERATED, INVOICE_SENT, INVOICE_PAID)
# Statut calculé à la lecture, jamais stocké
INVOICE_OVERDUE = "overdue"

QUOTE_DRAFT = "draft"
QUOTE_SENT = "sent"
QUOTE_ACCEPTED = "accepted"
QUOTE_REJECTED = "rejected"
QUOTE_EXPIRED = "expired"
QUOTE_STATUSES = (QUOTE_DRAFT, QUOTE_SENT, QUOTE_ACCEPTED, QUOTE_REJECTED, QUOTE_EXPIRED)


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(String(36), primary_key=True, default=new_id)
    invoice_number = Column(String, unique=True, nullable=False)
    report_id = Column(String(36), ForeignKey("reports.id"), unique=True, nullable=True)
    intervention_id = Column(String(36), ForeignKey("interventions.id"), nullable=True)

    date = Column(DateTime, default=utcnow)
    client_name = Column(String, default="")
    client_address = Column(String, default="")

    line_items = Column(JSON, default=list)
    subtotal = Column(Float, default=0)
    discount_amount = Column(Float, default=0)
    vat_rate = Column(Float, nullable=False)
    vat_amount = Column(Float, default=0)
    total = Column(Float, default=0)

    status = Column(String, default=INVOICE_GENERATED, nullable=False)
    sent_at = Column(DateTime, nullable=True)
    notes = Column(String, nullable=True)
    pdf_url = Column(String, nullable=True)

    report = relationship("Report")
    intervention = relationship("Intervention")


class Quote(Base):
    __tablename__ = "quotes"

    id = Column(String(36), primary_key=True, default=new_id)
    quote_number = Column(String, unique=True, nullable=False)
    client_name = Column(String, nullable=False)
    client_email = Column(String, nullable=True)
    client_phone = Column(String, nullable=True)
    client_address = Column(String, nullable=True)
    regie_id = Column(String(36), ForeignKey("regies.id"), nullable=True)

    title = Column(String, nullable=True)
    description = Column(String, nullable=True)
    items = Column(JSON, default=list)
    subtotal = Column(Float, default=0)
    discount_regie = Column(Boolean, default=False)
    discount_percentage = Column(Float, default=0)
    discount_amount = Column(Float, default=0)
    vat_rate = Column(Float, nullable=False)
    vat_amount = Column(Float, default=0)
    total = Column(Float, default=0)

    valid_until = Column(Date, nullable=True)
    status = Column(String, default=QUOTE_DRAFT, nullable=False)
    accepted_at = Column(DateTime, nullable=True)
    rejected_at = Column(DateTime, nullable=True)
    rejection_reason = Column(String, nullable=True)
    pdf_url = Column(String, nullable=True)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=utcnow)

    regie = relationship("Regie")

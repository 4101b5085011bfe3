from sqlalchemy import Column, String, DateTime, JSON
from .base import Base
from ..utils import new_id, utcnow


class AuditLog(Base):
    __tablename__ = "audit_log"

    id = Column(String(36), primary_key=True, default=new_id)
    action = Column(String, nullable=False)
    table_name = Column(String, nullable=False)
    record_id = Column(String(36), nullable=False, index=True)
    user_id = Column(String(36), nullable=True)
    user_email = Column(String, nullable=True)
    old_values = Column(JSON, nullable=True)
    new_values = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=utcnow)

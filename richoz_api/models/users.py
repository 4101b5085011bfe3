from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from .base import Base
from ..utils import new_id, utcnow

ROLE_ADMIN = "admin"
ROLE_SECRETARY = "secretary"
ROLE_TECHNICIAN = "technician"
ROLES = (ROLE_ADMIN, ROLE_SECRETARY, ROLE_TECHNICIAN)
# Bureau : ceux qui valident les rapports et traitent la boîte mail
OFFICE_ROLES = (ROLE_ADMIN, ROLE_SECRETARY)


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=True)
    role = Column(String, default=ROLE_TECHNICIAN, nullable=False)
    first_name = Column(String, default="")
    last_name = Column(String, default="")
    phone = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)

    interventions = relationship("Intervention", back_populates="technician")

    @property
    def display_name(self):
        full = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return full or self.email


class CompanySettings(Base):
    __tablename__ = "company_settings"

    id = Column(String(36), primary_key=True, default=new_id)
    company_name = Column(String, default="")
    address = Column(String, default="")
    email = Column(String, default="")
    phone = Column(String, default="")
    iban = Column(String, default="")
    vat_number = Column(String, default="")
    logo_url = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

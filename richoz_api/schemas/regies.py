from pydantic import BaseModel, Field
from typing import List, Optional


class RegieCreate(BaseModel):
    name: str = Field(min_length=1)
    keyword: str = Field(min_length=1)
    email_contact: Optional[str] = None
    email_domains: List[str] = []
    phone: Optional[str] = None
    address: Optional[str] = None
    discount_percentage: float = Field(default=0, ge=0, le=100)
    billing_email: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool = True


class RegieUpdate(BaseModel):
    name: Optional[str] = None
    keyword: Optional[str] = None
    email_contact: Optional[str] = None
    email_domains: Optional[List[str]] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    discount_percentage: Optional[float] = Field(default=None, ge=0, le=100)
    billing_email: Optional[str] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class RegieOut(RegieCreate):
    id: str
    class Config:
        from_attributes = True

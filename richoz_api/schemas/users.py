from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Literal
from datetime import datetime

# --- AUTH ---
class Token(BaseModel):
    access_token: str
    token_type: str


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    role: Literal["admin", "secretary", "technician"] = "technician"
    first_name: str = ""
    last_name: str = ""
    phone: Optional[str] = None


class UserUpdate(BaseModel):
    role: Optional[Literal["admin", "secretary", "technician"]] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    is_active: Optional[bool] = None
    password: Optional[str] = Field(default=None, min_length=8)


class UserOut(BaseModel):
    id: str
    email: EmailStr
    role: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    class Config:
        from_attributes = True


# --- ENTREPRISE ---
class CompanySettingsUpdate(BaseModel):
    company_name: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    iban: Optional[str] = None
    vat_number: Optional[str] = None
    logo_url: Optional[str] = None


class CompanySettingsOut(CompanySettingsUpdate):
    id: str
    class Config:
        from_attributes = True

from pydantic import BaseModel, Field, model_validator
from typing import List, Optional, Literal
from datetime import datetime, date
from uuid import UUID


class LineItem(BaseModel):
    description: str
    quantity: float = 1
    unit_price: float = 0
    total: Optional[float] = None

    @model_validator(mode="after")
    def fill_total(self):
        if self.total is None:
            self.total = round(self.quantity * self.unit_price, 2)
        return self


class InvoiceCreate(BaseModel):
    report_id: UUID
    line_items: List[LineItem] = []
    discount_amount: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None


class InvoiceStatusUpdate(BaseModel):
    status: Literal["generated", "sent", "paid"]


class InvoiceOut(BaseModel):
    id: str
    invoice_number: str
    report_id: Optional[str] = None
    intervention_id: Optional[str] = None
    date: Optional[datetime] = None
    client_name: Optional[str] = None
    client_address: Optional[str] = None
    line_items: List[LineItem] = []
    subtotal: float
    discount_amount: float = 0
    vat_rate: float
    vat_amount: float
    total: float
    status: str
    is_overdue: bool = False
    sent_at: Optional[datetime] = None
    notes: Optional[str] = None
    pdf_url: Optional[str] = None
    class Config:
        from_attributes = True


class QuoteDraftRequest(BaseModel):
    text: str = Field(min_length=1)


class QuoteCreate(BaseModel):
    client_name: str = Field(min_length=1)
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    client_address: Optional[str] = None
    regie_id: Optional[UUID] = None
    title: Optional[str] = None
    description: Optional[str] = None
    items: List[LineItem] = Field(min_length=1)
    discount_regie: bool = False
    valid_until: Optional[date] = None


class QuoteStatusUpdate(BaseModel):
    status: Literal["sent", "accepted", "rejected", "expired"]
    rejection_reason: Optional[str] = None


class QuoteOut(BaseModel):
    id: str
    quote_number: str
    client_name: str
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    client_address: Optional[str] = None
    regie_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    items: List[LineItem] = []
    subtotal: float
    discount_regie: bool = False
    discount_percentage: float = 0
    discount_amount: float = 0
    vat_rate: float
    vat_amount: float
    total: float
    valid_until: Optional[date] = None
    status: str
    accepted_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    class Config:
        from_attributes = True

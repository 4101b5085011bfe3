from pydantic import BaseModel, Field
from typing import Optional, Literal

Category = Literal["service", "plomberie", "chauffage", "sanitaire", "autre"]


class ProductCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    sku: Optional[str] = None
    category: Category = "autre"
    price: float = Field(default=0, ge=0)
    cost_price: Optional[float] = Field(default=None, ge=0)
    supplier: Optional[str] = None
    track_stock: bool = False
    stock_quantity: int = 0
    is_active: bool = True


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    sku: Optional[str] = None
    category: Optional[Category] = None
    price: Optional[float] = Field(default=None, ge=0)
    cost_price: Optional[float] = Field(default=None, ge=0)
    supplier: Optional[str] = None
    track_stock: Optional[bool] = None
    stock_quantity: Optional[int] = None
    is_active: Optional[bool] = None


class ProductOut(ProductCreate):
    id: str
    class Config:
        from_attributes = True

from sqlalchemy import Column, String, Boolean, DateTime, Float, Integer
from .base import Base
from ..utils import new_id, utcnow

PRODUCT_CATEGORIES = ("service", "plomberie", "chauffage", "sanitaire", "autre")


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False, index=True)
    description = Column(String, nullable=True)
    sku = Column(String, nullable=True)
    category = Column(String, default="autre")
    price = Column(Float, default=0)
    cost_price = Column(Float, nullable=True)
    supplier = Column(String, nullable=True)
    track_stock = Column(Boolean, default=False)
    stock_quantity = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)

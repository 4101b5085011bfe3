from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..dependencies import get_current_user, require_office

router = APIRouter(prefix="/products", tags=["Catalogue"])


@router.get("", response_model=List[schemas.ProductOut])
def read_products(category: Optional[str] = None, search: Optional[str] = None,
                  db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    query = db.query(models.Product).filter(models.Product.is_active == True)
    if category:
        query = query.filter(models.Product.category == category)
    if search:
        query = query.filter(models.Product.name.ilike(f"%{search}%"))
    return query.order_by(models.Product.name).all()


@router.post("", response_model=schemas.ProductOut, status_code=201)
def create_product(data: schemas.ProductCreate, db: Session = Depends(get_db),
                   current_user: models.User = Depends(require_office)):
    product = models.Product(**data.model_dump())
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


@router.put("/{product_id}", response_model=schemas.ProductOut)
def update_product(product_id: str, data: schemas.ProductUpdate, db: Session = Depends(get_db),
                   current_user: models.User = Depends(require_office)):
    product = db.query(models.Product).filter(models.Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Produit introuvable")
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(product, key, value)
    db.commit()
    db.refresh(product)
    return product


@router.delete("/{product_id}")
def delete_product(product_id: str, db: Session = Depends(get_db),
                   current_user: models.User = Depends(require_office)):
    # Désactivation seulement : des rapports peuvent y faire référence
    product = db.query(models.Product).filter(models.Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Produit introuvable")
    product.is_active = False
    db.commit()
    return {"success": True, "message": "Produit désactivé"}

# phm/routers/products.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from phm.auth.deps import get_current_user
from phm.core.errors import ConflictError
from phm.db import get_db
from phm.models.product import Product
from phm.models.user import User
from phm.schemas.common import PageParams
from phm.schemas.product import ProductCreate, ProductOut, ProductSearchHit, ProductUpdate
from phm.services.pagination import paginate
from phm.services.tenancy import apply_update, get_owned_or_404

router = APIRouter(prefix="/api/products", tags=["products"])

REQUIRED = ("sku", "name", "sell_price", "stock_level", "min_stock_level", "is_active")


def _sku_taken(db: Session, account_id: int, sku: str, exclude_id: Optional[int] = None) -> bool:
    q = db.query(Product.id).filter(Product.account_id == account_id, Product.sku == sku)
    if exclude_id is not None:
        q = q.filter(Product.id != exclude_id)
    return q.first() is not None


@router.get("")
def list_products(
    search: Optional[str] = None,
    category: Optional[str] = None,
    manufacturer: Optional[str] = None,
    is_active: Optional[bool] = Query(None, alias="isActive"),
    paging: PageParams = Depends(),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    q = db.query(Product).filter(Product.account_id == user.account_id)
    if search:
        term = f"%{search}%"
        q = q.filter(
            or_(
                Product.name.ilike(term),
                Product.sku.ilike(term),
                Product.description.ilike(term),
                Product.manufacturer.ilike(term),
            )
        )
    if category:
        q = q.filter(Product.category == category)
    if manufacturer:
        q = q.filter(Product.manufacturer.ilike(f"%{manufacturer}%"))
    if is_active is not None:
        q = q.filter(Product.is_active == is_active)

    q = q.order_by(Product.name.asc(), Product.id.asc())
    return paginate(q, paging, ProductOut.model_validate)


@router.get("/search")
def quick_search(
    q: str = "",
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Type-ahead for the quote builder: active products only, needs 2+ characters."""
    if len(q.strip()) < 2:
        return {"data": []}
    term = f"%{q.strip()}%"
    rows = (
        db.query(Product)
        .filter(
            Product.account_id == user.account_id,
            Product.is_active.is_(True),
            or_(Product.name.ilike(term), Product.sku.ilike(term), Product.manufacturer.ilike(term)),
        )
        .order_by(Product.name.asc())
        .limit(limit)
        .all()
    )
    return {"data": [ProductSearchHit.model_validate(p) for p in rows]}


@router.post("", status_code=201)
def create_product(
    payload: ProductCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if _sku_taken(db, user.account_id, payload.sku):
        raise ConflictError(f"Product with SKU '{payload.sku}' already exists")

    product = Product(account_id=user.account_id, **payload.model_dump())
    db.add(product)
    db.commit()
    db.refresh(product)
    return {"data": ProductOut.model_validate(product), "message": "Product created successfully"}


@router.get("/{product_id}")
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    product = get_owned_or_404(db, Product, product_id, user.account_id, "Product")
    return {"data": ProductOut.model_validate(product)}


@router.put("/{product_id}")
def update_product(
    product_id: int,
    payload: ProductUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    product = get_owned_or_404(db, Product, product_id, user.account_id, "Product")
    if payload.sku and payload.sku != product.sku and _sku_taken(db, user.account_id, payload.sku, product.id):
        raise ConflictError(f"Product with SKU '{payload.sku}' already exists")

    apply_update(product, payload, required=REQUIRED)
    db.commit()
    db.refresh(product)
    return {"data": ProductOut.model_validate(product), "message": "Product updated successfully"}


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    product = get_owned_or_404(db, Product, product_id, user.account_id, "Product")
    db.delete(product)
    db.commit()
    return {"message": "Product deleted successfully"}

# storefront/api/routers/products.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.schemas import ProductOut, ProductPage
from storefront.services.catalog_service import CatalogService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("/", response_model=ProductPage)
def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return CatalogService(db).list_products(page=page, limit=limit)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    product = CatalogService(db).get_active_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Produkt nie znaleziony")
    return product

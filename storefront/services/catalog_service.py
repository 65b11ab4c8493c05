# storefront/services/catalog_service.py
import math
from typing import Any, Dict

from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.repos.product_repo import ProductRepo


class CatalogService:
    """Tylko odczyt katalogu. Stan magazynu zmienia wyłącznie OrderService."""

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def get_active_product(self, product_id: int) -> ProductModel | None:
        return self.repo.get_active_product(product_id)

    def list_products(self, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        page = max(page, 1)
        total = self.repo.count_active_products()
        products = self.repo.list_active_products(offset=(page - 1) * limit, limit=limit)
        total_pages = math.ceil(total / limit) if limit else 0
        return {
            "products": products,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "total_pages": total_pages,
                "has_next": page < total_pages,
                "has_prev": page > 1,
            },
        }

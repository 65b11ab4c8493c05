# storefront/data/seed.py
from decimal import Decimal

from storefront.data.database import Base, SessionLocal, engine
from storefront.data.models import ProductModel, UserModel

USERS = [
    {"id": 1, "name": "Admin", "email": "admin@example.com", "role": "ADMIN"},
    {"id": 2, "name": "Jan Kowalski", "email": "jan@example.com", "role": "USER"},
]

PRODUCTS = [
    {"sku": "KB-001", "name": "Keyboard", "price": Decimal("199.99"), "stock": 25},
    {"sku": "MS-001", "name": "Mouse", "price": Decimal("49.50"), "stock": 100},
    {"sku": "MN-001", "name": "Monitor", "price": Decimal("899.00"), "stock": 5},
]


def seed(session_factory=SessionLocal) -> bool:
    """Zasila pustą bazę użytkownikami i produktami. Zwraca False jeśli dane już są."""
    db = session_factory()
    try:
        # not forcing: only seed if empty
        if db.query(ProductModel).first():
            return False
        db.add_all(UserModel(**u) for u in USERS)
        db.add_all(ProductModel(**p) for p in PRODUCTS)
        db.commit()
        return True
    finally:
        db.close()


if __name__ == "__main__":
    Base.metadata.create_all(bind=engine)
    seed()

"""Pytest fixtures: osobna baza SQLite w pliku na kazdy test, zasilona uzytkownikami i produktami."""
import logging
import os

# musi byc ustawione przed importem pakietu (settings czytaja env przy imporcie)
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ.setdefault("LOG_LEVEL", "INFO")

from decimal import Decimal

import pytest
from sqlalchemy.orm import sessionmaker

from storefront.data.database import Base, make_engine
from storefront.data.models import ProductModel, UserModel
from storefront.domain.pricing import PricingConfig
from storefront.services.order_service import OrderService

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

ADMIN_ID = 1
USER_ID = 2
OTHER_USER_ID = 3

PRODUCT_A = 1  # 100.00, stock 10
PRODUCT_B = 2  # 25.50, stock 5
PRODUCT_INACTIVE = 3
PRODUCT_LAST_UNIT = 4  # stock 1

ADDRESS = {
    "street": "ul. Marszalkowska 1",
    "city": "Warszawa",
    "state": "mazowieckie",
    "zip_code": "00-001",
    "country": "PL",
    "phone": "+48123456789",
}


class RecordingNotifications:
    """Zamiast kolejki Celery - zapisuje wywolania."""

    def __init__(self):
        self.placed = []
        self.status_changes = []

    def send_order_placed(self, user_id, order_id, total):
        self.placed.append((user_id, order_id, total))

    def send_status_changed(self, user_id, order_id, status):
        self.status_changes.append((user_id, order_id, status))


@pytest.fixture
def engine(tmp_path):
    eng = make_engine(f"sqlite:///{tmp_path / 'storefront.db'}")
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def seeded(session_factory):
    db = session_factory()
    db.add_all(
        [
            UserModel(id=ADMIN_ID, name="Admin", email="admin@example.com", role="ADMIN"),
            UserModel(id=USER_ID, name="Jan", email="jan@example.com", role="USER"),
            UserModel(id=OTHER_USER_ID, name="Anna", email="anna@example.com", role="USER"),
        ]
    )
    db.add_all(
        [
            ProductModel(id=PRODUCT_A, sku="A-001", name="Keyboard", price=Decimal("100.00"), stock=10),
            ProductModel(id=PRODUCT_B, sku="B-001", name="Mouse", price=Decimal("25.50"), stock=5),
            ProductModel(
                id=PRODUCT_INACTIVE, sku="C-001", name="Old monitor", price=Decimal("10.00"), stock=3, is_active=False
            ),
            ProductModel(id=PRODUCT_LAST_UNIT, sku="D-001", name="Webcam", price=Decimal("60.00"), stock=1),
        ]
    )
    db.commit()
    db.close()
    return session_factory


@pytest.fixture
def db(seeded):
    session = seeded()
    yield session
    session.close()


@pytest.fixture
def pricing():
    return PricingConfig(
        tax_rate=Decimal("0.10"),
        flat_shipping_fee=Decimal("9.99"),
        free_shipping_threshold=Decimal("100.00"),
    )


@pytest.fixture
def notifications():
    return RecordingNotifications()


@pytest.fixture
def order_service(db, pricing, notifications):
    return OrderService(db, pricing=pricing, notification_service=notifications, restock_on_cancel=False)


def stock_of(session_factory, product_id: int) -> int:
    """Odczyt ze swiezej sesji, niezalezny od mapy tozsamosci testowanego serwisu."""
    s = session_factory()
    try:
        return s.get(ProductModel, product_id).stock
    finally:
        s.close()

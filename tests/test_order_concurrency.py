"""Concurrent checkouts competing for the same stock."""
import threading

import pytest

from conftest import ADDRESS, OTHER_USER_ID, PRODUCT_LAST_UNIT, USER_ID, RecordingNotifications, stock_of
from storefront.data.models import OrderModel
from storefront.domain.errors import InsufficientStockError, OrderCreationFailedError
from storefront.repos.product_repo import ProductRepo
from storefront.services.order_service import OrderService

LAST_UNIT = [{"product_id": PRODUCT_LAST_UNIT, "quantity": 1}]


def _service(session, pricing):
    return OrderService(session, pricing=pricing, notification_service=RecordingNotifications())


def _orders(session_factory):
    s = session_factory()
    try:
        return s.query(OrderModel).all()
    finally:
        s.close()


def test_second_checkout_sees_reduced_stock(seeded, pricing):
    first = _service(seeded(), pricing)
    second = _service(seeded(), pricing)

    first.place_order(USER_ID, LAST_UNIT, shipping_address=ADDRESS)

    with pytest.raises(InsufficientStockError) as exc:
        second.place_order(OTHER_USER_ID, LAST_UNIT, shipping_address=ADDRESS)

    assert exc.value.available == 0
    assert stock_of(seeded, PRODUCT_LAST_UNIT) == 0
    assert len(_orders(seeded)) == 1


def test_checkout_interleaved_between_read_and_write(seeded, pricing, monkeypatch):
    """
    Druga transakcja commituje pomiedzy odczytem a zapisem pierwszej.
    Pierwsza trafia na nieaktualna wersje, ponawia z nowym odczytem i dostaje available=0.
    """
    slow_session = seeded()
    slow = _service(slow_session, pricing)
    fast = _service(seeded(), pricing)

    real_lock = ProductRepo.lock_products_by_ids
    reads = []

    def racing_lock(self, product_ids):
        rows = real_lock(self, product_ids)
        if self.db is slow_session:
            reads.append([p.stock for p in rows])
            if len(reads) == 1:
                fast.place_order(OTHER_USER_ID, LAST_UNIT, shipping_address=ADDRESS)
        return rows

    monkeypatch.setattr(ProductRepo, "lock_products_by_ids", racing_lock)

    with pytest.raises(InsufficientStockError) as exc:
        slow.place_order(USER_ID, LAST_UNIT, shipping_address=ADDRESS)

    assert exc.value.available == 0
    # pierwszy odczyt widzial 1 sztuke, ponowiony juz 0
    assert reads == [[1], [0]]
    assert stock_of(seeded, PRODUCT_LAST_UNIT) == 0

    orders = _orders(seeded)
    assert len(orders) == 1
    assert orders[0].user_id == OTHER_USER_ID


def test_parallel_checkouts_never_oversell(seeded, pricing):
    barrier = threading.Barrier(2)
    outcomes = {}

    def checkout(user_id):
        session = seeded()
        try:
            barrier.wait(timeout=5)
            _service(session, pricing).place_order(user_id, LAST_UNIT, shipping_address=ADDRESS)
            outcomes[user_id] = "ok"
        except (InsufficientStockError, OrderCreationFailedError) as e:
            outcomes[user_id] = e
        finally:
            session.close()

    threads = [threading.Thread(target=checkout, args=(uid,)) for uid in (USER_ID, OTHER_USER_ID)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    successes = [uid for uid, outcome in outcomes.items() if outcome == "ok"]
    failures = [outcome for outcome in outcomes.values() if outcome != "ok"]

    assert len(successes) == 1
    assert len(failures) == 1
    if isinstance(failures[0], InsufficientStockError):
        assert failures[0].available == 0
    assert stock_of(seeded, PRODUCT_LAST_UNIT) == 0
    assert len(_orders(seeded)) == 1

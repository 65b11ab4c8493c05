"""Tests for the order status state machine."""
import pytest

from storefront.domain.errors import InvalidTransitionError
from storefront.domain.order_status import OrderStatus, can_transition, ensure_transition

S = OrderStatus

ALLOWED = [
    (S.PENDING, S.CONFIRMED),
    (S.PENDING, S.CANCELLED),
    (S.CONFIRMED, S.PROCESSING),
    (S.CONFIRMED, S.CANCELLED),
    (S.PROCESSING, S.SHIPPED),
    (S.SHIPPED, S.DELIVERED),
    (S.DELIVERED, S.REFUNDED),
    (S.CANCELLED, S.REFUNDED),
]


@pytest.mark.parametrize("current,target", ALLOWED)
def test_allowed_transitions(current, target):
    assert can_transition(current, target)
    assert ensure_transition("ORD-1", current, target) == target


@pytest.mark.parametrize(
    "current,target",
    [
        (S.PENDING, S.SHIPPED),
        (S.CONFIRMED, S.PENDING),
        (S.PROCESSING, S.CANCELLED),
        (S.SHIPPED, S.CANCELLED),
        (S.DELIVERED, S.CANCELLED),
        (S.DELIVERED, S.SHIPPED),
        (S.CANCELLED, S.PENDING),
        (S.PENDING, S.REFUNDED),
    ],
)
def test_rejected_transitions(current, target):
    assert not can_transition(current, target)


@pytest.mark.parametrize("target", list(OrderStatus))
def test_refunded_is_terminal(target):
    assert not can_transition(S.REFUNDED, target)


def test_rejection_carries_attempted_transition():
    with pytest.raises(InvalidTransitionError) as exc:
        ensure_transition("ORD-123", "SHIPPED", "CANCELLED")

    assert exc.value.details == {
        "order_id": "ORD-123",
        "current_status": "SHIPPED",
        "target_status": "CANCELLED",
    }
    assert exc.value.status_code == 409


def test_plain_strings_are_accepted():
    assert can_transition("PENDING", "CONFIRMED")

# storefront/domain/pricing.py
"""
Kalkulator cen zamowienia.

Czysta funkcja: te same wejscia zawsze daja te same sumy, bez dostepu do bazy.
Wszystkie kwoty to ``Decimal`` zaokraglany do groszy metoda ROUND_HALF_UP,
floaty sa odrzucane.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from storefront.utils import settings

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def money(value) -> Decimal:
    if isinstance(value, float):
        raise TypeError("Kwoty pieniezne nie moga byc typu float")
    if value is None or value == "":
        return ZERO
    return Decimal(str(value)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PricingConfig:
    tax_rate: Decimal
    flat_shipping_fee: Decimal
    free_shipping_threshold: Decimal

    @classmethod
    def from_settings(cls) -> "PricingConfig":
        return cls(
            tax_rate=settings.TAX_RATE,
            flat_shipping_fee=settings.FLAT_SHIPPING_FEE,
            free_shipping_threshold=settings.FREE_SHIPPING_THRESHOLD,
        )


@dataclass(frozen=True)
class PriceLine:
    unit_price: Decimal
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return money(money(self.unit_price) * self.quantity)


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal


def calculate_totals(lines: Iterable[PriceLine], config: PricingConfig) -> OrderTotals:
    subtotal = ZERO
    line_count = 0
    for line in lines:
        line_count += 1
        if line.quantity < 1:
            raise ValueError("Ilosc musi byc wieksza niz 0")
        subtotal += line.line_total

    if isinstance(config.tax_rate, float):
        raise TypeError("Stawka podatku nie moze byc typu float")

    tax = money(subtotal * config.tax_rate)

    # pusty koszyk (brak pozycji) nie placi za wysylke
    if line_count == 0 or subtotal >= money(config.free_shipping_threshold):
        shipping = ZERO
    else:
        shipping = money(config.flat_shipping_fee)

    return OrderTotals(
        subtotal=subtotal,
        tax=tax,
        shipping=shipping,
        total=subtotal + tax + shipping,
    )

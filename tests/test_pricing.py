"""Tests for the order pricing calculator."""
from decimal import Decimal

import pytest

from storefront.domain.pricing import PriceLine, PricingConfig, calculate_totals, money


def test_scenario_free_shipping_over_threshold(pricing):
    totals = calculate_totals([PriceLine(Decimal("100.00"), 2)], pricing)

    assert totals.subtotal == Decimal("200.00")
    assert totals.tax == Decimal("20.00")
    assert totals.shipping == Decimal("0.00")
    assert totals.total == Decimal("220.00")


def test_subtotal_equal_to_threshold_ships_free(pricing):
    totals = calculate_totals([PriceLine(Decimal("50.00"), 2)], pricing)

    assert totals.subtotal == pricing.free_shipping_threshold
    assert totals.shipping == Decimal("0.00")


def test_subtotal_below_threshold_pays_flat_fee(pricing):
    totals = calculate_totals([PriceLine(Decimal("99.99"), 1)], pricing)

    assert totals.shipping == Decimal("9.99")
    assert totals.tax == Decimal("10.00")  # 9.999 -> 10.00
    assert totals.total == Decimal("119.98")


def test_tax_rounds_half_up(pricing):
    # 10.05 * 0.10 = 1.005
    totals = calculate_totals([PriceLine(Decimal("10.05"), 1)], pricing)

    assert totals.tax == Decimal("1.01")


def test_subtotal_is_exact_sum_of_line_totals(pricing):
    lines = [PriceLine(Decimal("0.10"), 3), PriceLine(Decimal("0.20"), 7), PriceLine(Decimal("19.99"), 11)]

    totals = calculate_totals(lines, pricing)

    assert totals.subtotal == sum((line.line_total for line in lines), Decimal("0.00"))
    assert totals.subtotal == Decimal("221.59")


def test_calculation_is_deterministic(pricing):
    lines = [PriceLine(Decimal("33.33"), 3), PriceLine(Decimal("0.01"), 1)]

    assert calculate_totals(lines, pricing) == calculate_totals(list(lines), pricing)


def test_empty_lines_price_to_zero(pricing):
    totals = calculate_totals([], pricing)

    assert totals.subtotal == totals.tax == totals.shipping == totals.total == Decimal("0.00")


def test_float_prices_are_rejected(pricing):
    with pytest.raises(TypeError):
        calculate_totals([PriceLine(19.99, 1)], pricing)


def test_non_positive_quantity_is_rejected(pricing):
    with pytest.raises(ValueError):
        calculate_totals([PriceLine(Decimal("1.00"), 0)], pricing)


def test_custom_config_changes_shipping_rule():
    config = PricingConfig(
        tax_rate=Decimal("0.19"),
        flat_shipping_fee=Decimal("15000"),
        free_shipping_threshold=Decimal("150000"),
    )

    totals = calculate_totals([PriceLine(Decimal("50000"), 2)], config)

    assert totals.shipping == Decimal("15000.00")
    assert totals.tax == Decimal("19000.00")
    assert totals.total == Decimal("134000.00")


def test_money_quantizes_strings_and_ints():
    assert money("1.005") == Decimal("1.01")
    assert money(3) == Decimal("3.00")
    assert money(None) == Decimal("0.00")


def test_zero_priced_lines_still_pay_shipping(pricing):
    totals = calculate_totals([PriceLine(Decimal("0.00"), 1)], pricing)

    assert totals.subtotal == Decimal("0.00")
    assert totals.shipping == Decimal("9.99")
    assert totals.total == Decimal("9.99")


def test_generator_input_is_counted_for_shipping(pricing):
    totals = calculate_totals((PriceLine(Decimal("0.00"), q) for q in (1, 2)), pricing)

    assert totals.shipping == Decimal("9.99")

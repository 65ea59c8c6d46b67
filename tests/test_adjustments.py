"""
Adjustment engine tests: free months first, discount second.
"""

from decimal import Decimal

import pytest

from app.core.exceptions import ValidationError
from app.models.quote import Quote
from app.services.adjustments import (
    compute_breakdown,
    resolve_original_total,
    validate_discount_percentage,
    validate_free_months,
)


def test_free_months_then_discount_exact_figures():
    breakdown = compute_breakdown(
        Decimal("1200"),
        12,
        free_months=2,
        discount_percentage=Decimal("10"),
    )

    assert breakdown.monthly_rate == Decimal("100.00")
    assert breakdown.billable_months == 10
    assert breakdown.subtotal_after_free == Decimal("1000.00")
    assert breakdown.discount_amount == Decimal("100.00")
    assert breakdown.final_total == Decimal("900.00")
    assert breakdown.savings == Decimal("300.00")


def test_discount_applies_to_amount_after_free_months():
    breakdown = compute_breakdown(
        Decimal("1000"),
        10,
        free_months=5,
        discount_percentage=Decimal("50"),
    )

    assert breakdown.subtotal_after_free == Decimal("500.00")
    # 50% of 500, not of the original 1000
    assert breakdown.discount_amount == Decimal("250.00")
    assert breakdown.final_total == Decimal("250.00")
    assert breakdown.savings == Decimal("750.00")


def test_discount_only():
    breakdown = compute_breakdown(Decimal("1200"), 12, discount_percentage=Decimal("15"))

    assert breakdown.free_months == 0
    assert breakdown.final_total == Decimal("1020.00")
    assert breakdown.savings == Decimal("180.00")


def test_intermediates_are_not_rounded_before_final_total():
    # 1000 / 3 = 333.33..., times 2 billable months = 666.66...
    breakdown = compute_breakdown(Decimal("1000"), 3, free_months=1)

    assert breakdown.monthly_rate == Decimal("333.33")
    assert breakdown.final_total == Decimal("666.67")
    assert breakdown.savings == Decimal("333.33")


def test_original_total_is_read_back_once_set():
    quote = Quote(total=Decimal("1080.00"), original_total=Decimal("1200.00"), contract_months=12)
    assert resolve_original_total(quote) == Decimal("1200.00")

    fresh = Quote(total=Decimal("1200.00"), original_total=None, contract_months=12)
    assert resolve_original_total(fresh) == Decimal("1200.00")


@pytest.mark.parametrize("percentage", ["0", "-5", "100.01", "150"])
def test_discount_percentage_out_of_range(percentage):
    with pytest.raises(ValidationError):
        validate_discount_percentage(Decimal(percentage))


@pytest.mark.parametrize("percentage", ["0.5", "10", "100"])
def test_discount_percentage_in_range(percentage):
    assert validate_discount_percentage(Decimal(percentage)) == Decimal(percentage)


@pytest.mark.parametrize("months", [0, -1, 12, 13])
def test_free_months_out_of_range(months):
    with pytest.raises(ValidationError):
        validate_free_months(months, 12)


def test_free_months_leaves_one_billable_month():
    assert validate_free_months(11, 12) == 11


def test_discount_percentage_rounded_to_stored_precision():
    assert str(validate_discount_percentage(Decimal("12.345"))) == "12.35"
    assert str(validate_discount_percentage(Decimal("12.344"))) == "12.34"


def test_discount_percentage_rounding_to_zero_is_rejected():
    with pytest.raises(ValidationError):
        validate_discount_percentage(Decimal("0.004"))

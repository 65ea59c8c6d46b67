"""
Approval decision tests.
"""

from decimal import Decimal

from app.models.quote import QuoteStatus
from app.services.approval import PriceCheck, evaluate_approval


def test_all_prices_at_or_above_minimum_stay_pending():
    decision = evaluate_approval([
        PriceCheck(service_id=1, final_price=Decimal("100.00"), minimum_price=Decimal("100.00")),
        PriceCheck(service_id=2, final_price=Decimal("15.00"), minimum_price=Decimal("10.00")),
    ])

    assert decision.requires_approval is False
    assert decision.violations == ()
    assert decision.initial_status is QuoteStatus.PENDING


def test_one_price_below_minimum_requires_approval():
    decision = evaluate_approval([
        PriceCheck(service_id=1, final_price=Decimal("150.00"), minimum_price=Decimal("100.00")),
        PriceCheck(service_id=2, final_price=Decimal("9.99"), minimum_price=Decimal("10.00")),
    ])

    assert decision.requires_approval is True
    assert [v.service_id for v in decision.violations] == [2]
    assert decision.initial_status is QuoteStatus.PENDING_APPROVAL


def test_no_checks_needs_no_approval():
    assert evaluate_approval([]).requires_approval is False

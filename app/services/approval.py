"""
Approval decision for new quotations.

A quotation needs managerial approval when any requested sale price is
strictly below the catalog minimum of its service. Evaluated once, at
creation time, from the requested prices.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable

from app.models.quote import QuoteStatus


@dataclass(frozen=True)
class PriceCheck:
    service_id: int
    final_price: Decimal
    minimum_price: Decimal

    @property
    def below_minimum(self) -> bool:
        return self.final_price < self.minimum_price


@dataclass(frozen=True)
class ApprovalDecision:
    requires_approval: bool
    violations: tuple[PriceCheck, ...] = field(default_factory=tuple)

    @property
    def initial_status(self) -> QuoteStatus:
        if self.requires_approval:
            return QuoteStatus.PENDING_APPROVAL
        return QuoteStatus.PENDING


def evaluate_approval(checks: Iterable[PriceCheck]) -> ApprovalDecision:
    violations = tuple(check for check in checks if check.below_minimum)
    return ApprovalDecision(requires_approval=bool(violations), violations=violations)

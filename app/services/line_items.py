"""
Line-item builder.

Turns one requested service into priced quotation lines, either from an
explicit per-category breakdown or, for legacy requests that only carry flat
quantity fields, by inferring the quantity from the unit type of the
service's category.

Every line satisfies ``subtotal = quantity * unit_price * duration_months``.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, NamedTuple

from app.models.catalog import UnitType
from app.services.catalog import CatalogEntry


CENT = Decimal("0.01")


def to_money(value: Decimal) -> Decimal:
    """Round to cents, half up."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class LegacyQuantities:
    """Flat quantity fields of requests without a category breakdown."""

    servers: int = 0
    equipment: int = 0
    capacity_gb: int = 0
    users: int = 0
    sessions: int = 0
    time: int = 0


class QuantityEstimate(NamedTuple):
    principal: int
    secondary: int
    explanation: str

    @property
    def total(self) -> int:
        return max(self.principal + self.secondary, 1)


@dataclass(frozen=True)
class LineItemDraft:
    """A priced line, ready to be persisted."""

    service_id: int
    category_id: int
    unit_of_measure_id: int
    unit_type: UnitType
    quantity: int
    unit_price: Decimal
    duration_months: int
    explanation: str = ""

    @property
    def subtotal(self) -> Decimal:
        return to_money(self.unit_price * self.quantity * self.duration_months)


def infer_from_price(unit_price: Decimal, duration_months: int, reference_price: Decimal) -> int:
    """
    Estimate a quantity from the sale price when no quantity was supplied.

    quantity = round(unit_price * duration / reference_price), at least 1.
    """
    if reference_price <= 0 or unit_price <= 0:
        return 1
    estimate = (unit_price * duration_months / reference_price).quantize(
        Decimal("1"), rounding=ROUND_HALF_UP
    )
    return max(int(estimate), 1)


def _single_field_strategy(field: str, label: str) -> Callable[..., QuantityEstimate]:
    def strategy(
        quantities: LegacyQuantities,
        unit_price: Decimal,
        duration_months: int,
        reference_price: Decimal,
    ) -> QuantityEstimate:
        supplied = getattr(quantities, field)
        if supplied > 0:
            return QuantityEstimate(supplied, 0, f"{supplied} {label}")
        if quantities.servers > 0:
            return QuantityEstimate(quantities.servers, 0, f"{quantities.servers} {label} (servers field)")
        inferred = infer_from_price(unit_price, duration_months, reference_price)
        return QuantityEstimate(inferred, 0, f"{inferred} {label} inferred from price")

    return strategy


def _capacity_strategy(
    quantities: LegacyQuantities,
    unit_price: Decimal,
    duration_months: int,
    reference_price: Decimal,
) -> QuantityEstimate:
    supplied = quantities.capacity_gb or quantities.servers
    if supplied > 0:
        return QuantityEstimate(supplied, 0, f"{supplied} GB")
    inferred = infer_from_price(unit_price, duration_months, reference_price)
    return QuantityEstimate(inferred, 0, f"{inferred} GB inferred from price")


def _count_strategy(
    quantities: LegacyQuantities,
    unit_price: Decimal,
    duration_months: int,
    reference_price: Decimal,
) -> QuantityEstimate:
    if quantities.servers > 0 or quantities.equipment > 0:
        return QuantityEstimate(
            quantities.servers,
            quantities.equipment,
            f"{quantities.servers} servers + {quantities.equipment} equipment",
        )
    inferred = infer_from_price(unit_price, duration_months, reference_price)
    return QuantityEstimate(inferred, 0, f"{inferred} units inferred from price")


QUANTITY_STRATEGIES: dict[UnitType, Callable[..., QuantityEstimate]] = {
    UnitType.CAPACITY: _capacity_strategy,
    UnitType.USERS: _single_field_strategy("users", "users"),
    UnitType.SESSIONS: _single_field_strategy("sessions", "sessions"),
    UnitType.TIME: _single_field_strategy("time", "time units"),
    UnitType.COUNT: _count_strategy,
}


def estimate_quantity(
    unit_type: UnitType,
    quantities: LegacyQuantities,
    unit_price: Decimal,
    duration_months: int,
    reference_price: Decimal,
) -> QuantityEstimate:
    """Dispatch to the quantity strategy of a unit type (count is the catch-all)."""
    strategy = QUANTITY_STRATEGIES.get(unit_type, _count_strategy)
    return strategy(quantities, unit_price, duration_months, reference_price)


def build_breakdown_line(
    entry: CatalogEntry,
    quantity: int,
    unit_price: Decimal,
    duration_months: int,
) -> LineItemDraft | None:
    """
    One line of an explicit category breakdown.

    Non-positive quantities are skipped (None), they are not an error.
    """
    if quantity <= 0:
        return None
    return LineItemDraft(
        service_id=entry.service_id,
        category_id=entry.category_id,
        unit_of_measure_id=entry.unit_of_measure_id,
        unit_type=entry.unit_type,
        quantity=quantity,
        unit_price=to_money(unit_price),
        duration_months=duration_months,
        explanation=f"{quantity} x {entry.category_name}",
    )


def build_inferred_line(
    entry: CatalogEntry,
    quantities: LegacyQuantities,
    unit_price: Decimal,
    duration_months: int,
) -> LineItemDraft:
    """Single line for a request without category breakdown."""
    estimate = estimate_quantity(
        entry.unit_type,
        quantities,
        unit_price,
        duration_months,
        entry.reference_price,
    )
    return LineItemDraft(
        service_id=entry.service_id,
        category_id=entry.category_id,
        unit_of_measure_id=entry.unit_of_measure_id,
        unit_type=entry.unit_type,
        quantity=estimate.total,
        unit_price=to_money(unit_price),
        duration_months=duration_months,
        explanation=estimate.explanation,
    )

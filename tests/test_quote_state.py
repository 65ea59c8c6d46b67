"""
Quotation state machine tests, on unsaved model instances.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from app.core.exceptions import AuthorizationError, ValidationError
from app.models.quote import Quote, QuoteStatus
from app.models.user import User, UserRole
from app.services.quote_state import Trigger, apply_transition, parse_trigger


NOW = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


def make_user(user_id: int, role: UserRole, name: str = "Staff") -> User:
    return User(id=user_id, email=f"u{user_id}@example.com", full_name=name, role=role)


def make_quote(status: QuoteStatus, owner_id: int = 10) -> Quote:
    return Quote(
        id=1,
        quote_number="COT-2026-00001",
        owner_id=owner_id,
        client_id=1,
        status=status,
        contract_months=12,
        total=Decimal("1200.00"),
    )


SUPERVISOR = make_user(1, UserRole.SUPERVISOR, "Sam Supervisor")
OWNER = make_user(10, UserRole.SALESPERSON, "Paul Vendeur")


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("approve", Trigger.APPROVE),
        ("approved", Trigger.APPROVE),
        ("Rejected", Trigger.REJECT),
        (" effective ", Trigger.MARK_EFFECTIVE),
        ("force_reject", Trigger.FORCE_REJECT),
        ("pending", Trigger.KEEP_PENDING),
    ],
)
def test_parse_trigger_vocabulary(raw, expected):
    assert parse_trigger(raw) is expected


def test_parse_trigger_rejects_unknown_value():
    with pytest.raises(ValidationError) as exc_info:
        parse_trigger("archive")

    assert exc_info.value.details["trigger"] == "archive"


@pytest.mark.parametrize(
    "status, trigger, expected",
    [
        (QuoteStatus.PENDING_APPROVAL, "approve", QuoteStatus.PENDING),
        (QuoteStatus.PENDING_APPROVAL, "reject", QuoteStatus.REJECTED),
        (QuoteStatus.PENDING, "reject", QuoteStatus.REJECTED),
        (QuoteStatus.PENDING, "effective", QuoteStatus.EFFECTIVE),
    ],
)
def test_table_transitions(status, trigger, expected):
    quote = make_quote(status)

    result = apply_transition(quote, trigger, SUPERVISOR, now=NOW)

    assert result.previous_status is status
    assert result.new_status is expected
    assert result.changed is True
    assert quote.status is expected


def test_approve_records_approver_and_clears_rejection():
    quote = make_quote(QuoteStatus.PENDING_APPROVAL)
    quote.rejected_by_id = 99
    quote.rejected_by_name = "Old"

    apply_transition(quote, Trigger.APPROVE, SUPERVISOR, now=NOW)

    assert quote.approved_by_id == SUPERVISOR.id
    assert quote.approved_by_name == "Sam Supervisor"
    assert quote.approved_at == NOW
    assert quote.rejected_by_id is None
    assert quote.rejected_by_name is None


def test_reject_records_reason_as_comment():
    quote = make_quote(QuoteStatus.PENDING)

    apply_transition(quote, "reject", SUPERVISOR, reason="Budget client insuffisant", now=NOW)

    assert quote.status is QuoteStatus.REJECTED
    assert quote.rejected_by_name == "Sam Supervisor"
    assert quote.rejected_at == NOW
    assert quote.comment == "Budget client insuffisant"


@pytest.mark.parametrize(
    "status, trigger",
    [
        (QuoteStatus.PENDING, "approve"),
        (QuoteStatus.PENDING_APPROVAL, "effective"),
        (QuoteStatus.EFFECTIVE, "reject"),
        (QuoteStatus.REJECTED, "approve"),
        (QuoteStatus.PENDING, "pending"),
        (QuoteStatus.PENDING_APPROVAL, "pending_approval"),
    ],
)
def test_invalid_pairs_are_no_ops(status, trigger):
    quote = make_quote(status)

    result = apply_transition(quote, trigger, SUPERVISOR, now=NOW)

    assert result.previous_status is status
    assert result.new_status is status
    assert result.changed is False
    assert quote.status is status
    assert quote.total == Decimal("1200.00")
    assert quote.approved_by_id is None
    assert quote.rejected_by_id is None


@pytest.mark.parametrize("status", list(QuoteStatus))
def test_force_reject_from_any_state(status):
    quote = make_quote(status)

    result = apply_transition(quote, "force_reject", SUPERVISOR, now=NOW)

    assert result.new_status is QuoteStatus.REJECTED
    assert result.changed is True
    assert quote.rejected_by_id == SUPERVISOR.id


@pytest.mark.parametrize("trigger", ["approve", "reject", "effective", "force_reject", "pending"])
def test_salesperson_cannot_fire_any_trigger(trigger):
    quote = make_quote(QuoteStatus.PENDING_APPROVAL)

    with pytest.raises(AuthorizationError):
        apply_transition(quote, trigger, OWNER, now=NOW)

    assert quote.status is QuoteStatus.PENDING_APPROVAL


@pytest.mark.parametrize("trigger", ["reject", "effective"])
def test_owning_salesperson_is_not_enough(trigger):
    quote = make_quote(QuoteStatus.PENDING, owner_id=OWNER.id)

    with pytest.raises(AuthorizationError):
        apply_transition(quote, trigger, OWNER, now=NOW)

    assert quote.status is QuoteStatus.PENDING
    assert quote.approved_by_id is None
    assert quote.rejected_by_id is None


def test_admin_marks_effective_on_any_quotation():
    admin = make_user(2, UserRole.ADMIN, "Alice Admin")
    quote = make_quote(QuoteStatus.PENDING, owner_id=OWNER.id)

    result = apply_transition(quote, "effective", admin, now=NOW)

    assert result.new_status is QuoteStatus.EFFECTIVE
    assert quote.approved_by_id == admin.id

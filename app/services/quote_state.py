"""
Quotation state machine.

States: pending, pending_approval, effective, rejected.

    pending_approval --approve--> pending
    pending_approval --reject---> rejected
    pending          --reject---> rejected
    pending          --effective-> effective
    any              --force_reject--> rejected

Any other (state, trigger) pair leaves the quotation untouched.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from app.core.exceptions import AuthorizationError, ValidationError
from app.models.base import utcnow
from app.models.quote import Quote, QuoteStatus
from app.models.user import User


logger = logging.getLogger(__name__)


class Trigger(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    MARK_EFFECTIVE = "effective"
    FORCE_REJECT = "force_reject"
    # Resting-state names sent by older clients; recognized, never transition.
    KEEP_PENDING = "pending"
    KEEP_PENDING_APPROVAL = "pending_approval"


TRIGGER_ALIASES = {
    "approved": Trigger.APPROVE,
    "rejected": Trigger.REJECT,
}

TRANSITIONS: dict[tuple[QuoteStatus, Trigger], QuoteStatus] = {
    (QuoteStatus.PENDING_APPROVAL, Trigger.APPROVE): QuoteStatus.PENDING,
    (QuoteStatus.PENDING_APPROVAL, Trigger.REJECT): QuoteStatus.REJECTED,
    (QuoteStatus.PENDING, Trigger.REJECT): QuoteStatus.REJECTED,
    (QuoteStatus.PENDING, Trigger.MARK_EFFECTIVE): QuoteStatus.EFFECTIVE,
}


@dataclass(frozen=True)
class TransitionResult:
    previous_status: QuoteStatus
    new_status: QuoteStatus
    trigger: Trigger

    @property
    def changed(self) -> bool:
        return self.previous_status != self.new_status or self.trigger is Trigger.FORCE_REJECT


def parse_trigger(value: str | Trigger) -> Trigger:
    """Map a raw trigger value to a Trigger, raising ValidationError when unknown."""
    if isinstance(value, Trigger):
        return value
    normalized = (value or "").strip().lower()
    if normalized in TRIGGER_ALIASES:
        return TRIGGER_ALIASES[normalized]
    try:
        return Trigger(normalized)
    except ValueError:
        raise ValidationError(
            f"Déclencheur invalide: {value}",
            {"trigger": value, "allowed": [t.value for t in Trigger] + list(TRIGGER_ALIASES)},
        ) from None


def next_status(current: QuoteStatus, trigger: Trigger) -> Optional[QuoteStatus]:
    """Target status for a trigger, or None when the trigger is a no-op here."""
    if trigger is Trigger.FORCE_REJECT:
        return QuoteStatus.REJECTED
    return TRANSITIONS.get((current, trigger))


def check_permission(trigger: Trigger, actor: User) -> None:
    """Only admins and supervisors move quotations between states."""
    if not actor.is_privileged:
        raise AuthorizationError(
            "Vous n'avez pas les permissions pour effectuer cette action",
            {"trigger": trigger.value, "role": actor.role.value},
        )


def _record_approval(quote: Quote, actor: User, at: datetime) -> None:
    quote.approved_by_id = actor.id
    quote.approved_by_name = actor.full_name
    quote.approved_at = at
    quote.rejected_by_id = None
    quote.rejected_by_name = None
    quote.rejected_at = None


def _record_rejection(quote: Quote, actor: User, at: datetime, reason: Optional[str]) -> None:
    quote.rejected_by_id = actor.id
    quote.rejected_by_name = actor.full_name
    quote.rejected_at = at
    quote.approved_by_id = None
    quote.approved_by_name = None
    quote.approved_at = None
    if reason:
        quote.comment = reason


def apply_transition(
    quote: Quote,
    trigger: str | Trigger,
    actor: User,
    reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> TransitionResult:
    """
    Drive a quotation through one transition.

    The trigger is validated and the actor's permission checked before any
    field is touched. No-op triggers return the current status as both
    previous and new status and leave audit fields as they are.
    """
    trigger = parse_trigger(trigger)
    check_permission(trigger, actor)

    previous = quote.status
    target = next_status(previous, trigger)
    if target is None:
        logger.info(
            f"Devis {quote.id}: déclencheur '{trigger.value}' sans effet depuis '{previous.value}'"
        )
        return TransitionResult(previous, previous, trigger)

    at = now or utcnow()
    if target is QuoteStatus.REJECTED:
        _record_rejection(quote, actor, at, reason)
    else:
        # approve and effective both record the actor as approver
        _record_approval(quote, actor, at)
    quote.status = target

    logger.info(
        f"Devis {quote.id}: {previous.value} -> {target.value} par {actor.full_name} ({actor.id})"
    )
    return TransitionResult(previous, target, trigger)

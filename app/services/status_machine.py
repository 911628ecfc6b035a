"""
Status State Machine
Guarded status changes for applications and offers.

Each change validates the requested status against the entity's transition
table, applies the status side effects, and returns the StatusHistory row
for the caller to add to the session. Nothing is committed here.
"""
import logging
from datetime import datetime
from typing import Mapping, Optional

from app.exceptions import InvalidTransition
from app.models import utcnow
from app.models.application import Application, ApplicationStatus
from app.models.offer import Offer, OfferStatus
from app.models.status_history import StatusHistory, HistoryEntity

logger = logging.getLogger(__name__)


def allowed_transitions(transitions: Mapping[str, set], current: Optional[str]) -> set:
    return set(transitions.get(current, set()))


def check_transition(
    entity: str,
    transitions: Mapping[str, set],
    current: Optional[str],
    requested: str,
) -> None:
    """
    Raise InvalidTransition unless current -> requested is a declared edge.

    Unknown requested statuses and self-transitions are rejected the same way.
    """
    if requested not in transitions or requested not in allowed_transitions(transitions, current):
        raise InvalidTransition(entity, current, requested)


def change_application_status(
    application: Application,
    requested: str,
    actor: Optional[str] = None,
    actor_id: Optional[int] = None,
    reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> StatusHistory:
    """
    Move an application to a new status.

    Args:
        application: Application to change (must be flushed, id is recorded)
        requested: Target status
        actor: Display name of who made the change
        actor_id: User id of who made the change
        reason: Free text reason, stored on the history row and on
            rejection/withdrawal metadata
        now: Timestamp override

    Returns:
        Unsaved StatusHistory entry

    Raises:
        InvalidTransition: requested is not allowed from the current status
    """
    check_transition("application", ApplicationStatus.TRANSITIONS, application.status, requested)

    now = now or utcnow()
    old_status = application.status

    if requested == ApplicationStatus.REJECTED:
        application.rejected_at = now
        application.rejected_by = actor
        application.rejection_reason = reason
        application.rejection_stage = old_status

    if requested == ApplicationStatus.WITHDRAWN:
        application.withdrawn_at = now
        application.withdrawal_reason = reason

    application.previous_status = old_status
    application.status = requested
    application.status_changed_at = now
    application.status_changed_by = actor

    logger.info(f"Application {application.id} status changed: {old_status} -> {requested}")

    return StatusHistory.record(
        tenant_id=application.tenant_id,
        entity_type=HistoryEntity.APPLICATION,
        entity_id=application.id,
        from_status=old_status,
        to_status=requested,
        changed_by=actor,
        changed_by_id=actor_id,
        reason=reason,
    )


def change_offer_status(
    offer: Offer,
    requested: str,
    actor: Optional[str] = None,
    actor_id: Optional[int] = None,
    reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> StatusHistory:
    """
    Move an offer to a new status along OfferStatus.TRANSITIONS.

    Cross-entity guards (salary present, not expired) are checked by the
    workflow service before calling this.
    """
    check_transition("offer", OfferStatus.TRANSITIONS, offer.status, requested)

    now = now or utcnow()
    old_status = offer.status

    if requested == OfferStatus.SENT:
        offer.sent_at = now
    elif requested == OfferStatus.ACCEPTED:
        offer.accepted_at = now
    elif requested == OfferStatus.REJECTED:
        offer.rejected_at = now
        offer.rejection_reason = reason
    elif requested == OfferStatus.WITHDRAWN:
        offer.withdrawn_at = now
        offer.withdrawal_reason = reason
    elif requested == OfferStatus.EXPIRED:
        offer.expired_at = now

    offer.status = requested

    logger.info(f"Offer {offer.id} status changed: {old_status} -> {requested}")

    return StatusHistory.record(
        tenant_id=offer.tenant_id,
        entity_type=HistoryEntity.OFFER,
        entity_id=offer.id,
        from_status=old_status,
        to_status=requested,
        changed_by=actor,
        changed_by_id=actor_id,
        reason=reason,
    )

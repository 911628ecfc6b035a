"""Unit tests for application and offer status transitions."""

import pytest

from app.exceptions import InvalidTransition
from app.models import ApplicationStatus, OfferStatus, HistoryEntity
from app.models.application import Application
from app.models.offer import Offer
from app.services.status_machine import (
    change_application_status,
    change_offer_status,
    check_transition,
)


def make_application(status: str) -> Application:
    return Application(id=11, tenant_id=1, status=status)


def make_offer(status: str) -> Offer:
    return Offer(id=21, tenant_id=1, status=status)


@pytest.mark.unit
class TestApplicationTransitions:
    """Tests for change_application_status."""

    def test_allowed_transition_updates_status(self):
        """APPLIED -> SHORTLISTED is a declared edge."""
        application = make_application(ApplicationStatus.APPLIED)

        entry = change_application_status(application, ApplicationStatus.SHORTLISTED, actor="Priya")

        assert application.status == ApplicationStatus.SHORTLISTED
        assert application.previous_status == ApplicationStatus.APPLIED
        assert application.status_changed_by == "Priya"
        assert entry.entity_type == HistoryEntity.APPLICATION
        assert entry.entity_id == 11
        assert entry.from_status == ApplicationStatus.APPLIED
        assert entry.to_status == ApplicationStatus.SHORTLISTED
        assert entry.reason == "Status changed from APPLIED to SHORTLISTED"

    def test_skipping_a_stage_is_rejected(self):
        """APPLIED cannot jump to SELECTED and nothing is mutated."""
        application = make_application(ApplicationStatus.APPLIED)

        with pytest.raises(InvalidTransition) as exc_info:
            change_application_status(application, ApplicationStatus.SELECTED)

        assert exc_info.value.current_status == ApplicationStatus.APPLIED
        assert exc_info.value.requested_status == ApplicationStatus.SELECTED
        assert exc_info.value.status_code == 409
        assert application.status == ApplicationStatus.APPLIED
        assert application.previous_status is None

    def test_unknown_status_is_rejected(self):
        """Statuses outside the table are invalid transitions."""
        application = make_application(ApplicationStatus.APPLIED)

        with pytest.raises(InvalidTransition):
            change_application_status(application, "HIRED")

    def test_self_transition_is_rejected(self):
        """Re-applying the current status is not an edge."""
        application = make_application(ApplicationStatus.INTERVIEW)

        with pytest.raises(InvalidTransition):
            change_application_status(application, ApplicationStatus.INTERVIEW)

    @pytest.mark.parametrize("terminal", ApplicationStatus.terminal())
    def test_terminal_statuses_have_no_exits(self, terminal):
        """REJECTED, JOINED and WITHDRAWN are final."""
        for target in ApplicationStatus.all():
            with pytest.raises(InvalidTransition):
                change_application_status(make_application(terminal), target)

    def test_rejection_records_stage_and_reason(self):
        """Rejecting stores who, why and at which stage."""
        application = make_application(ApplicationStatus.INTERVIEW)

        entry = change_application_status(
            application, ApplicationStatus.REJECTED, actor="Priya", actor_id=4, reason="Not a fit"
        )

        assert application.rejection_stage == ApplicationStatus.INTERVIEW
        assert application.rejected_by == "Priya"
        assert application.rejection_reason == "Not a fit"
        assert application.rejected_at is not None
        assert entry.changed_by_id == 4
        assert entry.reason == "Not a fit"

    def test_withdrawal_records_reason(self):
        application = make_application(ApplicationStatus.SHORTLISTED)

        change_application_status(application, ApplicationStatus.WITHDRAWN, reason="Took another job")

        assert application.withdrawn_at is not None
        assert application.withdrawal_reason == "Took another job"

    def test_on_hold_can_resume(self):
        """ON_HOLD returns to any pre-offer stage."""
        for target in (ApplicationStatus.APPLIED, ApplicationStatus.SHORTLISTED,
                       ApplicationStatus.INTERVIEW, ApplicationStatus.SELECTED):
            application = make_application(ApplicationStatus.ON_HOLD)
            change_application_status(application, target)
            assert application.status == target


@pytest.mark.unit
class TestOfferTransitions:
    """Tests for change_offer_status."""

    def test_send_sets_sent_at(self):
        offer = make_offer(OfferStatus.DRAFT)

        entry = change_offer_status(offer, OfferStatus.SENT)

        assert offer.status == OfferStatus.SENT
        assert offer.sent_at is not None
        assert entry.entity_type == HistoryEntity.OFFER
        assert entry.from_status == OfferStatus.DRAFT

    def test_expire_sets_expired_at(self):
        offer = make_offer(OfferStatus.SENT)

        change_offer_status(offer, OfferStatus.EXPIRED)

        assert offer.status == OfferStatus.EXPIRED
        assert offer.expired_at is not None

    def test_draft_cannot_be_accepted(self):
        """Acceptance requires the offer to be SENT first."""
        offer = make_offer(OfferStatus.DRAFT)

        with pytest.raises(InvalidTransition) as exc_info:
            change_offer_status(offer, OfferStatus.ACCEPTED)

        assert exc_info.value.details["entity"] == "offer"
        assert offer.status == OfferStatus.DRAFT

    @pytest.mark.parametrize("terminal", OfferStatus.terminal())
    def test_terminal_offers_cannot_be_withdrawn(self, terminal):
        with pytest.raises(InvalidTransition):
            change_offer_status(make_offer(terminal), OfferStatus.WITHDRAWN)

    def test_rejection_stores_reason(self):
        offer = make_offer(OfferStatus.SENT)

        change_offer_status(offer, OfferStatus.REJECTED, reason="Counter offer")

        assert offer.rejection_reason == "Counter offer"
        assert offer.rejected_at is not None


@pytest.mark.unit
class TestCheckTransition:
    """Tests for the raw table check."""

    def test_none_current_status_has_no_edges(self):
        with pytest.raises(InvalidTransition) as exc_info:
            check_transition("application", ApplicationStatus.TRANSITIONS, None, ApplicationStatus.APPLIED)

        assert exc_info.value.code == "INVALID_STATUS_TRANSITION"

    def test_declared_edge_passes(self):
        check_transition("offer", OfferStatus.TRANSITIONS, OfferStatus.SENT, OfferStatus.ACCEPTED)

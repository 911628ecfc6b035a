"""Unit tests for RecruitmentWorkflowService."""

from datetime import date, timedelta

import pytest

from app.exceptions import InvalidTransition, NotFoundError, PreconditionNotMet
from app.models import (
    ApplicationStatus,
    ApplicationOfferStatus,
    HistoryEntity,
    JobStatus,
    OfferStatus,
    utcnow,
)
from app.services.recruitment_workflow_service import RecruitmentWorkflowService
from tests.helpers import OTHER_TENANT_ID, SAMPLE_SALARY


def statuses(history):
    return [(h.from_status, h.to_status) for h in history]


NON_EDGES = [
    (current, requested)
    for current in ApplicationStatus.all()
    for requested in ApplicationStatus.all()
    if requested not in ApplicationStatus.TRANSITIONS[current]
]


@pytest.mark.unit
class TestApplications:
    """Tests for application creation and manual status changes."""

    def test_create_application(self, workflow, sample_application, sample_job):
        """New applications start APPLIED with a creation history entry."""
        assert sample_application.application_code == "APP-00001"
        assert sample_application.status == ApplicationStatus.APPLIED
        assert sample_application.designation == sample_job.title
        assert sample_application.father_name == "Ravi Rao"
        assert sample_application.candidate_info["email"] == "asha.rao@example.com"

        history = workflow.get_application_history(sample_application.id)
        assert statuses(history) == [(None, ApplicationStatus.APPLIED)]
        assert history[0].reason == "Application submitted"

    def test_duplicate_application(self, workflow, sample_application, sample_job, sample_candidate):
        """Second application for the same job and candidate is refused."""
        with pytest.raises(PreconditionNotMet) as exc_info:
            workflow.create_application(job_id=sample_job.id, candidate_id=sample_candidate.id)

        assert exc_info.value.code == "DUPLICATE_APPLICATION"
        assert exc_info.value.details["application_id"] == sample_application.id
        assert exc_info.value.details["current_status"] == ApplicationStatus.APPLIED

    def test_closed_job_rejects_applications(self, db, workflow, sample_job, sample_candidate):
        sample_job.status = JobStatus.CLOSED
        db.session.commit()

        with pytest.raises(PreconditionNotMet) as exc_info:
            workflow.create_application(job_id=sample_job.id, candidate_id=sample_candidate.id)

        assert exc_info.value.code == "JOB_NOT_OPEN"

    def test_duplicate_candidate_email(self, workflow, sample_candidate):
        with pytest.raises(PreconditionNotMet) as exc_info:
            workflow.create_candidate(first_name="Asha", email="ASHA.RAO@example.com")

        assert exc_info.value.code == "DUPLICATE_CANDIDATE"

    def test_invalid_transition_leaves_no_trace(self, workflow, sample_application):
        """A refused change neither mutates the application nor writes history."""
        with pytest.raises(InvalidTransition) as exc_info:
            workflow.change_status(sample_application.id, ApplicationStatus.SELECTED)

        assert exc_info.value.current_status == ApplicationStatus.APPLIED
        application = workflow.get_application(sample_application.id)
        assert application.status == ApplicationStatus.APPLIED
        assert len(workflow.get_application_history(sample_application.id)) == 1

    def test_offered_requires_offer_workflow(self, workflow, selected_application):
        with pytest.raises(PreconditionNotMet) as exc_info:
            workflow.change_status(selected_application.id, ApplicationStatus.OFFERED)

        assert exc_info.value.code == "STATUS_REQUIRES_WORKFLOW"

    def test_joined_requires_conversion(self, workflow, draft_offer, selected_application):
        with pytest.raises(PreconditionNotMet) as exc_info:
            workflow.change_status(selected_application.id, ApplicationStatus.JOINED)

        assert exc_info.value.code == "STATUS_REQUIRES_WORKFLOW"

    @pytest.mark.parametrize("current,requested", NON_EDGES)
    def test_every_undeclared_pair_is_invalid(self, db, workflow, sample_application, current, requested):
        """Pairs outside the transition table fail the same way, workflow targets included."""
        sample_application.status = current
        db.session.commit()

        with pytest.raises(InvalidTransition) as exc_info:
            workflow.change_status(sample_application.id, requested)

        assert exc_info.value.current_status == current
        assert exc_info.value.requested_status == requested
        assert workflow.get_application(sample_application.id).status == current

    @pytest.mark.parametrize("closing_status", [ApplicationStatus.WITHDRAWN, ApplicationStatus.REJECTED])
    def test_duplicate_application_after_close(
        self, workflow, sample_application, sample_job, sample_candidate, closing_status
    ):
        """A closed application still blocks a second one for the same job and candidate."""
        workflow.change_status(sample_application.id, closing_status, reason="Closed")

        with pytest.raises(PreconditionNotMet) as exc_info:
            workflow.create_application(job_id=sample_job.id, candidate_id=sample_candidate.id)

        assert exc_info.value.code == "DUPLICATE_APPLICATION"
        assert exc_info.value.details["current_status"] == closing_status

    def test_history_is_ordered(self, workflow, selected_application):
        history = workflow.get_application_history(selected_application.id)

        assert statuses(history) == [
            (None, ApplicationStatus.APPLIED),
            (ApplicationStatus.APPLIED, ApplicationStatus.SHORTLISTED),
            (ApplicationStatus.SHORTLISTED, ApplicationStatus.INTERVIEW),
            (ApplicationStatus.INTERVIEW, ApplicationStatus.SELECTED),
        ]

    def test_other_tenant_cannot_see_application(self, sample_application):
        other = RecruitmentWorkflowService(tenant_id=OTHER_TENANT_ID)

        with pytest.raises(NotFoundError):
            other.get_application(sample_application.id)

    def test_list_applications(self, workflow, sample_application):
        items, total = workflow.list_applications(status=ApplicationStatus.APPLIED)

        assert total == 1
        assert items[0].id == sample_application.id

        items, total = workflow.list_applications(status=ApplicationStatus.JOINED)
        assert (items, total) == ([], 0)


@pytest.mark.unit
class TestInterviews:
    """Tests for interview scheduling."""

    def test_requires_shortlist(self, workflow, sample_application):
        with pytest.raises(PreconditionNotMet) as exc_info:
            workflow.schedule_interview(sample_application.id, scheduled_date=date(2026, 10, 20))

        assert exc_info.value.code == "INVALID_STATUS_FOR_INTERVIEW"

    def test_first_round_moves_to_interview(self, workflow, sample_application):
        workflow.change_status(sample_application.id, ApplicationStatus.SHORTLISTED)

        first = workflow.schedule_interview(sample_application.id, scheduled_date=date(2026, 10, 20))
        second = workflow.schedule_interview(sample_application.id, scheduled_date=date(2026, 10, 22))

        application = workflow.get_application(sample_application.id)
        assert application.status == ApplicationStatus.INTERVIEW
        assert application.total_interview_rounds == 2
        assert (first.round_number, second.round_number) == (1, 2)
        assert second.round_name == "Round 2"

    def test_completing_round_counts(self, workflow, sample_application):
        workflow.change_status(sample_application.id, ApplicationStatus.SHORTLISTED)
        interview = workflow.schedule_interview(sample_application.id, scheduled_date=date(2026, 10, 20))

        workflow.update_interview(interview.id, status="COMPLETED", result="PASS", rating=4)

        assert workflow.get_application(sample_application.id).completed_interview_rounds == 1


@pytest.mark.unit
class TestOffers:
    """Tests for the offer lifecycle."""

    def test_create_offer(self, workflow, draft_offer, selected_application):
        """Offer starts DRAFT; application moves to OFFERED with offer PENDING."""
        application = workflow.get_application(selected_application.id)

        assert draft_offer.status == OfferStatus.DRAFT
        assert draft_offer.offer_code == "OFF-00001"
        assert draft_offer.salary_snapshot.totals["annual_ctc"] == "861600"
        assert draft_offer.valid_until > utcnow() + timedelta(days=6)
        assert application.status == ApplicationStatus.OFFERED
        assert application.offer_id == draft_offer.id
        assert application.offer_status == ApplicationOfferStatus.PENDING
        assert application.joining_date == date(2026, 11, 2)

        history = workflow.get_history(HistoryEntity.OFFER, draft_offer.id)
        assert statuses(history) == [(None, OfferStatus.DRAFT)]

    def test_offer_requires_selected(self, workflow, sample_application):
        with pytest.raises(PreconditionNotMet) as exc_info:
            workflow.create_offer(sample_application.id, **SAMPLE_SALARY)

        assert exc_info.value.code == "CANNOT_CREATE_OFFER"

    def test_second_offer_refused(self, workflow, draft_offer, selected_application):
        with pytest.raises(PreconditionNotMet) as exc_info:
            workflow.create_offer(selected_application.id, **SAMPLE_SALARY)

        assert exc_info.value.code == "OFFER_ALREADY_EXISTS"

    def test_send_requires_joining_date(self, workflow, selected_application):
        offer = workflow.create_offer(selected_application.id, **SAMPLE_SALARY)

        with pytest.raises(PreconditionNotMet) as exc_info:
            workflow.send_offer(offer.id)

        assert exc_info.value.code == "OFFER_NOT_SENDABLE"
        assert exc_info.value.details["missing"] == ["joining_date"]
        assert workflow.get_offer(offer.id).status == OfferStatus.DRAFT

    def test_draft_can_be_edited(self, workflow, draft_offer):
        offer = workflow.update_offer_draft(
            draft_offer.id,
            location="Pune",
            earnings=[{"label": "Basic", "annual": "720000"}],
        )

        assert offer.location == "Pune"
        assert offer.salary_snapshot.totals["gross_earnings"] == "720000"

    def test_sent_offer_is_not_editable(self, workflow, draft_offer):
        workflow.send_offer(draft_offer.id)

        with pytest.raises(PreconditionNotMet) as exc_info:
            workflow.update_offer_draft(draft_offer.id, location="Pune")

        assert exc_info.value.code == "OFFER_NOT_EDITABLE"

    def test_accept_and_convert(self, workflow, draft_offer, selected_application):
        workflow.send_offer(draft_offer.id, actor="Priya")
        workflow.accept_offer(draft_offer.id, accepted_via="EMAIL", actor="Priya")

        employee = workflow.convert_to_employee(draft_offer.id, actor="Priya")

        application = workflow.get_application(selected_application.id)
        offer = workflow.get_offer(draft_offer.id)
        assert employee.employee_code == "EMP-00001"
        assert employee.name == "Asha Rao"
        assert employee.salary_snapshot_id == offer.salary_snapshot_id
        assert application.status == ApplicationStatus.JOINED
        assert application.employee_id == employee.id
        assert offer.employee_id == employee.id
        assert offer.accepted_via == "EMAIL"

    def test_convert_twice_refused(self, workflow, draft_offer):
        workflow.send_offer(draft_offer.id)
        workflow.accept_offer(draft_offer.id)
        workflow.convert_to_employee(draft_offer.id)

        with pytest.raises(PreconditionNotMet) as exc_info:
            workflow.convert_to_employee(draft_offer.id)

        assert exc_info.value.code == "EMPLOYEE_ALREADY_EXISTS"

    def test_convert_requires_acceptance(self, workflow, draft_offer):
        workflow.send_offer(draft_offer.id)

        with pytest.raises(PreconditionNotMet) as exc_info:
            workflow.convert_to_employee(draft_offer.id)

        assert exc_info.value.code == "OFFER_NOT_ACCEPTED"

    def test_accept_draft_is_invalid(self, workflow, draft_offer):
        with pytest.raises(InvalidTransition):
            workflow.accept_offer(draft_offer.id)

    def test_expired_offer_cannot_be_accepted(self, db, workflow, draft_offer, selected_application):
        """Expiry is applied on access; the application keeps its OFFERED status."""
        workflow.send_offer(draft_offer.id)
        draft_offer.valid_until = utcnow() - timedelta(hours=1)
        db.session.commit()

        with pytest.raises(PreconditionNotMet) as exc_info:
            workflow.accept_offer(draft_offer.id)

        assert exc_info.value.code == "OFFER_EXPIRED"
        application = workflow.get_application(selected_application.id)
        assert workflow.get_offer(draft_offer.id).status == OfferStatus.EXPIRED
        assert application.offer_status == ApplicationOfferStatus.EXPIRED
        assert application.status == ApplicationStatus.OFFERED

    def test_expire_offers_batch(self, db, workflow, draft_offer):
        workflow.send_offer(draft_offer.id)
        draft_offer.valid_until = utcnow() - timedelta(days=1)
        db.session.commit()

        assert workflow.expire_offers() == 1
        assert workflow.expire_offers() == 0

    def test_reject_offer_closes_application(self, workflow, draft_offer, selected_application):
        workflow.send_offer(draft_offer.id)

        workflow.reject_offer(draft_offer.id, reason="Accepted a counter offer")

        application = workflow.get_application(selected_application.id)
        assert application.status == ApplicationStatus.REJECTED
        assert application.offer_status == ApplicationOfferStatus.REJECTED
        assert application.rejection_reason == "Offer declined: Accepted a counter offer"
        assert application.rejection_stage == ApplicationStatus.OFFERED

    def test_withdraw_offer_closes_application(self, workflow, draft_offer, selected_application):
        workflow.withdraw_offer(draft_offer.id, reason="Position frozen")

        application = workflow.get_application(selected_application.id)
        assert workflow.get_offer(draft_offer.id).status == OfferStatus.WITHDRAWN
        assert application.status == ApplicationStatus.REJECTED
        assert application.rejection_reason == "Offer withdrawn: Position frozen"

    def test_withdrawing_sent_offer_updates_offer_sub_state(self, workflow, draft_offer, selected_application):
        workflow.send_offer(draft_offer.id)

        workflow.withdraw_offer(draft_offer.id, reason="Budget cut")

        application = workflow.get_application(selected_application.id)
        assert application.offer_status == ApplicationOfferStatus.REJECTED
        assert application.status == ApplicationStatus.REJECTED
        assert application.offer_id == draft_offer.id

    def test_rejecting_application_withdraws_open_offer(self, workflow, draft_offer, selected_application):
        workflow.change_status(selected_application.id, ApplicationStatus.REJECTED, reason="Background check")

        offer = workflow.get_offer(draft_offer.id)
        assert offer.status == OfferStatus.WITHDRAWN
        assert offer.withdrawal_reason == "Application rejected: Background check"
        assert workflow.get_application(selected_application.id).offer_status == ApplicationOfferStatus.REJECTED


@pytest.mark.unit
class TestPipelineStats:
    """Tests for pipeline_stats."""

    def test_counts_are_zero_filled(self, workflow, draft_offer):
        stats = workflow.pipeline_stats()

        assert set(stats["by_status"]) == set(ApplicationStatus.all())
        assert stats["by_status"][ApplicationStatus.OFFERED] == 1
        assert stats["by_status"][ApplicationStatus.APPLIED] == 0
        assert stats["offers"][OfferStatus.DRAFT] == 1
        assert stats["total"] == 1
        assert stats["active"] == 1

    def test_filter_by_job(self, workflow, sample_application):
        other_job = workflow.create_job(job_code="OPS-001", title="Ops Lead")

        assert workflow.pipeline_stats(job_id=other_job.id)["total"] == 0
        assert workflow.pipeline_stats(job_id=sample_application.job_id)["total"] == 1

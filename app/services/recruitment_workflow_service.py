"""
Recruitment Workflow Service
Business logic for the hiring pipeline: application -> interview -> offer -> employee.

Every guarded action is one unit of work: load with a row lock, check the
guard, mutate, append status history, commit. Unique indexes stop a second
writer that raced past a guard; the resulting IntegrityError is turned into
PreconditionNotMet. When redis is available, offer creation and employee
conversion also take a per-application redis lock.
"""
import logging
from contextlib import contextmanager, ExitStack
from datetime import date, datetime, timedelta
from typing import Optional, Dict, Any, List, Tuple

from redis.exceptions import RedisError
from sqlalchemy import select, and_, func
from sqlalchemy.exc import IntegrityError

from app import db, get_redis
from app.exceptions import NotFoundError, PreconditionNotMet
from app.models import utcnow
from app.models.application import (
    Application,
    ApplicationStatus,
    ApplicationOfferStatus,
    ApplicationSource,
    ApplicationPriority,
)
from app.models.candidate import Candidate
from app.models.employee import Employee
from app.models.interview import Interview, InterviewStatus
from app.models.job_requirement import JobRequirement, JobStatus
from app.models.offer import Offer, OfferStatus, AcceptedVia
from app.models.status_history import StatusHistory, HistoryEntity
from app.services.salary_service import SalaryService
from app.services.status_machine import change_application_status, change_offer_status, check_transition
from app.utils.redis_client import RedisClient, LockNotAcquired, cache_key
from config.settings import settings

logger = logging.getLogger(__name__)

PIPELINE_CACHE_TTL = 60


class RecruitmentWorkflowService:
    """
    Service for the recruitment pipeline of one tenant.

    Handles:
    - Job requirements and candidates
    - Application creation and guarded status changes
    - Interview scheduling
    - Offer lifecycle (draft, send, accept, reject, withdraw, expire)
    - Conversion of accepted offers to employees
    - Pipeline statistics
    """

    def __init__(self, tenant_id: int):
        """
        Initialize the workflow service for a specific tenant.

        Args:
            tenant_id: Tenant ID for multi-tenant isolation
        """
        self.tenant_id = tenant_id
        self.salary = SalaryService(tenant_id)

    # ==================== Infrastructure ====================

    def _redis(self) -> Optional[RedisClient]:
        connection = get_redis()
        return RedisClient(connection) if connection is not None else None

    @contextmanager
    def _entity_lock(self, name: str):
        """Per-entity redis lock; a no-op when redis is not configured."""
        client = self._redis()
        with ExitStack() as stack:
            if client is not None:
                key = f"hireflow:lock:{self.tenant_id}:{name}"
                try:
                    stack.enter_context(
                        client.lock(key, timeout=settings.workflow_lock_timeout_seconds)
                    )
                except LockNotAcquired:
                    raise PreconditionNotMet(
                        "Another change to this record is in progress, retry shortly",
                        code="CONCURRENT_MODIFICATION",
                        details={"lock": name},
                    )
                except RedisError as e:
                    logger.warning(f"Redis lock {key} unavailable, relying on database constraints: {e}")
            yield

    def _commit(self, code: str, message: str) -> None:
        """Commit, converting a unique constraint violation into PreconditionNotMet."""
        try:
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            logger.warning(f"Integrity error ({code}): {e.orig}")
            raise PreconditionNotMet(message, code=code)

    def _next_code(self, model, prefix: str) -> str:
        count = db.session.scalar(
            select(func.count(model.id)).where(model.tenant_id == self.tenant_id)
        ) or 0
        return f"{prefix}-{count + 1:05d}"

    def _invalidate_pipeline(self, job_id: Optional[int] = None) -> None:
        client = self._redis()
        if client is None:
            return
        client.delete(cache_key("pipeline", self.tenant_id, "all"))
        if job_id is not None:
            client.delete(cache_key("pipeline", self.tenant_id, job_id))

    # ==================== Jobs and candidates ====================

    def create_job(
        self,
        job_code: str,
        title: str,
        department: Optional[str] = None,
        location: Optional[str] = None,
        employment_type: str = "FULL_TIME",
        openings: int = 1,
        description: Optional[str] = None,
    ) -> JobRequirement:
        """Create an OPEN job requirement."""
        job = JobRequirement(
            tenant_id=self.tenant_id,
            job_code=job_code,
            title=title,
            department=department,
            location=location,
            employment_type=employment_type,
            openings=openings,
            description=description,
            status=JobStatus.OPEN,
        )
        db.session.add(job)
        self._commit("DUPLICATE_JOB_CODE", f"Job code {job_code} already exists")
        logger.info(f"Created job requirement {job.id} ({job_code})")
        return job

    def get_job(self, job_id: int) -> JobRequirement:
        job = db.session.scalar(
            select(JobRequirement).where(and_(
                JobRequirement.id == job_id,
                JobRequirement.tenant_id == self.tenant_id,
            ))
        )
        if not job:
            raise NotFoundError(f"Job requirement {job_id} not found")
        return job

    def list_jobs(self, status: Optional[str] = None) -> List[JobRequirement]:
        query = select(JobRequirement).where(JobRequirement.tenant_id == self.tenant_id)
        if status:
            query = query.where(JobRequirement.status == status)
        return list(db.session.scalars(query.order_by(JobRequirement.created_at.desc())))

    def create_candidate(
        self,
        first_name: str,
        email: str,
        last_name: Optional[str] = None,
        mobile: Optional[str] = None,
        father_name: Optional[str] = None,
        address: Optional[str] = None,
        current_designation: Optional[str] = None,
    ) -> Candidate:
        candidate = Candidate(
            tenant_id=self.tenant_id,
            first_name=first_name,
            last_name=last_name,
            email=email.lower(),
            mobile=mobile,
            father_name=father_name,
            address=address,
            current_designation=current_designation,
        )
        db.session.add(candidate)
        self._commit("DUPLICATE_CANDIDATE", f"Candidate with email {email} already exists")
        logger.info(f"Created candidate {candidate.id}")
        return candidate

    def get_candidate(self, candidate_id: int) -> Candidate:
        candidate = db.session.scalar(
            select(Candidate).where(and_(
                Candidate.id == candidate_id,
                Candidate.tenant_id == self.tenant_id,
            ))
        )
        if not candidate:
            raise NotFoundError(f"Candidate {candidate_id} not found")
        return candidate

    # ==================== Applications ====================

    def find_application(self, job_id: int, candidate_id: int) -> Optional[Application]:
        return db.session.scalar(
            select(Application).where(and_(
                Application.tenant_id == self.tenant_id,
                Application.job_id == job_id,
                Application.candidate_id == candidate_id,
            ))
        )

    def create_application(
        self,
        job_id: int,
        candidate_id: int,
        source: str = ApplicationSource.CAREER_PORTAL,
        priority: str = ApplicationPriority.MEDIUM,
        notes: Optional[str] = None,
        actor: Optional[str] = None,
        actor_id: Optional[int] = None,
    ) -> Application:
        """
        Submit a candidate's application to a job.

        Raises:
            NotFoundError: Job or candidate not found
            PreconditionNotMet: Job not open (JOB_NOT_OPEN) or an application
                already exists for this job and candidate (DUPLICATE_APPLICATION)
        """
        job = self.get_job(job_id)
        candidate = self.get_candidate(candidate_id)

        if not job.is_open:
            raise PreconditionNotMet(
                f"Job {job.job_code} is not open for applications",
                code="JOB_NOT_OPEN",
                details={"job_status": job.status},
            )

        existing = self.find_application(job_id, candidate_id)
        if existing:
            raise PreconditionNotMet(
                "Candidate has already applied for this job",
                code="DUPLICATE_APPLICATION",
                details={
                    "application_id": existing.id,
                    "application_code": existing.application_code,
                    "current_status": existing.status,
                },
            )

        application = Application(
            tenant_id=self.tenant_id,
            application_code=self._next_code(Application, "APP"),
            job_id=job.id,
            candidate_id=candidate.id,
            candidate_info=candidate.snapshot(),
            source=source,
            priority=priority,
            notes=notes,
            status=ApplicationStatus.APPLIED,
            status_changed_at=utcnow(),
            status_changed_by=actor,
            designation=job.title,
            department=job.department,
            location=job.location,
            address=candidate.address,
            father_name=candidate.father_name,
        )
        db.session.add(application)
        try:
            db.session.flush()
        except IntegrityError:
            db.session.rollback()
            if self.find_application(job_id, candidate_id):
                raise PreconditionNotMet(
                    "Candidate has already applied for this job",
                    code="DUPLICATE_APPLICATION",
                )
            raise PreconditionNotMet(
                "Application could not be numbered, retry shortly",
                code="CONCURRENT_MODIFICATION",
            )

        db.session.add(StatusHistory.record(
            tenant_id=self.tenant_id,
            entity_type=HistoryEntity.APPLICATION,
            entity_id=application.id,
            from_status=None,
            to_status=ApplicationStatus.APPLIED,
            changed_by=actor,
            changed_by_id=actor_id,
            reason="Application submitted",
        ))
        self._commit("DUPLICATE_APPLICATION", "Candidate has already applied for this job")
        self._invalidate_pipeline(job_id)

        logger.info(f"Created application {application.application_code} for candidate {candidate_id} to job {job_id}")
        return application

    def get_application(self, application_id: int, for_update: bool = False) -> Application:
        query = select(Application).where(and_(
            Application.id == application_id,
            Application.tenant_id == self.tenant_id,
        ))
        if for_update:
            query = query.with_for_update()
        application = db.session.scalar(query)
        if not application:
            raise NotFoundError(f"Application {application_id} not found")
        return application

    def list_applications(
        self,
        status: Optional[str] = None,
        job_id: Optional[int] = None,
        page: int = 1,
        per_page: int = 20,
    ) -> Tuple[List[Application], int]:
        """Paginated applications, newest first."""
        conditions = [Application.tenant_id == self.tenant_id]
        if status:
            conditions.append(Application.status == status)
        if job_id:
            conditions.append(Application.job_id == job_id)

        total = db.session.scalar(select(func.count(Application.id)).where(and_(*conditions))) or 0
        items = db.session.scalars(
            select(Application)
            .where(and_(*conditions))
            .order_by(Application.created_at.desc(), Application.id.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
        ).unique().all()
        return list(items), total

    def change_status(
        self,
        application_id: int,
        new_status: str,
        actor: Optional[str] = None,
        actor_id: Optional[int] = None,
        reason: Optional[str] = None,
    ) -> Application:
        """
        Manually change an application's status.

        OFFERED and JOINED are only reached through create_offer and
        convert_to_employee, which maintain the offer/employee links.

        Raises:
            InvalidTransition: Not an allowed edge from the current status
            PreconditionNotMet: Allowed edge, but the target status requires
                the offer/employee workflow
        """
        application = self.get_application(application_id, for_update=True)

        check_transition("application", ApplicationStatus.TRANSITIONS, application.status, new_status)
        if new_status in ApplicationStatus.workflow_only():
            raise PreconditionNotMet(
                f"Status {new_status} is set by the offer workflow, not directly",
                code="STATUS_REQUIRES_WORKFLOW",
                details={"current_status": application.status, "requested_status": new_status},
            )

        history = change_application_status(application, new_status, actor, actor_id, reason)
        db.session.add(history)

        if new_status == ApplicationStatus.REJECTED and application.offer_id is not None:
            # Closing the application closes an offer that is still open
            offer = db.session.get(Offer, application.offer_id)
            if offer and offer.can_be_withdrawn:
                db.session.add(change_offer_status(
                    offer, OfferStatus.WITHDRAWN, actor, actor_id,
                    reason=f"Application rejected: {reason}" if reason else "Application rejected",
                ))
                application.offer_status = ApplicationOfferStatus.REJECTED
        elif new_status == ApplicationStatus.WITHDRAWN and application.offer_id is not None:
            offer = db.session.get(Offer, application.offer_id)
            if offer and offer.can_be_withdrawn:
                db.session.add(change_offer_status(
                    offer, OfferStatus.WITHDRAWN, actor, actor_id,
                    reason=f"Candidate withdrew: {reason}" if reason else "Candidate withdrew",
                ))
                application.offer_status = ApplicationOfferStatus.REJECTED

        self._commit("CONCURRENT_MODIFICATION", "Application was modified concurrently, retry")
        self._invalidate_pipeline(application.job_id)
        return application

    def get_history(self, entity_type: str, entity_id: int) -> List[StatusHistory]:
        """Status history, oldest first."""
        return list(db.session.scalars(
            select(StatusHistory)
            .where(and_(
                StatusHistory.tenant_id == self.tenant_id,
                StatusHistory.entity_type == entity_type,
                StatusHistory.entity_id == entity_id,
            ))
            .order_by(StatusHistory.created_at, StatusHistory.id)
        ))

    def get_application_history(self, application_id: int) -> List[StatusHistory]:
        self.get_application(application_id)
        return self.get_history(HistoryEntity.APPLICATION, application_id)

    # ==================== Interviews ====================

    def schedule_interview(
        self,
        application_id: int,
        scheduled_date: date,
        scheduled_time: Optional[str] = None,
        mode: str = "IN_PERSON",
        location: Optional[str] = None,
        interviewer_name: Optional[str] = None,
        interviewer_id: Optional[int] = None,
        round_name: Optional[str] = None,
        notes: Optional[str] = None,
        actor: Optional[str] = None,
        actor_id: Optional[int] = None,
    ) -> Interview:
        """
        Schedule the next interview round.

        A SHORTLISTED application moves to INTERVIEW.

        Raises:
            PreconditionNotMet: Application is not SHORTLISTED or INTERVIEW
                (INVALID_STATUS_FOR_INTERVIEW)
        """
        application = self.get_application(application_id, for_update=True)

        if not application.can_schedule_interview:
            raise PreconditionNotMet(
                f"Cannot schedule interview. Current status: {application.status}",
                code="INVALID_STATUS_FOR_INTERVIEW",
                details={
                    "current_status": application.status,
                    "allowed_statuses": [ApplicationStatus.SHORTLISTED, ApplicationStatus.INTERVIEW],
                },
            )

        round_number = application.total_interview_rounds + 1
        interview = Interview(
            tenant_id=self.tenant_id,
            application_id=application.id,
            round_number=round_number,
            round_name=round_name or f"Round {round_number}",
            scheduled_date=scheduled_date,
            scheduled_time=scheduled_time,
            mode=mode,
            location=location,
            interviewer_name=interviewer_name,
            interviewer_id=interviewer_id,
            notes=notes,
            status=InterviewStatus.SCHEDULED,
            created_by_id=actor_id,
        )
        db.session.add(interview)
        application.total_interview_rounds = round_number

        if application.status == ApplicationStatus.SHORTLISTED:
            db.session.add(change_application_status(
                application, ApplicationStatus.INTERVIEW, actor, actor_id,
                reason=f"Interview round {round_number} scheduled",
            ))

        self._commit("DUPLICATE_INTERVIEW_ROUND", "Interview round was scheduled concurrently, retry")
        self._invalidate_pipeline(application.job_id)

        logger.info(f"Interview round {round_number} scheduled for application {application_id}")
        return interview

    def update_interview(
        self,
        interview_id: int,
        status: Optional[str] = None,
        result: Optional[str] = None,
        rating: Optional[int] = None,
        feedback: Optional[str] = None,
    ) -> Interview:
        """Record interview outcome. Completing a round bumps the application counter."""
        interview = db.session.scalar(
            select(Interview).where(and_(
                Interview.id == interview_id,
                Interview.tenant_id == self.tenant_id,
            ))
        )
        if not interview:
            raise NotFoundError(f"Interview {interview_id} not found")

        if status and status != interview.status:
            if status == InterviewStatus.COMPLETED:
                application = self.get_application(interview.application_id, for_update=True)
                application.completed_interview_rounds = (application.completed_interview_rounds or 0) + 1
            interview.status = status
        if result is not None:
            interview.result = result
        if rating is not None:
            interview.rating = rating
        if feedback is not None:
            interview.feedback = feedback

        db.session.commit()
        logger.info(f"Updated interview {interview_id}: status={interview.status} result={interview.result}")
        return interview

    # ==================== Offers ====================

    def create_offer(
        self,
        application_id: int,
        joining_date: Optional[date] = None,
        salary_structure_id: Optional[int] = None,
        earnings: Optional[list[dict]] = None,
        deductions: Optional[list[dict]] = None,
        employer_benefits: Optional[list[dict]] = None,
        designation: Optional[str] = None,
        department: Optional[str] = None,
        location: Optional[str] = None,
        valid_days: Optional[int] = None,
        probation_months: int = 3,
        notice_period_days: int = 30,
        working_days: str = "Monday to Friday",
        working_hours: str = "9:00 AM to 6:00 PM",
        benefits: Optional[list[str]] = None,
        special_terms: Optional[str] = None,
        actor: Optional[str] = None,
        actor_id: Optional[int] = None,
    ) -> Offer:
        """
        Create a DRAFT offer for a SELECTED application.

        Salary comes from a structure id or inline components; without either
        the application's latest assigned snapshot is reused when present.
        The application moves to OFFERED with offer_status PENDING.

        Raises:
            PreconditionNotMet: Application not SELECTED (CANNOT_CREATE_OFFER)
                or already has an offer (OFFER_ALREADY_EXISTS)
        """
        with self._entity_lock(f"application:{application_id}"):
            application = self.get_application(application_id, for_update=True)

            if application.offer_id is not None:
                raise PreconditionNotMet(
                    "An offer already exists for this application",
                    code="OFFER_ALREADY_EXISTS",
                    details={"offer_id": application.offer_id, "current_status": application.status},
                )
            if application.status != ApplicationStatus.SELECTED:
                raise PreconditionNotMet(
                    f"Cannot create offer. Application status must be SELECTED, current: {application.status}",
                    code="CANNOT_CREATE_OFFER",
                    details={"current_status": application.status, "required_status": ApplicationStatus.SELECTED},
                )

            snapshot = None
            if salary_structure_id is not None or earnings:
                breakdown = self.salary.build_breakdown(salary_structure_id, earnings, deductions, employer_benefits)
                snapshot = self.salary.create_snapshot(application, breakdown, salary_structure_id, actor)
            else:
                snapshot = self.salary.latest_snapshot(application.id)

            days = valid_days if valid_days is not None else settings.offer_validity_days
            offer = Offer(
                tenant_id=self.tenant_id,
                offer_code=self._next_code(Offer, "OFF"),
                application_id=application.id,
                candidate_id=application.candidate_id,
                job_id=application.job_id,
                salary_snapshot_id=snapshot.id if snapshot else None,
                status=OfferStatus.DRAFT,
                designation=designation or application.designation,
                department=department or application.department,
                location=location or application.location,
                joining_date=joining_date,
                valid_until=utcnow() + timedelta(days=days),
                probation_months=probation_months,
                notice_period_days=notice_period_days,
                working_days=working_days,
                working_hours=working_hours,
                benefits=benefits or [],
                special_terms=special_terms,
                created_by=actor,
            )
            db.session.add(offer)
            try:
                db.session.flush()
            except IntegrityError:
                db.session.rollback()
                raise PreconditionNotMet(
                    "An offer already exists for this application",
                    code="OFFER_ALREADY_EXISTS",
                )

            db.session.add(StatusHistory.record(
                tenant_id=self.tenant_id,
                entity_type=HistoryEntity.OFFER,
                entity_id=offer.id,
                from_status=None,
                to_status=OfferStatus.DRAFT,
                changed_by=actor,
                changed_by_id=actor_id,
                reason="Offer created",
            ))

            application.offer_id = offer.id
            application.offer_status = ApplicationOfferStatus.PENDING
            if joining_date:
                application.joining_date = joining_date
            db.session.add(change_application_status(
                application, ApplicationStatus.OFFERED, actor, actor_id,
                reason=f"Offer {offer.offer_code} created",
            ))

            self._commit("OFFER_ALREADY_EXISTS", "An offer already exists for this application")

        self._invalidate_pipeline(application.job_id)
        logger.info(f"Created offer {offer.offer_code} for application {application_id}")
        return offer

    def _expire_if_due(self, offer: Offer, now: Optional[datetime] = None) -> bool:
        """Mark a SENT offer past valid_until as EXPIRED. Caller commits."""
        if not offer.is_expired(now):
            return False
        db.session.add(change_offer_status(offer, OfferStatus.EXPIRED, reason="Offer validity elapsed", now=now))
        application = db.session.get(Application, offer.application_id)
        if application is not None:
            application.offer_status = ApplicationOfferStatus.EXPIRED
        return True

    def get_offer(self, offer_id: int, for_update: bool = False) -> Offer:
        """Load an offer, applying expiry first."""
        query = select(Offer).where(and_(Offer.id == offer_id, Offer.tenant_id == self.tenant_id))
        if for_update:
            query = query.with_for_update()
        offer = db.session.scalar(query)
        if not offer:
            raise NotFoundError(f"Offer {offer_id} not found")
        if self._expire_if_due(offer):
            db.session.commit()
            logger.info(f"Offer {offer.offer_code} expired on access")
        return offer

    def update_offer_draft(
        self,
        offer_id: int,
        joining_date: Optional[date] = None,
        designation: Optional[str] = None,
        department: Optional[str] = None,
        location: Optional[str] = None,
        salary_structure_id: Optional[int] = None,
        earnings: Optional[list[dict]] = None,
        deductions: Optional[list[dict]] = None,
        employer_benefits: Optional[list[dict]] = None,
        special_terms: Optional[str] = None,
        actor: Optional[str] = None,
    ) -> Offer:
        """
        Edit a DRAFT offer. New salary input creates a new snapshot; the
        previous snapshot row is left untouched.

        Raises:
            PreconditionNotMet: Offer is no longer DRAFT (OFFER_NOT_EDITABLE)
        """
        offer = self.get_offer(offer_id, for_update=True)
        if offer.status != OfferStatus.DRAFT:
            raise PreconditionNotMet(
                f"Only DRAFT offers can be edited, current: {offer.status}",
                code="OFFER_NOT_EDITABLE",
                details={"current_status": offer.status},
            )

        application = self.get_application(offer.application_id, for_update=True)
        if salary_structure_id is not None or earnings:
            breakdown = self.salary.build_breakdown(salary_structure_id, earnings, deductions, employer_benefits)
            snapshot = self.salary.create_snapshot(application, breakdown, salary_structure_id, actor)
            offer.salary_snapshot_id = snapshot.id
        if joining_date is not None:
            offer.joining_date = joining_date
            application.joining_date = joining_date
        if designation is not None:
            offer.designation = designation
        if department is not None:
            offer.department = department
        if location is not None:
            offer.location = location
        if special_terms is not None:
            offer.special_terms = special_terms

        db.session.commit()
        logger.info(f"Updated draft offer {offer.offer_code}")
        return offer

    def send_offer(self, offer_id: int, actor: Optional[str] = None, actor_id: Optional[int] = None) -> Offer:
        """
        DRAFT -> SENT.

        Raises:
            InvalidTransition: Offer is not DRAFT
            PreconditionNotMet: Salary snapshot or joining date missing (OFFER_NOT_SENDABLE)
        """
        offer = self.get_offer(offer_id, for_update=True)

        if offer.status == OfferStatus.DRAFT and not offer.can_be_sent:
            missing = []
            if offer.salary_snapshot_id is None:
                missing.append("salary_snapshot")
            if offer.joining_date is None:
                missing.append("joining_date")
            raise PreconditionNotMet(
                f"Offer cannot be sent, missing: {', '.join(missing)}",
                code="OFFER_NOT_SENDABLE",
                details={"missing": missing},
            )

        db.session.add(change_offer_status(offer, OfferStatus.SENT, actor, actor_id, reason="Offer sent to candidate"))
        application = self.get_application(offer.application_id, for_update=True)
        application.offer_status = ApplicationOfferStatus.SENT

        self._commit("CONCURRENT_MODIFICATION", "Offer was modified concurrently, retry")
        logger.info(f"Offer {offer.offer_code} sent")
        return offer

    def _ensure_not_expired(self, offer: Offer) -> None:
        if offer.status == OfferStatus.EXPIRED:
            raise PreconditionNotMet(
                f"Offer {offer.offer_code} expired on {offer.valid_until.isoformat()}",
                code="OFFER_EXPIRED",
                details={"valid_until": offer.valid_until.isoformat(), "current_status": offer.status},
            )

    def accept_offer(
        self,
        offer_id: int,
        accepted_via: str = AcceptedVia.MANUAL,
        actor: Optional[str] = None,
        actor_id: Optional[int] = None,
    ) -> Offer:
        """
        SENT -> ACCEPTED, only while not expired.

        Raises:
            PreconditionNotMet: Offer expired (OFFER_EXPIRED)
            InvalidTransition: Offer is not SENT
        """
        offer = self.get_offer(offer_id, for_update=True)
        self._ensure_not_expired(offer)

        db.session.add(change_offer_status(offer, OfferStatus.ACCEPTED, actor, actor_id, reason="Offer accepted"))
        offer.accepted_via = accepted_via
        application = self.get_application(offer.application_id, for_update=True)
        application.offer_status = ApplicationOfferStatus.ACCEPTED

        self._commit("CONCURRENT_MODIFICATION", "Offer was modified concurrently, retry")
        logger.info(f"Offer {offer.offer_code} accepted via {accepted_via}")
        return offer

    def reject_offer(
        self,
        offer_id: int,
        reason: Optional[str] = None,
        actor: Optional[str] = None,
        actor_id: Optional[int] = None,
    ) -> Offer:
        """
        SENT -> REJECTED (candidate declined). The application is closed as REJECTED.

        Raises:
            PreconditionNotMet: Offer expired (OFFER_EXPIRED)
            InvalidTransition: Offer is not SENT
        """
        offer = self.get_offer(offer_id, for_update=True)
        self._ensure_not_expired(offer)

        db.session.add(change_offer_status(offer, OfferStatus.REJECTED, actor, actor_id, reason=reason))
        application = self.get_application(offer.application_id, for_update=True)
        application.offer_status = ApplicationOfferStatus.REJECTED
        db.session.add(change_application_status(
            application, ApplicationStatus.REJECTED, actor, actor_id,
            reason=f"Offer declined: {reason}" if reason else "Offer declined",
        ))

        self._commit("CONCURRENT_MODIFICATION", "Offer was modified concurrently, retry")
        self._invalidate_pipeline(application.job_id)
        logger.info(f"Offer {offer.offer_code} rejected")
        return offer

    def withdraw_offer(
        self,
        offer_id: int,
        reason: Optional[str] = None,
        actor: Optional[str] = None,
        actor_id: Optional[int] = None,
    ) -> Offer:
        """
        Withdraw a DRAFT or SENT offer. The application is closed as REJECTED.

        Raises:
            InvalidTransition: Offer already ACCEPTED, REJECTED, EXPIRED or WITHDRAWN
        """
        offer = self.get_offer(offer_id, for_update=True)

        db.session.add(change_offer_status(offer, OfferStatus.WITHDRAWN, actor, actor_id, reason=reason))
        application = self.get_application(offer.application_id, for_update=True)
        # The application's offer sub-state has no WITHDRAWN; a withdrawn offer reads as REJECTED
        application.offer_status = ApplicationOfferStatus.REJECTED
        if not application.is_terminal:
            db.session.add(change_application_status(
                application, ApplicationStatus.REJECTED, actor, actor_id,
                reason=f"Offer withdrawn: {reason}" if reason else "Offer withdrawn",
            ))

        self._commit("CONCURRENT_MODIFICATION", "Offer was modified concurrently, retry")
        self._invalidate_pipeline(application.job_id)
        logger.info(f"Offer {offer.offer_code} withdrawn")
        return offer

    def expire_offers(self, now: Optional[datetime] = None) -> int:
        """Expire every SENT offer past valid_until. Returns the number expired."""
        now = now or utcnow()
        offers = db.session.scalars(
            select(Offer).where(and_(
                Offer.tenant_id == self.tenant_id,
                Offer.status == OfferStatus.SENT,
                Offer.valid_until < now,
            ))
        ).unique().all()

        expired = 0
        for offer in offers:
            if self._expire_if_due(offer, now):
                expired += 1
        db.session.commit()

        if expired:
            logger.info(f"Expired {expired} offers for tenant {self.tenant_id}")
        return expired

    # ==================== Employees ====================

    def convert_to_employee(
        self,
        offer_id: int,
        employee_code: Optional[str] = None,
        actor: Optional[str] = None,
        actor_id: Optional[int] = None,
    ) -> Employee:
        """
        Create the employee record for an accepted offer; application -> JOINED.

        Raises:
            PreconditionNotMet: Offer not ACCEPTED (OFFER_NOT_ACCEPTED) or an
                employee already exists (EMPLOYEE_ALREADY_EXISTS)
        """
        offer = self.get_offer(offer_id)
        with self._entity_lock(f"application:{offer.application_id}"):
            offer = self.get_offer(offer_id, for_update=True)
            application = self.get_application(offer.application_id, for_update=True)

            if offer.employee_id is not None or application.employee_id is not None:
                raise PreconditionNotMet(
                    "An employee already exists for this offer",
                    code="EMPLOYEE_ALREADY_EXISTS",
                    details={"employee_id": offer.employee_id or application.employee_id},
                )
            if offer.status != OfferStatus.ACCEPTED or not application.can_convert_to_employee:
                raise PreconditionNotMet(
                    f"Offer must be ACCEPTED before conversion, current: {offer.status}",
                    code="OFFER_NOT_ACCEPTED",
                    details={
                        "offer_status": offer.status,
                        "application_status": application.status,
                        "application_offer_status": application.offer_status,
                    },
                )

            info = application.candidate_info or {}
            employee = Employee(
                tenant_id=self.tenant_id,
                employee_code=employee_code or self._next_code(Employee, "EMP"),
                application_id=application.id,
                offer_id=offer.id,
                candidate_id=application.candidate_id,
                salary_snapshot_id=offer.salary_snapshot_id,
                name=application.applicant_name,
                email=info.get("email"),
                mobile=info.get("mobile"),
                designation=offer.designation,
                department=offer.department,
                location=offer.location,
                joining_date=offer.joining_date,
            )
            db.session.add(employee)
            try:
                db.session.flush()
            except IntegrityError:
                db.session.rollback()
                raise PreconditionNotMet(
                    "An employee already exists for this offer",
                    code="EMPLOYEE_ALREADY_EXISTS",
                )

            offer.employee_id = employee.id
            application.employee_id = employee.id
            db.session.add(change_application_status(
                application, ApplicationStatus.JOINED, actor, actor_id,
                reason=f"Converted to employee {employee.employee_code}",
            ))
            self._commit("EMPLOYEE_ALREADY_EXISTS", "An employee already exists for this offer")

        self._invalidate_pipeline(application.job_id)
        logger.info(f"Offer {offer.offer_code} converted to employee {employee.employee_code}")
        return employee

    # ==================== Statistics ====================

    def pipeline_stats(self, job_id: Optional[int] = None) -> Dict[str, Any]:
        """Application counts per status (zero-filled) and offer status counts."""
        client = self._redis()
        key = cache_key("pipeline", self.tenant_id, job_id if job_id is not None else "all")
        if client is not None:
            cached = client.get(key)
            if cached is not None:
                return cached

        conditions = [Application.tenant_id == self.tenant_id]
        if job_id is not None:
            conditions.append(Application.job_id == job_id)

        rows = db.session.execute(
            select(Application.status, func.count(Application.id))
            .where(and_(*conditions))
            .group_by(Application.status)
        ).all()
        by_status = {status: 0 for status in ApplicationStatus.all()}
        by_status.update({status: count for status, count in rows})

        offer_conditions = [Offer.tenant_id == self.tenant_id]
        if job_id is not None:
            offer_conditions.append(Offer.job_id == job_id)
        offer_rows = db.session.execute(
            select(Offer.status, func.count(Offer.id))
            .where(and_(*offer_conditions))
            .group_by(Offer.status)
        ).all()
        offers = {status: 0 for status in OfferStatus.all()}
        offers.update({status: count for status, count in offer_rows})

        stats = {
            "job_id": job_id,
            "total": sum(by_status.values()),
            "active": sum(by_status[s] for s in ApplicationStatus.active()),
            "by_status": by_status,
            "offers": offers,
        }
        if client is not None:
            client.set(key, stats, ttl=PIPELINE_CACHE_TTL)
        return stats

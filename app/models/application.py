"""
Application Model
One candidate's pursuit of one job requirement. Primary entity of the hiring pipeline.
"""
from sqlalchemy import String, Integer, Text, Date, DateTime, ForeignKey, Index

from app import db
from app.models import BaseModel


class ApplicationStatus:
    """Application status constants and allowed transitions."""
    APPLIED = "APPLIED"
    SHORTLISTED = "SHORTLISTED"
    INTERVIEW = "INTERVIEW"
    SELECTED = "SELECTED"
    OFFERED = "OFFERED"
    JOINED = "JOINED"
    REJECTED = "REJECTED"
    WITHDRAWN = "WITHDRAWN"
    ON_HOLD = "ON_HOLD"

    TRANSITIONS = {
        APPLIED: {SHORTLISTED, REJECTED, WITHDRAWN, ON_HOLD},
        SHORTLISTED: {INTERVIEW, REJECTED, WITHDRAWN, ON_HOLD},
        INTERVIEW: {SELECTED, REJECTED, WITHDRAWN, ON_HOLD},
        SELECTED: {OFFERED, REJECTED, WITHDRAWN},
        OFFERED: {JOINED, REJECTED, WITHDRAWN},
        ON_HOLD: {APPLIED, SHORTLISTED, INTERVIEW, SELECTED, REJECTED},
        REJECTED: set(),
        JOINED: set(),
        WITHDRAWN: set(),
    }

    @classmethod
    def all(cls) -> list[str]:
        return [
            cls.APPLIED, cls.SHORTLISTED, cls.INTERVIEW, cls.SELECTED,
            cls.OFFERED, cls.JOINED, cls.REJECTED, cls.WITHDRAWN, cls.ON_HOLD,
        ]

    @classmethod
    def terminal(cls) -> list[str]:
        """Final statuses (no further transitions)."""
        return [cls.REJECTED, cls.JOINED, cls.WITHDRAWN]

    @classmethod
    def active(cls) -> list[str]:
        return [s for s in cls.all() if s not in cls.terminal()]

    @classmethod
    def workflow_only(cls) -> list[str]:
        """Statuses reached only through offer creation or employee conversion."""
        return [cls.OFFERED, cls.JOINED]


class ApplicationOfferStatus:
    """Offer sub-state mirrored on the application once an offer is linked."""
    PENDING = "PENDING"
    SENT = "SENT"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"

    @classmethod
    def all(cls) -> list[str]:
        return [cls.PENDING, cls.SENT, cls.ACCEPTED, cls.REJECTED, cls.EXPIRED]


class ApplicationSource:
    CAREER_PORTAL = "CAREER_PORTAL"
    REFERRAL = "REFERRAL"
    LINKEDIN = "LINKEDIN"
    NAUKRI = "NAUKRI"
    DIRECT = "DIRECT"
    OTHER = "OTHER"

    @classmethod
    def all(cls) -> list[str]:
        return [cls.CAREER_PORTAL, cls.REFERRAL, cls.LINKEDIN, cls.NAUKRI, cls.DIRECT, cls.OTHER]


class ApplicationPriority:
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"

    @classmethod
    def all(cls) -> list[str]:
        return [cls.LOW, cls.MEDIUM, cls.HIGH, cls.URGENT]


class Application(BaseModel):
    """
    A candidate's application to a job requirement.

    Status only changes through the workflow service, which enforces
    ApplicationStatus.TRANSITIONS and appends a StatusHistory row per change.
    Offer and employee links are written by the workflow service:
    - offer_id is set together with status OFFERED
    - employee_id is set together with status JOINED, after the offer was ACCEPTED

    The letter fields (offer_letter_path, offer_ref_code, ...) are written by
    the letter service only after the generated PDF exists on disk.
    """
    __tablename__ = "applications"

    tenant_id = db.Column(Integer, nullable=False, index=True)
    application_code = db.Column(String(20), nullable=False)

    job_id = db.Column(Integer, ForeignKey("job_requirements.id", ondelete="CASCADE"), nullable=False, index=True)
    candidate_id = db.Column(Integer, ForeignKey("candidates.id", ondelete="CASCADE"), nullable=False, index=True)
    candidate_info = db.Column(db.JSON, nullable=False, default=dict)

    source = db.Column(String(30), nullable=False, default=ApplicationSource.CAREER_PORTAL)
    priority = db.Column(String(20), nullable=False, default=ApplicationPriority.MEDIUM)
    notes = db.Column(Text)

    # Status
    status = db.Column(String(20), nullable=False, default=ApplicationStatus.APPLIED)
    previous_status = db.Column(String(20))
    status_changed_at = db.Column(DateTime)
    status_changed_by = db.Column(String(255))

    # Rejection / withdrawal metadata
    rejected_at = db.Column(DateTime)
    rejected_by = db.Column(String(255))
    rejection_reason = db.Column(Text)
    rejection_stage = db.Column(String(20))
    withdrawn_at = db.Column(DateTime)
    withdrawal_reason = db.Column(Text)

    # Interview counters
    total_interview_rounds = db.Column(Integer, nullable=False, default=0)
    completed_interview_rounds = db.Column(Integer, nullable=False, default=0)

    # Offer / employee links (plain ids, offers and employees point back with FKs)
    offer_id = db.Column(Integer)
    offer_status = db.Column(String(20))
    employee_id = db.Column(Integer)

    # Letter data
    offer_letter_path = db.Column(String(500))
    offer_ref_code = db.Column(String(100))
    joining_letter_path = db.Column(String(500))
    joining_date = db.Column(Date)
    designation = db.Column(String(200))
    department = db.Column(String(200))
    location = db.Column(String(200))
    address = db.Column(Text)
    father_name = db.Column(String(200))

    job = db.relationship("JobRequirement", lazy="joined")
    candidate = db.relationship("Candidate", lazy="joined")

    __table_args__ = (
        Index("idx_application_unique", "tenant_id", "job_id", "candidate_id", unique=True),
        Index("idx_application_code", "tenant_id", "application_code", unique=True),
        Index("idx_application_tenant_status", "tenant_id", "status"),
    )

    @property
    def is_terminal(self) -> bool:
        return self.status in ApplicationStatus.terminal()

    @property
    def can_schedule_interview(self) -> bool:
        return self.status in (ApplicationStatus.SHORTLISTED, ApplicationStatus.INTERVIEW)

    @property
    def can_create_offer(self) -> bool:
        return self.status == ApplicationStatus.SELECTED and self.offer_id is None

    @property
    def can_convert_to_employee(self) -> bool:
        return (
            self.status == ApplicationStatus.OFFERED
            and self.offer_status == ApplicationOfferStatus.ACCEPTED
            and self.employee_id is None
        )

    @property
    def applicant_name(self) -> str:
        info = self.candidate_info or {}
        if info.get("name"):
            return info["name"]
        return self.candidate.full_name if self.candidate else ""

    def to_dict(self, include_job: bool = False, include_candidate: bool = False) -> dict:
        """Convert application to dictionary."""
        data = super().to_dict()
        data.update({
            "tenant_id": self.tenant_id,
            "application_code": self.application_code,
            "job_id": self.job_id,
            "candidate_id": self.candidate_id,
            "candidate_info": self.candidate_info,
            "source": self.source,
            "priority": self.priority,
            "notes": self.notes,
            "status": self.status,
            "previous_status": self.previous_status,
            "status_changed_at": self.status_changed_at.isoformat() if self.status_changed_at else None,
            "status_changed_by": self.status_changed_by,
            "rejected_at": self.rejected_at.isoformat() if self.rejected_at else None,
            "rejected_by": self.rejected_by,
            "rejection_reason": self.rejection_reason,
            "rejection_stage": self.rejection_stage,
            "withdrawn_at": self.withdrawn_at.isoformat() if self.withdrawn_at else None,
            "withdrawal_reason": self.withdrawal_reason,
            "total_interview_rounds": self.total_interview_rounds,
            "completed_interview_rounds": self.completed_interview_rounds,
            "offer_id": self.offer_id,
            "offer_status": self.offer_status,
            "employee_id": self.employee_id,
            "offer_letter_path": self.offer_letter_path,
            "offer_ref_code": self.offer_ref_code,
            "joining_letter_path": self.joining_letter_path,
            "joining_date": self.joining_date.isoformat() if self.joining_date else None,
            "designation": self.designation,
            "department": self.department,
            "location": self.location,
            "address": self.address,
            "father_name": self.father_name,
        })
        if include_job and self.job:
            data["job"] = self.job.to_dict()
        if include_candidate and self.candidate:
            data["candidate"] = self.candidate.to_dict()
        return data

    def __repr__(self):
        return f"<Application {self.application_code} ({self.status})>"

"""
Offer Model
Compensation and terms proposal linked 1:1 to a SELECTED application.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Integer, Text, Date, DateTime, ForeignKey, Index

from app import db
from app.models import BaseModel, utcnow


class OfferStatus:
    """Offer status constants and allowed transitions."""
    DRAFT = "DRAFT"
    SENT = "SENT"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"
    WITHDRAWN = "WITHDRAWN"

    TRANSITIONS = {
        DRAFT: {SENT, WITHDRAWN},
        SENT: {ACCEPTED, REJECTED, EXPIRED, WITHDRAWN},
        ACCEPTED: set(),
        REJECTED: set(),
        EXPIRED: set(),
        WITHDRAWN: set(),
    }

    @classmethod
    def all(cls) -> list[str]:
        return [cls.DRAFT, cls.SENT, cls.ACCEPTED, cls.REJECTED, cls.EXPIRED, cls.WITHDRAWN]

    @classmethod
    def terminal(cls) -> list[str]:
        return [cls.ACCEPTED, cls.REJECTED, cls.EXPIRED, cls.WITHDRAWN]


class AcceptedVia:
    EMAIL = "EMAIL"
    PORTAL = "PORTAL"
    MANUAL = "MANUAL"

    @classmethod
    def all(cls) -> list[str]:
        return [cls.EMAIL, cls.PORTAL, cls.MANUAL]


class Offer(BaseModel):
    """Offer for an application. The salary snapshot is fixed at creation."""

    __tablename__ = "offers"

    tenant_id = db.Column(Integer, nullable=False, index=True)
    offer_code = db.Column(String(20), nullable=False)
    application_id = db.Column(
        Integer, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True
    )
    candidate_id = db.Column(Integer, nullable=False)
    job_id = db.Column(Integer, nullable=False)
    salary_snapshot_id = db.Column(Integer, ForeignKey("salary_snapshots.id"))

    status = db.Column(String(20), nullable=False, default=OfferStatus.DRAFT)

    # Job details
    designation = db.Column(String(200))
    department = db.Column(String(200))
    location = db.Column(String(200))
    joining_date = db.Column(Date)
    valid_until = db.Column(DateTime, nullable=False)

    # Terms
    probation_months = db.Column(Integer, nullable=False, default=3)
    notice_period_days = db.Column(Integer, nullable=False, default=30)
    working_days = db.Column(String(100), nullable=False, default="Monday to Friday")
    working_hours = db.Column(String(100), nullable=False, default="9:00 AM to 6:00 PM")
    benefits = db.Column(db.JSON, nullable=False, default=list)
    special_terms = db.Column(Text)

    # Lifecycle timestamps
    sent_at = db.Column(DateTime)
    accepted_at = db.Column(DateTime)
    accepted_via = db.Column(String(20))
    rejected_at = db.Column(DateTime)
    rejection_reason = db.Column(Text)
    withdrawn_at = db.Column(DateTime)
    withdrawal_reason = db.Column(Text)
    expired_at = db.Column(DateTime)

    employee_id = db.Column(Integer)
    created_by = db.Column(String(255))

    application = db.relationship("Application", lazy="joined")
    salary_snapshot = db.relationship("SalarySnapshot", lazy="joined")

    __table_args__ = (
        Index("idx_offer_application", "tenant_id", "application_id", unique=True),
        Index("idx_offer_code", "tenant_id", "offer_code", unique=True),
        Index("idx_offer_tenant_status", "tenant_id", "status"),
    )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """True when a SENT offer is past its validity window."""
        now = now or utcnow()
        return self.status == OfferStatus.SENT and self.valid_until is not None and self.valid_until < now

    @property
    def can_be_sent(self) -> bool:
        return (
            self.status == OfferStatus.DRAFT
            and self.salary_snapshot_id is not None
            and self.joining_date is not None
        )

    @property
    def can_be_accepted(self) -> bool:
        return self.status == OfferStatus.SENT and not self.is_expired()

    @property
    def can_be_rejected(self) -> bool:
        return self.status == OfferStatus.SENT and not self.is_expired()

    @property
    def can_be_withdrawn(self) -> bool:
        return self.status not in OfferStatus.terminal()

    @property
    def can_link_employee(self) -> bool:
        return self.status == OfferStatus.ACCEPTED and self.employee_id is None

    def to_dict(self, include_salary: bool = True) -> dict:
        data = super().to_dict()
        data.update({
            "tenant_id": self.tenant_id,
            "offer_code": self.offer_code,
            "application_id": self.application_id,
            "candidate_id": self.candidate_id,
            "job_id": self.job_id,
            "salary_snapshot_id": self.salary_snapshot_id,
            "status": self.status,
            "designation": self.designation,
            "department": self.department,
            "location": self.location,
            "joining_date": self.joining_date.isoformat() if self.joining_date else None,
            "valid_until": self.valid_until.isoformat() if self.valid_until else None,
            "probation_months": self.probation_months,
            "notice_period_days": self.notice_period_days,
            "working_days": self.working_days,
            "working_hours": self.working_hours,
            "benefits": self.benefits,
            "special_terms": self.special_terms,
            "sent_at": self.sent_at.isoformat() if self.sent_at else None,
            "accepted_at": self.accepted_at.isoformat() if self.accepted_at else None,
            "accepted_via": self.accepted_via,
            "rejected_at": self.rejected_at.isoformat() if self.rejected_at else None,
            "rejection_reason": self.rejection_reason,
            "withdrawn_at": self.withdrawn_at.isoformat() if self.withdrawn_at else None,
            "withdrawal_reason": self.withdrawal_reason,
            "expired_at": self.expired_at.isoformat() if self.expired_at else None,
            "employee_id": self.employee_id,
            "created_by": self.created_by,
        })
        if include_salary and self.salary_snapshot:
            data["salary_snapshot"] = self.salary_snapshot.to_dict()
        return data

    def __repr__(self):
        return f"<Offer {self.offer_code} ({self.status})>"

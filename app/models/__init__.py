"""SQLAlchemy models package."""

from datetime import datetime, timezone
from app import db


def utcnow() -> datetime:
    """Naive UTC timestamp used for every stored datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class BaseModel(db.Model):
    """Base model with common columns."""

    __abstract__ = True

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self):
        """Convert model to dictionary."""
        return {
            "id": self.id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        """String representation."""
        return f"<{self.__class__.__name__} id={self.id}>"


# Import recruitment models to ensure they're registered with SQLAlchemy
from app.models.job_requirement import JobRequirement, JobStatus
from app.models.candidate import Candidate
from app.models.application import (
    Application,
    ApplicationStatus,
    ApplicationOfferStatus,
    ApplicationSource,
    ApplicationPriority,
)
from app.models.status_history import StatusHistory, HistoryEntity
from app.models.interview import Interview, InterviewStatus, InterviewMode
from app.models.salary import SalaryStructure, SalarySnapshot
from app.models.offer import Offer, OfferStatus, AcceptedVia
from app.models.employee import Employee

# Import letter models
from app.models.letter_template import LetterTemplate, LetterType, TemplateType
from app.models.generated_letter import GeneratedLetter
from app.models.company_profile import CompanyProfile

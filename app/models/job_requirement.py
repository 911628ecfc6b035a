"""
Job Requirement Model
An open position a tenant is hiring for. Applications point at one requirement.
"""
from sqlalchemy import String, Integer, Text, Index

from app import db
from app.models import BaseModel


class JobStatus:
    """Job requirement status constants."""
    OPEN = "OPEN"
    ON_HOLD = "ON_HOLD"
    CLOSED = "CLOSED"

    @classmethod
    def all(cls) -> list[str]:
        return [cls.OPEN, cls.ON_HOLD, cls.CLOSED]


class JobRequirement(BaseModel):
    """Job opening that candidates apply to."""

    __tablename__ = "job_requirements"

    tenant_id = db.Column(Integer, nullable=False, index=True)

    job_code = db.Column(String(50), nullable=False)
    title = db.Column(String(255), nullable=False)
    department = db.Column(String(255))
    location = db.Column(String(255))
    employment_type = db.Column(String(50), default="FULL_TIME")
    openings = db.Column(Integer, nullable=False, default=1)
    description = db.Column(Text)
    status = db.Column(String(20), nullable=False, default=JobStatus.OPEN)

    __table_args__ = (
        Index("idx_job_requirement_code", "tenant_id", "job_code", unique=True),
        Index("idx_job_requirement_tenant_status", "tenant_id", "status"),
    )

    @property
    def is_open(self) -> bool:
        return self.status == JobStatus.OPEN

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            "tenant_id": self.tenant_id,
            "job_code": self.job_code,
            "title": self.title,
            "department": self.department,
            "location": self.location,
            "employment_type": self.employment_type,
            "openings": self.openings,
            "description": self.description,
            "status": self.status,
        })
        return data

    def __repr__(self):
        return f"<JobRequirement {self.job_code} {self.title!r} ({self.status})>"

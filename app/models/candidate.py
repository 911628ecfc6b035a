"""
Candidate Model
A person who can apply to job requirements within a tenant.
"""
from sqlalchemy import String, Integer, Text, Index

from app import db
from app.models import BaseModel


class Candidate(BaseModel):
    """Candidate profile. Letter generation reads name, father name and address from here."""

    __tablename__ = "candidates"

    tenant_id = db.Column(Integer, nullable=False, index=True)

    first_name = db.Column(String(100), nullable=False)
    last_name = db.Column(String(100))
    email = db.Column(String(255), nullable=False)
    mobile = db.Column(String(20))
    father_name = db.Column(String(200))
    address = db.Column(Text)
    current_designation = db.Column(String(200))
    resume_path = db.Column(String(500))

    __table_args__ = (
        Index("idx_candidate_tenant_email", "tenant_id", "email", unique=True),
    )

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    def snapshot(self) -> dict:
        """Contact details copied onto an application at submission time."""
        return {
            "name": self.full_name,
            "email": self.email,
            "mobile": self.mobile,
            "father_name": self.father_name,
            "address": self.address,
            "current_designation": self.current_designation,
        }

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            "tenant_id": self.tenant_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "full_name": self.full_name,
            "email": self.email,
            "mobile": self.mobile,
            "father_name": self.father_name,
            "address": self.address,
            "current_designation": self.current_designation,
            "resume_path": self.resume_path,
        })
        return data

    def __repr__(self):
        return f"<Candidate {self.full_name} ({self.email})>"

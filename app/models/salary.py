"""
Salary Models
SalaryStructure is an editable template of components. SalarySnapshot is the
immutable copy attached to an application/offer and used for letters.

Components are stored as lists of {"label": str, "annual": str} where the
amount is a decimal string, so totals never pick up float drift.
"""
from sqlalchemy import String, Integer, Text, Boolean, ForeignKey, Index

from app import db
from app.models import BaseModel


class SalaryStructure(BaseModel):
    """Reusable salary template owned by a tenant."""

    __tablename__ = "salary_structures"

    tenant_id = db.Column(Integer, nullable=False, index=True)
    name = db.Column(String(200), nullable=False)
    description = db.Column(Text)
    earnings = db.Column(db.JSON, nullable=False, default=list)
    deductions = db.Column(db.JSON, nullable=False, default=list)
    employer_benefits = db.Column(db.JSON, nullable=False, default=list)
    is_active = db.Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        Index("idx_salary_structure_name", "tenant_id", "name", unique=True),
    )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            "tenant_id": self.tenant_id,
            "name": self.name,
            "description": self.description,
            "earnings": self.earnings,
            "deductions": self.deductions,
            "employer_benefits": self.employer_benefits,
            "is_active": self.is_active,
        })
        return data


class SalarySnapshot(BaseModel):
    """
    Point-in-time salary copy. There is no update path: a new assignment
    creates a new snapshot and readers always pick the latest one.
    """

    __tablename__ = "salary_snapshots"

    tenant_id = db.Column(Integer, nullable=False, index=True)
    application_id = db.Column(
        Integer, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True
    )
    structure_id = db.Column(Integer, ForeignKey("salary_structures.id", ondelete="SET NULL"))

    earnings = db.Column(db.JSON, nullable=False, default=list)
    deductions = db.Column(db.JSON, nullable=False, default=list)
    employer_benefits = db.Column(db.JSON, nullable=False, default=list)
    # Output of compute_totals at creation time, decimal strings
    totals = db.Column(db.JSON, nullable=False, default=dict)
    created_by = db.Column(String(255))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "application_id": self.application_id,
            "structure_id": self.structure_id,
            "earnings": self.earnings,
            "deductions": self.deductions,
            "employer_benefits": self.employer_benefits,
            "totals": self.totals,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<SalarySnapshot id={self.id} application={self.application_id}>"

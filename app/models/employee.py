"""
Employee Model
Terminal artifact of the hiring pipeline, created once from an accepted offer.
"""
from sqlalchemy import String, Integer, Date, ForeignKey, Index

from app import db
from app.models import BaseModel


class Employee(BaseModel):
    __tablename__ = "employees"

    tenant_id = db.Column(Integer, nullable=False, index=True)
    employee_code = db.Column(String(20), nullable=False)

    application_id = db.Column(Integer, ForeignKey("applications.id"), nullable=False)
    offer_id = db.Column(Integer, ForeignKey("offers.id"), nullable=False)
    candidate_id = db.Column(Integer, nullable=False)
    salary_snapshot_id = db.Column(Integer, ForeignKey("salary_snapshots.id"))

    name = db.Column(String(255), nullable=False)
    email = db.Column(String(255))
    mobile = db.Column(String(20))
    designation = db.Column(String(200))
    department = db.Column(String(200))
    location = db.Column(String(200))
    joining_date = db.Column(Date)
    status = db.Column(String(20), nullable=False, default="ACTIVE")

    __table_args__ = (
        Index("idx_employee_offer", "tenant_id", "offer_id", unique=True),
        Index("idx_employee_code", "tenant_id", "employee_code", unique=True),
    )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            "tenant_id": self.tenant_id,
            "employee_code": self.employee_code,
            "application_id": self.application_id,
            "offer_id": self.offer_id,
            "candidate_id": self.candidate_id,
            "salary_snapshot_id": self.salary_snapshot_id,
            "name": self.name,
            "email": self.email,
            "mobile": self.mobile,
            "designation": self.designation,
            "department": self.department,
            "location": self.location,
            "joining_date": self.joining_date.isoformat() if self.joining_date else None,
            "status": self.status,
        })
        return data

    def __repr__(self):
        return f"<Employee {self.employee_code} {self.name!r}>"

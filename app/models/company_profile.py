"""
Company Profile Model
Per-tenant letterhead data: the issuing company and who signs its letters.
"""
from sqlalchemy import String, Integer, Text

from app import db
from app.models import BaseModel


class CompanyProfile(BaseModel):
    """One row per tenant, created on first update."""

    __tablename__ = "company_profiles"

    tenant_id = db.Column(Integer, nullable=False, unique=True, index=True)
    company_name = db.Column(String(255))
    address = db.Column(Text)
    contact_email = db.Column(String(255))
    signatory_name = db.Column(String(255))
    signatory_designation = db.Column(String(255))
    branding = db.Column(db.JSON, nullable=False, default=dict)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            "tenant_id": self.tenant_id,
            "company_name": self.company_name,
            "address": self.address,
            "contact_email": self.contact_email,
            "signatory_name": self.signatory_name,
            "signatory_designation": self.signatory_designation,
            "branding": self.branding or {},
        })
        return data

    def __repr__(self):
        return f"<CompanyProfile tenant={self.tenant_id} {self.company_name!r}>"

"""
Company Profile Service
Letterhead data per tenant, also a placeholder source for letters.
"""
import logging
from typing import Optional, Dict, Any

from sqlalchemy import select

from app import db
from app.models.company_profile import CompanyProfile
from app.services.placeholder_mapping import is_present

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "company_name",
    "address",
    "contact_email",
    "signatory_name",
    "signatory_designation",
)


class CompanyProfileService:
    """Read and update the tenant's company profile."""

    def __init__(self, tenant_id: int):
        self.tenant_id = tenant_id

    def get_profile(self) -> Optional[CompanyProfile]:
        return db.session.scalar(
            select(CompanyProfile).where(CompanyProfile.tenant_id == self.tenant_id)
        )

    def update_profile(self, branding: Optional[Dict[str, Any]] = None, **fields) -> CompanyProfile:
        """
        Create or update the profile. Blank values leave the stored value alone.

        Args:
            branding: Logo/colour settings, replaced as a whole when given
            **fields: Any of PROFILE_FIELDS
        """
        unknown = set(fields) - set(PROFILE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown company profile fields: {', '.join(sorted(unknown))}")

        profile = self.get_profile()
        if profile is None:
            profile = CompanyProfile(tenant_id=self.tenant_id, branding={})
            db.session.add(profile)

        for name, value in fields.items():
            if is_present(value):
                setattr(profile, name, str(value).strip())
        if branding:
            profile.branding = dict(branding)

        db.session.commit()
        logger.info(f"Company profile updated for tenant {self.tenant_id}")
        return profile

    def placeholder_values(self) -> Dict[str, Any]:
        """Entity values read by the company_* and signatory_* placeholders."""
        profile = self.get_profile()
        if profile is None:
            return {}
        return {
            "company_name": profile.company_name,
            "company_address": profile.address,
            "company_email": profile.contact_email,
            "signatory_name": profile.signatory_name,
            "signatory_designation": profile.signatory_designation,
        }

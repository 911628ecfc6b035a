"""Unit tests for CompanyProfileService."""

import pytest

from app.services.company_profile_service import CompanyProfileService
from tests.helpers import TENANT_ID, OTHER_TENANT_ID


@pytest.fixture
def profiles(db):
    return CompanyProfileService(TENANT_ID)


@pytest.mark.unit
class TestCompanyProfile:
    """Tests for profile create/update and placeholder values."""

    def test_no_profile_yet(self, profiles):
        assert profiles.get_profile() is None
        assert profiles.placeholder_values() == {}

    def test_first_update_creates_profile(self, profiles):
        profile = profiles.update_profile(
            company_name="Acme Technologies",
            address="4th Floor, Prestige Tower, Bengaluru",
            signatory_name="Meera Iyer",
            branding={"primary_color": "#0b5394"},
        )

        assert profile.id is not None
        assert profile.tenant_id == TENANT_ID
        assert profile.branding == {"primary_color": "#0b5394"}

    def test_blank_values_keep_stored_value(self, profiles):
        profiles.update_profile(company_name="Acme Technologies", signatory_name="Meera Iyer")

        profile = profiles.update_profile(company_name="  ", signatory_designation="Head of HR")

        assert profile.company_name == "Acme Technologies"
        assert profile.signatory_designation == "Head of HR"

    def test_unknown_field(self, profiles):
        with pytest.raises(ValueError):
            profiles.update_profile(logo_url="x")

    def test_placeholder_values(self, profiles):
        profiles.update_profile(company_name="Acme Technologies", address="Bengaluru", contact_email="hr@acme.test")

        values = profiles.placeholder_values()

        assert values["company_name"] == "Acme Technologies"
        assert values["company_address"] == "Bengaluru"
        assert values["company_email"] == "hr@acme.test"
        assert values["signatory_name"] is None

    def test_profiles_are_tenant_scoped(self, profiles):
        profiles.update_profile(company_name="Acme Technologies")

        assert CompanyProfileService(OTHER_TENANT_ID).get_profile() is None

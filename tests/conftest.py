"""Pytest configuration and fixtures."""

import os
import sys
from datetime import date

import pytest

# Add the parent directory to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from app import create_app, db as app_db
from config.testing import TestingConfig
from app.models import ApplicationStatus
from app.services.file_storage import FileStorageService
from app.services.recruitment_workflow_service import RecruitmentWorkflowService
from tests.helpers import TENANT_ID, SAMPLE_SALARY, FakeConverter, make_token


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: service and pure function tests")
    config.addinivalue_line("markers", "integration: HTTP flow tests")


@pytest.fixture(scope="session")
def app():
    """Create application for testing."""
    app = create_app(config=TestingConfig)
    return app


@pytest.fixture(scope="function")
def client(app):
    """Flask test client."""
    client = app.test_client()
    with app.app_context():
        yield client


@pytest.fixture(scope="function")
def db(app):
    """Database session for testing."""
    with app.app_context():
        # Create all tables
        app_db.create_all()
        yield app_db
        # Drop all tables
        app_db.session.remove()
        app_db.drop_all()


@pytest.fixture(scope="function")
def runner(app):
    """Flask CLI runner."""
    return app.test_cli_runner()


@pytest.fixture
def auth_headers():
    """Bearer token for a recruiter in TENANT_ID."""
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def storage(tmp_path):
    """File storage rooted in a per-test directory."""
    store = FileStorageService(root_path=str(tmp_path / "uploads"))
    store.ensure_dirs()
    return store


@pytest.fixture
def converter():
    return FakeConverter()


@pytest.fixture
def workflow(db):
    return RecruitmentWorkflowService(tenant_id=TENANT_ID)


@pytest.fixture
def sample_job(workflow):
    """Create an open job requirement."""
    return workflow.create_job(
        job_code="ENG-001",
        title="Software Engineer",
        department="Engineering",
        location="Bengaluru",
    )


@pytest.fixture
def sample_candidate(workflow):
    """Create a sample candidate."""
    return workflow.create_candidate(
        first_name="Asha",
        last_name="Rao",
        email="asha.rao@example.com",
        mobile="9876543210",
        father_name="Ravi Rao",
        address="12 MG Road, Bengaluru",
    )


@pytest.fixture
def sample_application(workflow, sample_job, sample_candidate):
    """Create an APPLIED application."""
    return workflow.create_application(
        job_id=sample_job.id,
        candidate_id=sample_candidate.id,
        actor="Test Recruiter",
        actor_id=7,
    )


@pytest.fixture
def selected_application(workflow, sample_application):
    """Application moved to SELECTED through shortlist and interview."""
    workflow.change_status(sample_application.id, ApplicationStatus.SHORTLISTED, actor="Test Recruiter")
    workflow.schedule_interview(sample_application.id, scheduled_date=date(2026, 10, 20))
    workflow.change_status(sample_application.id, ApplicationStatus.SELECTED, actor="Test Recruiter")
    return sample_application


@pytest.fixture
def draft_offer(workflow, selected_application):
    """DRAFT offer with salary and joining date, ready to send."""
    return workflow.create_offer(
        selected_application.id,
        joining_date=date(2026, 11, 2),
        **SAMPLE_SALARY,
        actor="Test Recruiter",
        actor_id=7,
    )

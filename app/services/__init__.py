"""Business logic services package."""

from app.services.file_storage import FileStorageService
from app.services.salary_service import SalaryService
from app.services.recruitment_workflow_service import RecruitmentWorkflowService
from app.services.letter_template_service import LetterTemplateService
from app.services.letter_render_service import LetterService
from app.services.company_profile_service import CompanyProfileService

__all__ = [
    "FileStorageService",
    "SalaryService",
    "RecruitmentWorkflowService",
    "LetterTemplateService",
    "LetterService",
    "CompanyProfileService",
]

"""
Letter Render Service
Generates offer and joining letter PDFs from stored templates.

Render flow for one letter:
    1. Guards (template type, offer letter present, salary snapshot present)
    2. Placeholder dictionary (override -> entity -> default)
    3. Template resolved on disk and rendered (.docx via python-docx, or HTML)
    4. Working file written as {Offer|Joining}_Letter_{applicationId}_{ms}
    5. LibreOffice converts it to PDF; the PDF must exist afterwards
    6. Application fields updated, GeneratedLetter appended, one commit

Nothing is written to the database before step 6, so a failed conversion
leaves no partial letter record.
"""
import logging
import os
import time
from datetime import date, datetime, timezone
from typing import Optional, Dict, Any, List, Tuple

from sqlalchemy import select, and_

from app import db
from app.exceptions import ConversionFailure, DataIncomplete, NotFoundError, PreconditionNotMet
from app.models.application import Application
from app.models.generated_letter import GeneratedLetter
from app.models.letter_template import LetterTemplate, LetterType
from app.models.offer import Offer
from app.services.company_profile_service import CompanyProfileService
from app.services.file_storage import FileStorageService
from app.services.letter_template_service import LetterTemplateService
from app.services.placeholder_mapping import is_present, map_to_placeholders
from app.services.salary_calculator import SalaryBreakdown, build_salary_rows
from app.services.salary_service import SalaryService
from app.utils.docx_converter import DocumentConverter, get_converter
from app.utils.docx_placeholders import SALARY_TABLE_TOKEN, render_docx, render_html
from config.settings import settings

logger = logging.getLogger(__name__)

FILE_PREFIXES = {
    LetterType.OFFER: "Offer_Letter",
    LetterType.JOINING: "Joining_Letter",
}

# Sample data used for template previews
PREVIEW_APPLICANT = {
    "name": "John Doe",
    "father_name": "Richard Doe",
    "designation": "Software Engineer",
    "department": "Engineering",
    "location": "Bengaluru",
    "address": "221B Baker Street, Bengaluru 560001",
    "joining_date": date(2026, 1, 1),
    "offer_ref_code": "OFF-00001",
    "valid_until": date(2026, 1, 1),
    "probation_months": 3,
    "notice_period_days": 30,
    "working_days": "Monday to Friday",
    "working_hours": "9:00 AM to 6:00 PM",
}

PREVIEW_SALARY = {
    "earnings": [
        {"label": "Basic", "annual": "600000"},
        {"label": "HRA", "annual": "240000"},
        {"label": "Special Allowance", "annual": "160000"},
    ],
    "deductions": [
        {"label": "Professional Tax", "annual": "2400"},
        {"label": "PF", "annual": "21600"},
    ],
    "employer_benefits": [
        {"label": "Employer PF", "annual": "21600"},
    ],
}


def epoch_millis() -> int:
    return int(time.time() * 1000)


def _parse_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if is_present(value):
        try:
            return date.fromisoformat(str(value).strip())
        except ValueError:
            return None
    return None


class LetterService:
    """Offer/joining letter generation for one tenant."""

    def __init__(
        self,
        tenant_id: int,
        storage: Optional[FileStorageService] = None,
        converter: Optional[DocumentConverter] = None,
    ):
        """
        Args:
            tenant_id: Tenant ID for multi-tenant isolation
            storage: File store (defaults to the configured uploads root)
            converter: PDF converter (defaults to LibreOffice from settings)
        """
        self.tenant_id = tenant_id
        self.storage = storage or FileStorageService()
        self.converter = converter or get_converter()
        self.templates = LetterTemplateService(tenant_id, storage=self.storage)
        self.salary = SalaryService(tenant_id)
        self.company = CompanyProfileService(tenant_id)

    # ==================== Entity data ====================

    def _get_application(self, application_id: int) -> Application:
        application = db.session.scalar(
            select(Application).where(and_(
                Application.id == application_id,
                Application.tenant_id == self.tenant_id,
            ))
        )
        if not application:
            raise NotFoundError(f"Application {application_id} not found")
        return application

    def applicant_values(self, application: Application) -> Dict[str, Any]:
        """Flat entity values read by the placeholder fields."""
        offer = db.session.get(Offer, application.offer_id) if application.offer_id else None
        info = application.candidate_info or {}

        values = dict(self.company.placeholder_values())
        values.update({
            "name": application.applicant_name,
            "father_name": application.father_name or info.get("father_name"),
            "designation": (offer.designation if offer else None) or application.designation,
            "job_title": application.job.title if application.job else None,
            "current_designation": info.get("current_designation"),
            "department": (offer.department if offer else None) or application.department,
            "location": (offer.location if offer else None) or application.location,
            "address": application.address or info.get("address"),
            "joining_date": application.joining_date or (offer.joining_date if offer else None),
            "offer_ref_code": application.offer_ref_code or (offer.offer_code if offer else None),
        })
        if offer is not None:
            values.update({
                "valid_until": offer.valid_until,
                "probation_months": offer.probation_months,
                "notice_period_days": offer.notice_period_days,
                "working_days": offer.working_days,
                "working_hours": offer.working_hours,
            })
        return values

    def _salary_breakdown(self, application: Application) -> Optional[SalaryBreakdown]:
        snapshot = self.salary.snapshot_for_letters(application)
        return SalaryBreakdown.from_record(snapshot) if snapshot is not None else None

    # ==================== Rendering ====================

    def _render_source(
        self,
        template: LetterTemplate,
        values: Dict[str, str],
        salary_rows: Optional[list],
        target_base: str,
    ) -> str:
        """Render a template into target_base + .docx/.html and return that path."""
        if template.is_word:
            template_path = self.storage.resolve_template_path(template.file_path)
            content = render_docx(self.storage.read(template_path), values, salary_rows)
            return self.storage.write(f"{target_base}.docx", content)

        if not is_present(template.body_content):
            raise DataIncomplete(
                f"Template {template.id} has no body content",
                code="TEMPLATE_SOURCE_MISSING",
                details={"template_id": template.id},
            )
        content = render_html(template.body_content, values, salary_rows)
        return self.storage.write(f"{target_base}.html", content.encode("utf-8"))

    def _convert(self, source_path: str, output_dir: str) -> str:
        pdf_path = self.converter.convert(source_path, output_dir)
        if not self.storage.exists(pdf_path):
            raise ConversionFailure(
                f"PDF was not produced for {os.path.basename(source_path)}",
                details={"expected_output": pdf_path},
            )
        return pdf_path

    def _generate(
        self,
        application: Application,
        template: LetterTemplate,
        letter_type: str,
        values: Dict[str, str],
        salary_rows: Optional[list],
        actor: Optional[str],
    ) -> GeneratedLetter:
        self.storage.ensure_dirs()
        base = self.storage.letters_dir / f"{FILE_PREFIXES[letter_type]}_{application.id}_{epoch_millis()}"

        started = time.monotonic()
        source_path = self._render_source(template, values, salary_rows, str(base))
        pdf_path = self._convert(source_path, str(self.storage.letters_dir))
        logger.info(
            f"Rendered {letter_type} letter for application {application.id} "
            f"in {time.monotonic() - started:.2f}s: {os.path.basename(pdf_path)}"
        )

        download_url = self.storage.url_for(pdf_path)
        letter = GeneratedLetter(
            tenant_id=self.tenant_id,
            application_id=application.id,
            template_id=template.id,
            letter_type=letter_type,
            template_type=template.template_type,
            docx_path=self.storage.relative_path(source_path),
            pdf_path=self.storage.relative_path(pdf_path),
            pdf_url=download_url,
            generated_by=actor,
            snapshot_data=dict(values),
        )
        db.session.add(letter)
        return letter

    def _result(self, letter: GeneratedLetter, application: Application, values: Dict[str, str]) -> Dict[str, Any]:
        return {
            "letter": letter.to_dict(),
            "application_id": application.id,
            "download_url": letter.pdf_url,
            "pdf_path": letter.pdf_path,
            "placeholders": values,
        }

    # ==================== Offer letter ====================

    def generate_offer_letter(
        self,
        application_id: int,
        template_id: int,
        overrides: Optional[Dict[str, Any]] = None,
        actor: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Render an offer letter PDF for an application.

        The values used for offer_ref_code, joining_date, address, location
        and father_name are written back to the application once the PDF
        exists.

        Raises:
            NotFoundError: Application or template not found
            PreconditionNotMet: Template is not an offer template
            FileNotFound: Template file missing from every candidate path
            ConversionFailure / ConversionTimeout: PDF conversion failed
        """
        overrides = overrides or {}
        application = self._get_application(application_id)
        template = self.templates.get_template(template_id)
        self.templates.ensure_letter_type(template, LetterType.OFFER)

        breakdown = self._salary_breakdown(application)
        values = map_to_placeholders(
            self.applicant_values(application),
            overrides,
            breakdown,
            letter_type=LetterType.OFFER,
            grouping=settings.currency_grouping,
        )

        salary_rows = None
        if breakdown is not None and SALARY_TABLE_TOKEN in (template.placeholders or []):
            salary_rows = self._salary_rows(breakdown)

        letter = self._generate(
            application, template, LetterType.OFFER, values, salary_rows, actor
        )

        application.offer_letter_path = letter.pdf_path
        if is_present(values.get("offer_ref_code")):
            application.offer_ref_code = values["offer_ref_code"]
        joining_date = _parse_date(overrides.get("joining_date"))
        if joining_date:
            application.joining_date = joining_date
        for field in ("address", "location", "father_name"):
            if is_present(overrides.get(field)):
                setattr(application, field, str(overrides[field]).strip())

        db.session.commit()
        logger.info(f"Offer letter {letter.id} generated for application {application.id}")
        return self._result(letter, application, values)

    # ==================== Joining letter ====================

    def generate_joining_letter(
        self,
        application_id: int,
        template_id: int,
        overrides: Optional[Dict[str, Any]] = None,
        actor: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Render a joining letter PDF, with the salary table, for an application.

        Raises:
            NotFoundError: Application or template not found
            PreconditionNotMet: No offer letter yet (OFFER_LETTER_REQUIRED) or
                template is not a joining template (TEMPLATE_TYPE_MISMATCH)
            DataIncomplete: No salary snapshot (SALARY_SNAPSHOT_REQUIRED)
            FileNotFound: Template file missing from every candidate path
            ConversionFailure / ConversionTimeout: PDF conversion failed
        """
        overrides = overrides or {}
        application = self._get_application(application_id)

        if not is_present(application.offer_letter_path):
            raise PreconditionNotMet(
                "Generate the offer letter before the joining letter",
                code="OFFER_LETTER_REQUIRED",
                details={"application_id": application.id},
            )

        template = self.templates.get_template(template_id)
        self.templates.ensure_letter_type(template, LetterType.JOINING)

        breakdown = self._salary_breakdown(application)
        if breakdown is None:
            raise DataIncomplete(
                "Salary must be assigned before generating the joining letter",
                code="SALARY_SNAPSHOT_REQUIRED",
                details={"application_id": application.id},
            )

        values = map_to_placeholders(
            self.applicant_values(application),
            overrides,
            breakdown,
            letter_type=LetterType.JOINING,
            grouping=settings.currency_grouping,
        )

        letter = self._generate(
            application, template, LetterType.JOINING, values, self._salary_rows(breakdown), actor
        )
        application.joining_letter_path = letter.pdf_path

        db.session.commit()
        logger.info(f"Joining letter {letter.id} generated for application {application.id}")
        return self._result(letter, application, values)

    def _salary_rows(self, breakdown: SalaryBreakdown) -> list:
        return build_salary_rows(
            breakdown.earnings,
            breakdown.deductions,
            breakdown.employer_benefits,
            breakdown.totals,
            grouping=settings.currency_grouping,
        )

    # ==================== Preview ====================

    def _template_mtime(self, template: LetterTemplate) -> float:
        if template.is_word:
            return self.storage.mtime(self.storage.resolve_template_path(template.file_path))
        changed = template.updated_at or template.created_at
        return changed.replace(tzinfo=timezone.utc).timestamp()

    def preview_template(self, template_id: int) -> str:
        """
        Render a template with sample data to previews/Preview_{id}.pdf.

        Conversion is skipped while the existing preview is at least as new as
        the template source.

        Returns:
            Absolute path of the preview PDF
        """
        template = self.templates.get_template(template_id)
        self.storage.ensure_dirs()

        pdf_path = self.storage.previews_dir / f"Preview_{template.id}.pdf"
        source_mtime = self._template_mtime(template)
        if self.storage.exists(str(pdf_path)) and self.storage.mtime(str(pdf_path)) >= source_mtime:
            logger.debug(f"Preview for template {template.id} is fresh, skipping conversion")
            return str(pdf_path)

        breakdown = SalaryBreakdown.from_components(**PREVIEW_SALARY)
        values = map_to_placeholders(
            {**PREVIEW_APPLICANT, **self.company.placeholder_values()},
            None,
            breakdown,
            letter_type=template.letter_type,
            grouping=settings.currency_grouping,
        )
        salary_rows = None
        if template.letter_type == LetterType.JOINING or SALARY_TABLE_TOKEN in (template.placeholders or []):
            salary_rows = self._salary_rows(breakdown)

        base = self.storage.previews_dir / f"Preview_{template.id}"
        source_path = self._render_source(template, values, salary_rows, str(base))
        result = self._convert(source_path, str(self.storage.previews_dir))
        logger.info(f"Preview generated for template {template.id}")
        return result

    def preview_joining_letter(
        self,
        application_id: int,
        template_id: int,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Render a joining letter for a real application into previews/.

        Unlike generate_joining_letter this needs no offer letter, writes
        Preview_Joining_{applicationId}_{ms}.pdf and records nothing.

        Returns:
            Absolute path of the preview PDF

        Raises:
            NotFoundError: Application or template not found
            PreconditionNotMet: Template is not a WORD joining template
            DataIncomplete: No salary snapshot (SALARY_SNAPSHOT_REQUIRED)
            FileNotFound: Template file missing from every candidate path
            ConversionFailure / ConversionTimeout: PDF conversion failed
        """
        application = self._get_application(application_id)
        template = self.templates.get_template(template_id)
        self.templates.ensure_letter_type(template, LetterType.JOINING)
        if not template.is_word:
            raise PreconditionNotMet(
                "Joining letter previews need a WORD template",
                code="TEMPLATE_TYPE_MISMATCH",
                details={"template_id": template.id, "template_type": template.template_type},
            )

        breakdown = self._salary_breakdown(application)
        if breakdown is None:
            raise DataIncomplete(
                "Salary must be assigned before previewing the joining letter",
                code="SALARY_SNAPSHOT_REQUIRED",
                details={"application_id": application.id},
            )

        values = map_to_placeholders(
            self.applicant_values(application),
            overrides,
            breakdown,
            letter_type=LetterType.JOINING,
            grouping=settings.currency_grouping,
        )

        self.storage.ensure_dirs()
        base = self.storage.previews_dir / f"Preview_Joining_{application.id}_{epoch_millis()}"
        source_path = self._render_source(template, values, self._salary_rows(breakdown), str(base))
        result = self._convert(source_path, str(self.storage.previews_dir))
        logger.info(f"Joining letter preview generated for application {application.id}")
        return result

    # ==================== History ====================

    def history(self, application_id: int) -> List[GeneratedLetter]:
        """Generated letters for an application, newest first."""
        self._get_application(application_id)
        return list(db.session.scalars(
            select(GeneratedLetter)
            .where(and_(
                GeneratedLetter.tenant_id == self.tenant_id,
                GeneratedLetter.application_id == application_id,
            ))
            .order_by(GeneratedLetter.created_at.desc(), GeneratedLetter.id.desc())
        ))

    def get_letter_file(self, letter_id: int) -> Tuple[str, str]:
        """
        Returns:
            (absolute pdf path, download file name)

        Raises:
            NotFoundError: Letter record not found
            FileNotFound: Record exists but the PDF is gone
        """
        letter = db.session.scalar(
            select(GeneratedLetter).where(and_(
                GeneratedLetter.id == letter_id,
                GeneratedLetter.tenant_id == self.tenant_id,
            ))
        )
        if not letter:
            raise NotFoundError(f"Generated letter {letter_id} not found")
        path = self.storage.resolve_letter_path(letter.pdf_path)
        return path, os.path.basename(path)

    def get_letter_file_by_url_path(self, relative_path: str) -> Tuple[str, str]:
        """Resolve a ``download_url`` path (relative to the uploads root) for this tenant."""
        letter = db.session.scalar(
            select(GeneratedLetter).where(and_(
                GeneratedLetter.pdf_path == relative_path,
                GeneratedLetter.tenant_id == self.tenant_id,
            ))
        )
        if not letter:
            raise NotFoundError(f"Generated letter {relative_path} not found")
        path = self.storage.resolve_letter_path(letter.pdf_path)
        return path, os.path.basename(path)

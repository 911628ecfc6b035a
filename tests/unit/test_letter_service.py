"""Unit tests for letter templates and letter rendering."""

import io
import os
import time
from unittest.mock import Mock

import pytest
from docx import Document
from sqlalchemy import select, func
from werkzeug.datastructures import FileStorage

from app.exceptions import (
    ConversionTimeout,
    DataIncomplete,
    FileNotFound,
    NotFoundError,
    PreconditionNotMet,
)
from app.models import GeneratedLetter, LetterType, TemplateType
from app.services.company_profile_service import CompanyProfileService
from app.services.letter_render_service import LetterService
from app.services.letter_template_service import LetterTemplateService
from tests.helpers import TENANT_ID, OTHER_TENANT_ID, build_docx


def upload(content: bytes, filename: str = "template.docx") -> FileStorage:
    return FileStorage(stream=io.BytesIO(content), filename=filename)


def letter_count(db) -> int:
    return db.session.scalar(select(func.count(GeneratedLetter.id)))


@pytest.fixture
def templates(db, storage):
    return LetterTemplateService(TENANT_ID, storage=storage)


@pytest.fixture
def letters(db, storage, converter):
    return LetterService(TENANT_ID, storage=storage, converter=converter)


@pytest.fixture
def offer_template(templates):
    return templates.upload_word_template(
        upload(build_docx(
            "Ref: {{offer_ref_no}}",
            "Dear {{candidate_name}}, S/o {{father_name}}",
            "You will join as {{designation}} at {{location}} on {{joining_date}}.",
            "Annual CTC: {{annual_ctc}} {{not_a_known_token}}",
        ), "offer.docx"),
        letter_type=LetterType.OFFER,
        name="Standard offer",
    )


@pytest.fixture
def joining_template(templates):
    return templates.upload_word_template(
        upload(build_docx(
            "Dear {{employee_name}},",
            "Your compensation:",
            "{{salary_table}}",
        ), "joining.docx"),
        letter_type=LetterType.JOINING,
    )


@pytest.mark.unit
class TestLetterTemplates:
    """Tests for LetterTemplateService."""

    def test_upload_records_placeholders(self, offer_template, storage):
        assert offer_template.template_type == TemplateType.WORD
        assert offer_template.placeholders == sorted([
            "annual_ctc", "candidate_name", "designation", "father_name",
            "joining_date", "location", "not_a_known_token", "offer_ref_no",
        ])
        assert offer_template.file_path.startswith("templates/offer-template-")
        assert storage.resolve_template_path(offer_template.file_path)

    def test_unreadable_docx_is_still_stored(self, templates):
        """A document python-docx cannot parse gets an empty placeholder list."""
        template = templates.upload_word_template(upload(b"PK-not-really", "broken.docx"), LetterType.OFFER)

        assert template.placeholders == []

    def test_unknown_letter_type(self, templates):
        with pytest.raises(ValueError):
            templates.upload_word_template(upload(build_docx("x")), "relieving")

    def test_single_default_per_letter_type(self, templates, offer_template):
        second = templates.upload_word_template(
            upload(build_docx("{{employee_name}}")), LetterType.OFFER, is_default=True
        )
        templates.set_default(offer_template.id)

        assert templates.get_default(LetterType.OFFER).id == offer_template.id
        assert templates.get_template(second.id).is_default is False

    def test_html_template(self, templates):
        template = templates.create_html_template(
            "Pad", LetterType.OFFER, "<p>{{employee_name}} {{ location }}</p>", TemplateType.LETTER_PAD
        )

        assert template.placeholders == ["employee_name", "location"]

    def test_deleted_template_is_hidden(self, templates, offer_template):
        templates.delete_template(offer_template.id)

        with pytest.raises(NotFoundError):
            templates.get_template(offer_template.id)
        assert templates.list_templates(LetterType.OFFER) == []

    def test_templates_are_tenant_scoped(self, storage, offer_template):
        with pytest.raises(NotFoundError):
            LetterTemplateService(OTHER_TENANT_ID, storage=storage).get_template(offer_template.id)


@pytest.mark.unit
class TestOfferLetter:
    """Tests for generate_offer_letter."""

    def test_generates_pdf_and_updates_application(
        self, db, letters, converter, storage, offer_template, sample_application
    ):
        result = letters.generate_offer_letter(
            sample_application.id,
            offer_template.id,
            overrides={"offer_ref_code": "HR/2026/041", "address": "7 Residency Road", "joining_date": "2026-11-02"},
            actor="Priya",
        )

        filename = os.path.basename(result["pdf_path"])
        assert filename.startswith(f"Offer_Letter_{sample_application.id}_")
        assert filename.endswith(".pdf")
        assert result["download_url"] == f"/uploads/offers/{filename}"
        assert len(converter.calls) == 1

        assert sample_application.offer_letter_path == result["pdf_path"]
        assert sample_application.offer_ref_code == "HR/2026/041"
        assert sample_application.address == "7 Residency Road"
        assert sample_application.joining_date.isoformat() == "2026-11-02"
        assert letter_count(db) == 1
        assert result["letter"]["generated_by"] == "Priya"

    def test_rendered_document_content(self, letters, storage, offer_template, sample_application):
        """Entity values fill the template; unknown tokens render empty."""
        result = letters.generate_offer_letter(sample_application.id, offer_template.id)

        letter = result["letter"]
        docx_path = storage.root / letters.history(sample_application.id)[0].docx_path
        text = "\n".join(p.text for p in Document(str(docx_path)).paragraphs)
        assert "Dear Asha Rao, S/o Ravi Rao" in text
        assert "You will join as Software Engineer at Bengaluru" in text
        assert "{{" not in text
        assert letter["snapshot_data"]["candidate_name"] == "Asha Rao"

    def test_blank_override_keeps_entity_value(self, letters, offer_template, sample_application):
        result = letters.generate_offer_letter(
            sample_application.id, offer_template.id, overrides={"location": "  "}
        )

        assert result["placeholders"]["location"] == "Bengaluru"
        assert sample_application.location == "Bengaluru"

    def test_offer_salary_tokens(self, letters, offer_template, draft_offer, selected_application):
        result = letters.generate_offer_letter(selected_application.id, offer_template.id)

        assert result["placeholders"]["annual_ctc"] == "8,61,600"
        assert result["placeholders"]["offer_ref_no"] == draft_offer.offer_code

    def test_wrong_template_type(self, letters, joining_template, sample_application):
        with pytest.raises(PreconditionNotMet) as exc_info:
            letters.generate_offer_letter(sample_application.id, joining_template.id)

        assert exc_info.value.code == "TEMPLATE_TYPE_MISMATCH"

    def test_missing_template_file(self, db, letters, converter, storage, offer_template, sample_application):
        """Nothing is recorded when the template cannot be found on disk."""
        os.remove(storage.resolve_template_path(offer_template.file_path))

        with pytest.raises(FileNotFound) as exc_info:
            letters.generate_offer_letter(sample_application.id, offer_template.id)

        assert exc_info.value.candidates
        assert converter.calls == []
        assert letter_count(db) == 0
        assert sample_application.offer_letter_path is None

    def test_conversion_timeout(self, db, storage, offer_template, sample_application):
        """A converter timeout propagates as retryable and leaves no letter record."""
        converter = Mock()
        converter.convert.side_effect = ConversionTimeout("LibreOffice conversion timed out after 60 seconds")
        service = LetterService(TENANT_ID, storage=storage, converter=converter)

        with pytest.raises(ConversionTimeout) as exc_info:
            service.generate_offer_letter(sample_application.id, offer_template.id)

        assert exc_info.value.retryable is True
        assert letter_count(db) == 0
        assert sample_application.offer_letter_path is None

    def test_html_template_renders_html_source(self, letters, templates, sample_application):
        template = templates.create_html_template("Blank", LetterType.OFFER, "<p>Dear {{employee_name}}</p>")

        result = letters.generate_offer_letter(sample_application.id, template.id)

        assert result["letter"]["template_type"] == TemplateType.BLANK
        assert letters.history(sample_application.id)[0].docx_path.endswith(".html")


@pytest.mark.unit
class TestJoiningLetter:
    """Tests for generate_joining_letter."""

    def test_requires_offer_letter(self, letters, converter, joining_template, draft_offer, selected_application):
        with pytest.raises(PreconditionNotMet) as exc_info:
            letters.generate_joining_letter(selected_application.id, joining_template.id)

        assert exc_info.value.code == "OFFER_LETTER_REQUIRED"
        assert converter.calls == []

    def test_requires_salary_snapshot(self, letters, offer_template, joining_template, sample_application):
        letters.generate_offer_letter(sample_application.id, offer_template.id)

        with pytest.raises(DataIncomplete) as exc_info:
            letters.generate_joining_letter(sample_application.id, joining_template.id)

        assert exc_info.value.code == "SALARY_SNAPSHOT_REQUIRED"
        assert exc_info.value.status_code == 422

    def test_generates_joining_letter_with_salary_table(
        self, letters, storage, offer_template, joining_template, draft_offer, selected_application
    ):
        letters.generate_offer_letter(selected_application.id, offer_template.id)

        result = letters.generate_joining_letter(selected_application.id, joining_template.id, actor="Priya")

        assert result["download_url"]
        assert os.path.basename(result["pdf_path"]).startswith(f"Joining_Letter_{selected_application.id}_")
        assert selected_application.joining_letter_path == result["pdf_path"]

        history = letters.history(selected_application.id)
        assert [h.letter_type for h in history] == [LetterType.JOINING, LetterType.OFFER]

        document = Document(str(storage.root / history[0].docx_path))
        assert len(document.tables) == 1
        cells = [row.cells[0].text for row in document.tables[0].rows]
        assert "Basic" in cells
        assert "TOTAL CTC (A+C)" in cells

    def test_download_file(self, letters, offer_template, sample_application):
        result = letters.generate_offer_letter(sample_application.id, offer_template.id)

        path, name = letters.get_letter_file(result["letter"]["id"])

        assert os.path.exists(path)
        assert name == os.path.basename(result["pdf_path"])


@pytest.mark.unit
class TestPreview:
    """Tests for preview_template."""

    def test_fresh_preview_skips_conversion(self, letters, converter, storage, offer_template):
        first = letters.preview_template(offer_template.id)
        second = letters.preview_template(offer_template.id)

        assert first == second == str(storage.previews_dir / f"Preview_{offer_template.id}.pdf")
        assert len(converter.calls) == 1

    def test_changed_template_is_rerendered(self, letters, converter, storage, offer_template):
        letters.preview_template(offer_template.id)
        template_path = storage.resolve_template_path(offer_template.file_path)
        future = time.time() + 60
        os.utime(template_path, (future, future))

        letters.preview_template(offer_template.id)

        assert len(converter.calls) == 2


@pytest.mark.unit
class TestJoiningPreview:
    """Tests for preview_joining_letter."""

    def test_preview_needs_no_offer_letter(
        self, db, letters, converter, storage, joining_template, draft_offer, selected_application
    ):
        pdf_path = letters.preview_joining_letter(selected_application.id, joining_template.id)

        filename = os.path.basename(pdf_path)
        assert filename.startswith(f"Preview_Joining_{selected_application.id}_")
        assert filename.endswith(".pdf")
        assert os.path.dirname(pdf_path) == str(storage.previews_dir)
        assert letter_count(db) == 0
        assert selected_application.joining_letter_path is None

        document = Document(converter.calls[0])
        assert "Dear Asha Rao," in [p.text for p in document.paragraphs]
        assert len(document.tables) == 1

    def test_preview_requires_salary_snapshot(self, letters, converter, joining_template, sample_application):
        with pytest.raises(DataIncomplete) as exc_info:
            letters.preview_joining_letter(sample_application.id, joining_template.id)

        assert exc_info.value.code == "SALARY_SNAPSHOT_REQUIRED"
        assert converter.calls == []

    def test_preview_rejects_offer_template(self, letters, offer_template, draft_offer, selected_application):
        with pytest.raises(PreconditionNotMet) as exc_info:
            letters.preview_joining_letter(selected_application.id, offer_template.id)

        assert exc_info.value.code == "TEMPLATE_TYPE_MISMATCH"


@pytest.mark.unit
class TestCompanyPlaceholders:
    """Company profile values reach the letter placeholders."""

    def test_profile_values_fill_company_tokens(self, letters, offer_template, sample_application):
        CompanyProfileService(TENANT_ID).update_profile(
            company_name="Acme Technologies",
            address="Prestige Tower, Bengaluru",
            signatory_name="Meera Iyer",
        )

        result = letters.generate_offer_letter(sample_application.id, offer_template.id)

        assert result["placeholders"]["company_name"] == "Acme Technologies"
        assert result["placeholders"]["company_address"] == "Prestige Tower, Bengaluru"
        assert result["placeholders"]["signatory_name"] == "Meera Iyer"
        assert result["placeholders"]["signatory_designation"] == ""

    def test_override_beats_profile(self, letters, offer_template, sample_application):
        CompanyProfileService(TENANT_ID).update_profile(company_name="Acme Technologies")

        result = letters.generate_offer_letter(
            sample_application.id, offer_template.id, overrides={"company_name": "Acme India"}
        )

        assert result["placeholders"]["company_name"] == "Acme India"

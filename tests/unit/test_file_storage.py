"""Unit tests for FileStorageService."""

import io
import os

import pytest
from werkzeug.datastructures import FileStorage

from app.exceptions import FileNotFound, PreconditionNotMet
from app.services.file_storage import FileStorageService
from tests.helpers import build_docx


@pytest.fixture
def store(tmp_path):
    service = FileStorageService(root_path=str(tmp_path / "uploads"))
    service.ensure_dirs()
    return service


def upload(content: bytes, filename: str) -> FileStorage:
    return FileStorage(stream=io.BytesIO(content), filename=filename)


@pytest.mark.unit
class TestTemplatePathResolution:
    """Tests for template path candidates and resolution."""

    def test_absolute_path_has_three_candidates(self, store):
        candidates = store.template_path_candidates("/srv/old-host/templates/offer.docx")

        assert candidates == [
            "/srv/old-host/templates/offer.docx",
            str(store.root / "srv/old-host/templates/offer.docx"),
            str(store.templates_dir / "offer.docx"),
        ]

    def test_relative_path_candidates(self, store):
        candidates = store.template_path_candidates("legacy/offer.docx")

        assert candidates == [
            str(store.root / "legacy/offer.docx"),
            str(store.templates_dir / "offer.docx"),
        ]

    def test_backslashes_are_normalized(self, store):
        candidates = store.template_path_candidates("templates\\offer.docx")

        assert candidates == [str(store.templates_dir / "offer.docx")]

    def test_falls_back_to_basename_in_templates_dir(self, store):
        """A path recorded on another host still resolves by file name."""
        target = store.templates_dir / "offer-template-1.docx"
        target.write_bytes(b"docx")

        resolved = store.resolve_template_path("/var/app/uploads/templates/offer-template-1.docx")

        assert resolved == str(target)

    def test_missing_template_lists_every_candidate(self, store):
        with pytest.raises(FileNotFound) as exc_info:
            store.resolve_template_path("/srv/old-host/templates/missing.docx")

        error = exc_info.value
        assert len(error.candidates) == 3
        for candidate in error.candidates:
            assert candidate in error.message
        assert error.details["candidates"] == error.candidates
        assert error.infrastructure is True

    def test_empty_reference(self, store):
        with pytest.raises(FileNotFound):
            store.resolve_template_path(None)


@pytest.mark.unit
class TestTemplateUpload:
    """Tests for save_template."""

    def test_save_docx(self, store):
        content = build_docx("Dear {{employee_name}}")

        stored = store.save_template(upload(content, "Offer Letter.docx"), "offer")

        assert os.path.basename(stored["path"]).startswith("offer-template-")
        assert stored["path"].endswith(".docx")
        assert stored["original_filename"] == "Offer_Letter.docx"
        assert store.read(stored["path"]) == content

    def test_rejects_other_extensions(self, store):
        with pytest.raises(PreconditionNotMet) as exc_info:
            store.save_template(upload(b"hello", "offer.pdf"), "offer")

        assert exc_info.value.code == "INVALID_TEMPLATE_FILE"

    def test_rejects_empty_file(self, store):
        with pytest.raises(PreconditionNotMet):
            store.save_template(upload(b"", "offer.docx"), "offer")

    def test_rejects_oversized_file(self, tmp_path):
        store = FileStorageService(root_path=str(tmp_path), max_template_size_mb=1)

        with pytest.raises(PreconditionNotMet) as exc_info:
            store.save_template(upload(b"x" * (1024 * 1024 + 1), "big.docx"), "offer")

        assert "too large" in exc_info.value.message


@pytest.mark.unit
class TestLetterFiles:
    """Tests for generated letter access."""

    def test_url_and_relative_path(self, store):
        path = store.write(str(store.letters_dir / "Offer_Letter_3_1.pdf"), b"%PDF")

        assert store.url_for(path) == "/uploads/offers/Offer_Letter_3_1.pdf"
        assert store.relative_path(path) == "offers/Offer_Letter_3_1.pdf"
        assert store.resolve_letter_path("offers/Offer_Letter_3_1.pdf") == str(store.letters_dir / "Offer_Letter_3_1.pdf")

    def test_read_missing_file(self, store):
        with pytest.raises(FileNotFound):
            store.read(str(store.root / "nope.pdf"))

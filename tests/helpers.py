"""Shared test data and doubles."""

import io
import os
from pathlib import Path

import jwt
from docx import Document

from config.testing import TestingConfig

TENANT_ID = 1
OTHER_TENANT_ID = 2

SAMPLE_SALARY = {
    "earnings": [
        {"label": "Basic", "annual": "600000"},
        {"label": "HRA", "annual": "240000"},
    ],
    "deductions": [
        {"label": "PF", "annual": "21600"},
    ],
    "employer_benefits": [
        {"label": "Employer PF", "annual": "21600"},
    ],
}


class FakeConverter:
    """Stands in for LibreOffice: writes a small PDF next to the requested output."""

    def __init__(self):
        self.calls = []

    def convert(self, input_path: str, output_dir: str) -> str:
        self.calls.append(input_path)
        os.makedirs(output_dir, exist_ok=True)
        pdf_path = os.path.abspath(
            os.path.join(output_dir, Path(input_path).stem + ".pdf")
        )
        with open(pdf_path, "wb") as f:
            f.write(b"%PDF-1.4\n% test\n")
        return pdf_path


def build_docx(*paragraphs: str) -> bytes:
    """A .docx with one paragraph per argument."""
    document = Document()
    for text in paragraphs:
        document.add_paragraph(text)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def make_token(tenant_id: int = TENANT_ID, user_id: int = 7, role: str = "HR_MANAGER",
               name: str = "Test Recruiter") -> str:
    return jwt.encode(
        {"tenant_id": tenant_id, "user_id": user_id, "role": role, "name": name},
        TestingConfig.SECRET_KEY,
        algorithm="HS256",
    )

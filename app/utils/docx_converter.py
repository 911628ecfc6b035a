"""
Document to PDF Converter
Runs LibreOffice headless to turn rendered .docx/.html letters into PDF.
"""
import logging
import os
import shutil
import subprocess
from typing import Optional

from app.exceptions import ConversionFailure, ConversionTimeout

logger = logging.getLogger(__name__)

LIBREOFFICE_BINARIES = ("libreoffice", "soffice")

# Writer export filter; needed so .html input is not routed to the web filter
PDF_FILTER = "pdf:writer_pdf_Export"


class DocumentConverter:
    """
    Convert a document to PDF with LibreOffice.

    The call blocks until the child process exits or the timeout elapses; on
    timeout the child is killed and ConversionTimeout is raised so callers can
    retry.
    """

    def __init__(self, binary: Optional[str] = None, timeout: int = 60):
        """
        Args:
            binary: Explicit soffice/libreoffice path. Discovered on PATH when empty.
            timeout: Seconds before the conversion is abandoned
        """
        self.binary = binary or None
        self.timeout = timeout

    def find_binary(self) -> Optional[str]:
        """Resolve the LibreOffice executable, or None when not installed."""
        if self.binary:
            return self.binary if os.path.exists(self.binary) else shutil.which(self.binary)
        for name in LIBREOFFICE_BINARIES:
            found = shutil.which(name)
            if found:
                return found
        return None

    def is_available(self) -> bool:
        return self.find_binary() is not None

    def convert(self, input_path: str, output_dir: str) -> str:
        """
        Convert a file to PDF.

        Args:
            input_path: Rendered .docx or .html file
            output_dir: Directory for the PDF (created if missing)

        Returns:
            Absolute path of the PDF, named after the input file

        Raises:
            ConversionFailure: Binary missing, non-zero exit, or no output produced
            ConversionTimeout: Conversion exceeded the timeout
        """
        if not os.path.exists(input_path):
            raise ConversionFailure(f"Input file not found: {input_path}", code="CONVERSION_INPUT_MISSING")

        binary = self.find_binary()
        if not binary:
            raise ConversionFailure(
                "LibreOffice not found. Install with:\n"
                "  Ubuntu/Debian: sudo apt-get install libreoffice\n"
                "  Mac: brew install --cask libreoffice",
                code="CONVERTER_NOT_INSTALLED",
            )

        os.makedirs(output_dir, exist_ok=True)
        cmd = [
            binary,
            "--headless",
            "--convert-to", PDF_FILTER,
            "--outdir", output_dir,
            input_path,
        ]
        logger.debug(f"Running LibreOffice command: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ConversionTimeout(
                f"LibreOffice conversion timed out after {self.timeout} seconds",
                details={"input_path": input_path, "timeout": self.timeout},
            ) from e
        except OSError as e:
            raise ConversionFailure(
                f"LibreOffice could not be started: {e}",
                details={"input_path": input_path},
            ) from e

        if result.returncode != 0:
            raise ConversionFailure(
                f"LibreOffice conversion failed with code {result.returncode}\n"
                f"STDOUT: {result.stdout}\n"
                f"STDERR: {result.stderr}",
                details={"input_path": input_path, "returncode": result.returncode},
            )

        pdf_path = os.path.abspath(os.path.join(
            output_dir,
            os.path.splitext(os.path.basename(input_path))[0] + ".pdf",
        ))
        if not os.path.exists(pdf_path):
            raise ConversionFailure(
                f"Conversion completed but output file not found: {pdf_path}\n"
                f"STDOUT: {result.stdout}\n"
                f"STDERR: {result.stderr}",
                details={"input_path": input_path, "expected_output": pdf_path},
            )

        logger.info(f"Converted {os.path.basename(input_path)} to PDF: {pdf_path}")
        return pdf_path


def get_converter() -> DocumentConverter:
    """Converter configured from application settings."""
    from config.settings import settings

    return DocumentConverter(
        binary=settings.libreoffice_binary,
        timeout=settings.conversion_timeout_seconds,
    )

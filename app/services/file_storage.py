"""
File Storage Service
Local filesystem store for letter templates and generated letters.

Layout under the uploads root:
    templates/   uploaded .docx templates
    offers/      rendered letters (.docx working copies and .pdf output)
    previews/    Preview_* renders of templates

Writers only create new, uniquely named files; nothing is modified in place.
"""
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from flask import current_app, has_app_context
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from app.exceptions import FileNotFound, PreconditionNotMet
from config.settings import settings

logger = logging.getLogger(__name__)


class FileStorageService:
    """Byte-addressable local store with template path resolution."""

    URL_PREFIX = "/uploads"

    def __init__(
        self,
        root_path: Optional[str] = None,
        templates_dir: Optional[str] = None,
        letters_subdir: Optional[str] = None,
        previews_subdir: Optional[str] = None,
        max_template_size_mb: Optional[int] = None,
    ):
        """Initialize storage. Missing arguments fall back to Flask config, then settings."""
        self.root = Path(root_path or self._config("STORAGE_LOCAL_PATH", settings.storage_local_path)).resolve()
        self.templates_dir = Path(
            templates_dir
            or self._config("LETTER_TEMPLATES_DIR", settings.letter_templates_dir)
            or self.root / "templates"
        ).resolve()
        self.letters_subdir = letters_subdir or self._config(
            "GENERATED_LETTERS_SUBDIR", settings.generated_letters_subdir
        )
        self.previews_subdir = previews_subdir or self._config(
            "LETTER_PREVIEWS_SUBDIR", settings.letter_previews_subdir
        )
        max_mb = max_template_size_mb or self._config("MAX_TEMPLATE_SIZE_MB", settings.max_template_size_mb)
        self.max_template_bytes = int(max_mb) * 1024 * 1024

    @staticmethod
    def _config(key: str, default: Any) -> Any:
        if has_app_context():
            return current_app.config.get(key) or default
        return default

    # ==================== Directories ====================

    @property
    def letters_dir(self) -> Path:
        return self.root / self.letters_subdir

    @property
    def previews_dir(self) -> Path:
        return self.root / self.previews_subdir

    def ensure_dirs(self) -> None:
        for directory in (self.root, self.templates_dir, self.letters_dir, self.previews_dir):
            directory.mkdir(parents=True, exist_ok=True)

    # ==================== Byte access ====================

    def exists(self, path: str) -> bool:
        return bool(path) and os.path.isfile(path)

    def read(self, path: str) -> bytes:
        if not self.exists(path):
            raise FileNotFound(f"File not found: {path}", candidates=[str(path)])
        with open(path, "rb") as f:
            return f.read()

    def write(self, path: str, content: bytes) -> str:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "wb") as f:
            f.write(content)
        logger.debug(f"Wrote {len(content)} bytes to {target}")
        return str(target)

    def mtime(self, path: str) -> float:
        return os.path.getmtime(path)

    # ==================== Path resolution ====================

    def template_path_candidates(self, stored_path: str) -> list[str]:
        """
        Paths tried for a stored template reference, in order:
        as-given absolute path, relative to the uploads root, basename under
        the templates directory.
        """
        candidates = []
        normalized = str(stored_path).replace("\\", "/").strip()
        if os.path.isabs(normalized):
            candidates.append(os.path.normpath(normalized))
        candidates.append(str(self.root / normalized.lstrip("/")))
        candidates.append(str(self.templates_dir / os.path.basename(normalized)))

        unique = []
        for candidate in candidates:
            if candidate not in unique:
                unique.append(candidate)
        return unique

    def resolve_template_path(self, stored_path: Optional[str]) -> str:
        """
        Resolve a template reference to an existing file.

        Raises:
            FileNotFound: None of the candidates exist; lists every path tried
        """
        if not stored_path:
            raise FileNotFound("Template has no file path", candidates=[])

        candidates = self.template_path_candidates(stored_path)
        for candidate in candidates:
            if self.exists(candidate):
                return candidate

        raise FileNotFound(
            f"Template file not found. Tried: {', '.join(candidates)}",
            candidates=candidates,
        )

    def resolve_letter_path(self, stored_path: Optional[str]) -> str:
        """Resolve a generated letter reference (absolute or relative to the root)."""
        if not stored_path:
            raise FileNotFound("Letter has no file path", candidates=[])
        candidates = []
        if os.path.isabs(stored_path):
            candidates.append(stored_path)
        candidates.append(str(self.root / stored_path.lstrip("/")))
        candidates.append(str(self.letters_dir / os.path.basename(stored_path)))
        for candidate in candidates:
            if self.exists(candidate):
                return candidate
        raise FileNotFound(
            f"Letter file not found. Tried: {', '.join(candidates)}",
            candidates=candidates,
        )

    def url_for(self, path: str) -> str:
        """Public URL for a file under the uploads root."""
        relative = Path(path).resolve().relative_to(self.root)
        return f"{self.URL_PREFIX}/{relative.as_posix()}"

    def relative_path(self, path: str) -> str:
        return Path(path).resolve().relative_to(self.root).as_posix()

    # ==================== Template uploads ====================

    def validate_template_upload(self, file: FileStorage) -> Dict[str, Any]:
        """
        Validate an uploaded Word template.

        Raises:
            PreconditionNotMet: Missing file, wrong extension, empty or too large
        """
        if not file or not file.filename:
            raise PreconditionNotMet("No template file provided", code="INVALID_TEMPLATE_FILE")

        filename = secure_filename(file.filename) or file.filename
        if not filename.lower().endswith(".docx"):
            raise PreconditionNotMet(
                "Only .docx templates are supported",
                code="INVALID_TEMPLATE_FILE",
                details={"filename": file.filename},
            )

        file.seek(0, os.SEEK_END)
        size = file.tell()
        file.seek(0)
        if size == 0:
            raise PreconditionNotMet("Template file is empty", code="INVALID_TEMPLATE_FILE")
        if size > self.max_template_bytes:
            max_mb = self.max_template_bytes / (1024 * 1024)
            raise PreconditionNotMet(
                f"Template too large ({size / (1024 * 1024):.2f}MB). Maximum: {max_mb}MB",
                code="INVALID_TEMPLATE_FILE",
            )
        return {"filename": filename, "file_size": size}

    def save_template(self, file: FileStorage, letter_type: str) -> Dict[str, Any]:
        """Store an uploaded template as {type}-template-{ts}.docx."""
        info = self.validate_template_upload(file)
        content = file.read()

        timestamp = int(datetime.now(timezone.utc).timestamp() * 1000)
        target = self.templates_dir / f"{letter_type}-template-{timestamp}.docx"
        self.write(str(target), content)

        logger.info(f"Stored {letter_type} template {info['filename']} at {target}")
        return {
            "path": str(target),
            "original_filename": info["filename"],
            "file_size": info["file_size"],
            "content": content,
        }

"""
Letter Template Service
Upload, list and manage offer/joining letter templates.
"""
import logging
from typing import Optional, List

from sqlalchemy import select, and_, update
from werkzeug.datastructures import FileStorage

from app import db
from app.exceptions import NotFoundError, PreconditionNotMet
from app.models.letter_template import LetterTemplate, LetterType, TemplateType
from app.services.file_storage import FileStorageService
from app.utils.docx_placeholders import extract_placeholders, extract_placeholders_from_text

logger = logging.getLogger(__name__)


class LetterTemplateService:
    """Tenant-scoped letter templates."""

    def __init__(self, tenant_id: int, storage: Optional[FileStorageService] = None):
        self.tenant_id = tenant_id
        self.storage = storage or FileStorageService()

    def _check_letter_type(self, letter_type: str) -> None:
        if letter_type not in LetterType.all():
            raise ValueError(f"letter_type must be one of {LetterType.all()}")

    def upload_word_template(
        self,
        file: FileStorage,
        letter_type: str,
        name: Optional[str] = None,
        is_default: bool = False,
        created_by: Optional[str] = None,
    ) -> LetterTemplate:
        """
        Store a .docx template and record the tokens it contains.

        A document python-docx cannot open is still stored, with an empty
        placeholder list.

        Raises:
            ValueError: Unknown letter type
            PreconditionNotMet: Not a usable .docx upload (INVALID_TEMPLATE_FILE)
        """
        self._check_letter_type(letter_type)
        stored = self.storage.save_template(file, letter_type)
        placeholders = sorted(extract_placeholders(stored["content"]))

        template = LetterTemplate(
            tenant_id=self.tenant_id,
            name=name or stored["original_filename"],
            letter_type=letter_type,
            template_type=TemplateType.WORD,
            file_path=self.storage.relative_path(stored["path"]),
            original_filename=stored["original_filename"],
            placeholders=placeholders,
            created_by=created_by,
        )
        db.session.add(template)
        db.session.flush()
        if is_default:
            self._clear_default(letter_type, keep_id=template.id)
            template.is_default = True
        db.session.commit()

        logger.info(
            f"Uploaded {letter_type} template {template.id} with {len(placeholders)} placeholders"
        )
        return template

    def create_html_template(
        self,
        name: str,
        letter_type: str,
        body_content: str,
        template_type: str = TemplateType.BLANK,
        is_default: bool = False,
        created_by: Optional[str] = None,
    ) -> LetterTemplate:
        """Create a BLANK or LETTER_PAD template from an HTML body."""
        self._check_letter_type(letter_type)
        if template_type not in TemplateType.html():
            raise ValueError(f"template_type must be one of {TemplateType.html()}")

        template = LetterTemplate(
            tenant_id=self.tenant_id,
            name=name,
            letter_type=letter_type,
            template_type=template_type,
            body_content=body_content,
            placeholders=sorted(extract_placeholders_from_text(body_content or "")),
            created_by=created_by,
        )
        db.session.add(template)
        db.session.flush()
        if is_default:
            self._clear_default(letter_type, keep_id=template.id)
            template.is_default = True
        db.session.commit()

        logger.info(f"Created {template_type} {letter_type} template {template.id}")
        return template

    def get_template(self, template_id: int, active_only: bool = True) -> LetterTemplate:
        conditions = [LetterTemplate.id == template_id, LetterTemplate.tenant_id == self.tenant_id]
        if active_only:
            conditions.append(LetterTemplate.is_active.is_(True))
        template = db.session.scalar(select(LetterTemplate).where(and_(*conditions)))
        if not template:
            raise NotFoundError(f"Letter template {template_id} not found")
        return template

    def list_templates(self, letter_type: Optional[str] = None) -> List[LetterTemplate]:
        query = select(LetterTemplate).where(and_(
            LetterTemplate.tenant_id == self.tenant_id,
            LetterTemplate.is_active.is_(True),
        ))
        if letter_type:
            query = query.where(LetterTemplate.letter_type == letter_type)
        return list(db.session.scalars(
            query.order_by(LetterTemplate.is_default.desc(), LetterTemplate.created_at.desc())
        ))

    def update_template(
        self,
        template_id: int,
        name: Optional[str] = None,
        is_default: Optional[bool] = None,
    ) -> LetterTemplate:
        """Update template metadata. The template source itself is immutable."""
        template = self.get_template(template_id)
        if name:
            template.name = name
        if is_default is True:
            self._clear_default(template.letter_type, keep_id=template.id)
            template.is_default = True
        elif is_default is False:
            template.is_default = False
        db.session.commit()
        return template

    def delete_template(self, template_id: int) -> None:
        """Deactivate a template; generated letters keep referring to it."""
        template = self.get_template(template_id)
        template.is_active = False
        template.is_default = False
        db.session.commit()
        logger.info(f"Deactivated letter template {template_id}")

    def set_default(self, template_id: int) -> LetterTemplate:
        template = self.get_template(template_id)
        self._clear_default(template.letter_type, keep_id=template.id)
        template.is_default = True
        db.session.commit()
        return template

    def get_default(self, letter_type: str) -> LetterTemplate:
        template = db.session.scalar(
            select(LetterTemplate).where(and_(
                LetterTemplate.tenant_id == self.tenant_id,
                LetterTemplate.letter_type == letter_type,
                LetterTemplate.is_active.is_(True),
                LetterTemplate.is_default.is_(True),
            ))
        )
        if not template:
            raise NotFoundError(f"No default {letter_type} template configured")
        return template

    def _clear_default(self, letter_type: str, keep_id: int) -> None:
        db.session.execute(
            update(LetterTemplate)
            .where(and_(
                LetterTemplate.tenant_id == self.tenant_id,
                LetterTemplate.letter_type == letter_type,
                LetterTemplate.id != keep_id,
            ))
            .values(is_default=False)
        )

    def ensure_letter_type(self, template: LetterTemplate, letter_type: str) -> None:
        """
        Raises:
            PreconditionNotMet: Template is for a different letter (TEMPLATE_TYPE_MISMATCH)
        """
        if template.letter_type != letter_type:
            raise PreconditionNotMet(
                f"Template {template.id} is a {template.letter_type} letter template, not {letter_type}",
                code="TEMPLATE_TYPE_MISMATCH",
                details={"template_letter_type": template.letter_type, "requested": letter_type},
            )

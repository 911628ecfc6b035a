"""
Letter Template Model
Offer/joining letter templates. WORD templates are .docx files on disk;
BLANK and LETTER_PAD templates carry an HTML body instead.
"""
from sqlalchemy import String, Integer, Text, Boolean, Index

from app import db
from app.models import BaseModel


class LetterType:
    OFFER = "offer"
    JOINING = "joining"

    @classmethod
    def all(cls) -> list[str]:
        return [cls.OFFER, cls.JOINING]


class TemplateType:
    WORD = "WORD"
    BLANK = "BLANK"
    LETTER_PAD = "LETTER_PAD"

    @classmethod
    def all(cls) -> list[str]:
        return [cls.WORD, cls.BLANK, cls.LETTER_PAD]

    @classmethod
    def html(cls) -> list[str]:
        return [cls.BLANK, cls.LETTER_PAD]


class LetterTemplate(BaseModel):
    """Stored template. Placeholders are extracted once at upload time."""

    __tablename__ = "letter_templates"

    tenant_id = db.Column(Integer, nullable=False, index=True)
    name = db.Column(String(200), nullable=False)
    letter_type = db.Column(String(20), nullable=False)
    template_type = db.Column(String(20), nullable=False, default=TemplateType.WORD)

    file_path = db.Column(String(500))
    original_filename = db.Column(String(255))
    body_content = db.Column(Text)
    placeholders = db.Column(db.JSON, nullable=False, default=list)

    is_default = db.Column(Boolean, nullable=False, default=False)
    is_active = db.Column(Boolean, nullable=False, default=True)
    created_by = db.Column(String(255))

    __table_args__ = (
        Index("idx_letter_template_tenant_type", "tenant_id", "letter_type", "is_active"),
    )

    @property
    def is_word(self) -> bool:
        return self.template_type == TemplateType.WORD

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            "tenant_id": self.tenant_id,
            "name": self.name,
            "letter_type": self.letter_type,
            "template_type": self.template_type,
            "file_path": self.file_path,
            "original_filename": self.original_filename,
            "body_content": self.body_content,
            "placeholders": self.placeholders or [],
            "is_default": self.is_default,
            "is_active": self.is_active,
            "created_by": self.created_by,
        })
        return data

    def __repr__(self):
        return f"<LetterTemplate {self.name!r} {self.letter_type}/{self.template_type}>"

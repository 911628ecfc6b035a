"""
Letter schemas for request validation.
"""
from typing import Optional, Dict, Any
from pydantic import BaseModel, EmailStr, Field, field_validator

from app.models.letter_template import LetterType, TemplateType


class LetterTemplateUploadSchema(BaseModel):
    """Form fields sent alongside a .docx upload."""

    letter_type: str
    name: Optional[str] = Field(None, max_length=200)
    is_default: bool = False

    @field_validator("letter_type")
    @classmethod
    def validate_letter_type(cls, v: str) -> str:
        v = v.lower()
        if v not in LetterType.all():
            raise ValueError(f"letter_type must be one of: {', '.join(LetterType.all())}")
        return v


class HtmlTemplateCreateSchema(LetterTemplateUploadSchema):
    """Schema for a BLANK or LETTER_PAD template with an HTML body."""

    name: str = Field(..., min_length=1, max_length=200)
    body_content: str = Field(..., min_length=1)
    template_type: str = Field(default=TemplateType.BLANK)

    @field_validator("template_type")
    @classmethod
    def validate_template_type(cls, v: str) -> str:
        if v not in TemplateType.html():
            raise ValueError(f"template_type must be one of: {', '.join(TemplateType.html())}")
        return v


class LetterGenerateSchema(BaseModel):
    """
    Schema for generating an offer or joining letter.

    overrides are typed in per render and take precedence over stored data;
    blank values fall back to the stored value.
    """

    application_id: int
    template_id: int
    overrides: Dict[str, Any] = Field(default_factory=dict)


class CompanyProfileUpdateSchema(BaseModel):
    """Company profile fields; omitted or blank fields keep their stored value."""

    company_name: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    signatory_name: Optional[str] = Field(None, max_length=255)
    signatory_designation: Optional[str] = Field(None, max_length=255)
    branding: Optional[Dict[str, Any]] = None

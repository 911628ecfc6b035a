"""Pydantic schemas for request/response validation."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict


class TimestampedSchema(BaseModel):
    """Base schema with timestamps."""

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ErrorResponseSchema(BaseModel):
    """Schema for error responses."""

    error: str
    message: str
    status: int
    details: Optional[dict] = None


class HealthCheckSchema(BaseModel):
    """Schema for health check response."""

    status: str
    timestamp: datetime
    environment: str


class AppInfoSchema(BaseModel):
    """Schema for app info response."""

    name: str
    version: str
    environment: str
    debug: bool
    timestamp: datetime


from app.schemas.recruitment_schema import (
    JobCreateSchema,
    CandidateCreateSchema,
    ApplicationCreateSchema,
    ApplicationStatusUpdateSchema,
    ApplicationFilterSchema,
    InterviewScheduleSchema,
    InterviewUpdateSchema,
    SalaryComponentSchema,
    SalaryInputSchema,
    OfferCreateSchema,
    OfferDraftUpdateSchema,
    OfferAcceptSchema,
    OfferReasonSchema,
    EmployeeConvertSchema,
)

from app.schemas.salary_schema import (
    SalaryStructureCreateSchema,
    SalaryComputeSchema,
    SalaryAssignSchema,
)

from app.schemas.letter_schema import (
    LetterTemplateUploadSchema,
    HtmlTemplateCreateSchema,
    LetterGenerateSchema,
    CompanyProfileUpdateSchema,
)

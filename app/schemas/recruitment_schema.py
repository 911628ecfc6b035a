"""
Recruitment schemas for request validation.
Jobs, candidates, applications, interviews and offers.
"""
from typing import Optional, List, Dict, Any
from datetime import date
from pydantic import BaseModel, Field, field_validator, ConfigDict, EmailStr

from app.models.application import ApplicationStatus, ApplicationSource, ApplicationPriority
from app.models.interview import InterviewStatus, InterviewMode, InterviewResult
from app.models.offer import AcceptedVia


# ==================== Jobs and candidates ====================

class JobCreateSchema(BaseModel):
    """Schema for creating a job requirement."""

    job_code: str = Field(..., min_length=1, max_length=50)
    title: str = Field(..., min_length=1, max_length=200)
    department: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = Field(None, max_length=200)
    employment_type: str = Field(default="FULL_TIME", max_length=30)
    openings: int = Field(default=1, ge=1)
    description: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class CandidateCreateSchema(BaseModel):
    """Schema for registering a candidate."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: EmailStr
    mobile: Optional[str] = Field(None, max_length=30)
    father_name: Optional[str] = Field(None, max_length=200)
    address: Optional[str] = None
    current_designation: Optional[str] = Field(None, max_length=200)

    model_config = ConfigDict(from_attributes=True)


# ==================== Applications ====================

class ApplicationCreateSchema(BaseModel):
    """Schema for submitting an application."""

    job_id: int = Field(..., description="ID of the job requirement")
    candidate_id: int = Field(..., description="ID of the candidate")
    source: str = Field(default=ApplicationSource.CAREER_PORTAL, max_length=30)
    priority: str = Field(default=ApplicationPriority.MEDIUM, max_length=20)
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("source")
    @classmethod
    def validate_source(cls, v: str) -> str:
        if v not in ApplicationSource.all():
            raise ValueError(f"Source must be one of: {', '.join(ApplicationSource.all())}")
        return v

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v: str) -> str:
        if v not in ApplicationPriority.all():
            raise ValueError(f"Priority must be one of: {', '.join(ApplicationPriority.all())}")
        return v


class ApplicationStatusUpdateSchema(BaseModel):
    """Schema for a manual status change."""

    status: str = Field(..., max_length=30)
    reason: Optional[str] = Field(None, description="Optional reason recorded in history")

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        v = v.upper()
        if v not in ApplicationStatus.all():
            raise ValueError(f"Status must be one of: {', '.join(ApplicationStatus.all())}")
        return v


class ApplicationFilterSchema(BaseModel):
    """Query parameters for listing applications."""

    status: Optional[str] = None
    job_id: Optional[int] = None
    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=20, ge=1, le=100)


# ==================== Interviews ====================

class InterviewScheduleSchema(BaseModel):
    """Schema for scheduling an interview round."""

    scheduled_date: date
    scheduled_time: Optional[str] = Field(None, max_length=20)
    mode: str = Field(default=InterviewMode.IN_PERSON, max_length=20)
    location: Optional[str] = Field(None, max_length=500)
    interviewer_name: Optional[str] = Field(None, max_length=200)
    interviewer_id: Optional[int] = None
    round_name: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None

    @field_validator("mode")
    @classmethod
    def validate_mode(cls, v: str) -> str:
        if v not in InterviewMode.all():
            raise ValueError(f"Mode must be one of: {', '.join(InterviewMode.all())}")
        return v


class InterviewUpdateSchema(BaseModel):
    """Schema for recording an interview outcome."""

    status: Optional[str] = None
    result: Optional[str] = None
    rating: Optional[int] = Field(None, ge=1, le=5)
    feedback: Optional[str] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: Optional[str]) -> Optional[str]:
        if v and v not in InterviewStatus.all():
            raise ValueError(f"Status must be one of: {', '.join(InterviewStatus.all())}")
        return v

    @field_validator("result")
    @classmethod
    def validate_result(cls, v: Optional[str]) -> Optional[str]:
        if v and v not in InterviewResult.all():
            raise ValueError(f"Result must be one of: {', '.join(InterviewResult.all())}")
        return v


# ==================== Offers ====================

class SalaryComponentSchema(BaseModel):
    """One salary line. Either annual or monthly must be given."""

    label: str = Field(..., min_length=1, max_length=100)
    annual: Optional[str] = None
    monthly: Optional[str] = None

    @field_validator("annual", "monthly", mode="before")
    @classmethod
    def amount_as_text(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)


class SalaryInputSchema(BaseModel):
    """Salary given as a stored structure id or as inline components."""

    salary_structure_id: Optional[int] = None
    earnings: Optional[List[SalaryComponentSchema]] = None
    deductions: Optional[List[SalaryComponentSchema]] = None
    employer_benefits: Optional[List[SalaryComponentSchema]] = None

    def salary_components(self) -> Dict[str, Optional[list]]:
        """Component lists as plain dicts for the salary calculator."""
        def dump(items):
            return [i.model_dump(exclude_none=True) for i in items] if items else None
        return {
            "earnings": dump(self.earnings),
            "deductions": dump(self.deductions),
            "employer_benefits": dump(self.employer_benefits),
        }


class OfferCreateSchema(SalaryInputSchema):
    """Schema for creating a draft offer."""

    joining_date: Optional[date] = None
    designation: Optional[str] = Field(None, max_length=200)
    department: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = Field(None, max_length=200)
    valid_days: Optional[int] = Field(None, ge=1, le=365)
    probation_months: int = Field(default=3, ge=0)
    notice_period_days: int = Field(default=30, ge=0)
    working_days: str = Field(default="Monday to Friday", max_length=100)
    working_hours: str = Field(default="9:00 AM to 6:00 PM", max_length=100)
    benefits: Optional[List[str]] = None
    special_terms: Optional[str] = None


class OfferDraftUpdateSchema(SalaryInputSchema):
    """Schema for editing a DRAFT offer."""

    joining_date: Optional[date] = None
    designation: Optional[str] = Field(None, max_length=200)
    department: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = Field(None, max_length=200)
    special_terms: Optional[str] = None


class OfferAcceptSchema(BaseModel):
    accepted_via: str = Field(default=AcceptedVia.MANUAL)

    @field_validator("accepted_via")
    @classmethod
    def validate_accepted_via(cls, v: str) -> str:
        if v not in AcceptedVia.all():
            raise ValueError(f"accepted_via must be one of: {', '.join(AcceptedVia.all())}")
        return v


class OfferReasonSchema(BaseModel):
    """Reason for rejecting or withdrawing an offer."""

    reason: Optional[str] = None


class EmployeeConvertSchema(BaseModel):
    employee_code: Optional[str] = Field(None, max_length=50)

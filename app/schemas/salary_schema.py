"""
Salary schemas for request validation.
"""
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator

from app.schemas.recruitment_schema import SalaryComponentSchema, SalaryInputSchema


class SalaryStructureCreateSchema(BaseModel):
    """Schema for creating a reusable salary structure."""

    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    earnings: List[SalaryComponentSchema] = Field(..., min_length=1)
    deductions: List[SalaryComponentSchema] = Field(default_factory=list)
    employer_benefits: List[SalaryComponentSchema] = Field(default_factory=list)

    def components(self) -> dict:
        return {
            "earnings": [c.model_dump(exclude_none=True) for c in self.earnings],
            "deductions": [c.model_dump(exclude_none=True) for c in self.deductions],
            "employer_benefits": [c.model_dump(exclude_none=True) for c in self.employer_benefits],
        }


class SalaryComputeSchema(SalaryInputSchema):
    """Compute totals without storing anything."""

    grouping: Optional[str] = None

    @field_validator("grouping")
    @classmethod
    def validate_grouping(cls, v: Optional[str]) -> Optional[str]:
        if v and v not in ("indian", "international"):
            raise ValueError("grouping must be 'indian' or 'international'")
        return v


class SalaryAssignSchema(SalaryInputSchema):
    """Attach a salary snapshot to an application."""

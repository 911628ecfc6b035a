"""
Interview Model
A scheduled interview round for an application.
"""
from sqlalchemy import String, Integer, Text, Date, ForeignKey, Index

from app import db
from app.models import BaseModel


class InterviewStatus:
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"

    @classmethod
    def all(cls) -> list[str]:
        return [cls.SCHEDULED, cls.COMPLETED, cls.CANCELLED, cls.NO_SHOW]


class InterviewMode:
    IN_PERSON = "IN_PERSON"
    VIDEO = "VIDEO"
    PHONE = "PHONE"

    @classmethod
    def all(cls) -> list[str]:
        return [cls.IN_PERSON, cls.VIDEO, cls.PHONE]


class InterviewResult:
    PASS = "PASS"
    FAIL = "FAIL"
    ON_HOLD = "ON_HOLD"

    @classmethod
    def all(cls) -> list[str]:
        return [cls.PASS, cls.FAIL, cls.ON_HOLD]


class Interview(BaseModel):
    """Interview round. round_number is 1-based per application."""

    __tablename__ = "interviews"

    tenant_id = db.Column(Integer, nullable=False, index=True)
    application_id = db.Column(
        Integer, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True
    )

    round_number = db.Column(Integer, nullable=False)
    round_name = db.Column(String(100))
    scheduled_date = db.Column(Date, nullable=False)
    scheduled_time = db.Column(String(20))
    mode = db.Column(String(20), nullable=False, default=InterviewMode.IN_PERSON)
    location = db.Column(String(255))
    interviewer_name = db.Column(String(255))
    interviewer_id = db.Column(Integer)

    status = db.Column(String(20), nullable=False, default=InterviewStatus.SCHEDULED)
    result = db.Column(String(20))
    rating = db.Column(Integer)
    feedback = db.Column(Text)
    notes = db.Column(Text)
    created_by_id = db.Column(Integer)

    __table_args__ = (
        Index("idx_interview_round", "application_id", "round_number", unique=True),
    )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            "application_id": self.application_id,
            "round_number": self.round_number,
            "round_name": self.round_name,
            "scheduled_date": self.scheduled_date.isoformat() if self.scheduled_date else None,
            "scheduled_time": self.scheduled_time,
            "mode": self.mode,
            "location": self.location,
            "interviewer_name": self.interviewer_name,
            "interviewer_id": self.interviewer_id,
            "status": self.status,
            "result": self.result,
            "rating": self.rating,
            "feedback": self.feedback,
            "notes": self.notes,
        })
        return data

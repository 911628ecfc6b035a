"""Error taxonomy for recruitment workflow and letter generation.

Guard and precondition failures are user-correctable and map to 4xx
responses. File and converter failures are infrastructure errors: they are
logged in full and surfaced to the caller as a generic failure with a
correlation id.
"""

from typing import Any, Optional


class RecruitmentError(Exception):
    """Base exception for all domain errors."""

    kind = "RECRUITMENT_ERROR"
    status_code = 400
    retryable = False
    infrastructure = False

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code or self.kind
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "retryable": self.retryable,
        }


class NotFoundError(RecruitmentError):
    """Entity not found within the current tenant."""

    kind = "NOT_FOUND"
    status_code = 404


class InvalidTransition(RecruitmentError):
    """Requested status is not an allowed edge from the current status."""

    kind = "INVALID_TRANSITION"
    status_code = 409

    def __init__(self, entity: str, current_status: Optional[str], requested_status: str):
        super().__init__(
            f"Invalid {entity} status transition from {current_status} to {requested_status}",
            code="INVALID_STATUS_TRANSITION",
            details={
                "entity": entity,
                "current_status": current_status,
                "requested_status": requested_status,
            },
        )
        self.current_status = current_status
        self.requested_status = requested_status


class PreconditionNotMet(RecruitmentError):
    """Cross-entity guard failed (duplicate, missing artifact, wrong state)."""

    kind = "PRECONDITION_NOT_MET"
    status_code = 422


class DataIncomplete(RecruitmentError):
    """Required upstream data is absent."""

    kind = "DATA_INCOMPLETE"
    status_code = 422


class FileNotFound(RecruitmentError):
    """A template or generated file is missing from storage."""

    kind = "FILE_NOT_FOUND"
    status_code = 500
    infrastructure = True

    def __init__(self, message: str, candidates: Optional[list[str]] = None):
        super().__init__(message, details={"candidates": list(candidates or [])})
        self.candidates = list(candidates or [])


class ConversionFailure(RecruitmentError):
    """External document converter errored. Message is the converter's own."""

    kind = "CONVERSION_FAILURE"
    status_code = 502
    infrastructure = True


class ConversionTimeout(ConversionFailure):
    """External document converter did not finish in time."""

    kind = "CONVERSION_TIMEOUT"
    status_code = 504
    retryable = True

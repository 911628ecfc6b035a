"""
Recruitment routes: jobs, candidates, applications, interviews, offers and
employee conversion.

Domain errors (RecruitmentError) propagate to the application error handler,
which maps them to 404/409/422 responses.
"""
from flask import Blueprint, request, jsonify, g
from pydantic import ValidationError
import logging

from app.exceptions import RecruitmentError
from app.models.status_history import HistoryEntity
from app.routes.api import error_response, validation_error_response, internal_error_response
from app.services.recruitment_workflow_service import RecruitmentWorkflowService
from app.schemas.recruitment_schema import (
    JobCreateSchema,
    CandidateCreateSchema,
    ApplicationCreateSchema,
    ApplicationStatusUpdateSchema,
    ApplicationFilterSchema,
    InterviewScheduleSchema,
    InterviewUpdateSchema,
    OfferCreateSchema,
    OfferDraftUpdateSchema,
    OfferAcceptSchema,
    OfferReasonSchema,
    EmployeeConvertSchema,
)
from app.middleware.portal_auth import require_portal_auth
from app.middleware.tenant_context import with_tenant_context, get_current_user_name

logger = logging.getLogger(__name__)

recruitment_bp = Blueprint('recruitment', __name__, url_prefix='/api/recruitment')


def get_service() -> RecruitmentWorkflowService:
    """Get workflow service for current tenant."""
    return RecruitmentWorkflowService(tenant_id=g.tenant_id)


def actor() -> dict:
    return {"actor": get_current_user_name(), "actor_id": g.user_id}


def json_body() -> dict:
    return request.get_json(silent=True) or {}


# ==================== Jobs and candidates ====================

@recruitment_bp.route('/jobs', methods=['POST'])
@require_portal_auth
@with_tenant_context
def create_job():
    """Create a job requirement."""
    try:
        data = JobCreateSchema.model_validate(json_body())
        job = get_service().create_job(**data.model_dump())
        return jsonify(job.to_dict()), 201
    except ValidationError as e:
        return validation_error_response(e)
    except RecruitmentError:
        raise
    except Exception as e:
        return internal_error_response("creating job", e)


@recruitment_bp.route('/jobs', methods=['GET'])
@require_portal_auth
@with_tenant_context
def list_jobs():
    jobs = get_service().list_jobs(status=request.args.get('status'))
    return jsonify({"items": [j.to_dict() for j in jobs], "total": len(jobs)}), 200


@recruitment_bp.route('/candidates', methods=['POST'])
@require_portal_auth
@with_tenant_context
def create_candidate():
    """Register a candidate."""
    try:
        data = CandidateCreateSchema.model_validate(json_body())
        candidate = get_service().create_candidate(**data.model_dump())
        return jsonify(candidate.to_dict()), 201
    except ValidationError as e:
        return validation_error_response(e)
    except RecruitmentError:
        raise
    except Exception as e:
        return internal_error_response("creating candidate", e)


# ==================== Applications ====================

@recruitment_bp.route('/applications', methods=['POST'])
@require_portal_auth
@with_tenant_context
def create_application():
    """
    Submit an application.

    Request Body: ApplicationCreateSchema
    Returns: Application with job and candidate
    """
    try:
        data = ApplicationCreateSchema.model_validate(json_body())
        application = get_service().create_application(**data.model_dump(), **actor())
        logger.info(f"Created application {application.id} by user {g.user_id}")
        return jsonify(application.to_dict(include_job=True, include_candidate=True)), 201
    except ValidationError as e:
        return validation_error_response(e)
    except RecruitmentError:
        raise
    except Exception as e:
        return internal_error_response("creating application", e)


@recruitment_bp.route('/applications', methods=['GET'])
@require_portal_auth
@with_tenant_context
def list_applications():
    """List applications with optional status/job filters."""
    try:
        filters = ApplicationFilterSchema.model_validate(request.args.to_dict())
        items, total = get_service().list_applications(
            status=filters.status,
            job_id=filters.job_id,
            page=filters.page,
            per_page=filters.per_page,
        )
        return jsonify({
            "items": [a.to_dict(include_job=True) for a in items],
            "total": total,
            "page": filters.page,
            "per_page": filters.per_page,
        }), 200
    except ValidationError as e:
        return validation_error_response(e)


@recruitment_bp.route('/applications/<int:application_id>', methods=['GET'])
@require_portal_auth
@with_tenant_context
def get_application(application_id: int):
    application = get_service().get_application(application_id)
    return jsonify(application.to_dict(include_job=True, include_candidate=True)), 200


@recruitment_bp.route('/applications/<int:application_id>/status', methods=['PATCH'])
@require_portal_auth
@with_tenant_context
def update_application_status(application_id: int):
    """
    Manually move an application along the status graph.

    Returns 409 for a transition that is not allowed.
    """
    try:
        data = ApplicationStatusUpdateSchema.model_validate(json_body())
        application = get_service().change_status(
            application_id, data.status, reason=data.reason, **actor()
        )
        return jsonify(application.to_dict()), 200
    except ValidationError as e:
        return validation_error_response(e)
    except RecruitmentError:
        raise
    except Exception as e:
        return internal_error_response("updating application status", e)


@recruitment_bp.route('/applications/<int:application_id>/history', methods=['GET'])
@require_portal_auth
@with_tenant_context
def get_application_history(application_id: int):
    """Status history, oldest first."""
    history = get_service().get_application_history(application_id)
    return jsonify({"items": [h.to_dict() for h in history]}), 200


# ==================== Interviews ====================

@recruitment_bp.route('/applications/<int:application_id>/interviews', methods=['POST'])
@require_portal_auth
@with_tenant_context
def schedule_interview(application_id: int):
    try:
        data = InterviewScheduleSchema.model_validate(json_body())
        interview = get_service().schedule_interview(application_id, **data.model_dump(), **actor())
        return jsonify(interview.to_dict()), 201
    except ValidationError as e:
        return validation_error_response(e)
    except RecruitmentError:
        raise
    except Exception as e:
        return internal_error_response("scheduling interview", e)


@recruitment_bp.route('/interviews/<int:interview_id>', methods=['PATCH'])
@require_portal_auth
@with_tenant_context
def update_interview(interview_id: int):
    try:
        data = InterviewUpdateSchema.model_validate(json_body())
        interview = get_service().update_interview(interview_id, **data.model_dump())
        return jsonify(interview.to_dict()), 200
    except ValidationError as e:
        return validation_error_response(e)
    except RecruitmentError:
        raise
    except Exception as e:
        return internal_error_response("updating interview", e)


# ==================== Offers ====================

@recruitment_bp.route('/applications/<int:application_id>/offer', methods=['POST'])
@require_portal_auth
@with_tenant_context
def create_offer(application_id: int):
    """
    Create a DRAFT offer for a SELECTED application.

    Request Body: OfferCreateSchema
    """
    try:
        data = OfferCreateSchema.model_validate(json_body())
        fields = data.model_dump(exclude={"earnings", "deductions", "employer_benefits"})
        offer = get_service().create_offer(
            application_id, **fields, **data.salary_components(), **actor()
        )
        return jsonify(offer.to_dict()), 201
    except ValidationError as e:
        return validation_error_response(e)
    except ValueError as e:
        return error_response(str(e), 400)
    except RecruitmentError:
        raise
    except Exception as e:
        return internal_error_response("creating offer", e)


@recruitment_bp.route('/offers/<int:offer_id>', methods=['GET'])
@require_portal_auth
@with_tenant_context
def get_offer(offer_id: int):
    offer = get_service().get_offer(offer_id)
    return jsonify(offer.to_dict()), 200


@recruitment_bp.route('/offers/<int:offer_id>', methods=['PATCH'])
@require_portal_auth
@with_tenant_context
def update_offer(offer_id: int):
    """Edit a DRAFT offer."""
    try:
        data = OfferDraftUpdateSchema.model_validate(json_body())
        fields = data.model_dump(exclude={"earnings", "deductions", "employer_benefits"})
        offer = get_service().update_offer_draft(
            offer_id, **fields, **data.salary_components(), actor=get_current_user_name()
        )
        return jsonify(offer.to_dict()), 200
    except ValidationError as e:
        return validation_error_response(e)
    except ValueError as e:
        return error_response(str(e), 400)
    except RecruitmentError:
        raise
    except Exception as e:
        return internal_error_response("updating offer", e)


@recruitment_bp.route('/offers/<int:offer_id>/history', methods=['GET'])
@require_portal_auth
@with_tenant_context
def get_offer_history(offer_id: int):
    service = get_service()
    service.get_offer(offer_id)
    history = service.get_history(HistoryEntity.OFFER, offer_id)
    return jsonify({"items": [h.to_dict() for h in history]}), 200


@recruitment_bp.route('/offers/<int:offer_id>/send', methods=['POST'])
@require_portal_auth
@with_tenant_context
def send_offer(offer_id: int):
    offer = get_service().send_offer(offer_id, **actor())
    return jsonify(offer.to_dict()), 200


@recruitment_bp.route('/offers/<int:offer_id>/accept', methods=['POST'])
@require_portal_auth
@with_tenant_context
def accept_offer(offer_id: int):
    try:
        data = OfferAcceptSchema.model_validate(json_body())
        offer = get_service().accept_offer(offer_id, accepted_via=data.accepted_via, **actor())
        return jsonify(offer.to_dict()), 200
    except ValidationError as e:
        return validation_error_response(e)


@recruitment_bp.route('/offers/<int:offer_id>/reject', methods=['POST'])
@require_portal_auth
@with_tenant_context
def reject_offer(offer_id: int):
    try:
        data = OfferReasonSchema.model_validate(json_body())
        offer = get_service().reject_offer(offer_id, reason=data.reason, **actor())
        return jsonify(offer.to_dict()), 200
    except ValidationError as e:
        return validation_error_response(e)


@recruitment_bp.route('/offers/<int:offer_id>/withdraw', methods=['POST'])
@require_portal_auth
@with_tenant_context
def withdraw_offer(offer_id: int):
    try:
        data = OfferReasonSchema.model_validate(json_body())
        offer = get_service().withdraw_offer(offer_id, reason=data.reason, **actor())
        return jsonify(offer.to_dict()), 200
    except ValidationError as e:
        return validation_error_response(e)


@recruitment_bp.route('/offers/expire', methods=['POST'])
@require_portal_auth
@with_tenant_context
def expire_offers():
    """Expire every SENT offer past its validity date."""
    expired = get_service().expire_offers()
    return jsonify({"expired": expired}), 200


# ==================== Employees ====================

@recruitment_bp.route('/offers/<int:offer_id>/convert', methods=['POST'])
@require_portal_auth
@with_tenant_context
def convert_to_employee(offer_id: int):
    """Create the employee for an ACCEPTED offer; application moves to JOINED."""
    try:
        data = EmployeeConvertSchema.model_validate(json_body())
        employee = get_service().convert_to_employee(
            offer_id, employee_code=data.employee_code, **actor()
        )
        logger.info(f"Offer {offer_id} converted to employee {employee.id} by user {g.user_id}")
        return jsonify(employee.to_dict()), 201
    except ValidationError as e:
        return validation_error_response(e)
    except RecruitmentError:
        raise
    except Exception as e:
        return internal_error_response("converting offer to employee", e)


# ==================== Statistics ====================

@recruitment_bp.route('/pipeline', methods=['GET'])
@require_portal_auth
@with_tenant_context
def pipeline_stats():
    """Application counts per status, optionally for one job."""
    job_id = request.args.get('job_id', type=int)
    return jsonify(get_service().pipeline_stats(job_id=job_id)), 200

"""
Salary routes: reusable structures, totals computation and salary assignment.
"""
from flask import Blueprint, request, jsonify, g
from pydantic import ValidationError
import logging

from app.exceptions import RecruitmentError
from app.routes.api import error_response, validation_error_response, internal_error_response
from app.services.salary_calculator import build_salary_rows
from app.services.salary_service import SalaryService
from app.schemas.salary_schema import (
    SalaryStructureCreateSchema,
    SalaryComputeSchema,
    SalaryAssignSchema,
)
from app.middleware.portal_auth import require_portal_auth
from app.middleware.tenant_context import with_tenant_context, get_current_user_name
from config.settings import settings

logger = logging.getLogger(__name__)

salary_bp = Blueprint('salary', __name__, url_prefix='/api/salary')


def get_service() -> SalaryService:
    """Get salary service for current tenant."""
    return SalaryService(tenant_id=g.tenant_id)


@salary_bp.route('/structures', methods=['POST'])
@require_portal_auth
@with_tenant_context
def create_structure():
    """
    Create a salary structure.

    Request Body: SalaryStructureCreateSchema
    """
    try:
        data = SalaryStructureCreateSchema.model_validate(request.get_json(silent=True) or {})
        structure = get_service().create_structure(
            name=data.name,
            description=data.description,
            **data.components(),
        )
        return jsonify(structure.to_dict()), 201
    except ValidationError as e:
        return validation_error_response(e)
    except ValueError as e:
        return error_response(str(e), 400)
    except RecruitmentError:
        raise
    except Exception as e:
        return internal_error_response("creating salary structure", e)


@salary_bp.route('/structures', methods=['GET'])
@require_portal_auth
@with_tenant_context
def list_structures():
    active_only = request.args.get('active_only', 'true').lower() != 'false'
    structures = get_service().list_structures(active_only=active_only)
    return jsonify({"items": [s.to_dict() for s in structures], "total": len(structures)}), 200


@salary_bp.route('/compute', methods=['POST'])
@require_portal_auth
@with_tenant_context
def compute():
    """
    Compute totals and the salary table for a structure or inline components.
    Nothing is stored.
    """
    try:
        data = SalaryComputeSchema.model_validate(request.get_json(silent=True) or {})
        breakdown = get_service().build_breakdown(data.salary_structure_id, **data.salary_components())
        grouping = data.grouping or settings.currency_grouping
        rows = build_salary_rows(
            breakdown.earnings,
            breakdown.deductions,
            breakdown.employer_benefits,
            breakdown.totals,
            grouping=grouping,
        )
        return jsonify({
            **breakdown.to_dict(),
            "rows": [r.to_dict() for r in rows],
        }), 200
    except ValidationError as e:
        return validation_error_response(e)
    except ValueError as e:
        return error_response(str(e), 400)


@salary_bp.route('/applications/<int:application_id>/assign', methods=['POST'])
@require_portal_auth
@with_tenant_context
def assign_salary(application_id: int):
    """Attach a new salary snapshot to an application (and its DRAFT offer)."""
    try:
        data = SalaryAssignSchema.model_validate(request.get_json(silent=True) or {})
        snapshot = get_service().assign_salary(
            application_id,
            structure_id=data.salary_structure_id,
            created_by=get_current_user_name(),
            **data.salary_components(),
        )
        return jsonify(snapshot.to_dict()), 201
    except ValidationError as e:
        return validation_error_response(e)
    except ValueError as e:
        return error_response(str(e), 400)
    except RecruitmentError:
        raise
    except Exception as e:
        return internal_error_response("assigning salary", e)

"""
Letter routes: template management, offer/joining letter generation,
previews, history and downloads.

Template and converter failures surface through the application error
handler as a generic "Letter generation failed" with a correlation id.
"""
from flask import Blueprint, request, jsonify, g, send_file
from pydantic import ValidationError
import logging
import os

from app.exceptions import FileNotFound, RecruitmentError
from app.routes.api import error_response, validation_error_response, internal_error_response
from app.services.letter_render_service import LetterService
from app.services.letter_template_service import LetterTemplateService
from app.services.company_profile_service import CompanyProfileService
from app.schemas.letter_schema import (
    LetterTemplateUploadSchema,
    HtmlTemplateCreateSchema,
    LetterGenerateSchema,
    CompanyProfileUpdateSchema,
)
from app.middleware.portal_auth import require_portal_auth
from app.middleware.tenant_context import with_tenant_context, get_current_user_name

logger = logging.getLogger(__name__)

letter_bp = Blueprint('letters', __name__, url_prefix='/api/letters')


def get_template_service() -> LetterTemplateService:
    return LetterTemplateService(tenant_id=g.tenant_id)


def get_letter_service() -> LetterService:
    """Get letter service for current tenant."""
    return LetterService(tenant_id=g.tenant_id)


def get_company_service() -> CompanyProfileService:
    return CompanyProfileService(tenant_id=g.tenant_id)


# ==================== Templates ====================

@letter_bp.route('/templates', methods=['POST'])
@require_portal_auth
@with_tenant_context
def upload_template():
    """
    Upload a Word (.docx) letter template.

    Form Data:
        file: .docx template
        letter_type: offer | joining
        name: Optional display name
        is_default: Optional "true"/"false"
    """
    try:
        form = LetterTemplateUploadSchema.model_validate({
            "letter_type": request.form.get('letter_type', ''),
            "name": request.form.get('name') or None,
            "is_default": request.form.get('is_default', 'false').lower() == 'true',
        })
        template = get_template_service().upload_word_template(
            request.files.get('file'),
            letter_type=form.letter_type,
            name=form.name,
            is_default=form.is_default,
            created_by=get_current_user_name(),
        )
        return jsonify(template.to_dict()), 201
    except ValidationError as e:
        return validation_error_response(e)
    except RecruitmentError:
        raise
    except Exception as e:
        return internal_error_response("uploading letter template", e)


@letter_bp.route('/templates/html', methods=['POST'])
@require_portal_auth
@with_tenant_context
def create_html_template():
    """Create a BLANK or LETTER_PAD template from an HTML body."""
    try:
        data = HtmlTemplateCreateSchema.model_validate(request.get_json(silent=True) or {})
        template = get_template_service().create_html_template(
            name=data.name,
            letter_type=data.letter_type,
            body_content=data.body_content,
            template_type=data.template_type,
            is_default=data.is_default,
            created_by=get_current_user_name(),
        )
        return jsonify(template.to_dict()), 201
    except ValidationError as e:
        return validation_error_response(e)
    except ValueError as e:
        return error_response(str(e), 400)


@letter_bp.route('/templates', methods=['GET'])
@require_portal_auth
@with_tenant_context
def list_templates():
    templates = get_template_service().list_templates(letter_type=request.args.get('letter_type'))
    return jsonify({"items": [t.to_dict() for t in templates], "total": len(templates)}), 200


@letter_bp.route('/templates/<int:template_id>', methods=['GET'])
@require_portal_auth
@with_tenant_context
def get_template(template_id: int):
    return jsonify(get_template_service().get_template(template_id).to_dict()), 200


@letter_bp.route('/templates/<int:template_id>', methods=['PATCH'])
@require_portal_auth
@with_tenant_context
def update_template(template_id: int):
    """Rename a template or mark it as the default for its letter type."""
    data = request.get_json(silent=True) or {}
    template = get_template_service().update_template(
        template_id,
        name=data.get('name'),
        is_default=data.get('is_default'),
    )
    return jsonify(template.to_dict()), 200


@letter_bp.route('/templates/<int:template_id>', methods=['DELETE'])
@require_portal_auth
@with_tenant_context
def delete_template(template_id: int):
    get_template_service().delete_template(template_id)
    return jsonify({"message": "Template deleted", "id": template_id}), 200


@letter_bp.route('/templates/<int:template_id>/preview', methods=['GET'])
@require_portal_auth
@with_tenant_context
def preview_template(template_id: int):
    """Render the template with sample data and return the PDF."""
    pdf_path = get_letter_service().preview_template(template_id)
    return send_file(pdf_path, mimetype='application/pdf', download_name=f"Preview_{template_id}.pdf")


@letter_bp.route('/preview-joining', methods=['POST'])
@require_portal_auth
@with_tenant_context
def preview_joining_letter():
    """
    Render a joining letter for an application with its real data and salary
    table, without recording it.

    Request Body: LetterGenerateSchema
    Returns: the preview PDF
    """
    try:
        data = LetterGenerateSchema.model_validate(request.get_json(silent=True) or {})
        pdf_path = get_letter_service().preview_joining_letter(
            data.application_id, data.template_id, overrides=data.overrides
        )
        return send_file(pdf_path, mimetype='application/pdf', download_name=os.path.basename(pdf_path))
    except ValidationError as e:
        return validation_error_response(e)


# ==================== Company profile ====================

@letter_bp.route('/company-profile', methods=['GET'])
@require_portal_auth
@with_tenant_context
def get_company_profile():
    profile = get_company_service().get_profile()
    if profile is None:
        return jsonify({"tenant_id": g.tenant_id, "is_new": True}), 200
    return jsonify(profile.to_dict()), 200


@letter_bp.route('/company-profile', methods=['PUT'])
@require_portal_auth
@with_tenant_context
def update_company_profile():
    """
    Create or update the company profile used on letters.

    Request Body: CompanyProfileUpdateSchema
    """
    try:
        data = CompanyProfileUpdateSchema.model_validate(request.get_json(silent=True) or {})
        fields = data.model_dump(exclude={"branding"}, exclude_none=True)
        profile = get_company_service().update_profile(branding=data.branding, **fields)
        return jsonify(profile.to_dict()), 200
    except ValidationError as e:
        return validation_error_response(e)


# ==================== Generation ====================

def _generate(letter_kind: str):
    try:
        data = LetterGenerateSchema.model_validate(request.get_json(silent=True) or {})
        service = get_letter_service()
        generate = (
            service.generate_offer_letter if letter_kind == "offer" else service.generate_joining_letter
        )
        result = generate(
            data.application_id,
            data.template_id,
            overrides=data.overrides,
            actor=get_current_user_name(),
        )
        logger.info(
            f"Generated {letter_kind} letter for application {data.application_id} by user {g.user_id}"
        )
        return jsonify(result), 201
    except ValidationError as e:
        return validation_error_response(e)


@letter_bp.route('/offer', methods=['POST'])
@require_portal_auth
@with_tenant_context
def generate_offer_letter():
    """
    Generate an offer letter PDF.

    Request Body: LetterGenerateSchema
    Returns: letter record and download_url
    """
    return _generate("offer")


@letter_bp.route('/joining', methods=['POST'])
@require_portal_auth
@with_tenant_context
def generate_joining_letter():
    """
    Generate a joining letter PDF. Requires an offer letter and a salary
    snapshot for the application.
    """
    return _generate("joining")


# ==================== History and downloads ====================

@letter_bp.route('/history/<int:application_id>', methods=['GET'])
@require_portal_auth
@with_tenant_context
def letter_history(application_id: int):
    """Generated letters for an application, newest first."""
    letters = get_letter_service().history(application_id)
    return jsonify({"items": [letter.to_dict() for letter in letters], "total": len(letters)}), 200


@letter_bp.route('/<int:letter_id>/download', methods=['GET'])
@require_portal_auth
@with_tenant_context
def download_letter(letter_id: int):
    try:
        path, filename = get_letter_service().get_letter_file(letter_id)
    except FileNotFound as e:
        logger.warning(f"Letter {letter_id} file missing: {e.message}")
        return error_response("Letter file not found", 404)
    return send_file(path, mimetype='application/pdf', as_attachment=True, download_name=filename)


# ==================== Uploads ====================

uploads_bp = Blueprint('uploads', __name__, url_prefix='/uploads')


@uploads_bp.route('/<path:relative_path>', methods=['GET'])
@require_portal_auth
@with_tenant_context
def serve_letter(relative_path: str):
    """Serve a generated letter by the download_url returned at generation time."""
    try:
        path, filename = get_letter_service().get_letter_file_by_url_path(relative_path)
    except FileNotFound as e:
        logger.warning(f"Letter {relative_path} file missing: {e.message}")
        return error_response("Letter file not found", 404)
    return send_file(path, mimetype='application/pdf', download_name=filename)

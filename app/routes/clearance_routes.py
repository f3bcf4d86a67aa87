"""
Clearance case routes
"""

from flask import Blueprint, request, jsonify
from app.models import db
from app.services import AuthService, ClearanceService
from app.utils import (
    ClearanceError, ValidationError, AuthenticationError, log_error,
    create_response, create_error_response
)

clearance_bp = Blueprint('clearance', __name__)


def _error(e: ClearanceError):
    response, status = create_error_response(e)
    return jsonify(response), status


def _decision_args():
    data = request.get_json(silent=True) or {}
    return data.get('decision'), data.get('comments') or '', data.get('role')


@clearance_bp.route('/clearance-case/<path:student_id>', methods=['GET'])
def get_clearance_case(student_id):
    """Get a student's clearance case with lock state"""
    try:
        actor = AuthService.require_actor()
        case = ClearanceService.get_case(actor, student_id)
        return jsonify(create_response(True, "Clearance case retrieved", case))

    except ClearanceError as e:
        return _error(e)
    except AuthenticationError as e:
        return jsonify(create_response(False, str(e))), 401
    except Exception as e:
        log_error("Get clearance case error", e)
        db.session.rollback()
        return jsonify(create_response(False, "Failed to get clearance case")), 500


@clearance_bp.route('/clearance-case/<path:student_id>/summary', methods=['GET'])
def get_clearance_summary(student_id):
    """Get a student's clearance progress"""
    try:
        actor = AuthService.require_actor()
        summary = ClearanceService.get_summary(actor, student_id)
        return jsonify(create_response(True, "Clearance summary retrieved", summary))

    except ClearanceError as e:
        return _error(e)
    except AuthenticationError as e:
        return jsonify(create_response(False, str(e))), 401
    except Exception as e:
        log_error("Get clearance summary error", e)
        return jsonify(create_response(False, "Failed to get clearance summary")), 500


@clearance_bp.route('/clearance-case/<path:student_id>/forms/<form_type>/submit', methods=['POST'])
def submit_form(student_id, form_type):
    """Submit a clearance form"""
    try:
        actor = AuthService.require_actor()
        data = request.get_json(silent=True)
        result = ClearanceService.submit_form(actor, student_id, form_type, data)
        return jsonify(create_response(True, "Form submitted successfully", result))

    except ClearanceError as e:
        return _error(e)
    except ValidationError as e:
        return jsonify(create_response(False, str(e))), 400
    except AuthenticationError as e:
        return jsonify(create_response(False, str(e))), 401
    except Exception as e:
        log_error("Submit form error", e)
        db.session.rollback()
        return jsonify(create_response(False, "Failed to submit form")), 500


@clearance_bp.route('/clearance-case/<path:student_id>/forms/<form_type>/decide', methods=['POST'])
def decide_form(student_id, form_type):
    """Approve or reject a submitted form"""
    try:
        actor = AuthService.require_actor()
        decision, comments, role = _decision_args()
        result = ClearanceService.decide_form(actor, student_id, form_type, decision, comments, role)
        return jsonify(create_response(True, f"Form {decision}", result))

    except ClearanceError as e:
        return _error(e)
    except ValidationError as e:
        return jsonify(create_response(False, str(e))), 400
    except AuthenticationError as e:
        return jsonify(create_response(False, str(e))), 401
    except Exception as e:
        log_error("Decide form error", e)
        db.session.rollback()
        return jsonify(create_response(False, "Failed to record decision")), 500


@clearance_bp.route('/clearance-case/<path:student_id>/documents/<document_type>/upload', methods=['POST'])
def upload_document(student_id, document_type):
    """Register an uploaded document for review"""
    try:
        actor = AuthService.require_actor()
        data = request.get_json(silent=True) or request.form.to_dict()
        result = ClearanceService.upload_document(actor, student_id, document_type, data)
        return jsonify(create_response(True, "Document uploaded successfully", result))

    except ClearanceError as e:
        return _error(e)
    except ValidationError as e:
        return jsonify(create_response(False, str(e))), 400
    except AuthenticationError as e:
        return jsonify(create_response(False, str(e))), 401
    except Exception as e:
        log_error("Upload document error", e)
        db.session.rollback()
        return jsonify(create_response(False, "Failed to upload document")), 500


@clearance_bp.route('/clearance-case/<path:student_id>/documents/<document_type>/decide', methods=['POST'])
def decide_document(student_id, document_type):
    """Approve or reject an uploaded document"""
    try:
        actor = AuthService.require_actor()
        decision, comments, role = _decision_args()
        result = ClearanceService.decide_document(actor, student_id, document_type, decision, comments, role)
        return jsonify(create_response(True, f"Document {decision}", result))

    except ClearanceError as e:
        return _error(e)
    except ValidationError as e:
        return jsonify(create_response(False, str(e))), 400
    except AuthenticationError as e:
        return jsonify(create_response(False, str(e))), 401
    except Exception as e:
        log_error("Decide document error", e)
        db.session.rollback()
        return jsonify(create_response(False, "Failed to record decision")), 500


@clearance_bp.route('/staff/pending', methods=['GET'])
def get_pending_items():
    """Forms and documents waiting for the logged-in staff member"""
    try:
        actor = AuthService.require_actor()
        limit = request.args.get('limit', type=int)
        items = ClearanceService.pending_for(actor, limit)
        return jsonify(create_response(True, "Pending items retrieved", items))

    except ClearanceError as e:
        return _error(e)
    except AuthenticationError as e:
        return jsonify(create_response(False, str(e))), 401
    except Exception as e:
        log_error("Get pending items error", e)
        return jsonify(create_response(False, "Failed to get pending items")), 500

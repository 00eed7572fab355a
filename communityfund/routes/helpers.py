from flask import jsonify, request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
import logging

from communityfund.models.database import db
from communityfund.services.base import BaseService

logger = logging.getLogger(__name__)


def error_response(error):
    """Serialize a CampaignServiceError into a JSON failure"""
    return jsonify(error.to_dict()), error.status_code


def internal_error(action, error):
    db.session.rollback()
    logger.error(f"Error {action}: {str(error)}")
    return jsonify({'error': 'Internal server error'}), 500


def current_caller():
    """Load the authenticated user; the route must be behind jwt_required"""
    return BaseService(db.session).get_user_or_404(get_jwt_identity())


def optional_caller_id():
    """Identity of the caller when a valid token is sent, otherwise None"""
    try:
        verify_jwt_in_request(optional=True)
    except (JWTExtendedException, PyJWTError):
        return None
    return get_jwt_identity()


def json_body():
    return request.get_json(silent=True) or {}

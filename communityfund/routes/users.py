from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required, get_jwt_identity
from werkzeug.utils import secure_filename

from communityfund.models.database import db
from communityfund.routes.helpers import error_response, internal_error, json_body
from communityfund.services.asset_store import AssetStoreClient, AssetStoreError
from communityfund.errors import CampaignServiceError
from communityfund.services.user_service import UserDirectory

users_bp = Blueprint('users', __name__)
uploads_bp = Blueprint('uploads', __name__)


@users_bp.route('/profile', methods=['GET'])
@jwt_required()
def get_profile():
    try:
        current_user_id = get_jwt_identity()
        profile = UserDirectory(db.session).get_profile(current_user_id)

        return jsonify({
            'user': profile
        }), 200

    except CampaignServiceError as e:
        return error_response(e)
    except Exception as e:
        return internal_error('fetching profile', e)


@users_bp.route('/profile', methods=['PUT'])
@jwt_required()
def update_profile():
    try:
        current_user_id = get_jwt_identity()
        user = UserDirectory(db.session).update_profile(current_user_id, current_user_id, json_body())

        return jsonify({
            'message': 'Profile updated successfully',
            'user': user.to_dict()
        }), 200

    except CampaignServiceError as e:
        return error_response(e)
    except Exception as e:
        return internal_error('updating profile', e)


@users_bp.route('/verify-id', methods=['PUT'])
@jwt_required()
def verify_govt_id():
    try:
        current_user_id = get_jwt_identity()
        user = UserDirectory(db.session).verify_govt_id(
            current_user_id,
            current_user_id,
            json_body().get('govt_id_url')
        )

        return jsonify({
            'message': 'Government ID submitted successfully',
            'user': user.to_dict()
        }), 200

    except CampaignServiceError as e:
        return error_response(e)
    except Exception as e:
        return internal_error('verifying government ID', e)


@uploads_bp.route('', methods=['POST'])
@jwt_required()
def upload_file():
    try:
        file = request.files.get('file')
        if not file or not file.filename:
            return jsonify({'error': 'No file provided', 'kind': 'validation_error'}), 400

        client = AssetStoreClient(
            current_app.config['ASSET_STORE_URL'],
            api_key=current_app.config['ASSET_STORE_API_KEY'],
            timeout=current_app.config['ASSET_STORE_TIMEOUT']
        )
        if not client.is_configured():
            return jsonify({'error': 'File uploads are not available'}), 503

        url = client.upload(secure_filename(file.filename), file.stream, file.mimetype)

        return jsonify({
            'success': True,
            'url': url
        }), 200

    except AssetStoreError as e:
        return jsonify({'error': str(e)}), 502
    except Exception as e:
        return internal_error('uploading file', e)

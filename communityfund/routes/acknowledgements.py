from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity

from communityfund.models.database import db
from communityfund.routes.helpers import error_response, internal_error, json_body
from communityfund.services.acknowledgement_service import AcknowledgementWorkflow
from communityfund.errors import CampaignServiceError

acknowledgements_bp = Blueprint('acknowledgements', __name__)


@acknowledgements_bp.route('/generate', methods=['POST'])
@jwt_required()
def generate_acknowledgement():
    try:
        current_user_id = get_jwt_identity()
        data = json_body()

        acknowledgement = AcknowledgementWorkflow(db.session).generate(
            data.get('campaign_id'),
            current_user_id,
            data.get('message')
        )

        return jsonify({
            'message': 'Acknowledgement generated successfully',
            'acknowledgement': acknowledgement.to_dict()
        }), 201

    except CampaignServiceError as e:
        return error_response(e)
    except Exception as e:
        return internal_error('generating acknowledgement', e)


@acknowledgements_bp.route('/campaign/<campaign_id>', methods=['GET'])
def get_acknowledgement_by_campaign(campaign_id):
    try:
        acknowledgement = AcknowledgementWorkflow(db.session).get_for_campaign(campaign_id)

        data = acknowledgement.to_dict(include_campaign=True)
        if acknowledgement.generator:
            data['generator'] = acknowledgement.generator.to_summary()

        return jsonify({
            'acknowledgement': data
        }), 200

    except CampaignServiceError as e:
        return error_response(e)
    except Exception as e:
        return internal_error(f'fetching acknowledgement for campaign {campaign_id}', e)


@acknowledgements_bp.route('/mine', methods=['GET'])
@jwt_required()
def get_my_acknowledgements():
    try:
        current_user_id = get_jwt_identity()
        acknowledgements = AcknowledgementWorkflow(db.session).list_for_user(current_user_id)

        return jsonify({
            'count': len(acknowledgements),
            'acknowledgements': [ack.to_dict(include_campaign=True) for ack in acknowledgements]
        }), 200

    except Exception as e:
        return internal_error('fetching acknowledgements', e)


@acknowledgements_bp.route('/<acknowledgement_id>/publish', methods=['PUT'])
@jwt_required()
def publish_acknowledgement(acknowledgement_id):
    try:
        current_user_id = get_jwt_identity()
        acknowledgement = AcknowledgementWorkflow(db.session).publish(acknowledgement_id, current_user_id)

        return jsonify({
            'message': 'Acknowledgement published successfully',
            'acknowledgement': acknowledgement.to_dict()
        }), 200

    except CampaignServiceError as e:
        return error_response(e)
    except Exception as e:
        return internal_error(f'publishing acknowledgement {acknowledgement_id}', e)


@acknowledgements_bp.route('/<acknowledgement_id>', methods=['PUT'])
@jwt_required()
def update_acknowledgement(acknowledgement_id):
    try:
        current_user_id = get_jwt_identity()
        data = json_body()

        acknowledgement = AcknowledgementWorkflow(db.session).update_message(
            acknowledgement_id,
            current_user_id,
            data.get('message')
        )

        return jsonify({
            'message': 'Acknowledgement updated successfully',
            'acknowledgement': acknowledgement.to_dict()
        }), 200

    except CampaignServiceError as e:
        return error_response(e)
    except Exception as e:
        return internal_error(f'updating acknowledgement {acknowledgement_id}', e)

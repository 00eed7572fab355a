from flask import Blueprint, current_app, jsonify
from flask_jwt_extended import jwt_required

from communityfund.models.database import db
from communityfund.routes.helpers import (
    current_caller, error_response, internal_error, json_body, optional_caller_id
)
from communityfund.services.campaign_service import CampaignService
from communityfund.services.donation_service import DonationLedger
from communityfund.errors import CampaignServiceError
from communityfund.services.participation_service import ParticipationRegistry

campaigns_bp = Blueprint('campaigns', __name__)


@campaigns_bp.route('', methods=['GET'])
def get_campaigns():
    try:
        caller_id = optional_caller_id()
        campaigns = CampaignService(db.session).list_campaigns()

        return jsonify({
            'campaigns': [campaign.to_dict(caller_id=caller_id) for campaign in campaigns],
            'total': len(campaigns)
        }), 200

    except Exception as e:
        return internal_error('fetching campaigns', e)


@campaigns_bp.route('/<campaign_id>', methods=['GET'])
def get_campaign(campaign_id):
    try:
        caller_id = optional_caller_id()
        campaign = CampaignService(db.session).get_campaign(campaign_id)

        campaign_data = campaign.to_dict(caller_id=caller_id, include_ledger=True)
        if campaign.creator:
            campaign_data['creator'] = campaign.creator.to_summary()

        return jsonify({
            'campaign': campaign_data
        }), 200

    except CampaignServiceError as e:
        return error_response(e)
    except Exception as e:
        return internal_error(f'fetching campaign {campaign_id}', e)


@campaigns_bp.route('', methods=['POST'])
@jwt_required()
def create_campaign():
    try:
        caller = current_caller()
        campaign = CampaignService(db.session).propose(json_body(), caller.id)

        return jsonify({
            'message': 'Campaign submitted for approval',
            'campaign': campaign.to_dict()
        }), 201

    except CampaignServiceError as e:
        return error_response(e)
    except Exception as e:
        return internal_error('creating campaign', e)


@campaigns_bp.route('/<campaign_id>/join', methods=['POST'])
@jwt_required()
def join_campaign(campaign_id):
    try:
        caller = current_caller()
        score = ParticipationRegistry(db.session).join(campaign_id, caller.id)

        return jsonify({
            'message': 'Successfully joined the campaign',
            'popularity_score': score
        }), 200

    except CampaignServiceError as e:
        return error_response(e)
    except Exception as e:
        return internal_error(f'joining campaign {campaign_id}', e)


@campaigns_bp.route('/<campaign_id>/donate', methods=['POST'])
@jwt_required()
def donate_to_campaign(campaign_id):
    try:
        caller = current_caller()
        data = json_body()

        ledger = DonationLedger(db.session, current_app.config['PLATFORM_FEE_PERCENT'])
        donation = ledger.pledge(
            campaign_id,
            caller.id,
            data.get('amount'),
            data.get('payment_reference')
        )

        donation_data = donation.to_dict()
        donation_data['net_amount'] = float(ledger.net_amount(donation))

        return jsonify({
            'message': 'Donation recorded and pending confirmation',
            'donation': donation_data
        }), 201

    except CampaignServiceError as e:
        return error_response(e)
    except Exception as e:
        return internal_error(f'donating to campaign {campaign_id}', e)

"""
Admin API routes: campaign review, donation confirmation and dashboard stats.

Every route requires a JWT; the admin role is checked by the services after
the target record has been looked up.
"""

from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required

from communityfund.models.database import db
from communityfund.routes.helpers import current_caller, error_response, internal_error, json_body
from communityfund.services.campaign_service import CampaignService
from communityfund.services.donation_service import DonationLedger
from communityfund.errors import CampaignServiceError

admin_bp = Blueprint('admin', __name__)


@admin_bp.route('/campaigns', methods=['GET'])
@jwt_required()
def get_all_campaigns():
    try:
        caller = current_caller()
        campaigns = CampaignService(db.session).list_for_admin(caller.role)

        return jsonify({
            'campaigns': [campaign.to_dict(include_ledger=True) for campaign in campaigns],
            'total': len(campaigns)
        }), 200

    except CampaignServiceError as e:
        return error_response(e)
    except Exception as e:
        return internal_error('fetching campaigns for admin', e)


@admin_bp.route('/stats', methods=['GET'])
@jwt_required()
def get_dashboard_stats():
    try:
        caller = current_caller()
        stats = CampaignService(db.session).dashboard_stats(caller.role)
        return jsonify(stats), 200

    except CampaignServiceError as e:
        return error_response(e)
    except Exception as e:
        return internal_error('fetching dashboard stats', e)


@admin_bp.route('/campaigns/<campaign_id>/approve', methods=['PUT'])
@jwt_required()
def approve_campaign(campaign_id):
    try:
        caller = current_caller()
        campaign = CampaignService(db.session).approve(campaign_id, caller.role)

        return jsonify({
            'message': 'Campaign approved successfully',
            'campaign': campaign.to_dict()
        }), 200

    except CampaignServiceError as e:
        return error_response(e)
    except Exception as e:
        return internal_error(f'approving campaign {campaign_id}', e)


@admin_bp.route('/campaigns/<campaign_id>/reject', methods=['PUT'])
@jwt_required()
def reject_campaign(campaign_id):
    try:
        caller = current_caller()
        campaign = CampaignService(db.session).reject(campaign_id, caller.role)

        return jsonify({
            'message': 'Campaign rejected successfully',
            'campaign': campaign.to_dict()
        }), 200

    except CampaignServiceError as e:
        return error_response(e)
    except Exception as e:
        return internal_error(f'rejecting campaign {campaign_id}', e)


@admin_bp.route('/campaigns/<campaign_id>/donations/<donation_id>/received', methods=['PUT'])
@jwt_required()
def mark_donation_received(campaign_id, donation_id):
    try:
        caller = current_caller()
        data = json_body()

        donation = DonationLedger(db.session).confirm_received(
            campaign_id,
            donation_id,
            goal_id=data.get('goal_id'),
            caller_role=caller.role
        )

        return jsonify({
            'message': 'Donation marked as received',
            'donation': donation.to_dict()
        }), 200

    except CampaignServiceError as e:
        return error_response(e)
    except Exception as e:
        return internal_error(f'confirming donation {donation_id}', e)

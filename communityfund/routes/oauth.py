from authlib.integrations.flask_client import OAuth
from flask import Blueprint, current_app, jsonify, redirect, url_for
from flask_jwt_extended import create_access_token, create_refresh_token
import logging

from communityfund.models.database import db
from communityfund.routes.helpers import error_response
from communityfund.errors import CampaignServiceError
from communityfund.services.user_service import UserDirectory

logger = logging.getLogger(__name__)

oauth_bp = Blueprint('oauth', __name__)

# Initialize OAuth
oauth = OAuth()


def init_oauth(app):
    """Initialize OAuth with Flask app"""
    oauth.init_app(app)

    # Google OAuth
    oauth.register(
        name='google',
        client_id=app.config.get('GOOGLE_CLIENT_ID'),
        client_secret=app.config.get('GOOGLE_CLIENT_SECRET'),
        server_metadata_url='https://accounts.google.com/.well-known/openid-configuration',
        client_kwargs={
            'scope': 'openid email profile'
        }
    )


def issue_tokens(user):
    claims = {'role': user.role}
    return {
        'access_token': create_access_token(identity=user.id, additional_claims=claims),
        'refresh_token': create_refresh_token(identity=user.id)
    }


@oauth_bp.route('/google/login')
def google_login():
    """Initiate Google OAuth login"""
    try:
        redirect_uri = current_app.config.get('GOOGLE_REDIRECT_URI') or url_for('oauth.google_callback', _external=True)
        return oauth.google.authorize_redirect(redirect_uri)
    except Exception as e:
        logger.error(f"Error initiating Google login: {str(e)}")
        return jsonify({'error': 'Failed to initiate Google login'}), 500


@oauth_bp.route('/google/callback')
def google_callback():
    """Handle Google OAuth callback"""
    try:
        token = oauth.google.authorize_access_token()
        user_info = token.get('userinfo')

        if not user_info:
            return jsonify({'error': 'Failed to get user information from Google'}), 400

        directory = UserDirectory(db.session, admin_emails=current_app.config['ADMIN_EMAILS'])
        user = directory.upsert_from_identity(
            user_info.get('email'),
            name=user_info.get('name'),
            picture=user_info.get('picture'),
            provider='google'
        )

        tokens = issue_tokens(user)

        frontend_url = current_app.config.get('FRONTEND_URL')
        if frontend_url:
            return redirect(
                f"{frontend_url}?access_token={tokens['access_token']}&refresh_token={tokens['refresh_token']}"
            )

        return jsonify({
            'message': 'Google login successful',
            'user': user.to_dict(),
            **tokens
        })

    except CampaignServiceError as e:
        return error_response(e)
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error in Google callback: {str(e)}")
        return jsonify({'error': 'Google login failed'}), 500

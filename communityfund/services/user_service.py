import logging

from communityfund.models.campaign import Campaign
from communityfund.models.database import campaign_participants
from communityfund.models.user import User, ROLE_ADMIN, ROLE_USER
from communityfund.services.authorization import require_self
from communityfund.services.base import BaseService
from communityfund.errors import ValidationError

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ['name', 'picture', 'govt_id_url']


def _campaign_summary(campaign):
    return {
        'id': campaign.id,
        'title': campaign.title,
        'description': campaign.description,
        'category': campaign.category,
        'status': campaign.status,
        'created_at': campaign.created_at.isoformat() if campaign.created_at else None
    }


class UserDirectory(BaseService):
    """Users as seen by the campaign services.

    The lists of created and joined campaigns are rebuilt from the campaign
    records on every read; nothing about them is stored on the user.
    """

    def __init__(self, session, admin_emails=None):
        super().__init__(session)
        self.admin_emails = {email.strip().lower() for email in (admin_emails or []) if email.strip()}

    def upsert_from_identity(self, email, name=None, picture=None, provider='google'):
        if not email:
            raise ValidationError('Email not provided by identity provider')

        with self.atomic():
            user = self.session.query(User).filter_by(email=email).first()
            if user:
                if not user.name and name:
                    user.name = name
                if picture:
                    user.picture = picture
            else:
                user = User(
                    email=email,
                    name=name,
                    picture=picture,
                    auth_provider=provider,
                    role=ROLE_ADMIN if email.lower() in self.admin_emails else ROLE_USER
                )
                self.session.add(user)
                logger.info(f"New {user.role} account created for {email}")

        return user

    def get(self, user_id):
        return self.get_user_or_404(user_id)

    def created_campaigns(self, user_id):
        return self.session.query(Campaign).filter_by(
            creator_id=user_id
        ).order_by(Campaign.created_at.desc()).all()

    def joined_campaigns(self, user_id):
        return self.session.query(Campaign).join(
            campaign_participants, campaign_participants.c.campaign_id == Campaign.id
        ).filter(
            campaign_participants.c.user_id == user_id
        ).order_by(campaign_participants.c.joined_at.desc()).all()

    def get_profile(self, user_id):
        user = self.get_user_or_404(user_id)
        profile = user.to_dict()
        profile['created_campaigns'] = [_campaign_summary(c) for c in self.created_campaigns(user.id)]
        profile['joined_campaigns'] = [_campaign_summary(c) for c in self.joined_campaigns(user.id)]
        return profile

    def update_profile(self, user_id, caller_id, data):
        if not isinstance(data, dict):
            raise ValidationError('Request body must be a JSON object')

        with self.atomic():
            user = self.get_user_or_404(user_id)
            require_self(user.id, caller_id)
            for field in PROFILE_FIELDS:
                if data.get(field):
                    setattr(user, field, data[field])

        return user

    def verify_govt_id(self, user_id, caller_id, govt_id_url):
        if not isinstance(govt_id_url, str) or not govt_id_url.strip():
            raise ValidationError('govt_id_url is required')

        with self.atomic():
            user = self.get_user_or_404(user_id)
            require_self(user.id, caller_id)
            user.govt_id_url = govt_id_url.strip()
            user.is_govt_id_verified = True

        logger.info(f"Government ID recorded for user {user_id}")
        return user

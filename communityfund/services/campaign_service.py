"""
Campaign lifecycle: proposal, admin decision and the approval guard used by
the donation, participation and acknowledgement services.
"""

import logging

from sqlalchemy import func

from communityfund.models.campaign import (
    Campaign, CAMPAIGN_CATEGORIES, STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED
)
from communityfund.models.donation import CampaignDonation, DONATION_RECEIVED
from communityfund.models.user import User
from communityfund.services.authorization import require_admin
from communityfund.services.base import BaseService
from communityfund.errors import InvalidState, ValidationError
from communityfund.services.goal_service import GoalTracker
from communityfund.services.validators import (
    parse_bool, parse_date, parse_decimal, parse_positive_int, require_fields
)

logger = logging.getLogger(__name__)

REQUIRED_CAMPAIGN_FIELDS = [
    'title', 'description', 'about', 'date', 'target_participants', 'estimated_budget'
]


class CampaignService(BaseService):

    def __init__(self, session):
        super().__init__(session)
        self.goals = GoalTracker(session)

    def propose(self, data, creator_id):
        """
        Create a campaign in ``pending`` status owned by ``creator_id``.

        Raises:
            ValidationError: a required field is missing or malformed
        """
        if not isinstance(data, dict):
            raise ValidationError('Request body must be a JSON object')

        require_fields(data, REQUIRED_CAMPAIGN_FIELDS)
        for field in ('title', 'description', 'about'):
            if not isinstance(data[field], str):
                raise ValidationError(f'{field} must be text')

        category = data.get('category') or 'Other'
        if category not in CAMPAIGN_CATEGORIES:
            raise ValidationError(f'category must be one of: {", ".join(CAMPAIGN_CATEGORIES)}')

        is_ngo_affiliated = parse_bool(data.get('is_ngo_affiliated'), 'is_ngo_affiliated')
        ngo_details = None
        if is_ngo_affiliated:
            ngo_details = data.get('ngo_details')
            if not isinstance(ngo_details, dict):
                raise ValidationError('ngo_details is required for NGO-affiliated campaigns')
            require_fields(ngo_details, ['name', 'location'])
            ngo_details = {'name': ngo_details['name'], 'location': ngo_details['location']}

        documents = data.get('documents') or []
        if not isinstance(documents, list) or not all(isinstance(doc, str) for doc in documents):
            raise ValidationError('documents must be a list of URLs')

        contact = data.get('contact') or {}
        if not isinstance(contact, dict):
            raise ValidationError('contact must be an object with email and phone')

        campaign = Campaign(
            creator_id=creator_id,
            title=data['title'],
            description=data['description'],
            about=data['about'],
            category=category,
            location=data.get('location'),
            date=parse_date(data['date'], 'date'),
            image_url=data.get('image_url'),
            target_participants=parse_positive_int(data['target_participants'], 'target_participants'),
            estimated_budget=parse_decimal(data['estimated_budget'], 'estimated_budget'),
            status=STATUS_PENDING,
            is_ngo_affiliated=is_ngo_affiliated,
            popularity_score=0
        )
        campaign.set_documents(documents)
        campaign.set_contact({'email': contact.get('email'), 'phone': contact.get('phone')})
        campaign.set_ngo_details(ngo_details)
        campaign.goals = self.goals.build_goals(data.get('goals'))

        with self.atomic():
            self.session.add(campaign)

        logger.info(f"Campaign {campaign.id} proposed by {creator_id}")
        return campaign

    def approve(self, campaign_id, caller_role):
        return self._decide(campaign_id, caller_role, STATUS_APPROVED)

    def reject(self, campaign_id, caller_role):
        return self._decide(campaign_id, caller_role, STATUS_REJECTED)

    def _decide(self, campaign_id, caller_role, decision):
        with self.atomic():
            campaign = self.get_campaign_or_404(campaign_id, for_update=True)
            require_admin(caller_role, f'Only admins can mark campaigns as {decision}')

            # Repeating the same decision is accepted; reversing it is not
            if campaign.status not in (STATUS_PENDING, decision):
                raise InvalidState(f'Campaign has already been {campaign.status}')
            campaign.status = decision

        logger.info(f"Campaign {campaign_id} {decision}")
        return campaign

    @staticmethod
    def require_approved(campaign, message='Campaign is not approved'):
        if not campaign.is_approved():
            raise InvalidState(message)

    def get_campaign(self, campaign_id):
        return self.get_campaign_or_404(campaign_id)

    def list_campaigns(self):
        return self.session.query(Campaign).order_by(Campaign.created_at.desc()).all()

    def list_for_admin(self, caller_role):
        require_admin(caller_role)
        return self.list_campaigns()

    def dashboard_stats(self, caller_role):
        require_admin(caller_role)

        def count(status=None):
            query = self.session.query(Campaign)
            if status:
                query = query.filter_by(status=status)
            return query.count()

        total_received = self.session.query(
            func.coalesce(func.sum(CampaignDonation.amount), 0)
        ).filter(CampaignDonation.status == DONATION_RECEIVED).scalar()

        return {
            'total_campaigns': count(),
            'pending_campaigns': count(STATUS_PENDING),
            'approved_campaigns': count(STATUS_APPROVED),
            'rejected_campaigns': count(STATUS_REJECTED),
            'total_users': self.session.query(User).count(),
            'total_donations': float(total_received or 0)
        }

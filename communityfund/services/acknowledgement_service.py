"""
Thank-you documents for NGO-affiliated campaigns.

One acknowledgement per campaign, generated by the campaign's creator as a
draft and published once. The message can still be edited after publishing.
"""

from datetime import datetime
import logging

from sqlalchemy.exc import IntegrityError

from communityfund.models.acknowledgement import (
    Acknowledgement, ACK_DRAFT, ACK_PUBLISHED, DEFAULT_ACKNOWLEDGEMENT_MESSAGE
)
from communityfund.services.authorization import require_owner
from communityfund.services.base import BaseService
from communityfund.services.campaign_service import CampaignService
from communityfund.errors import AlreadyExists, InvalidState, NotFound, ValidationError

logger = logging.getLogger(__name__)


class AcknowledgementWorkflow(BaseService):

    def _get_or_404(self, ack_id):
        acknowledgement = self.session.get(Acknowledgement, ack_id) if ack_id else None
        if not acknowledgement:
            raise NotFound('Acknowledgement not found')
        return acknowledgement

    def _find_for_campaign(self, campaign_id):
        return self.session.query(Acknowledgement).filter_by(campaign_id=campaign_id).first()

    def _already_exists(self, existing):
        return AlreadyExists(
            'Acknowledgement already exists for this campaign',
            payload={'acknowledgement': existing.to_dict()}
        )

    def generate(self, campaign_id, caller_id, message=None):
        if message is not None and not isinstance(message, str):
            raise ValidationError('message must be text')

        with self.atomic():
            campaign = self.get_campaign_or_404(campaign_id)

            ngo = campaign.get_ngo_details() or {}
            if not campaign.is_ngo_affiliated or not ngo.get('name') or not ngo.get('location'):
                raise ValidationError('Acknowledgements can only be generated for NGO-affiliated campaigns')

            CampaignService.require_approved(
                campaign, 'Acknowledgements can only be generated for approved campaigns'
            )
            require_owner(campaign.creator_id, caller_id,
                          'Only the campaign creator can generate acknowledgements')

            existing = self._find_for_campaign(campaign.id)
            if existing:
                raise self._already_exists(existing)

            acknowledgement = Acknowledgement(
                campaign_id=campaign.id,
                ngo_name=ngo['name'],
                ngo_location=ngo['location'],
                message=message.strip() if message and message.strip() else DEFAULT_ACKNOWLEDGEMENT_MESSAGE,
                generated_by=caller_id,
                status=ACK_DRAFT
            )
            self.session.add(acknowledgement)
            try:
                self.session.flush()
            except IntegrityError:
                # Lost a race with another generate for the same campaign
                self.session.rollback()
                existing = self._find_for_campaign(campaign_id)
                if existing:
                    raise self._already_exists(existing)
                raise AlreadyExists('Acknowledgement already exists for this campaign')

        logger.info(f"Acknowledgement {acknowledgement.id} generated for campaign {campaign_id}")
        return acknowledgement

    def publish(self, ack_id, caller_id):
        with self.atomic():
            acknowledgement = self._get_or_404(ack_id)
            require_owner(acknowledgement.generated_by, caller_id,
                          'Only the creator can publish this acknowledgement')

            if acknowledgement.is_published():
                raise InvalidState('Acknowledgement is already published')

            updated = self.session.query(Acknowledgement).filter_by(
                id=acknowledgement.id,
                status=ACK_DRAFT
            ).update({
                Acknowledgement.status: ACK_PUBLISHED,
                Acknowledgement.published_at: datetime.utcnow(),
                Acknowledgement.updated_at: datetime.utcnow()
            }, synchronize_session=False)
            if updated != 1:
                raise InvalidState('Acknowledgement is already published')

        logger.info(f"Acknowledgement {ack_id} published")
        return self.session.get(Acknowledgement, ack_id)

    def update_message(self, ack_id, caller_id, message):
        if not isinstance(message, str) or not message.strip():
            raise ValidationError('Message is required')

        with self.atomic():
            acknowledgement = self._get_or_404(ack_id)
            require_owner(acknowledgement.generated_by, caller_id,
                          'Only the creator can update this acknowledgement')
            acknowledgement.message = message.strip()

        return acknowledgement

    def get_for_campaign(self, campaign_id):
        acknowledgement = self._find_for_campaign(campaign_id)
        if not acknowledgement:
            raise NotFound('Acknowledgement not found for this campaign')
        return acknowledgement

    def list_for_user(self, caller_id):
        return self.session.query(Acknowledgement).filter_by(
            generated_by=caller_id
        ).order_by(Acknowledgement.created_at.desc()).all()

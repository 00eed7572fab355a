from datetime import datetime
import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from communityfund.models.database import campaign_participants
from communityfund.services.base import BaseService
from communityfund.utils.calculators import calculate_popularity_score
from communityfund.services.campaign_service import CampaignService
from communityfund.errors import AlreadyExists

logger = logging.getLogger(__name__)


class ParticipationRegistry(BaseService):

    def is_participant(self, campaign_id, user_id):
        row = self.session.execute(
            select(campaign_participants.c.user_id).where(
                campaign_participants.c.campaign_id == campaign_id,
                campaign_participants.c.user_id == user_id
            )
        ).first()
        return row is not None

    def participant_count(self, campaign_id):
        return self.session.execute(
            select(func.count()).select_from(campaign_participants).where(
                campaign_participants.c.campaign_id == campaign_id
            )
        ).scalar()

    def join(self, campaign_id, user_id):
        """
        Enroll ``user_id`` in an approved campaign and return the new
        popularity score.

        The campaign row is locked for the duration and the (campaign, user)
        primary key rejects a second enrollment, so two concurrent joins by the
        same user cannot both succeed.
        """
        with self.atomic():
            campaign = self.get_campaign_or_404(campaign_id, for_update=True)
            CampaignService.require_approved(campaign, 'You can only join approved campaigns')

            if self.is_participant(campaign.id, user_id):
                raise AlreadyExists('Already joined this campaign')

            try:
                self.session.execute(campaign_participants.insert().values(
                    campaign_id=campaign.id,
                    user_id=user_id,
                    joined_at=datetime.utcnow()
                ))
            except IntegrityError:
                raise AlreadyExists('Already joined this campaign')

            count = self.participant_count(campaign.id)
            campaign.popularity_score = calculate_popularity_score(
                count, max(campaign.target_participants or 0, 1)
            )
            # Always bump the version, even when the score is already capped
            campaign.updated_at = datetime.utcnow()
            self.session.expire(campaign, ['participants'])

        score = campaign.popularity_score
        logger.info(f"User {user_id} joined campaign {campaign_id}, popularity now {score}")
        return score

    def joined_campaign_ids(self, user_id):
        rows = self.session.execute(
            select(campaign_participants.c.campaign_id).where(
                campaign_participants.c.user_id == user_id
            )
        ).all()
        return [row[0] for row in rows]

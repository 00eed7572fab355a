from datetime import datetime
import logging

from communityfund.models.donation import CampaignDonation, DONATION_PENDING, DONATION_RECEIVED
from communityfund.models.user import User
from communityfund.services.authorization import require_admin
from communityfund.services.base import BaseService
from communityfund.utils.calculators import (
    DEFAULT_PLATFORM_FEE_PERCENT, calculate_donation_after_fee, calculate_total_donations
)
from communityfund.services.campaign_service import CampaignService
from communityfund.errors import InvalidState, NotFound, ValidationError
from communityfund.services.goal_service import GoalTracker
from communityfund.services.validators import parse_decimal

logger = logging.getLogger(__name__)


class DonationLedger(BaseService):
    """Pledges recorded against approved campaigns and their confirmation.

    A pledge counts towards goals and the donor's running total only after an
    administrator confirms it, and the confirmation applies all three updates
    in one transaction.
    """

    def __init__(self, session, platform_fee_percent=DEFAULT_PLATFORM_FEE_PERCENT):
        super().__init__(session)
        self.platform_fee_percent = platform_fee_percent
        self.goals = GoalTracker(session)

    def pledge(self, campaign_id, donor_id, amount, payment_ref=None):
        try:
            amount = parse_decimal(amount, 'amount')
        except ValidationError:
            raise ValidationError('Invalid donation amount')

        if payment_ref is not None and not isinstance(payment_ref, str):
            raise ValidationError('payment_reference must be text')

        with self.atomic():
            campaign = self.get_campaign_or_404(campaign_id)
            CampaignService.require_approved(campaign, 'You can only donate to approved campaigns')

            donation = CampaignDonation(
                campaign_id=campaign.id,
                donor_id=donor_id,
                amount=amount,
                payment_reference=payment_ref or None,
                status=DONATION_PENDING,
                date=datetime.utcnow()
            )
            self.session.add(donation)

        logger.info(f"Donation {donation.id} of {amount} pledged to campaign {campaign_id}")
        return donation

    def confirm_received(self, campaign_id, donation_id, goal_id=None, caller_role=None):
        """
        Mark a pending donation as received.

        Credits ``goal_id`` when it names a goal of the same campaign and adds
        the amount to the donor's ``total_donated``.

        Raises:
            NotFound: campaign or donation does not exist
            Forbidden: caller is not an admin
            InvalidState: donation was already marked as received
        """
        with self.atomic():
            campaign = self.get_campaign_or_404(campaign_id, for_update=True)

            donation = self.session.query(CampaignDonation).filter_by(
                id=donation_id,
                campaign_id=campaign.id
            ).first()
            if not donation:
                raise NotFound('Donation not found')

            require_admin(caller_role, 'Only admins can confirm donations')

            if donation.is_received():
                raise InvalidState('Donation already marked as received')

            goal = self.goals.find(campaign, goal_id)
            amount = donation.amount
            donor_id = donation.donor_id

            # Conditional flip: a concurrent confirmation matches zero rows
            updated = self.session.query(CampaignDonation).filter_by(
                id=donation.id,
                status=DONATION_PENDING
            ).update({
                CampaignDonation.status: DONATION_RECEIVED,
                CampaignDonation.received_at: datetime.utcnow(),
                CampaignDonation.goal_id: goal.id if goal else None
            }, synchronize_session=False)
            if updated != 1:
                raise InvalidState('Donation already marked as received')

            if goal:
                self.goals.credit(goal, amount)
            elif goal_id:
                logger.warning(f"Goal {goal_id} not found on campaign {campaign_id}, no goal credited")

            credited = self.session.query(User).filter_by(id=donor_id).update(
                {User.total_donated: User.total_donated + amount},
                synchronize_session=False
            )
            if not credited:
                logger.warning(f"Donor {donor_id} not found, running total not updated")

        logger.info(f"Donation {donation_id} on campaign {campaign_id} marked as received")
        return self.session.get(CampaignDonation, donation_id)

    def net_amount(self, donation):
        return calculate_donation_after_fee(donation.amount, self.platform_fee_percent)

    @staticmethod
    def total_received(campaign):
        return calculate_total_donations([d for d in campaign.donations if d.is_received()])

    @staticmethod
    def total_pledged(campaign):
        return calculate_total_donations(list(campaign.donations))

from decimal import Decimal
import logging

from communityfund.models.campaign import CampaignGoal
from communityfund.utils.calculators import calculate_completion_percentage
from communityfund.errors import ValidationError
from communityfund.services.validators import parse_decimal

logger = logging.getLogger(__name__)


class GoalTracker:
    """Funding sub-goals of a campaign.

    Goals are defined when the campaign is proposed. After that the only
    change they ever see is ``credit``, called while a donation is being
    confirmed.
    """

    def __init__(self, session):
        self.session = session

    @staticmethod
    def percent_complete(goal):
        return calculate_completion_percentage(goal.collected_amount, goal.target_amount)

    def build_goals(self, raw_goals):
        if raw_goals is None:
            return []
        if not isinstance(raw_goals, list):
            raise ValidationError('goals must be a list')

        goals = []
        for position, raw in enumerate(raw_goals):
            if not isinstance(raw, dict):
                raise ValidationError(f'goals[{position}] must be an object')

            description = raw.get('description')
            if not isinstance(description, str) or not description.strip():
                raise ValidationError(f'goals[{position}].description is required')

            target_amount = parse_decimal(raw.get('target_amount'), f'goals[{position}].target_amount', allow_zero=True)

            goals.append(CampaignGoal(
                position=position,
                description=description.strip(),
                target_amount=target_amount,
                collected_amount=Decimal(0)
            ))
        return goals

    def find(self, campaign, goal_id):
        if not goal_id:
            return None
        return self.session.query(CampaignGoal).filter_by(id=goal_id, campaign_id=campaign.id).first()

    def credit(self, goal, amount):
        # Increment in SQL so concurrent credits to the same goal both count
        self.session.query(CampaignGoal).filter_by(id=goal.id).update(
            {CampaignGoal.collected_amount: CampaignGoal.collected_amount + amount},
            synchronize_session=False
        )
        self.session.refresh(goal)
        logger.info(f"Goal {goal.id} credited with {amount}, {self.percent_complete(goal)}% complete")

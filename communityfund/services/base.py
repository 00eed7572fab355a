from contextlib import contextmanager
import logging

from sqlalchemy.orm.exc import StaleDataError

from communityfund.models.campaign import Campaign
from communityfund.models.user import User
from communityfund.errors import InvalidState, NotFound

logger = logging.getLogger(__name__)


class BaseService:
    """Common plumbing for services that work against one store session."""

    def __init__(self, session):
        self.session = session

    @contextmanager
    def atomic(self):
        """Run the enclosed block as one transaction.

        Commits when the block finishes and rolls everything back if it
        raises, so callers never observe a partially applied operation.
        """
        try:
            yield self.session
            self.session.commit()
        except StaleDataError:
            self.session.rollback()
            logger.warning('Concurrent modification detected, transaction rolled back')
            raise InvalidState('Campaign was modified concurrently, please retry')
        except Exception:
            self.session.rollback()
            raise

    def get_campaign_or_404(self, campaign_id, for_update=False):
        query = self.session.query(Campaign).filter_by(id=campaign_id)
        if for_update:
            query = query.with_for_update()
        campaign = query.first()
        if not campaign:
            raise NotFound('Campaign not found')
        return campaign

    def get_user_or_404(self, user_id):
        user = self.session.get(User, user_id) if user_id else None
        if not user:
            raise NotFound('User not found')
        return user

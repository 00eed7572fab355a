from datetime import datetime

import pytest
from sqlalchemy import text

from communityfund.models.campaign import Campaign
from communityfund.models.database import db
from communityfund.services.campaign_service import CampaignService
from communityfund.services.donation_service import DonationLedger
from communityfund.errors import Forbidden, InvalidState, NotFound, ValidationError
from tests.conftest import campaign_data


@pytest.fixture
def service(session):
    return CampaignService(session)


class TestPropose:

    def test_creates_pending_campaign(self, service, creator):
        campaign = service.propose(campaign_data(), creator.id)

        assert campaign.status == 'pending'
        assert campaign.creator_id == creator.id
        assert campaign.popularity_score == 0
        assert campaign.participant_ids() == []
        assert campaign.date == datetime(2026, 12, 1, 9, 0)
        assert campaign.get_documents() == ['https://assets.example.org/permit.pdf']
        assert campaign.get_contact() == {'email': 'lake@example.org', 'phone': '+91 90000 00000'}
        assert campaign.get_ngo_details() is None

    def test_category_defaults_to_other(self, service, creator):
        data = campaign_data()
        del data['category']
        assert service.propose(data, creator.id).category == 'Other'

    @pytest.mark.parametrize('field', [
        'title', 'description', 'about', 'date', 'target_participants', 'estimated_budget'
    ])
    def test_missing_required_field(self, service, creator, field):
        data = campaign_data()
        del data[field]
        with pytest.raises(ValidationError, match=field):
            service.propose(data, creator.id)
        assert Campaign.query.count() == 0

    @pytest.mark.parametrize('overrides', [
        {'date': 'next tuesday'},
        {'date': 12345},
        {'target_participants': 0},
        {'target_participants': -3},
        {'target_participants': 'many'},
        {'target_participants': 10.5},
        {'estimated_budget': 0},
        {'estimated_budget': 'cheap'},
        {'estimated_budget': '5000.001'},
        {'estimated_budget': 10**12},
        {'goals': [{'description': 'Bags', 'target_amount': '0.005'}]},
        {'category': 'Sports'},
        {'documents': 'https://assets.example.org/one.pdf'},
        {'contact': 'call me'},
        {'title': 42},
    ])
    def test_malformed_fields(self, service, creator, overrides):
        with pytest.raises(ValidationError):
            service.propose(campaign_data(**overrides), creator.id)

    def test_ngo_details_required_when_affiliated(self, service, creator):
        with pytest.raises(ValidationError, match='ngo_details'):
            service.propose(campaign_data(is_ngo_affiliated=True), creator.id)

        with pytest.raises(ValidationError, match='location'):
            service.propose(campaign_data(
                is_ngo_affiliated=True, ngo_details={'name': 'Aranya'}
            ), creator.id)

    def test_ngo_details_stored_when_affiliated(self, service, creator, ngo_fields):
        campaign = service.propose(campaign_data(**ngo_fields), creator.id)
        assert campaign.is_ngo_affiliated is True
        assert campaign.get_ngo_details() == {'name': 'JalRaksha Trust', 'location': 'Bengaluru'}

    def test_ngo_details_dropped_when_not_affiliated(self, service, creator):
        campaign = service.propose(campaign_data(
            is_ngo_affiliated=False, ngo_details={'name': 'Ignored', 'location': 'Nowhere'}
        ), creator.id)
        assert campaign.get_ngo_details() is None

    def test_goals_created_with_zero_collected(self, service, creator):
        campaign = service.propose(campaign_data(goals=[
            {'description': 'Gloves and bags', 'target_amount': 1000},
            {'description': 'Transport', 'target_amount': 0},
        ]), creator.id)

        assert [g.description for g in campaign.goals] == ['Gloves and bags', 'Transport']
        assert all(g.collected_amount == 0 for g in campaign.goals)

    @pytest.mark.parametrize('goals', [
        'not a list',
        [{'target_amount': 10}],
        [{'description': 'Negative', 'target_amount': -1}],
        [{'description': 'No target'}],
    ])
    def test_malformed_goals(self, service, creator, goals):
        with pytest.raises(ValidationError):
            service.propose(campaign_data(goals=goals), creator.id)


class TestDecision:

    def test_admin_approves(self, service, creator, admin):
        campaign = service.propose(campaign_data(), creator.id)
        approved = service.approve(campaign.id, admin.role)
        assert approved.status == 'approved'

    def test_admin_rejects(self, service, creator, admin):
        campaign = service.propose(campaign_data(), creator.id)
        assert service.reject(campaign.id, admin.role).status == 'rejected'

    def test_non_admin_forbidden(self, service, creator):
        campaign = service.propose(campaign_data(), creator.id)
        with pytest.raises(Forbidden):
            service.approve(campaign.id, creator.role)
        with pytest.raises(Forbidden):
            service.reject(campaign.id, creator.role)
        assert db.session.get(Campaign, campaign.id).status == 'pending'

    def test_missing_campaign_is_not_found_even_for_non_admin(self, service):
        with pytest.raises(NotFound):
            service.approve('missing', 'user')

    def test_repeated_approval_is_accepted(self, service, creator, admin):
        campaign = service.propose(campaign_data(), creator.id)
        service.approve(campaign.id, admin.role)
        assert service.approve(campaign.id, admin.role).status == 'approved'

    def test_decided_campaign_cannot_be_reversed(self, service, creator, admin):
        campaign = service.propose(campaign_data(), creator.id)
        service.reject(campaign.id, admin.role)
        with pytest.raises(InvalidState):
            service.approve(campaign.id, admin.role)
        assert db.session.get(Campaign, campaign.id).status == 'rejected'

    def test_concurrent_modification_is_reported(self, service, creator, admin):
        campaign = service.propose(campaign_data(), creator.id)
        campaign_id = campaign.id
        assert campaign.version == 1

        # Another writer bumps the row after this session loaded it
        with db.engine.begin() as conn:
            conn.execute(text('UPDATE campaigns SET version = version + 1 WHERE id = :id'),
                         {'id': campaign_id})

        with pytest.raises(InvalidState, match='concurrently'):
            service.approve(campaign_id, admin.role)

    def test_require_approved(self, service, creator, make_campaign):
        pending = make_campaign(creator, approve=False)
        with pytest.raises(InvalidState):
            CampaignService.require_approved(pending)

        approved = make_campaign(creator)
        CampaignService.require_approved(approved)


class TestQueries:

    def test_list_newest_first(self, service, creator, make_campaign):
        first = make_campaign(creator, title='First')
        second = make_campaign(creator, title='Second')
        db.session.get(Campaign, first.id).created_at = datetime(2026, 1, 1)
        db.session.get(Campaign, second.id).created_at = datetime(2026, 2, 1)
        db.session.commit()

        assert [c.title for c in service.list_campaigns()] == ['Second', 'First']

    def test_get_missing(self, service):
        with pytest.raises(NotFound):
            service.get_campaign('nope')

    def test_admin_listing_requires_admin(self, service, creator):
        with pytest.raises(Forbidden):
            service.list_for_admin(creator.role)

    def test_dashboard_stats(self, service, creator, donor, admin, make_campaign):
        approved = make_campaign(creator)
        make_campaign(creator, approve=False)
        rejected = make_campaign(creator, approve=False)
        service.reject(rejected.id, admin.role)

        ledger = DonationLedger(db.session)
        received = ledger.pledge(approved.id, donor.id, 100)
        ledger.pledge(approved.id, donor.id, 40)
        ledger.confirm_received(approved.id, received.id, caller_role=admin.role)

        stats = service.dashboard_stats(admin.role)
        assert stats == {
            'total_campaigns': 3,
            'pending_campaigns': 1,
            'approved_campaigns': 1,
            'rejected_campaigns': 1,
            'total_users': 3,
            'total_donations': 100.0,
        }

    def test_dashboard_stats_requires_admin(self, service, creator):
        with pytest.raises(Forbidden):
            service.dashboard_stats(creator.role)

import pytest

from communityfund.models.acknowledgement import Acknowledgement, DEFAULT_ACKNOWLEDGEMENT_MESSAGE
from communityfund.models.database import db
from communityfund.services.acknowledgement_service import AcknowledgementWorkflow
from communityfund.errors import (
    AlreadyExists, Forbidden, InvalidState, NotFound, ValidationError
)


@pytest.fixture
def workflow(session):
    return AcknowledgementWorkflow(session)


@pytest.fixture
def ngo_campaign(make_campaign, creator, ngo_fields):
    return make_campaign(creator, **ngo_fields)


class TestGenerate:

    def test_creates_draft_with_default_message(self, workflow, ngo_campaign, creator):
        ack = workflow.generate(ngo_campaign.id, creator.id)

        assert ack.status == 'draft'
        assert ack.message == DEFAULT_ACKNOWLEDGEMENT_MESSAGE
        assert ack.ngo_name == 'JalRaksha Trust'
        assert ack.ngo_location == 'Bengaluru'
        assert ack.generated_by == creator.id
        assert ack.published_at is None

    def test_custom_message(self, workflow, ngo_campaign, creator):
        ack = workflow.generate(ngo_campaign.id, creator.id, '  Thank you all!  ')
        assert ack.message == 'Thank you all!'

    def test_blank_message_falls_back_to_default(self, workflow, ngo_campaign, creator):
        assert workflow.generate(ngo_campaign.id, creator.id, '   ').message == DEFAULT_ACKNOWLEDGEMENT_MESSAGE

    def test_non_ngo_campaign_rejected(self, workflow, make_campaign, creator):
        campaign = make_campaign(creator)
        with pytest.raises(ValidationError, match='NGO'):
            workflow.generate(campaign.id, creator.id)
        assert Acknowledgement.query.count() == 0

    def test_pending_campaign_rejected(self, workflow, make_campaign, creator, ngo_fields):
        campaign = make_campaign(creator, approve=False, **ngo_fields)
        with pytest.raises(InvalidState):
            workflow.generate(campaign.id, creator.id)

    def test_only_creator_can_generate(self, workflow, ngo_campaign, donor):
        with pytest.raises(Forbidden):
            workflow.generate(ngo_campaign.id, donor.id)

    def test_missing_campaign(self, workflow, creator):
        with pytest.raises(NotFound):
            workflow.generate('missing', creator.id)

    def test_second_generate_returns_existing(self, workflow, ngo_campaign, creator):
        first = workflow.generate(ngo_campaign.id, creator.id)
        first_id = first.id

        with pytest.raises(AlreadyExists) as excinfo:
            workflow.generate(ngo_campaign.id, creator.id, 'Another one')

        assert excinfo.value.payload['acknowledgement']['id'] == first_id
        assert Acknowledgement.query.count() == 1

    def test_concurrent_generate_reports_existing(self, workflow, ngo_campaign, creator, monkeypatch):
        first_id = workflow.generate(ngo_campaign.id, creator.id).id

        # The pre-insert lookup misses, so the unique constraint catches the duplicate
        calls = []
        original = AcknowledgementWorkflow._find_for_campaign

        def stale_first_lookup(self, campaign_id):
            calls.append(campaign_id)
            if len(calls) == 1:
                return None
            return original(self, campaign_id)

        monkeypatch.setattr(AcknowledgementWorkflow, '_find_for_campaign', stale_first_lookup)

        with pytest.raises(AlreadyExists) as excinfo:
            workflow.generate(ngo_campaign.id, creator.id)

        assert excinfo.value.payload['acknowledgement']['id'] == first_id
        assert Acknowledgement.query.count() == 1


class TestPublish:

    def test_publish_sets_timestamp(self, workflow, ngo_campaign, creator):
        ack = workflow.generate(ngo_campaign.id, creator.id)

        published = workflow.publish(ack.id, creator.id)

        assert published.status == 'published'
        assert published.published_at is not None

    def test_publish_twice_is_invalid(self, workflow, ngo_campaign, creator):
        ack = workflow.generate(ngo_campaign.id, creator.id)
        first = workflow.publish(ack.id, creator.id).published_at

        with pytest.raises(InvalidState, match='already published'):
            workflow.publish(ack.id, creator.id)

        assert db.session.get(Acknowledgement, ack.id).published_at == first

    def test_only_generator_can_publish(self, workflow, ngo_campaign, creator, admin):
        ack = workflow.generate(ngo_campaign.id, creator.id)
        with pytest.raises(Forbidden):
            workflow.publish(ack.id, admin.id)
        assert db.session.get(Acknowledgement, ack.id).status == 'draft'

    def test_publish_missing(self, workflow, creator):
        with pytest.raises(NotFound):
            workflow.publish('missing', creator.id)


class TestUpdateMessage:

    def test_update_draft(self, workflow, ngo_campaign, creator):
        ack = workflow.generate(ngo_campaign.id, creator.id)
        assert workflow.update_message(ack.id, creator.id, 'Thanks, team').message == 'Thanks, team'

    def test_update_after_publish_keeps_status(self, workflow, ngo_campaign, creator):
        ack = workflow.generate(ngo_campaign.id, creator.id)
        workflow.publish(ack.id, creator.id)

        updated = workflow.update_message(ack.id, creator.id, 'Revised thanks')

        assert updated.message == 'Revised thanks'
        assert updated.status == 'published'

    @pytest.mark.parametrize('message', [None, '', '   ', 12])
    def test_message_required(self, workflow, message):
        # Checked before the acknowledgement is even looked up
        with pytest.raises(ValidationError, match='Message is required'):
            workflow.update_message('missing', 'anyone', message)

    def test_only_generator_can_update(self, workflow, ngo_campaign, creator, donor):
        ack = workflow.generate(ngo_campaign.id, creator.id)
        with pytest.raises(Forbidden):
            workflow.update_message(ack.id, donor.id, 'Hijacked')
        assert db.session.get(Acknowledgement, ack.id).message == DEFAULT_ACKNOWLEDGEMENT_MESSAGE

    def test_update_missing(self, workflow, creator):
        with pytest.raises(NotFound):
            workflow.update_message('missing', creator.id, 'Hello')


class TestQueries:

    def test_get_for_campaign(self, workflow, ngo_campaign, creator):
        ack = workflow.generate(ngo_campaign.id, creator.id)
        assert workflow.get_for_campaign(ngo_campaign.id).id == ack.id

    def test_get_for_campaign_without_acknowledgement(self, workflow, ngo_campaign):
        with pytest.raises(NotFound):
            workflow.get_for_campaign(ngo_campaign.id)

    def test_list_for_user(self, workflow, make_campaign, creator, donor, ngo_fields):
        first = make_campaign(creator, **ngo_fields)
        second = make_campaign(creator, **ngo_fields)
        workflow.generate(first.id, creator.id)
        workflow.generate(second.id, creator.id)

        assert len(workflow.list_for_user(creator.id)) == 2
        assert workflow.list_for_user(donor.id) == []

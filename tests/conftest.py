"""
Shared fixtures: an application bound to a throwaway SQLite file, user
factories, JWT headers and campaign builders.
"""

import itertools

import pytest
from flask_jwt_extended import create_access_token

from communityfund.main import create_app
from communityfund.models.database import db
from communityfund.models.user import User, ROLE_ADMIN, ROLE_USER
from communityfund.services.campaign_service import CampaignService

_counter = itertools.count(1)


@pytest.fixture
def app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'test.db'}",
        'JWT_SECRET_KEY': 'test-jwt-secret-with-enough-length-for-hs256',
        'PLATFORM_FEE_PERCENT': 10,
        'ADMIN_EMAILS': ['root@example.org'],
        'ASSET_STORE_URL': None,
    })

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session(app):
    return db.session


@pytest.fixture
def make_user(app):
    def _make_user(role=ROLE_USER, email=None, name=None):
        n = next(_counter)
        user = User(
            email=email or f'user{n}@example.org',
            name=name or f'User {n}',
            role=role
        )
        db.session.add(user)
        db.session.commit()
        return user
    return _make_user


@pytest.fixture
def admin(make_user):
    return make_user(role=ROLE_ADMIN, name='Admin')


@pytest.fixture
def creator(make_user):
    return make_user(name='Creator')


@pytest.fixture
def donor(make_user):
    return make_user(name='Donor')


@pytest.fixture
def auth_headers(app):
    def _auth_headers(user):
        token = create_access_token(identity=user.id, additional_claims={'role': user.role})
        return {'Authorization': f'Bearer {token}'}
    return _auth_headers


def campaign_data(**overrides):
    data = {
        'title': 'Lake Cleanup Drive',
        'description': 'Clear plastic waste from the lake shore',
        'about': 'Volunteers meet every Sunday morning at the north gate.',
        'category': 'Environment',
        'location': 'Bengaluru',
        'date': '2026-12-01T09:00:00Z',
        'image_url': 'https://assets.example.org/lake.jpg',
        'target_participants': 100,
        'estimated_budget': 5000,
        'contact': {'email': 'lake@example.org', 'phone': '+91 90000 00000'},
        'documents': ['https://assets.example.org/permit.pdf'],
        'is_ngo_affiliated': False,
    }
    data.update(overrides)
    return data


@pytest.fixture
def payload():
    return campaign_data


@pytest.fixture
def make_campaign(app, admin):
    def _make_campaign(creator, approve=True, **overrides):
        service = CampaignService(db.session)
        campaign = service.propose(campaign_data(**overrides), creator.id)
        if approve:
            campaign = service.approve(campaign.id, admin.role)
        return campaign
    return _make_campaign


@pytest.fixture
def ngo_fields():
    return {
        'is_ngo_affiliated': True,
        'ngo_details': {'name': 'JalRaksha Trust', 'location': 'Bengaluru'},
    }

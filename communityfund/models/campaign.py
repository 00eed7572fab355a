from communityfund.models.database import db, generate_uuid, campaign_participants
from communityfund.utils.calculators import calculate_completion_percentage, calculate_total_donations
from datetime import datetime
import json

CAMPAIGN_CATEGORIES = ('Environment', 'Education', 'Animal Welfare', 'Healthcare', 'Other')

STATUS_PENDING = 'pending'
STATUS_APPROVED = 'approved'
STATUS_REJECTED = 'rejected'


class Campaign(db.Model):
    __tablename__ = 'campaigns'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    creator_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    about = db.Column(db.Text, nullable=False)
    category = db.Column(db.String(50), default='Other')
    location = db.Column(db.String(255))
    date = db.Column(db.DateTime, nullable=False)
    submitted_date = db.Column(db.DateTime, default=datetime.utcnow)
    image_url = db.Column(db.String(500))
    documents = db.Column(db.Text)  # JSON array of document URLs
    contact = db.Column(db.Text)  # JSON {"email", "phone"}
    target_participants = db.Column(db.Integer, nullable=False)
    estimated_budget = db.Column(db.Numeric(12, 2), nullable=False)
    status = db.Column(db.String(20), default=STATUS_PENDING, nullable=False, index=True)
    is_ngo_affiliated = db.Column(db.Boolean, default=False, nullable=False)
    ngo_details = db.Column(db.Text)  # JSON {"name", "location"}
    popularity_score = db.Column(db.Integer, default=0, nullable=False)
    version = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    donations = db.relationship('CampaignDonation', backref='campaign', lazy=True,
                                cascade='all, delete-orphan',
                                order_by='CampaignDonation.date')
    goals = db.relationship('CampaignGoal', backref='campaign', lazy=True,
                            cascade='all, delete-orphan',
                            order_by='CampaignGoal.position')
    participants = db.relationship('User', secondary=campaign_participants, lazy=True,
                                   viewonly=True, order_by=campaign_participants.c.joined_at)
    creator = db.relationship('User', foreign_keys=[creator_id], lazy=True)

    __mapper_args__ = {'version_id_col': version}

    def get_documents(self):
        return json.loads(self.documents) if self.documents else []

    def set_documents(self, documents_list):
        self.documents = json.dumps(documents_list)

    def get_contact(self):
        return json.loads(self.contact) if self.contact else {}

    def set_contact(self, contact_dict):
        self.contact = json.dumps(contact_dict)

    def get_ngo_details(self):
        return json.loads(self.ngo_details) if self.ngo_details else None

    def set_ngo_details(self, details_dict):
        self.ngo_details = json.dumps(details_dict) if details_dict else None

    def participant_ids(self):
        return [user.id for user in self.participants]

    def is_approved(self):
        return self.status == STATUS_APPROVED

    def to_dict(self, caller_id=None, include_ledger=False):
        data = {
            'id': self.id,
            'creator_id': self.creator_id,
            'title': self.title,
            'description': self.description,
            'about': self.about,
            'category': self.category,
            'location': self.location,
            'date': self.date.isoformat() if self.date else None,
            'submitted_date': self.submitted_date.isoformat() if self.submitted_date else None,
            'image_url': self.image_url,
            'documents': self.get_documents(),
            'contact': self.get_contact(),
            'target_participants': self.target_participants,
            'estimated_budget': float(self.estimated_budget) if self.estimated_budget is not None else None,
            'status': self.status,
            'is_ngo_affiliated': self.is_ngo_affiliated,
            'ngo_details': self.get_ngo_details(),
            'participants': self.participant_ids(),
            'popularity_score': self.popularity_score,
            'goals': [goal.to_dict() for goal in self.goals],
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None
        }

        if caller_id is not None:
            data['is_joined'] = caller_id in data['participants']

        if include_ledger:
            donations = list(self.donations)
            data['donations'] = [donation.to_dict() for donation in donations]
            data['total_pledged'] = float(calculate_total_donations(donations))
            data['total_received'] = float(calculate_total_donations(
                [d for d in donations if d.is_received()]))

        return data

    def __repr__(self):
        return f'<Campaign {self.title}>'


class CampaignGoal(db.Model):
    __tablename__ = 'campaign_goals'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    campaign_id = db.Column(db.String(36), db.ForeignKey('campaigns.id'), nullable=False, index=True)
    position = db.Column(db.Integer, default=0, nullable=False)
    description = db.Column(db.Text, nullable=False)
    target_amount = db.Column(db.Numeric(12, 2), nullable=False)
    collected_amount = db.Column(db.Numeric(12, 2), default=0, nullable=False)

    __table_args__ = (
        db.CheckConstraint('target_amount >= 0', name='ck_goal_target_non_negative'),
        db.CheckConstraint('collected_amount >= 0', name='ck_goal_collected_non_negative'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'description': self.description,
            'target_amount': float(self.target_amount),
            'collected_amount': float(self.collected_amount or 0),
            'percent_complete': calculate_completion_percentage(self.collected_amount, self.target_amount)
        }

    def __repr__(self):
        return f'<CampaignGoal {self.description}: {self.collected_amount}/{self.target_amount}>'

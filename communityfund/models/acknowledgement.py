from communityfund.models.database import db, generate_uuid
from datetime import datetime

DEFAULT_ACKNOWLEDGEMENT_MESSAGE = (
    'We sincerely thank all participants and donors for their valuable '
    'contribution to this campaign.'
)

ACK_DRAFT = 'draft'
ACK_PUBLISHED = 'published'


class Acknowledgement(db.Model):
    __tablename__ = 'acknowledgements'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    campaign_id = db.Column(db.String(36), db.ForeignKey('campaigns.id'), unique=True, nullable=False)
    # Copied from the campaign when generated, not kept in sync afterwards
    ngo_name = db.Column(db.String(255), nullable=False)
    ngo_location = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False, default=DEFAULT_ACKNOWLEDGEMENT_MESSAGE)
    generated_by = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    status = db.Column(db.String(20), default=ACK_DRAFT, nullable=False)
    published_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    campaign = db.relationship('Campaign', lazy=True)
    generator = db.relationship('User', lazy=True)

    def is_published(self):
        return self.status == ACK_PUBLISHED

    def to_dict(self, include_campaign=False):
        data = {
            'id': self.id,
            'campaign_id': self.campaign_id,
            'ngo_name': self.ngo_name,
            'ngo_location': self.ngo_location,
            'message': self.message,
            'generated_by': self.generated_by,
            'status': self.status,
            'published_at': self.published_at.isoformat() if self.published_at else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None
        }

        if include_campaign and self.campaign:
            data['campaign'] = {
                'id': self.campaign.id,
                'title': self.campaign.title,
                'description': self.campaign.description,
                'category': self.campaign.category,
                'status': self.campaign.status
            }

        return data

    def __repr__(self):
        return f'<Acknowledgement {self.campaign_id} ({self.status})>'

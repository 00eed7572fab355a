from communityfund.models.database import db, generate_uuid
from datetime import datetime

DONATION_PENDING = 'pending'
DONATION_RECEIVED = 'received'


class CampaignDonation(db.Model):
    """A self-reported pledge recorded in a campaign's ledger.

    The amount never changes after the pledge is recorded. The status moves
    from ``pending`` to ``received`` once, when an administrator confirms the
    money arrived.
    """
    __tablename__ = 'campaign_donations'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    campaign_id = db.Column(db.String(36), db.ForeignKey('campaigns.id'), nullable=False, index=True)
    donor_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    payment_reference = db.Column(db.String(255))  # e.g. the donor's UPI id
    status = db.Column(db.String(20), default=DONATION_PENDING, nullable=False)
    goal_id = db.Column(db.String(36), db.ForeignKey('campaign_goals.id'))
    date = db.Column(db.DateTime, default=datetime.utcnow)
    received_at = db.Column(db.DateTime)

    __table_args__ = (
        db.CheckConstraint('amount > 0', name='ck_donation_amount_positive'),
    )

    def is_received(self):
        return self.status == DONATION_RECEIVED

    def to_dict(self):
        return {
            'id': self.id,
            'campaign_id': self.campaign_id,
            'donor_id': self.donor_id,
            'amount': float(self.amount),
            'payment_reference': self.payment_reference,
            'status': self.status,
            'goal_id': self.goal_id,
            'date': self.date.isoformat() if self.date else None,
            'received_at': self.received_at.isoformat() if self.received_at else None
        }

    def __repr__(self):
        return f'<CampaignDonation {self.id}: {self.amount} ({self.status})>'

from flask_sqlalchemy import SQLAlchemy
from datetime import datetime
import uuid

db = SQLAlchemy()

def generate_uuid():
    return str(uuid.uuid4())

# A user may appear at most once in a campaign's participant list
campaign_participants = db.Table('campaign_participants',
    db.Column('campaign_id', db.String(36), db.ForeignKey('campaigns.id'), primary_key=True),
    db.Column('user_id', db.String(36), db.ForeignKey('users.id'), primary_key=True),
    db.Column('joined_at', db.DateTime, default=datetime.utcnow)
)

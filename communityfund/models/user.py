from communityfund.models.database import db, generate_uuid
from datetime import datetime

ROLE_ADMIN = 'admin'
ROLE_USER = 'user'


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    name = db.Column(db.String(200))
    picture = db.Column(db.String(500))
    role = db.Column(db.String(20), default=ROLE_USER, nullable=False)
    auth_provider = db.Column(db.String(50), default='google')
    govt_id_url = db.Column(db.String(500))
    is_govt_id_verified = db.Column(db.Boolean, default=False)
    total_donated = db.Column(db.Numeric(12, 2), default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.CheckConstraint('total_donated >= 0', name='ck_user_total_donated_non_negative'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'picture': self.picture,
            'role': self.role,
            'auth_provider': self.auth_provider,
            'govt_id_url': self.govt_id_url,
            'is_govt_id_verified': self.is_govt_id_verified,
            'total_donated': float(self.total_donated or 0),
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None
        }

    def to_summary(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'picture': self.picture
        }

    def __repr__(self):
        return f'<User {self.email}>'

"""
User Model
"""

import uuid
from datetime import datetime, timezone

from gympro.extensions import db


def new_id():
    return str(uuid.uuid4())


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(db.Model):
    """Gym user; ``role`` decides between the admin and member views"""
    __tablename__ = 'users'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    full_name = db.Column(db.String(120))
    role = db.Column(db.String(20), nullable=False, default='member')
    password_hash = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'full_name': self.full_name,
            'role': self.role,
            'created_at': self.created_at,
        }

    def __repr__(self):
        return f'<User {self.email} ({self.role})>'


class AuthToken(db.Model):
    """Access token issued by the local backend on sign-in"""
    __tablename__ = 'auth_tokens'

    token = db.Column(db.String(64), primary_key=True)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow)

    def __repr__(self):
        return f'<AuthToken user:{self.user_id}>'

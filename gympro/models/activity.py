"""
Attendance and Personal Trainer Request Models
"""

from gympro.extensions import db
from gympro.models.user import new_id, utcnow


class Attendance(db.Model):
    """One gym visit; ``check_out`` stays empty while the visit is in progress"""
    __tablename__ = 'attendance'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    check_in = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    check_out = db.Column(db.DateTime)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'check_in': self.check_in,
            'check_out': self.check_out,
        }

    def __repr__(self):
        return f'<Attendance user:{self.user_id} in:{self.check_in} out:{self.check_out}>'


class TrainerRequest(db.Model):
    """A member asking a trainer for a personal session"""
    __tablename__ = 'personal_trainer_requests'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    trainer_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False)
    requested_date = db.Column(db.DateTime, nullable=False)
    status = db.Column(db.String(20), nullable=False, default='pending')
    notes = db.Column(db.Text)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'trainer_id': self.trainer_id,
            'requested_date': self.requested_date,
            'status': self.status,
            'notes': self.notes,
        }

    def __repr__(self):
        return f'<TrainerRequest user:{self.user_id} trainer:{self.trainer_id} {self.status}>'

"""
Membership and Payment Models
"""

from gympro.extensions import db
from gympro.models.user import new_id, utcnow


class Membership(db.Model):
    """A member's enrollment in a plan"""
    __tablename__ = 'memberships'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    plan_name = db.Column(db.String(80), nullable=False)
    status = db.Column(db.String(20), nullable=False, default='active')
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date)
    price = db.Column(db.Float)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'plan_name': self.plan_name,
            'status': self.status,
            'start_date': self.start_date,
            'end_date': self.end_date,
            'price': self.price,
        }

    def __repr__(self):
        return f'<Membership {self.plan_name} user:{self.user_id} {self.status}>'


class Payment(db.Model):
    """A payment made by a member"""
    __tablename__ = 'payments'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    amount = db.Column(db.Float, nullable=False)
    status = db.Column(db.String(20), nullable=False, default='completed')
    payment_date = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    method = db.Column(db.String(40))

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'amount': self.amount,
            'status': self.status,
            'payment_date': self.payment_date,
            'method': self.method,
        }

    def __repr__(self):
        return f'<Payment {self.amount} user:{self.user_id} {self.status}>'

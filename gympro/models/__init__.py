"""
Models Package

Tables of the local SQL backend.
"""

from gympro.models.user import User, AuthToken
from gympro.models.membership import Membership, Payment
from gympro.models.activity import Attendance, TrainerRequest

TABLES = {
    'users': User,
    'memberships': Membership,
    'payments': Payment,
    'attendance': Attendance,
    'personal_trainer_requests': TrainerRequest,
}

__all__ = ['User', 'AuthToken', 'Membership', 'Payment', 'Attendance', 'TrainerRequest', 'TABLES']

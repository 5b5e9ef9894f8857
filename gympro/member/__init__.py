"""
Member Blueprint

Dashboard, membership status, attendance and personal trainer requests.
"""

from flask import Blueprint

member_bp = Blueprint('member', __name__)

from gympro.member import routes  # noqa: E402, F401

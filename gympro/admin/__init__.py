"""
Admin Blueprint

Dashboard, enrollments, payments and trainer requests for administrators.
"""

from flask import Blueprint

admin_bp = Blueprint('admin', __name__)

from gympro.admin import routes  # noqa: E402, F401

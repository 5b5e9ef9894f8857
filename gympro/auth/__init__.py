"""
Auth Blueprint

Sign-in, registration and sign-out.
"""

from flask import Blueprint

auth_bp = Blueprint('auth', __name__)

from gympro.auth import routes  # noqa: E402, F401

"""
Flask Extensions

The local data backend keeps its tables in Flask-SQLAlchemy. Flask-Login only
exposes the session identity as ``current_user``; the identity itself lives in
the session store.
"""

from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager

# Database instance (local SQL backend only)
db = SQLAlchemy()

# Request-scoped view of the signed-in identity
login_manager = LoginManager()

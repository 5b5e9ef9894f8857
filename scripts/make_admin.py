"""Promote a user of the local SQL backend to administrator.

Usage: python scripts/make_admin.py EMAIL [PASSWORD] [FULL NAME]

Creates the user when PASSWORD is given and the email is unknown.
"""
import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gympro import create_app
from gympro.extensions import db
from gympro.models import User
from werkzeug.security import generate_password_hash

if len(sys.argv) < 2:
    print(__doc__)
    sys.exit(1)

email = sys.argv[1].strip().lower()
password = sys.argv[2] if len(sys.argv) > 2 else None
full_name = sys.argv[3] if len(sys.argv) > 3 else None

app = create_app()

with app.app_context():
    user = User.query.filter_by(email=email).first()

    if not user:
        if not password:
            print(f"No user with email {email}; pass a password to create one")
            sys.exit(1)
        user = User(
            email=email,
            full_name=full_name,
            password_hash=generate_password_hash(password, method='pbkdf2:sha256'),
            role='admin'
        )
        db.session.add(user)
        print("New admin user created")
    else:
        user.role = 'admin'
        print("Existing user promoted to admin")

    db.session.commit()

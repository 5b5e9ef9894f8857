import pytest
from werkzeug.security import generate_password_hash

from gympro import create_app
from gympro.backend import EXTENSION_KEY
from gympro.config import TestConfig
from gympro.extensions import db
from gympro.models import User


@pytest.fixture()
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def service(app):
    return app.extensions[EXTENSION_KEY]


@pytest.fixture()
def make_user(app):
    def _make_user(email, password='secret1', role='member', full_name=None):
        user = User(
            email=email,
            full_name=full_name or email.split('@')[0].title(),
            role=role,
            password_hash=generate_password_hash(password),
        )
        db.session.add(user)
        db.session.commit()
        return user
    return _make_user


@pytest.fixture()
def admin_user(make_user):
    return make_user('coach@example.com', role='admin', full_name='Coach Carter')


@pytest.fixture()
def member_user(make_user):
    return make_user('ana@example.com', full_name='Ana Souza')


def sign_in_as(client, user):
    """Put ``user`` in the session store without going through /login."""
    with client.session_transaction() as sess:
        sess['identity'] = {
            'id': user.id,
            'email': user.email,
            'role': user.role,
            'full_name': user.full_name,
        }


@pytest.fixture()
def admin_client(client, admin_user):
    sign_in_as(client, admin_user)
    return client


@pytest.fixture()
def member_client(client, member_user):
    sign_in_as(client, member_user)
    return client

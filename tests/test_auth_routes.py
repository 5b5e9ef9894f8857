from sqlalchemy.exc import OperationalError

from gympro.auth.session import IDENTITY_KEY, TOKEN_KEY
from gympro.backend.sql import SqlDataService
from gympro.backend import DataServiceError
from gympro import create_app
from gympro.config import TestConfig
from gympro.extensions import db
from gympro.models import AuthToken, User


def _register(client, **overrides):
    data = {
        'full_name': 'Bruno Lima',
        'email': 'bruno@example.com',
        'password': 'secret1',
        'confirm_password': 'secret1',
    }
    data.update(overrides)
    return client.post('/register', data=data)


def test_register_creates_member_and_signs_in(client):
    r = _register(client)
    assert r.status_code == 302
    assert r.headers['Location'].endswith('/member')

    user = User.query.filter_by(email='bruno@example.com').first()
    assert user is not None
    assert user.role == 'member'
    assert user.full_name == 'Bruno Lima'

    with client.session_transaction() as sess:
        assert sess[IDENTITY_KEY]['id'] == user.id
        assert sess[IDENTITY_KEY]['role'] == 'member'
        assert sess[TOKEN_KEY]

    r = client.get('/member')
    assert r.status_code == 200
    assert 'Bruno Lima' in r.get_data(as_text=True)


def test_register_rejects_duplicate_email(client, member_user):
    r = _register(client, email=member_user.email)
    assert r.status_code == 200
    assert 'Could not create the account' in r.get_data(as_text=True)
    with client.session_transaction() as sess:
        assert IDENTITY_KEY not in sess


def test_register_validation(client):
    r = _register(client, confirm_password='other1')
    assert 'Passwords do not match.' in r.get_data(as_text=True)

    r = _register(client, password='123')
    assert 'Password must be at least 6 characters long.' in r.get_data(as_text=True)

    r = _register(client, email='not-an-email')
    assert 'Please provide a valid email address.' in r.get_data(as_text=True)
    assert User.query.count() == 0


def test_login_as_admin_lands_on_admin_dashboard(client, admin_user):
    r = client.post('/login', data={'email': 'coach@example.com', 'password': 'secret1'})
    assert r.status_code == 302
    assert r.headers['Location'].endswith('/admin')

    r = client.get('/admin')
    assert r.status_code == 200
    assert 'Monthly Revenue' in r.get_data(as_text=True)


def test_login_as_member_lands_on_member_dashboard(client, member_user):
    r = client.post('/login', data={'email': 'ANA@example.com ', 'password': 'secret1'},
                    follow_redirects=True)
    assert r.status_code == 200
    assert 'Welcome back, Ana Souza!' in r.get_data(as_text=True)


def test_login_with_wrong_password(client, member_user):
    r = client.post('/login', data={'email': 'ana@example.com', 'password': 'nope'})
    assert r.status_code == 200
    assert 'Invalid email or password' in r.get_data(as_text=True)
    with client.session_transaction() as sess:
        assert IDENTITY_KEY not in sess


def test_login_requires_both_fields(client):
    r = client.post('/login', data={'email': '', 'password': ''})
    assert 'Please provide both email and password.' in r.get_data(as_text=True)


def test_logout_revokes_token_and_returns_to_login(client, member_user):
    client.post('/login', data={'email': 'ana@example.com', 'password': 'secret1'})
    assert AuthToken.query.count() == 1

    r = client.post('/logout')
    assert r.status_code == 302
    assert r.headers['Location'].endswith('/login')
    assert AuthToken.query.count() == 0

    r = client.get('/member')
    assert r.status_code == 302
    assert r.headers['Location'].endswith('/login')


class BrokenSignOut(SqlDataService):
    def sign_out(self, access_token):
        raise DataServiceError('backend unreachable')


def test_logout_succeeds_locally_when_backend_fails():
    app = create_app(TestConfig, data_service=BrokenSignOut())
    with app.app_context():
        client = app.test_client()
        with client.session_transaction() as sess:
            sess[IDENTITY_KEY] = {'id': 'm-1', 'email': 'ana@example.com', 'role': 'member'}
            sess[TOKEN_KEY] = 'tok'

        r = client.post('/logout')
        assert r.headers['Location'].endswith('/login')
        with client.session_transaction() as sess:
            assert IDENTITY_KEY not in sess
            assert TOKEN_KEY not in sess
        db.drop_all()


def test_logout_rejects_get(member_client):
    r = member_client.get('/logout')
    assert r.status_code == 405

    r = member_client.get('/member')
    assert r.status_code == 200


def test_login_reports_database_outage(client, member_user, monkeypatch):
    def fail(*args, **kwargs):
        raise OperationalError('SELECT', {}, Exception('database is locked'))

    monkeypatch.setattr(db.session, 'execute', fail)
    r = client.post('/login', data={'email': 'ana@example.com', 'password': 'secret1'})

    assert r.status_code == 200
    assert 'The service is unavailable right now.' in r.get_data(as_text=True)
    with client.session_transaction() as sess:
        assert IDENTITY_KEY not in sess

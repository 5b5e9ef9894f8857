"""
Auth Services

Sign-in and registration against the Remote Data Service, producing the
identity the session store keeps.
"""

import logging

from gympro.backend import AuthResult, DataService
from gympro.schemas import Identity, Role

logger = logging.getLogger(__name__)


def load_identity(service: DataService, auth: AuthResult) -> Identity:
    """Build the identity for an authenticated user from the ``users`` table.

    A user without a ``users`` row is a member.
    """
    row = service.select_one('users', filters=[('id', 'eq', auth.user_id)])
    if row is None:
        logger.info("No users row for %s, treating as member", auth.user_id)
        return Identity(id=auth.user_id, email=auth.email, role=Role.MEMBER)
    role = row.get('role')
    if role not in (Role.ADMIN.value, Role.MEMBER.value):
        logger.warning("Unknown role %r for %s, treating as member", role, auth.user_id)
        role = Role.MEMBER
    return Identity(
        id=auth.user_id,
        email=row.get('email') or auth.email,
        role=role,
        full_name=row.get('full_name'),
    )


def sign_in(service: DataService, email, password):
    """Returns ``(identity, access_token)``; raises ``AuthError`` on bad credentials."""
    auth = service.sign_in(email, password)
    return load_identity(service, auth), auth.access_token


def register_member(service: DataService, full_name, email, password):
    """Create the account and its ``users`` row with the member role."""
    auth = service.sign_up(email, password)
    profile = {'email': auth.email or email, 'full_name': full_name, 'role': Role.MEMBER.value}

    # Some backends create the users row themselves on sign-up
    updated = service.update('users', profile, filters=[('id', 'eq', auth.user_id)])
    if not updated:
        service.insert('users', {'id': auth.user_id, **profile})

    identity = Identity(id=auth.user_id, email=profile['email'], role=Role.MEMBER, full_name=full_name)
    return identity, auth.access_token

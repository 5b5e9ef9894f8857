"""
Session Store

Holds who is signed in and whether they are an administrator. The store
wraps a mutable mapping (the signed Flask session cookie during a request, a
plain dict in tests) and is the only place that writes the identity.
"""

from __future__ import annotations

import logging
from typing import MutableMapping, Optional

from flask import has_request_context, session
from pydantic import ValidationError

from gympro.backend import DataService, DataServiceError, get_data_service
from gympro.schemas import Identity, Role

logger = logging.getLogger(__name__)

IDENTITY_KEY = 'identity'
TOKEN_KEY = 'access_token'


class SessionStore:
    """Current identity and the admin flag derived from it."""

    def __init__(self, storage: MutableMapping, data_service: DataService) -> None:
        self._storage = storage
        self._data_service = data_service

    @property
    def identity(self) -> Optional[Identity]:
        raw = self._storage.get(IDENTITY_KEY)
        if raw is None:
            return None
        try:
            return Identity.model_validate(raw)
        except ValidationError:
            logger.warning("Dropping unreadable identity from session")
            self._clear()
            return None

    @property
    def is_admin(self) -> bool:
        identity = self.identity
        return identity is not None and identity.role == Role.ADMIN

    @property
    def access_token(self) -> Optional[str]:
        return self._storage.get(TOKEN_KEY)

    def set_identity(self, identity: Optional[Identity], access_token: Optional[str] = None) -> None:
        """Replace the stored identity; None signs the session out locally."""
        if identity is None:
            self._clear()
            return
        self._storage[IDENTITY_KEY] = identity.model_dump(mode='json')
        if access_token is not None:
            self._storage[TOKEN_KEY] = access_token
        else:
            self._storage.pop(TOKEN_KEY, None)

    def sign_out(self) -> None:
        """Revoke the remote session, then always forget the local one."""
        token = self.access_token
        try:
            self._data_service.sign_out(token)
        except DataServiceError as exc:
            logger.warning("Remote sign-out failed, clearing local session anyway: %s", exc)
        except Exception:
            logger.exception("Unexpected error during remote sign-out")
        finally:
            self._clear()

    def _clear(self) -> None:
        self._storage.pop(IDENTITY_KEY, None)
        self._storage.pop(TOKEN_KEY, None)


def get_session_store() -> SessionStore:
    """The store for the current request."""
    return SessionStore(session, get_data_service())


def current_access_token() -> Optional[str]:
    if not has_request_context():
        return None
    return session.get(TOKEN_KEY)

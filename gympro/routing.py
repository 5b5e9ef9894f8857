"""
Route Guard

Chooses one of three disjoint navigation trees from the session and sends
every path outside the active tree to that tree's home. Unknown paths are
not 404s: they land on the home page (or the login page).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from flask import redirect, request
from werkzeug.exceptions import HTTPException
from werkzeug.routing import Map, Rule

from gympro.schemas import Identity

logger = logging.getLogger(__name__)

# Endpoints served whatever the session
EXEMPT_ENDPOINTS = frozenset({'static'})


@dataclass(frozen=True)
class NavigationTree:
    name: str
    home: str
    paths: Sequence[str]
    _map: Map = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        rules = [Rule(path, endpoint=path) for path in self.paths]
        object.__setattr__(self, '_map', Map(rules))

    def contains(self, path: str) -> bool:
        adapter = self._map.bind('localhost')
        try:
            adapter.match(path)
        except HTTPException:
            return False
        return True


UNAUTHENTICATED = NavigationTree(
    name='unauthenticated',
    home='/login',
    paths=('/login', '/register'),
)

ADMIN = NavigationTree(
    name='admin',
    home='/admin',
    paths=(
        '/admin',
        '/admin/payments',
        '/admin/enrollments',
        '/admin/enrollments/new',
        '/admin/trainer-requests',
        '/admin/trainer-requests/<request_id>/<any(approve, reject):decision>',
        '/logout',
    ),
)

MEMBER = NavigationTree(
    name='member',
    home='/member',
    paths=(
        '/member',
        '/member/status',
        '/member/attendance',
        '/member/attendance/check-in',
        '/member/attendance/check-out',
        '/member/personal',
        '/logout',
    ),
)

TREES = (UNAUTHENTICATED, ADMIN, MEMBER)


def active_tree(identity: Optional[Identity], is_admin: bool) -> NavigationTree:
    if identity is None:
        return UNAUTHENTICATED
    return ADMIN if is_admin else MEMBER


def redirect_for(identity: Optional[Identity], is_admin: bool, path: str) -> Optional[str]:
    """Home of the active tree when ``path`` is outside it, else None."""
    tree = active_tree(identity, is_admin)
    if tree.contains(path):
        return None
    return tree.home


def install_route_guard(app):
    """Run the guard before every request of ``app``."""
    from gympro.auth.session import get_session_store

    @app.before_request
    def guard_route():
        if request.endpoint in EXEMPT_ENDPOINTS:
            return None
        store = get_session_store()
        target = redirect_for(store.identity, store.is_admin, request.path)
        if target is None:
            return None
        logger.debug("Redirecting %s to %s", request.path, target)
        return redirect(request.script_root + target)

    return guard_route

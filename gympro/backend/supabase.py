"""
Hosted backend adapter

Talks to a Supabase project: PostgREST for the tables (``/rest/v1``) and
GoTrue for authentication (``/auth/v1``). The anon key identifies the project;
the signed-in user's access token is sent as the bearer so row-level security
applies.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, Optional

import requests

from gympro.backend.base import (
    AuthError,
    AuthResult,
    DataService,
    DataServiceError,
    check_filters,
)

logger = logging.getLogger(__name__)


def _encode(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if value is None:
        return 'null'
    return str(value)


def _jsonable(row: dict[str, Any]) -> dict[str, Any]:
    return {key: value.isoformat() if isinstance(value, (datetime, date)) else value
            for key, value in row.items()}


def encode_filters(filters) -> list[tuple[str, str]]:
    """PostgREST query parameters for ``(column, op, value)`` filters."""
    check_filters(filters)
    params = []
    for column, op, value in filters:
        if op == 'in':
            params.append((column, 'in.(' + ','.join(_encode(v) for v in value) + ')'))
        elif op == 'eq' and value is None:
            params.append((column, 'is.null'))
        else:
            params.append((column, f'{op}.{_encode(value)}'))
    return params


def parse_content_range(header: str | None) -> int:
    """Total from a ``Content-Range`` header such as ``0-24/3573`` or ``*/0``."""
    if not header or '/' not in header:
        raise DataServiceError("Count response missing Content-Range", detail=header)
    total = header.rsplit('/', 1)[1]
    if total == '*':
        raise DataServiceError("Count response without exact total", detail=header)
    return int(total)


class SupabaseDataService(DataService):
    """
    Synchronous Supabase client for the web views.

    ``token_provider`` returns the current user's access token, or None when
    nobody is signed in.
    """

    def __init__(
        self,
        url: str,
        anon_key: str,
        *,
        timeout: float = 10.0,
        token_provider: Callable[[], Optional[str]] | None = None,
        session: requests.Session | None = None,
    ) -> None:
        base_url = url.rstrip('/')
        self._rest_url = f'{base_url}/rest/v1'
        self._auth_url = f'{base_url}/auth/v1'
        self._anon_key = anon_key
        self._timeout = timeout
        self._token_provider = token_provider or (lambda: None)
        self._http = session or requests.Session()

    def close(self) -> None:
        self._http.close()

    def _headers(self, access_token: str | None = None, **extra: str) -> dict[str, str]:
        bearer = access_token or self._token_provider() or self._anon_key
        headers = {
            'apikey': self._anon_key,
            'Authorization': f'Bearer {bearer}',
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        }
        headers.update(extra)
        return headers

    def _request(self, method: str, url: str, *, what: str, **kwargs) -> requests.Response:
        try:
            response = self._http.request(method, url, timeout=self._timeout, **kwargs)
        except requests.exceptions.Timeout as exc:
            raise DataServiceError(f"{what} timed out") from exc
        except requests.exceptions.RequestException as exc:
            raise DataServiceError(f"{what} failed", detail=str(exc)) from exc
        if response.status_code >= 400:
            raise DataServiceError(
                f"{what} failed",
                status_code=response.status_code,
                detail=response.text,
            )
        return response

    def _json(self, response: requests.Response, what: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise DataServiceError(f"{what} returned a non-JSON body",
                                   status_code=response.status_code,
                                   detail=response.text) from exc

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def select(self, table, *, columns=None, filters=(), order=None, descending=False, limit=None):
        params = [('select', ','.join(columns) if columns else '*')]
        params.extend(encode_filters(filters))
        if order:
            params.append(('order', f"{order}.{'desc' if descending else 'asc'}"))
        if limit is not None:
            params.append(('limit', str(limit)))
        response = self._request(
            'GET', f'{self._rest_url}/{table}',
            what=f"Supabase REST GET for '{table}'",
            params=params,
            headers=self._headers(),
        )
        return self._json(response, f"Supabase REST GET for '{table}'")

    def count(self, table, *, filters=()):
        params = [('select', '*')]
        params.extend(encode_filters(filters))
        response = self._request(
            'HEAD', f'{self._rest_url}/{table}',
            what=f"Supabase REST COUNT for '{table}'",
            params=params,
            headers=self._headers(Prefer='count=exact'),
        )
        return parse_content_range(response.headers.get('Content-Range'))

    def insert(self, table, row):
        response = self._request(
            'POST', f'{self._rest_url}/{table}',
            what=f"Supabase REST INSERT for '{table}'",
            json=_jsonable(row),
            headers=self._headers(Prefer='return=representation'),
        )
        items = self._json(response, f"Supabase REST INSERT for '{table}'")
        if not items:
            raise DataServiceError(f"Empty insert response for table '{table}'")
        return items[0]

    def update(self, table, values, *, filters):
        if not filters:
            raise DataServiceError(f"UPDATE on '{table}' requires at least one filter")
        response = self._request(
            'PATCH', f'{self._rest_url}/{table}',
            what=f"Supabase REST UPDATE for '{table}'",
            params=encode_filters(filters),
            json=_jsonable(values),
            headers=self._headers(Prefer='return=representation'),
        )
        return self._json(response, f"Supabase REST UPDATE for '{table}'")

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def _auth_result(self, data: dict[str, Any], what: str) -> AuthResult:
        user = data.get('user') or {}
        access_token = data.get('access_token')
        if not access_token or not user.get('id'):
            raise AuthError(f"{what}: no session returned (is email confirmation pending?)")
        return AuthResult(user_id=str(user['id']), email=user.get('email', ''), access_token=access_token)

    def sign_in(self, email, password):
        try:
            response = self._request(
                'POST', f'{self._auth_url}/token',
                what="Supabase sign-in",
                params={'grant_type': 'password'},
                json={'email': email, 'password': password},
                headers=self._headers(access_token=self._anon_key),
            )
        except DataServiceError as exc:
            if exc.status_code in (400, 401, 422):
                raise AuthError("Invalid login credentials", status_code=exc.status_code,
                                detail=exc.detail) from exc
            raise
        return self._auth_result(self._json(response, "Supabase sign-in"), "Supabase sign-in")

    def sign_up(self, email, password):
        try:
            response = self._request(
                'POST', f'{self._auth_url}/signup',
                what="Supabase sign-up",
                json={'email': email, 'password': password},
                headers=self._headers(access_token=self._anon_key),
            )
        except DataServiceError as exc:
            if exc.status_code in (400, 422):
                raise AuthError("Sign-up rejected", status_code=exc.status_code, detail=exc.detail) from exc
            raise
        return self._auth_result(self._json(response, "Supabase sign-up"), "Supabase sign-up")

    def sign_out(self, access_token):
        if not access_token:
            return
        self._request(
            'POST', f'{self._auth_url}/logout',
            what="Supabase sign-out",
            headers=self._headers(access_token=access_token),
        )

    def get_user(self, access_token):
        try:
            response = self._request(
                'GET', f'{self._auth_url}/user',
                what="Supabase get user",
                headers=self._headers(access_token=access_token),
            )
        except DataServiceError as exc:
            if exc.status_code in (401, 403):
                return None
            raise
        data = self._json(response, "Supabase get user")
        return AuthResult(user_id=str(data['id']), email=data.get('email', ''), access_token=access_token)

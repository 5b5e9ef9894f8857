"""
Remote Data Service contract

Table-scoped reads and writes plus the authentication calls the views rely on.
Adapters return plain row dicts and raise ``DataServiceError`` on failure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple

# (column, operator, value)
Filter = Tuple[str, str, Any]

FILTER_OPERATORS = frozenset({'eq', 'neq', 'gt', 'gte', 'lt', 'lte', 'in', 'is'})


class DataServiceError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None, detail: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class AuthError(DataServiceError):
    """Credentials were rejected or the account could not be created."""


@dataclass
class AuthResult:
    user_id: str
    email: str
    access_token: str


def check_filters(filters: Sequence[Filter]) -> None:
    for column, op, _value in filters:
        if op not in FILTER_OPERATORS:
            raise DataServiceError(f"Unsupported filter operator '{op}' on column '{column}'")


class DataService(ABC):
    """Query and auth client for the backend holding the gym tables."""

    @abstractmethod
    def select(
        self,
        table: str,
        *,
        columns: Sequence[str] | None = None,
        filters: Sequence[Filter] = (),
        order: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        ...

    @abstractmethod
    def count(self, table: str, *, filters: Sequence[Filter] = ()) -> int:
        ...

    @abstractmethod
    def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        ...

    @abstractmethod
    def update(
        self,
        table: str,
        values: dict[str, Any],
        *,
        filters: Sequence[Filter],
    ) -> list[dict[str, Any]]:
        ...

    @abstractmethod
    def sign_in(self, email: str, password: str) -> AuthResult:
        ...

    @abstractmethod
    def sign_up(self, email: str, password: str) -> AuthResult:
        ...

    @abstractmethod
    def sign_out(self, access_token: str | None) -> None:
        ...

    @abstractmethod
    def get_user(self, access_token: str) -> Optional[AuthResult]:
        ...

    def select_one(self, table: str, **kwargs: Any) -> dict[str, Any] | None:
        """First matching row or None; "no matching record" is not an error."""
        kwargs['limit'] = 1
        rows = self.select(table, **kwargs)
        return rows[0] if rows else None

    def close(self) -> None:
        pass

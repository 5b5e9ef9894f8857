"""
Local SQL backend

Implements the Remote Data Service contract on top of the Flask-SQLAlchemy
models, for local development and tests. Must be used inside an application
context.
"""

from __future__ import annotations

import logging
import secrets
from datetime import date, datetime, timezone
from typing import Any, Optional, Sequence

from sqlalchemy import Date, DateTime, Float
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

from gympro.backend.base import (
    AuthError,
    AuthResult,
    DataService,
    DataServiceError,
    Filter,
    check_filters,
)
from gympro.extensions import db
from gympro.models import TABLES, AuthToken, User

logger = logging.getLogger(__name__)


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _coerce(column, value):
    """Bring a wire value (ISO string, aware datetime) to the column's Python type."""
    if value is None:
        return None
    col_type = column.type
    try:
        if isinstance(col_type, DateTime):
            if isinstance(value, str):
                value = datetime.fromisoformat(value.replace('Z', '+00:00'))
            elif isinstance(value, date) and not isinstance(value, datetime):
                value = datetime(value.year, value.month, value.day)
            return _to_naive_utc(value)
        if isinstance(col_type, Date):
            if isinstance(value, datetime):
                return value.date()
            if isinstance(value, str):
                return date.fromisoformat(value[:10])
            return value
        if isinstance(col_type, Float):
            return float(value)
    except (TypeError, ValueError) as exc:
        raise DataServiceError(f"Invalid value for column '{column.name}': {value!r}") from exc
    return value


class SqlDataService(DataService):
    """Data service backed by the application's SQLAlchemy session."""

    def _model(self, table: str):
        model = TABLES.get(table)
        if model is None:
            raise DataServiceError(f"Unknown table '{table}'", status_code=404)
        return model

    def _column(self, model, name: str):
        column = model.__table__.columns.get(name)
        if column is None:
            raise DataServiceError(f"Unknown column '{name}' on '{model.__tablename__}'", status_code=400)
        return column

    def _apply_filters(self, query, model, filters: Sequence[Filter]):
        check_filters(filters)
        for name, op, value in filters:
            column = self._column(model, name)
            attr = getattr(model, name)
            if op == 'is':
                if value in (None, 'null'):
                    query = query.where(attr.is_(None))
                else:
                    query = query.where(attr.is_(value))
            elif op == 'in':
                query = query.where(attr.in_([_coerce(column, v) for v in value]))
            else:
                value = _coerce(column, value)
                if op == 'eq':
                    query = query.where(attr == value)
                elif op == 'neq':
                    query = query.where(attr != value)
                elif op == 'gt':
                    query = query.where(attr > value)
                elif op == 'gte':
                    query = query.where(attr >= value)
                elif op == 'lt':
                    query = query.where(attr < value)
                elif op == 'lte':
                    query = query.where(attr <= value)
        return query

    def _row(self, obj, columns: Sequence[str] | None = None) -> dict[str, Any]:
        row = obj.to_dict()
        if columns:
            row = {key: row[key] for key in columns if key in row}
        return row

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def select(self, table, *, columns=None, filters=(), order=None, descending=False, limit=None):
        model = self._model(table)
        query = self._apply_filters(db.select(model), model, filters)
        if order:
            self._column(model, order)
            attr = getattr(model, order)
            query = query.order_by(attr.desc() if descending else attr.asc())
        if limit is not None:
            query = query.limit(limit)
        try:
            objs = db.session.execute(query).scalars().all()
        except SQLAlchemyError as exc:
            raise DataServiceError(f"SELECT failed for '{table}'", detail=str(exc)) from exc
        return [self._row(obj, columns) for obj in objs]

    def count(self, table, *, filters=()):
        model = self._model(table)
        query = self._apply_filters(db.select(db.func.count()).select_from(model), model, filters)
        try:
            return int(db.session.execute(query).scalar_one())
        except SQLAlchemyError as exc:
            raise DataServiceError(f"COUNT failed for '{table}'", detail=str(exc)) from exc

    def insert(self, table, row):
        model = self._model(table)
        values = {name: _coerce(self._column(model, name), value) for name, value in row.items()}
        obj = model(**values)
        try:
            db.session.add(obj)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise DataServiceError(f"INSERT failed for '{table}'", detail=str(exc)) from exc
        return self._row(obj)

    def update(self, table, values, *, filters):
        if not filters:
            raise DataServiceError(f"UPDATE on '{table}' requires at least one filter")
        model = self._model(table)
        coerced = {name: _coerce(self._column(model, name), value) for name, value in values.items()}
        query = self._apply_filters(db.select(model), model, filters)
        try:
            objs = db.session.execute(query).scalars().all()
            for obj in objs:
                for name, value in coerced.items():
                    setattr(obj, name, value)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise DataServiceError(f"UPDATE failed for '{table}'", detail=str(exc)) from exc
        return [self._row(obj) for obj in objs]

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def _issue_token(self, user: User) -> AuthResult:
        token = AuthToken(token=secrets.token_urlsafe(32), user_id=user.id)
        try:
            db.session.add(token)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise DataServiceError("Could not issue access token", detail=str(exc)) from exc
        return AuthResult(user_id=user.id, email=user.email, access_token=token.token)

    def _lookup(self, what, model, **criteria):
        try:
            return db.session.execute(db.select(model).filter_by(**criteria)).scalar_one_or_none()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise DataServiceError(f"{what} failed", detail=str(exc)) from exc

    def sign_in(self, email, password):
        user = self._lookup("Sign-in", User, email=email.strip().lower())
        if user is None or not user.password_hash or not check_password_hash(user.password_hash, password):
            raise AuthError("Invalid login credentials", status_code=400)
        return self._issue_token(user)

    def sign_up(self, email, password):
        email = email.strip().lower()
        existing = self._lookup("Sign-up", User, email=email)
        if existing is not None:
            raise AuthError("User already registered", status_code=422)
        user = User(email=email, password_hash=generate_password_hash(password, method='pbkdf2:sha256'))
        try:
            db.session.add(user)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise DataServiceError("Sign-up failed", detail=str(exc)) from exc
        logger.info("Registered local user %s", user.id)
        return self._issue_token(user)

    def sign_out(self, access_token):
        if not access_token:
            return
        try:
            db.session.execute(db.delete(AuthToken).where(AuthToken.token == access_token))
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise DataServiceError("Sign-out failed", detail=str(exc)) from exc

    def get_user(self, access_token) -> Optional[AuthResult]:
        token = self._lookup("Get user", AuthToken, token=access_token)
        if token is None:
            return None
        user = self._lookup("Get user", User, id=token.user_id)
        if user is None:
            return None
        return AuthResult(user_id=user.id, email=user.email, access_token=access_token)

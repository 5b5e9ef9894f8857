"""
Result Types

Typed rows returned by the Remote Data Service. Every row is validated here
before a view touches it.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime
from enum import Enum
from typing import Iterable, Optional, Type, TypeVar

from flask_login import UserMixin
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)


class Role(str, Enum):
    ADMIN = "admin"
    MEMBER = "member"


class MembershipStatus(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    COMPLETED = "completed"
    PENDING = "pending"
    FAILED = "failed"


class RequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Identity(BaseModel, UserMixin):
    """The signed-in user as held by the session store."""

    id: str
    email: str
    role: Role
    full_name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def get_id(self) -> str:
        return self.id


class Member(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    role: Role = Role.MEMBER
    created_at: Optional[datetime] = None


class Membership(BaseModel):
    id: str
    user_id: str
    plan_name: str
    status: MembershipStatus
    start_date: date
    end_date: Optional[date] = None
    price: Optional[float] = None


class Payment(BaseModel):
    id: str
    user_id: str
    amount: float
    status: PaymentStatus
    payment_date: datetime
    method: Optional[str] = None


class AttendanceRecord(BaseModel):
    id: str
    user_id: str
    check_in: datetime
    check_out: Optional[datetime] = None

    @property
    def in_progress(self) -> bool:
        return self.check_out is None

    @property
    def duration_minutes(self) -> Optional[int]:
        """Whole minutes between check-in and check-out, rounded half up."""
        if self.check_out is None:
            return None
        seconds = (self.check_out - self.check_in).total_seconds()
        return int(math.floor(seconds / 60 + 0.5))


class TrainerRequest(BaseModel):
    id: str
    user_id: str
    trainer_id: str
    requested_date: datetime
    status: RequestStatus = RequestStatus.PENDING
    notes: Optional[str] = None


class Trainer(BaseModel):
    id: str
    full_name: Optional[str] = None


# Joined views

class Enrollment(BaseModel):
    membership: Membership
    member: Optional[Member] = None


class PaymentEntry(BaseModel):
    payment: Payment
    member: Optional[Member] = None


class TrainerRequestEntry(BaseModel):
    request: TrainerRequest
    member: Optional[Member] = None
    trainer: Optional[Trainer] = None


class DashboardStats(BaseModel):
    total_members: int = 0
    active_members: int = 0
    monthly_revenue: float = 0.0
    attendance_today: int = 0


class MemberStats(BaseModel):
    last_check_in: Optional[datetime] = None
    total_visits: int = 0
    next_training_session: Optional[datetime] = None


ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_row(model: Type[ModelT], row: dict) -> Optional[ModelT]:
    """Validate one row; log and return None when the row does not fit."""
    try:
        return model.model_validate(row)
    except ValidationError as exc:
        logger.warning("Discarding %s row %r: %s", model.__name__, row.get("id"), exc)
        return None


def parse_rows(model: Type[ModelT], rows: Iterable[dict]) -> list[ModelT]:
    parsed = (parse_row(model, row) for row in rows)
    return [item for item in parsed if item is not None]

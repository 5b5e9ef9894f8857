"""
Shared Services

Time helpers and the user lookups both the admin and member views use to
put names next to rows.
"""

import logging
from datetime import datetime, timezone

from gympro.backend import DataService, DataServiceError
from gympro.schemas import Member, parse_rows

logger = logging.getLogger(__name__)


def utcnow():
    return datetime.now(timezone.utc)


def start_of_day(now):
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_month(now):
    """First instant of the month containing ``now``."""
    return start_of_day(now).replace(day=1)


def users_by_id(service: DataService, user_ids):
    """Map of user id to Member for the given ids; empty on failure."""
    ids = sorted({user_id for user_id in user_ids if user_id})
    if not ids:
        return {}
    try:
        rows = service.select('users', filters=[('id', 'in', ids)])
    except DataServiceError:
        logger.exception("Error fetching users for %d ids", len(ids))
        return {}
    return {member.id: member for member in parse_rows(Member, rows)}


def count_or_zero(service: DataService, table, filters=(), what=None):
    try:
        return service.count(table, filters=filters)
    except DataServiceError:
        logger.exception("Error counting %s", what or table)
        return 0

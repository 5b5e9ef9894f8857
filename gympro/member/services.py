"""
Member Services

Everything here is scoped to one member's ``user_id``.
"""

import logging

from gympro.backend import DataService, DataServiceError
from gympro.schemas import (
    AttendanceRecord,
    MemberStats,
    Membership,
    MembershipStatus,
    Payment,
    RequestStatus,
    Role,
    Trainer,
    TrainerRequest,
    TrainerRequestEntry,
    parse_row,
    parse_rows,
)
from gympro.services import count_or_zero, users_by_id, utcnow

logger = logging.getLogger(__name__)


def get_member_stats(service: DataService, user_id, now=None):
    now = now or utcnow()
    last_check_in = None
    next_training_session = None

    try:
        row = service.select_one(
            'attendance',
            filters=[('user_id', 'eq', user_id)],
            order='check_in',
            descending=True,
        )
        record = parse_row(AttendanceRecord, row) if row is not None else None
        if record is not None:
            last_check_in = record.check_in
    except DataServiceError:
        logger.exception("Error fetching last check-in for %s", user_id)

    try:
        row = service.select_one(
            'personal_trainer_requests',
            filters=[
                ('user_id', 'eq', user_id),
                ('status', 'eq', RequestStatus.APPROVED.value),
                ('requested_date', 'gte', now),
            ],
            order='requested_date',
        )
        req = parse_row(TrainerRequest, row) if row is not None else None
        if req is not None:
            next_training_session = req.requested_date
    except DataServiceError:
        logger.exception("Error fetching next training session for %s", user_id)

    return MemberStats(
        last_check_in=last_check_in,
        total_visits=count_or_zero(service, 'attendance', [('user_id', 'eq', user_id)], what='visits'),
        next_training_session=next_training_session,
    )


def get_active_membership(service: DataService, user_id):
    """The member's active membership, or None ("no active membership")."""
    try:
        row = service.select_one(
            'memberships',
            filters=[('user_id', 'eq', user_id), ('status', 'eq', MembershipStatus.ACTIVE.value)],
            order='start_date',
            descending=True,
        )
    except DataServiceError:
        logger.exception("Error fetching membership for %s", user_id)
        return None
    return parse_row(Membership, row) if row is not None else None


def get_recent_payments(service: DataService, user_id, limit=5):
    try:
        rows = service.select(
            'payments',
            filters=[('user_id', 'eq', user_id)],
            order='payment_date',
            descending=True,
            limit=limit,
        )
    except DataServiceError:
        logger.exception("Error fetching payments for %s", user_id)
        return []
    return parse_rows(Payment, rows)


# ----------------------------------------------------------------------
# Attendance
# ----------------------------------------------------------------------

def get_attendance(service: DataService, user_id):
    """Attendance history, latest check-in first."""
    try:
        rows = service.select(
            'attendance',
            filters=[('user_id', 'eq', user_id)],
            order='check_in',
            descending=True,
        )
    except DataServiceError:
        logger.exception("Error fetching attendance for %s", user_id)
        return []
    return parse_rows(AttendanceRecord, rows)


def find_open_session(records):
    for record in records:
        if record.in_progress:
            return record
    return None


def get_open_session(service: DataService, user_id):
    row = service.select_one(
        'attendance',
        filters=[('user_id', 'eq', user_id), ('check_out', 'is', None)],
        order='check_in',
        descending=True,
    )
    return parse_row(AttendanceRecord, row) if row is not None else None


def check_in(service: DataService, user_id, now=None):
    """Open a visit. Returns None when one is already open."""
    if get_open_session(service, user_id) is not None:
        return None
    row = service.insert('attendance', {'user_id': user_id, 'check_in': now or utcnow()})
    logger.info("Member %s checked in", user_id)
    return parse_row(AttendanceRecord, row)


def check_out(service: DataService, user_id, now=None):
    """Close the open visit. Returns None when there is nothing to close."""
    current = get_open_session(service, user_id)
    if current is None:
        return None
    # Only an open record is updated, so a repeated check-out keeps the first time
    rows = service.update(
        'attendance',
        {'check_out': now or utcnow()},
        filters=[('id', 'eq', current.id), ('check_out', 'is', None)],
    )
    if not rows:
        return None
    logger.info("Member %s checked out", user_id)
    return parse_row(AttendanceRecord, rows[0])


# ----------------------------------------------------------------------
# Personal trainer
# ----------------------------------------------------------------------

def list_trainers(service: DataService):
    """Trainers are the users holding the admin role."""
    try:
        rows = service.select(
            'users',
            columns=['id', 'full_name'],
            filters=[('role', 'eq', Role.ADMIN.value)],
            order='full_name',
        )
    except DataServiceError:
        logger.exception("Error fetching trainers")
        return []
    return parse_rows(Trainer, rows)


def list_member_requests(service: DataService, user_id):
    try:
        rows = service.select(
            'personal_trainer_requests',
            filters=[('user_id', 'eq', user_id)],
            order='requested_date',
            descending=True,
        )
    except DataServiceError:
        logger.exception("Error fetching trainer requests for %s", user_id)
        return []

    requests = parse_rows(TrainerRequest, rows)
    trainers = users_by_id(service, (r.trainer_id for r in requests))
    entries = []
    for req in requests:
        trainer = trainers.get(req.trainer_id)
        entries.append(TrainerRequestEntry(
            request=req,
            trainer=Trainer(id=trainer.id, full_name=trainer.full_name) if trainer else None,
        ))
    return entries


def create_trainer_request(service: DataService, user_id, trainer_id, requested_date, notes=None):
    row = service.insert('personal_trainer_requests', {
        'user_id': user_id,
        'trainer_id': trainer_id,
        'requested_date': requested_date,
        'status': RequestStatus.PENDING.value,
        'notes': notes or None,
    })
    logger.info("Member %s requested trainer %s", user_id, trainer_id)
    return parse_row(TrainerRequest, row)

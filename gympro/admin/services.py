"""
Admin Services

Dashboard aggregation and the enrollment, payment and trainer-request
listings. Reads fall back to empty values when the data service fails;
writes raise ``DataServiceError`` for the route to report.
"""

import logging
from collections import defaultdict

from gympro.backend import DataService, DataServiceError
from gympro.schemas import (
    DashboardStats,
    Enrollment,
    Member,
    Membership,
    MembershipStatus,
    Payment,
    PaymentEntry,
    PaymentStatus,
    RequestStatus,
    Role,
    Trainer,
    TrainerRequest,
    TrainerRequestEntry,
    parse_row,
    parse_rows,
)
from gympro.services import count_or_zero, start_of_day, start_of_month, users_by_id, utcnow

logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------
# Dashboard
# ----------------------------------------------------------------------

def monthly_revenue(service: DataService, now=None):
    """Sum of completed payments since the first instant of the current month."""
    now = now or utcnow()
    try:
        rows = service.select(
            'payments',
            columns=['amount'],
            filters=[
                ('status', 'eq', PaymentStatus.COMPLETED.value),
                ('payment_date', 'gte', start_of_month(now)),
            ],
        )
    except DataServiceError:
        logger.exception("Error fetching monthly revenue")
        return 0.0

    total = 0.0
    for row in rows:
        try:
            total += float(row.get('amount') or 0)
        except (TypeError, ValueError):
            logger.warning("Skipping payment with unreadable amount %r", row.get('amount'))
    return round(total, 2)


def get_dashboard_stats(service: DataService, now=None):
    """Member counts, this month's revenue and today's check-ins."""
    now = now or utcnow()
    return DashboardStats(
        total_members=count_or_zero(
            service, 'users', [('role', 'eq', Role.MEMBER.value)], what='members'),
        active_members=count_or_zero(
            service, 'memberships', [('status', 'eq', MembershipStatus.ACTIVE.value)],
            what='active memberships'),
        monthly_revenue=monthly_revenue(service, now),
        attendance_today=count_or_zero(
            service, 'attendance', [('check_in', 'gte', start_of_day(now))],
            what="today's attendance"),
    )


# ----------------------------------------------------------------------
# Members and enrollments
# ----------------------------------------------------------------------

def list_members(service: DataService):
    try:
        rows = service.select('users', filters=[('role', 'eq', Role.MEMBER.value)], order='full_name')
    except DataServiceError:
        logger.exception("Error fetching members")
        return []
    return parse_rows(Member, rows)


def list_enrollments(service: DataService):
    """All memberships with the member's name and email, newest start first."""
    try:
        rows = service.select('memberships', order='start_date', descending=True)
    except DataServiceError:
        logger.exception("Error fetching enrollments")
        return []

    memberships = parse_rows(Membership, rows)
    members = users_by_id(service, (m.user_id for m in memberships))
    return [Enrollment(membership=m, member=members.get(m.user_id)) for m in memberships]


def create_enrollment(service: DataService, user_id, plan_name, status, start_date, end_date=None, price=None):
    row = {
        'user_id': user_id,
        'plan_name': plan_name,
        'status': MembershipStatus(status).value,
        'start_date': start_date,
        'end_date': end_date,
    }
    if price is not None:
        row['price'] = price
    created = service.insert('memberships', row)
    logger.info("Created %s membership for %s", plan_name, user_id)
    return parse_row(Membership, created)


# ----------------------------------------------------------------------
# Payments
# ----------------------------------------------------------------------

def list_payments(service: DataService):
    try:
        rows = service.select('payments', order='payment_date', descending=True)
    except DataServiceError:
        logger.exception("Error fetching payments")
        return []

    payments = parse_rows(Payment, rows)
    members = users_by_id(service, (p.user_id for p in payments))
    return [PaymentEntry(payment=p, member=members.get(p.user_id)) for p in payments]


def payment_totals(entries):
    """Amount per payment status."""
    totals = defaultdict(float)
    for entry in entries:
        totals[entry.payment.status.value] += entry.payment.amount
    return {status: round(amount, 2) for status, amount in totals.items()}


def record_payment(service: DataService, user_id, amount, status, payment_date=None, method=None):
    row = {
        'user_id': user_id,
        'amount': amount,
        'status': PaymentStatus(status).value,
        'payment_date': payment_date or utcnow(),
    }
    if method:
        row['method'] = method
    created = service.insert('payments', row)
    logger.info("Recorded %s payment of %.2f for %s", status, amount, user_id)
    return parse_row(Payment, created)


# ----------------------------------------------------------------------
# Trainer requests
# ----------------------------------------------------------------------

def list_trainer_requests(service: DataService):
    """All requests with member and trainer names, latest requested date first."""
    try:
        rows = service.select('personal_trainer_requests', order='requested_date', descending=True)
    except DataServiceError:
        logger.exception("Error fetching trainer requests")
        return []

    requests = parse_rows(TrainerRequest, rows)
    people = users_by_id(service, [r.user_id for r in requests] + [r.trainer_id for r in requests])
    entries = []
    for req in requests:
        trainer = people.get(req.trainer_id)
        entries.append(TrainerRequestEntry(
            request=req,
            member=people.get(req.user_id),
            trainer=Trainer(id=trainer.id, full_name=trainer.full_name) if trainer else None,
        ))
    return entries


def decide_trainer_request(service: DataService, request_id, decision):
    """Set a request to approved or rejected.

    Returns False when nothing changed: the request is unknown, already in
    that status, or the update failed.
    """
    status = RequestStatus.APPROVED if decision == 'approve' else RequestStatus.REJECTED
    try:
        rows = service.update(
            'personal_trainer_requests',
            {'status': status.value},
            filters=[('id', 'eq', request_id), ('status', 'neq', status.value)],
        )
    except DataServiceError:
        logger.exception("Error updating trainer request %s", request_id)
        return False
    return bool(rows)

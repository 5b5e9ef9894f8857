"""
Admin Routes

Only reachable while an administrator is signed in; the route guard sends
everyone else away before these views run.
"""

import logging
from datetime import date, datetime, timezone

from flask import current_app, render_template, request, redirect, url_for, flash
from gympro.admin import admin_bp
from gympro.admin import services
from gympro.backend import DataServiceError, get_data_service
from gympro.schemas import MembershipStatus, PaymentStatus

logger = logging.getLogger(__name__)


def _parse_date(value, field, required=True):
    value = (value or '').strip()
    if not value:
        if required:
            raise ValueError(f'{field} is required.')
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValueError(f'{field} must be a valid date (YYYY-MM-DD).')


@admin_bp.route('')
def dashboard():
    """Admin dashboard with gym totals."""
    stats = services.get_dashboard_stats(get_data_service())
    return render_template('admin/dashboard.html', stats=stats)


@admin_bp.route('/enrollments')
def enrollments():
    """All memberships, newest first."""
    items = services.list_enrollments(get_data_service())
    return render_template('admin/enrollments.html', enrollments=items)


@admin_bp.route('/enrollments/new', methods=['GET', 'POST'])
def new_enrollment():
    """Create a membership for a member."""
    service = get_data_service()
    members = services.list_members(service)
    form_defaults = {
        'plan_name': current_app.config['DEFAULT_PLAN_NAME'],
        'status': MembershipStatus.ACTIVE.value,
    }

    if request.method == 'POST':
        user_id = request.form.get('user_id', '').strip()
        plan_name = request.form.get('plan_name', '').strip() or current_app.config['DEFAULT_PLAN_NAME']
        status = request.form.get('status', MembershipStatus.ACTIVE.value)
        price = request.form.get('price', '').strip()

        try:
            if not user_id:
                raise ValueError('Please choose a member.')
            if status not in {s.value for s in MembershipStatus}:
                raise ValueError('Please choose a valid status.')
            start_date = _parse_date(request.form.get('start_date'), 'Start date')
            end_date = _parse_date(request.form.get('end_date'), 'End date', required=False)
            if end_date is not None and end_date < start_date:
                raise ValueError('End date cannot be before the start date.')
            price_value = float(price) if price else None
        except ValueError as e:
            flash(str(e), 'danger')
            return render_template('admin/new_enrollment.html', members=members,
                                   form=request.form, statuses=list(MembershipStatus))

        try:
            services.create_enrollment(service, user_id, plan_name, status, start_date, end_date, price_value)
        except DataServiceError as e:
            logger.exception("Error creating enrollment")
            flash(f'Could not create the enrollment: {e}', 'danger')
            return render_template('admin/new_enrollment.html', members=members,
                                   form=request.form, statuses=list(MembershipStatus))

        flash('Enrollment created successfully.', 'success')
        return redirect(url_for('admin.enrollments'))

    return render_template('admin/new_enrollment.html', members=members,
                           form=form_defaults, statuses=list(MembershipStatus))


@admin_bp.route('/payments', methods=['GET', 'POST'])
def payments():
    """Payments list with per-status totals; POST records a payment."""
    service = get_data_service()

    if request.method == 'POST':
        user_id = request.form.get('user_id', '').strip()
        status = request.form.get('status', PaymentStatus.COMPLETED.value)
        method = request.form.get('method', '').strip() or None

        try:
            amount = float(request.form.get('amount', ''))
        except ValueError:
            amount = None

        try:
            if not user_id:
                raise ValueError('Please choose a member.')
            if amount is None or amount <= 0:
                raise ValueError('Amount must be a number greater than zero.')
            if status not in {s.value for s in PaymentStatus}:
                raise ValueError('Please choose a valid status.')
            paid_on = _parse_date(request.form.get('payment_date'), 'Payment date', required=False)
        except ValueError as e:
            flash(str(e), 'danger')
            return redirect(url_for('admin.payments'))

        payment_date = None
        if paid_on is not None:
            payment_date = datetime(paid_on.year, paid_on.month, paid_on.day, tzinfo=timezone.utc)

        try:
            services.record_payment(service, user_id, amount, status, payment_date, method)
            flash('Payment recorded successfully.', 'success')
        except DataServiceError as e:
            logger.exception("Error recording payment")
            flash(f'Could not record the payment: {e}', 'danger')
        return redirect(url_for('admin.payments'))

    entries = services.list_payments(service)
    return render_template('admin/payments.html',
                           payments=entries,
                           totals=services.payment_totals(entries),
                           members=services.list_members(service),
                           statuses=list(PaymentStatus))


@admin_bp.route('/trainer-requests')
def trainer_requests():
    """Personal trainer requests from all members."""
    items = services.list_trainer_requests(get_data_service())
    return render_template('admin/trainer_requests.html', requests=items)


@admin_bp.route('/trainer-requests/<request_id>/<any(approve, reject):decision>', methods=['POST'])
def decide_trainer_request(request_id, decision):
    """Approve or reject a trainer request."""
    services.decide_trainer_request(get_data_service(), request_id, decision)
    return redirect(url_for('admin.trainer_requests'))

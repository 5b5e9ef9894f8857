"""
Member Routes

Views for the signed-in member. ``current_user`` is the session identity.
"""

import logging
from datetime import date, datetime, timezone

from flask import current_app, render_template, request, redirect, url_for, flash
from flask_login import current_user
from gympro.backend import DataServiceError, get_data_service
from gympro.member import member_bp
from gympro.member import services

logger = logging.getLogger(__name__)


@member_bp.route('')
def dashboard():
    """Member dashboard with visit stats and the next training session."""
    stats = services.get_member_stats(get_data_service(), current_user.id)
    return render_template('member/dashboard.html', stats=stats)


@member_bp.route('/status')
def status():
    """Active membership and recent payments."""
    service = get_data_service()
    membership = services.get_active_membership(service, current_user.id)
    payments = services.get_recent_payments(service, current_user.id,
                                            limit=current_app.config['RECENT_PAYMENTS_LIMIT'])
    return render_template('member/status.html', membership=membership, payments=payments)


@member_bp.route('/attendance')
def attendance():
    """Attendance history and the check-in/check-out action."""
    records = services.get_attendance(get_data_service(), current_user.id)
    return render_template('member/attendance.html',
                           records=records,
                           current_session=services.find_open_session(records))


@member_bp.route('/attendance/check-in', methods=['POST'])
def check_in():
    try:
        record = services.check_in(get_data_service(), current_user.id)
        if record is None:
            flash('You are already checked in.', 'info')
    except DataServiceError:
        logger.exception("Error checking in")
    return redirect(url_for('member.attendance'))


@member_bp.route('/attendance/check-out', methods=['POST'])
def check_out():
    try:
        record = services.check_out(get_data_service(), current_user.id)
        if record is None:
            flash('You are not checked in.', 'info')
    except DataServiceError:
        logger.exception("Error checking out")
    return redirect(url_for('member.attendance'))


@member_bp.route('/personal', methods=['GET', 'POST'])
def personal():
    """Book a personal training session and list past requests."""
    service = get_data_service()

    if request.method == 'POST':
        trainer_id = request.form.get('trainer_id', '').strip()
        requested = request.form.get('requested_date', '').strip()
        notes = request.form.get('notes', '').strip()

        if not trainer_id or not requested:
            flash('Please choose a trainer and a date.', 'danger')
            return redirect(url_for('member.personal'))

        try:
            requested_day = date.fromisoformat(requested)
        except ValueError:
            flash('Please provide a valid date.', 'danger')
            return redirect(url_for('member.personal'))

        if requested_day < datetime.now(timezone.utc).date():
            flash('The preferred date cannot be in the past.', 'danger')
            return redirect(url_for('member.personal'))

        requested_date = datetime(requested_day.year, requested_day.month, requested_day.day,
                                  tzinfo=timezone.utc)
        try:
            services.create_trainer_request(service, current_user.id, trainer_id, requested_date, notes)
            flash('Training request submitted.', 'success')
        except DataServiceError as e:
            logger.exception("Error submitting trainer request")
            flash(f'Could not submit the request: {e}', 'danger')
        return redirect(url_for('member.personal'))

    return render_template('member/personal.html',
                           trainers=services.list_trainers(service),
                           requests=services.list_member_requests(service, current_user.id),
                           today=datetime.now(timezone.utc).date())

"""
Auth Routes

Sign-in and registration go through the Remote Data Service; the resulting
identity is stored in the session store.
"""

import logging

from flask import render_template, request, redirect, url_for, flash
from gympro.auth import auth_bp
from gympro.auth import services
from gympro.auth.session import get_session_store
from gympro.backend import AuthError, DataServiceError, get_data_service

logger = logging.getLogger(__name__)


def _home_for(identity):
    if identity.is_admin:
        return url_for('admin.dashboard')
    return url_for('member.dashboard')


@auth_bp.route('/register', methods=['GET', 'POST'])
def register():
    """Member registration route"""
    if request.method == 'POST':
        full_name = request.form.get('full_name', '').strip()
        email = request.form.get('email', '').strip().lower()
        password = request.form.get('password', '')
        confirm_password = request.form.get('confirm_password', '')

        # Validation
        if not full_name or len(full_name) < 3:
            flash('Full name must be at least 3 characters long.', 'danger')
            return render_template('auth/register.html')

        if not email or '@' not in email:
            flash('Please provide a valid email address.', 'danger')
            return render_template('auth/register.html')

        if not password or len(password) < 6:
            flash('Password must be at least 6 characters long.', 'danger')
            return render_template('auth/register.html')

        if password != confirm_password:
            flash('Passwords do not match.', 'danger')
            return render_template('auth/register.html')

        try:
            identity, token = services.register_member(get_data_service(), full_name, email, password)
        except AuthError as e:
            logger.info("Registration rejected for %s: %s", email, e)
            flash('Could not create the account. The email may already be registered.', 'danger')
            return render_template('auth/register.html')
        except DataServiceError:
            logger.exception("Registration error")
            flash('An error occurred during registration. Please try again.', 'danger')
            return render_template('auth/register.html')

        get_session_store().set_identity(identity, token)
        flash(f'Welcome, {identity.full_name}!', 'success')
        return redirect(_home_for(identity))

    return render_template('auth/register.html')


@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    """Sign-in route"""
    if request.method == 'POST':
        email = request.form.get('email', '').strip().lower()
        password = request.form.get('password', '')

        if not email or not password:
            flash('Please provide both email and password.', 'danger')
            return render_template('auth/login.html')

        try:
            identity, token = services.sign_in(get_data_service(), email, password)
        except AuthError:
            flash('Invalid email or password. Please try again.', 'danger')
            return render_template('auth/login.html')
        except DataServiceError:
            logger.exception("Sign-in error")
            flash('The service is unavailable right now. Please try again.', 'danger')
            return render_template('auth/login.html')

        get_session_store().set_identity(identity, token)
        flash(f'Welcome back, {identity.full_name or identity.email}!', 'success')
        return redirect(_home_for(identity))

    return render_template('auth/login.html')


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """Sign-out route; always ends the local session"""
    get_session_store().sign_out()
    flash('You have been logged out successfully.', 'info')
    return redirect(url_for('auth.login'))

"""
Auth Routes - Authentication and authorization
"""

from flask import render_template, redirect, url_for, request, flash, current_app
from flask_login import login_user, logout_user, current_user
from sqlalchemy.exc import SQLAlchemyError
from utils.security import (
    log_ip_activity, generate_reset_token, verify_reset_token
)
from utils.notifications import send_password_reset_email
from models import Profile
from extensions import db, login_manager
from . import auth_bp

MIN_PASSWORD_LENGTH = 8


@login_manager.user_loader
def load_profile(profile_id):
    return db.session.get(Profile, profile_id)


def _safe_next(target):
    if target and target.startswith('/') and not target.startswith('//'):
        return target
    return None


@auth_bp.route('/dashboard/login', methods=['GET', 'POST'])
def login():
    """Admin login; errors are shown inline on the form"""
    error = None
    email = ''

    if request.method == 'POST':
        email = request.form.get('email', '').strip().lower()
        password = request.form.get('password', '')

        profile = Profile.query.filter_by(email=email).first() if email else None
        if profile is None or not profile.check_password(password):
            error = 'Invalid login credentials'
            log_ip_activity('failed_login', f"Email: {email}")
            current_app.logger.warning(f"Failed login for {email}")
        else:
            login_user(profile, remember=bool(request.form.get('remember')))
            log_ip_activity('admin_login', f"Email: {email}")
            current_app.logger.info(f"Login: {email} (admin={profile.is_admin})")
            if not profile.is_admin:
                flash('Your account is not flagged as admin yet.', 'warning')
                return redirect(url_for('dashboard.setup'))
            return redirect(_safe_next(request.args.get('next')) or url_for('dashboard.index'))

    return render_template('auth/login.html', error=error, email=email)


@auth_bp.route('/dashboard/logout')
def logout():
    """Logout current user"""
    if not current_user.is_authenticated:
        flash('Please login to access this page.', 'error')
        return redirect(url_for('auth.login'))

    logout_user()
    flash('Logged out successfully', 'success')
    return redirect(url_for('auth.login'))


@auth_bp.route('/dashboard/forgot-password', methods=['GET', 'POST'])
def forgot_password():
    """Email a password reset link; unknown addresses get the same answer"""
    submitted = False
    error = None

    if request.method == 'POST':
        email = request.form.get('email', '').strip().lower()
        if not email:
            error = 'Please enter your email'
        else:
            profile = Profile.query.filter_by(email=email).first()
            if profile is not None:
                token = generate_reset_token(profile)
                reset_url = url_for('auth.reset_password', token=token, _external=True)
                if not send_password_reset_email(profile.email, reset_url):
                    current_app.logger.error(f"Reset email could not be sent to {email}")
            else:
                current_app.logger.info(f"Password reset requested for unknown email {email}")
            submitted = True

    return render_template('auth/forgot_password.html', submitted=submitted, error=error)


@auth_bp.route('/dashboard/reset-password/<token>', methods=['GET', 'POST'])
def reset_password(token):
    """Choose a new password from a reset link"""
    profile = verify_reset_token(token)
    if profile is None:
        return render_template('auth/reset_password.html', session_error=True), 400

    error = None
    if request.method == 'POST':
        password = request.form.get('password', '')
        confirm_password = request.form.get('confirm_password', '')

        if password != confirm_password:
            error = 'Passwords do not match'
        elif len(password) < MIN_PASSWORD_LENGTH:
            error = f'Password must be at least {MIN_PASSWORD_LENGTH} characters long'
        else:
            try:
                profile.set_password(password)
                db.session.commit()
            except SQLAlchemyError as e:
                db.session.rollback()
                current_app.logger.error(f"Password update failed for {profile.email}: {str(e)}")
                error = 'Failed to reset password'
            else:
                current_app.logger.info(f"Password reset for {profile.email}")
                flash('Password updated. You can now log in.', 'success')
                return redirect(url_for('auth.login'))

    return render_template('auth/reset_password.html', session_error=False, error=error, token=token)

"""
Dashboard Routes - Admin dashboard
Handles: Overview, content management, analytics, submissions inbox, setup
"""

import json
from flask import render_template, redirect, url_for, request, flash, current_app, jsonify, Response
from flask_login import current_user
from sqlalchemy.exc import SQLAlchemyError
from extensions import db, change_feed
from models import Category, Profile, EMBED_TYPES, SUBMISSION_STATUSES
from utils.analytics import load_analytics, overview_stats
from utils.content import ContentForm, ContentManager
from utils.decorators import login_required, admin_required, is_confirmed
from utils.errors import (
    ValidationError, NotFoundError, ConfirmationRequired,
    UploadRejected, UploadFailed, BackendError
)
from utils.inbox import SubmissionInbox, mailto_link
from . import dashboard_bp


def _confirm_page(message, action):
    return render_template('confirm.html', message=message, action=action,
                           cancel=request.referrer or url_for('dashboard.index'))


@dashboard_bp.route('/')
@admin_required
def index():
    """Dashboard landing page with headline figures"""
    try:
        stats = overview_stats()
    except SQLAlchemyError as e:
        current_app.logger.error(f"Error fetching overview stats: {str(e)}")
        stats = {'total_content': 0, 'month_views': 0, 'total_engagement': 0, 'submissions': 0}

    return render_template('dashboard/index.html', stats=stats, user=current_user)


# Content management

@dashboard_bp.route('/content')
@admin_required
def content():
    """All content, drafts included"""
    manager = ContentManager()
    return render_template('dashboard/content.html', contents=manager.list())


def _render_content_form(form, content_id=None, error=None, status=200):
    manager = ContentManager()
    return render_template('dashboard/content_form.html',
                           form=form,
                           content_id=content_id,
                           categories=manager.categories(),
                           embed_types=EMBED_TYPES,
                           error=error), status


def _attach_upload(manager, form):
    """Upload the posted image (if any) into the thumbnail field"""
    file = request.files.get('image')
    if file and file.filename:
        form.thumbnail_url = manager.upload_image(file)


@dashboard_bp.route('/content/new', methods=['GET', 'POST'])
@admin_required
def add_content():
    """Create content (draft unless published is ticked)"""
    if request.method == 'GET':
        return _render_content_form(ContentForm())

    manager = ContentManager()
    form = ContentForm.from_request(request.form)
    try:
        _attach_upload(manager, form)
        manager.create(form)
    except ValidationError as e:
        return _render_content_form(form, error=e.message, status=400)
    except (UploadRejected, UploadFailed) as e:
        return _render_content_form(form, error=e.message, status=e.status_code)
    except BackendError as e:
        flash(f'Error: {e.message}', 'error')
        return _render_content_form(form, error=e.message, status=500)

    flash('Content created successfully!', 'success')
    return redirect(url_for('dashboard.content'))


@dashboard_bp.route('/content/edit/<content_id>', methods=['GET', 'POST'])
@admin_required
def edit_content(content_id):
    """Edit content; the submitted embeds replace the stored ones"""
    manager = ContentManager()
    try:
        existing = manager.get(content_id)
    except NotFoundError:
        flash('Content not found', 'error')
        return redirect(url_for('dashboard.content'))

    if request.method == 'GET':
        return _render_content_form(ContentForm.from_content(existing), content_id=content_id)

    form = ContentForm.from_request(request.form)
    try:
        _attach_upload(manager, form)
        manager.update(content_id, form)
    except ValidationError as e:
        return _render_content_form(form, content_id=content_id, error=e.message, status=400)
    except (UploadRejected, UploadFailed) as e:
        return _render_content_form(form, content_id=content_id, error=e.message, status=e.status_code)
    except BackendError as e:
        flash(f'Error: {e.message}', 'error')
        return _render_content_form(form, content_id=content_id, error=e.message, status=500)

    flash('Content updated successfully!', 'success')
    return redirect(url_for('dashboard.content'))


@dashboard_bp.route('/content/delete/<content_id>', methods=['POST'])
@admin_required
def delete_content(content_id):
    """Delete content after explicit confirmation"""
    manager = ContentManager()
    try:
        manager.delete(content_id, confirmed=is_confirmed())
    except ConfirmationRequired as e:
        return _confirm_page(e.message, url_for('dashboard.delete_content', content_id=content_id))
    except NotFoundError:
        flash('Content not found', 'error')
    except BackendError as e:
        flash(f'Error deleting content: {e.message}', 'error')
    else:
        flash('Content deleted successfully', 'success')

    return redirect(url_for('dashboard.content'))


@dashboard_bp.route('/content/upload', methods=['POST'])
@admin_required
def upload_image():
    """Upload a thumbnail and answer with its public URL"""
    manager = ContentManager()
    try:
        url = manager.upload_image(request.files.get('image'))
    except (UploadRejected, UploadFailed) as e:
        return jsonify({'error': e.message}), e.status_code
    return jsonify({'url': url}), 201


# Analytics

@dashboard_bp.route('/analytics')
@admin_required
def analytics():
    """Analytics page; the browser polls analytics_data for refreshes"""
    try:
        summary = load_analytics()
    except SQLAlchemyError as e:
        current_app.logger.error(f"Error fetching analytics: {str(e)}")
        summary = None

    return render_template('dashboard/analytics.html',
                           summary=summary,
                           refresh_seconds=current_app.config.get('ANALYTICS_REFRESH_SECONDS', 30))


@dashboard_bp.route('/api/analytics')
@admin_required
def analytics_data():
    try:
        return jsonify(load_analytics()), 200
    except SQLAlchemyError as e:
        current_app.logger.error(f"Error fetching analytics: {str(e)}")
        return jsonify({'error': str(getattr(e, 'orig', None) or e)}), 500


# Submissions inbox

@dashboard_bp.route('/submissions')
@admin_required
def submissions():
    """Contact submissions, newest first"""
    inbox = SubmissionInbox()
    inbox.refresh()
    status_filter = request.args.get('status')
    entries = inbox.entries
    if status_filter in SUBMISSION_STATUSES:
        entries = [entry for entry in entries if entry.status == status_filter]

    return render_template('dashboard/submissions.html',
                           submissions=entries,
                           counts=inbox.counts(),
                           statuses=SUBMISSION_STATUSES,
                           status_filter=status_filter)


@dashboard_bp.route('/submissions/view/<submission_id>')
@admin_required
def view_submission(submission_id):
    """Submission detail; opening it marks it read"""
    inbox = SubmissionInbox()
    try:
        submission = inbox.open(submission_id)
    except NotFoundError:
        flash('Submission not found', 'error')
        return redirect(url_for('dashboard.submissions'))
    except BackendError as e:
        flash(f'Error: {e.message}', 'error')
        return redirect(url_for('dashboard.submissions'))

    return render_template('dashboard/view_submission.html',
                           submission=submission,
                           mailto=mailto_link(submission),
                           statuses=SUBMISSION_STATUSES)


@dashboard_bp.route('/submissions/status/<submission_id>', methods=['POST'])
@admin_required
def submission_status(submission_id):
    """Set any status; 'replied' is the usual manual transition"""
    inbox = SubmissionInbox()
    status = request.form.get('status', 'replied')
    try:
        inbox.set_status(submission_id, status)
        flash(f'Marked as {status}', 'success')
    except NotFoundError:
        flash('Submission not found', 'error')
    except (ValidationError, BackendError) as e:
        flash(e.message, 'error')

    return redirect(request.referrer or url_for('dashboard.submissions'))


@dashboard_bp.route('/submissions/delete/<submission_id>', methods=['POST'])
@admin_required
def delete_submission(submission_id):
    """Delete a submission after explicit confirmation"""
    inbox = SubmissionInbox()
    try:
        inbox.delete(submission_id, confirmed=is_confirmed())
    except ConfirmationRequired as e:
        return _confirm_page(e.message, url_for('dashboard.delete_submission', submission_id=submission_id))
    except NotFoundError:
        flash('Submission not found', 'error')
    except BackendError as e:
        flash(e.message, 'error')
    else:
        flash('Submission deleted', 'success')

    return redirect(url_for('dashboard.submissions'))


@dashboard_bp.route('/submissions/stream')
@admin_required
def submissions_stream():
    """
    Server-sent events for every change on the submissions table

    The stream ends after STREAM_MAX_KEEPALIVES idle intervals; the
    EventSource then reconnects.
    """
    keepalive_seconds = current_app.config.get('STREAM_KEEPALIVE_SECONDS', 15)
    max_keepalives = current_app.config.get('STREAM_MAX_KEEPALIVES', 8)
    subscription = change_feed.subscribe(SubmissionInbox.table)
    current_app.logger.debug("Submissions stream opened")

    def generate():
        try:
            yield 'retry: 5000\n\n'
            idle = 0
            while idle < max_keepalives:
                change = subscription.get(timeout=keepalive_seconds)
                if change is None:
                    idle += 1
                    yield ': keep-alive\n\n'
                    continue
                yield f"event: {change.type.lower()}\ndata: {json.dumps(change._asdict())}\n\n"
        finally:
            subscription.unsubscribe()

    return Response(generate(), mimetype='text/event-stream',
                    headers={'Cache-Control': 'no-cache', 'X-Accel-Buffering': 'no'})


# Setup

@dashboard_bp.route('/setup', methods=['GET', 'POST'])
@login_required
def setup():
    """Setup checklist; the first signed-in account may claim admin"""
    admin_exists = Profile.query.filter_by(is_admin=True).count() > 0

    if request.method == 'POST':
        if current_user.is_admin:
            flash('You already have admin access.', 'info')
        elif admin_exists:
            current_app.logger.warning(f"Admin claim refused for {current_user.email}")
            flash('An admin already exists. Ask them to grant you access.', 'error')
        else:
            try:
                current_user.is_admin = True
                db.session.commit()
                current_app.logger.info(f"Admin access granted to {current_user.email}")
                flash('Admin access granted!', 'success')
            except SQLAlchemyError as e:
                db.session.rollback()
                flash(f'Error: {str(getattr(e, "orig", None) or e)}', 'error')
        return redirect(url_for('dashboard.setup'))

    return render_template('dashboard/setup.html',
                           is_admin=current_user.is_admin,
                           admin_exists=admin_exists,
                           database_ready=Category.query.count() > 0)

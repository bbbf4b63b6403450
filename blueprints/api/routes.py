"""
API Routes - JSON endpoints used by the public page and external clients
"""

from flask import request, jsonify, current_app
from sqlalchemy.exc import SQLAlchemyError
from extensions import db
from models import Profile, Submission, EVENT_TYPES
from utils.analytics import report
from utils.decorators import api_admin_required
from utils.feed import ContentFeed
from utils.notifications import notify_new_submission
from utils.security import check_rate_limit, generate_api_token
from . import api_bp

REQUIRED_SUBMISSION_FIELDS = ('name', 'email', 'message')


def _text(body, field):
    value = body.get(field)
    if value is None:
        return ''
    return str(value).strip()


@api_bp.route('/submissions', methods=['POST'])
def create_submission():
    """Contact form endpoint; status always starts as 'new'"""
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return jsonify({'error': 'Request body must be a JSON object'}), 400

    missing = [field for field in REQUIRED_SUBMISSION_FIELDS if not _text(body, field)]
    if missing:
        return jsonify({'error': f"Missing required fields: {', '.join(missing)}"}), 400

    if not check_rate_limit('submissions'):
        return jsonify({'error': 'Too many requests'}), 429

    submission_type = _text(body, 'submission_type') or 'contact'
    current_app.logger.info(f"Submitting form: {_text(body, 'email')} ({submission_type})")

    try:
        submission = Submission(
            name=_text(body, 'name'),
            email=_text(body, 'email'),
            message=_text(body, 'message'),
            phone=_text(body, 'phone') or None,
            subject=_text(body, 'subject') or None,
            submission_type=submission_type,
            status='new',
        )
        db.session.add(submission)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Submission error: {str(e)}")
        return jsonify({'error': str(getattr(e, 'orig', None) or e)}), 500

    current_app.logger.info(f"Submission saved successfully: {submission.id}")
    notify_new_submission(submission)

    return jsonify({
        'success': True,
        'message': 'Submission received successfully!',
        'id': submission.id
    }), 201


@api_bp.route('/submissions', methods=['GET'])
@api_admin_required
def list_submissions():
    """All submissions, newest first"""
    try:
        submissions = Submission.query.order_by(Submission.created_at.desc()).all()
    except SQLAlchemyError as e:
        current_app.logger.error(f"Fetch error: {str(e)}")
        return jsonify({'error': str(getattr(e, 'orig', None) or e)}), 500
    return jsonify({'data': [s.to_dict() for s in submissions]}), 200


@api_bp.route('/analytics', methods=['POST'])
def track_event():
    """Record a view/click/embed_clicked event; the answer never reflects the write"""
    body = request.get_json(silent=True) or {}
    content_id = _text(body, 'content_id')
    event_type = _text(body, 'event_type')

    if not content_id:
        return jsonify({'error': 'content_id is required'}), 400
    if event_type not in EVENT_TYPES:
        return jsonify({'error': f"event_type must be one of: {', '.join(EVENT_TYPES)}"}), 400

    # Body fields carry the visitor's own values; headers are the fallback
    report(content_id, event_type,
           user_agent=_text(body, 'user_agent') or request.headers.get('User-Agent'),
           referrer=_text(body, 'referrer') or request.headers.get('Referer'))
    return jsonify({'accepted': True}), 202


@api_bp.route('/content')
def content_feed():
    """Published content with categories and embeds; ?category= filters in memory"""
    feed = ContentFeed().load()
    return jsonify(feed.to_dict(request.args.get('category'))), 200


@api_bp.route('/auth/token', methods=['POST'])
def issue_token():
    """Exchange admin credentials for a bearer token"""
    body = request.get_json(silent=True) or {}
    email = _text(body, 'email').lower()
    password = body.get('password') or ''

    profile = Profile.query.filter_by(email=email).first() if email else None
    if profile is None or not profile.check_password(password) or not profile.is_admin:
        current_app.logger.warning(f"API token refused for {email}")
        return jsonify({'error': 'Invalid login credentials'}), 401

    return jsonify({
        'token': generate_api_token(profile),
        'expires_in': current_app.config.get('API_TOKEN_MAX_AGE')
    }), 200

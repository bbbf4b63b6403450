"""
Inbox Module - Contact submissions as seen from the admin dashboard

The inbox keeps its own list of entries. Any change on the submissions
table triggers a full re-fetch on the next sync; deletes made through the
inbox update the local list directly.
"""

from urllib.parse import quote
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from extensions import db, change_feed
from models import Submission, SUBMISSION_STATUSES
from .errors import ValidationError, NotFoundError, ConfirmationRequired, BackendError


class SubmissionInbox:

    table = Submission.__tablename__

    def __init__(self, feed=None):
        self.feed = feed or change_feed
        self.entries = []
        self.subscription = None

    def refresh(self):
        """Full re-fetch, newest first"""
        try:
            self.entries = Submission.query.order_by(Submission.created_at.desc()).all()
        except SQLAlchemyError as e:
            current_app.logger.error(f"Error fetching submissions: {str(e)}")
        return self.entries

    def subscribe(self):
        if self.subscription is None:
            self.subscription = self.feed.subscribe(self.table)
        return self.subscription

    def sync(self):
        """Re-fetch when the change feed delivered anything since the last sync"""
        if self.subscription is None:
            return False
        if not self.subscription.drain():
            return False
        self.refresh()
        return True

    def close(self):
        if self.subscription is not None:
            self.subscription.unsubscribe()
            self.subscription = None

    def __enter__(self):
        self.subscribe()
        self.refresh()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def get(self, submission_id):
        submission = db.session.get(Submission, submission_id)
        if submission is None:
            raise NotFoundError('Submission not found')
        return submission

    def open(self, submission_id):
        """Fetch a submission for reading; reading it marks it read"""
        submission = self.get(submission_id)
        if submission.status != 'read':
            self._store_status(submission, 'read')
        return submission

    def mark_replied(self, submission_id):
        return self.set_status(submission_id, 'replied')

    def set_status(self, submission_id, status):
        if status not in SUBMISSION_STATUSES:
            raise ValidationError(f"Unknown status: {status}", fields=['status'])
        submission = self.get(submission_id)
        self._store_status(submission, status)
        return submission

    def _store_status(self, submission, status):
        try:
            submission.status = status
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Error updating status: {str(e)}")
            raise BackendError(str(getattr(e, 'orig', None) or e)) from e

    def delete(self, submission_id, confirmed=False):
        if not confirmed:
            raise ConfirmationRequired('Are you sure you want to delete this submission?')
        submission = self.get(submission_id)
        remaining = [entry for entry in self.entries if entry.id != submission_id]
        try:
            db.session.delete(submission)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Error deleting submission: {str(e)}")
            raise BackendError('Failed to delete submission') from e

        self.entries = remaining
        current_app.logger.info(f"Submission deleted: {submission_id}")

    def counts(self):
        result = {status: 0 for status in SUBMISSION_STATUSES}
        for entry in self.entries:
            result[entry.status] = result.get(entry.status, 0) + 1
        return result


def mailto_link(submission):
    """Mail-client link for replying out of band"""
    subject = f"Re: {submission.subject or 'Your message'}"
    return f"mailto:{submission.email}?subject={quote(subject)}"


__all__ = ['SubmissionInbox', 'mailto_link']

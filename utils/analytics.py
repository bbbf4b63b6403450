"""
Analytics Module - Event reporting and dashboard rollups

Events are written one row per call, never batched, never deduplicated.
Rollups are recomputed in memory from the full raw event set on every
dashboard refresh.
"""

import threading
from datetime import datetime, timedelta, timezone
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models import AnalyticsEvent, Content, Submission, EVENT_TYPES

TREND_DAYS = 7
TOP_CONTENT_LIMIT = 5
UNKNOWN_CATEGORY = 'Unknown'


def record_event(content_id, event_type, user_agent=None, referrer=None):
    """Write a single analytics row. Returns the row, or None on failure."""
    try:
        analytics_event = AnalyticsEvent(
            content_id=content_id,
            event_type=event_type,
            user_agent=(user_agent or '')[:500] or None,
            referrer=(referrer or '')[:1000] or None,
        )
        db.session.add(analytics_event)
        db.session.commit()
        return analytics_event
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Analytics error: {str(e)}")
        return None


def report(content_id, event_type, user_agent=None, referrer=None):
    """
    Fire-and-forget analytics write

    Never raises and never retries. With ANALYTICS_ASYNC the write runs on
    a daemon thread in its own app context; otherwise inline.

    Returns:
        bool: False when the event was refused before any write
    """
    if not content_id or event_type not in EVENT_TYPES:
        current_app.logger.warning(f"Ignoring analytics event {event_type!r} for {content_id!r}")
        return False

    if not current_app.config.get('ANALYTICS_ASYNC', True):
        record_event(content_id, event_type, user_agent, referrer)
        return True

    app = current_app._get_current_object()

    def _write():
        with app.app_context():
            try:
                record_event(content_id, event_type, user_agent, referrer)
            finally:
                db.session.remove()

    try:
        thread = threading.Thread(target=_write)
        thread.daemon = True
        thread.start()
    except RuntimeError as e:
        current_app.logger.error(f"Failed to track event: {str(e)}")
    return True


def _empty_totals(content):
    return {
        'content_id': content.id,
        'title': content.title,
        'views': 0,
        'clicks': 0,
        'embed_clicks': 0,
    }


def _count(totals, event_type):
    if event_type == 'view':
        totals['views'] += 1
    elif event_type == 'click':
        totals['clicks'] += 1
    elif event_type == 'embed_clicked':
        totals['embed_clicks'] += 1


def per_content_totals(events, contents):
    """View/click/embed counts per content, keeping content with at least one view"""
    totals = {content.id: _empty_totals(content) for content in contents}
    for analytics_event in events:
        entry = totals.get(analytics_event.content_id)
        if entry is not None:
            _count(entry, analytics_event.event_type)
    return [entry for entry in totals.values() if entry['views'] > 0]


def local_date(created_at, tz=None):
    """Calendar date of a naive-UTC timestamp in tz (server local time when None)"""
    return created_at.replace(tzinfo=timezone.utc).astimezone(tz).date()


def trend(events, today=None, days=TREND_DAYS, tz=None):
    """Daily counts for today and the preceding days, oldest first"""
    today = today or datetime.now(tz).date()
    window = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
    buckets = {}
    for day in window:
        buckets[day] = {
            'date': day.isoformat(),
            'label': f"{day.strftime('%b')} {day.day}",
            'views': 0,
            'clicks': 0,
            'embed_clicks': 0,
        }

    for analytics_event in events:
        if analytics_event.created_at is None:
            continue
        bucket = buckets.get(local_date(analytics_event.created_at, tz))
        if bucket is not None:
            _count(bucket, analytics_event.event_type)

    return [buckets[day] for day in window]


def per_category_totals(events, contents):
    """All events summed across each category's content; empty categories omitted"""
    events_by_content = {}
    for analytics_event in events:
        events_by_content[analytics_event.content_id] = events_by_content.get(analytics_event.content_id, 0) + 1

    categories = {}
    for content in contents:
        count = events_by_content.get(content.id, 0)
        if count == 0:
            continue
        name = content.category.name if content.category else UNKNOWN_CATEGORY
        if name in categories:
            categories[name]['count'] += count
        else:
            categories[name] = {'name': name, 'count': count}
    return list(categories.values())


def aggregate(events, contents, today=None, tz=None):
    """
    Recompute every dashboard rollup from raw events

    Args:
        events: AnalyticsEvent-like rows (content_id, event_type, created_at)
        contents: Content-like rows (id, title, category)
        today (date, optional): anchor of the 7-day trend
        tz (tzinfo, optional): zone the trend days are counted in, local by default

    Returns:
        dict: per_content, trend, categories, top_content and totals
    """
    per_content = per_content_totals(events, contents)
    top_content = sorted(per_content, key=lambda entry: entry['views'], reverse=True)[:TOP_CONTENT_LIMIT]

    return {
        'per_content': per_content,
        'trend': trend(events, today=today, tz=tz),
        'categories': per_category_totals(events, contents),
        'top_content': top_content,
        'totals': {
            'views': sum(entry['views'] for entry in per_content),
            'clicks': sum(entry['clicks'] for entry in per_content),
            'embed_clicks': sum(entry['embed_clicks'] for entry in per_content),
        },
    }


def load_analytics(today=None):
    """Read all events and all published content, then aggregate"""
    events = AnalyticsEvent.query.order_by(AnalyticsEvent.created_at.desc()).all()
    contents = Content.query.filter_by(published=True).all()
    current_app.logger.debug(f"Aggregating {len(events)} analytics events over {len(contents)} items")
    return aggregate(events, contents, today=today)


def overview_stats(now=None):
    """Headline figures for the dashboard landing page"""
    now = now or datetime.now()
    if now.tzinfo is None:
        now = now.astimezone()
    start_of_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    # created_at is stored as naive UTC
    start_of_month = start_of_month.astimezone(timezone.utc).replace(tzinfo=None)

    return {
        'total_content': Content.query.filter_by(published=True).count(),
        'month_views': AnalyticsEvent.query.filter(
            AnalyticsEvent.event_type == 'view',
            AnalyticsEvent.created_at >= start_of_month
        ).count(),
        'total_engagement': AnalyticsEvent.query.count(),
        'submissions': Submission.query.count(),
    }


__all__ = [
    'record_event',
    'report',
    'per_content_totals',
    'local_date',
    'trend',
    'per_category_totals',
    'aggregate',
    'load_analytics',
    'overview_stats'
]

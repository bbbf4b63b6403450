"""
Realtime Module - In-process change feed for table subscriptions

ORM insert/update/delete events are collected per session and published once
the transaction commits, so subscribers never see rolled-back changes.
"""

import queue
import threading
from collections import defaultdict, namedtuple

from sqlalchemy import event
from sqlalchemy.orm import Session, object_session


ChangeEvent = namedtuple('ChangeEvent', ['table', 'type', 'record_id'])

_PENDING_KEY = 'pending_changes'


class Subscription:
    """Handle returned by ChangeFeed.subscribe; holds undelivered events"""

    def __init__(self, feed, table):
        self.feed = feed
        self.table = table
        self.events = queue.Queue()
        self.active = True

    def get(self, timeout=None):
        """Block until the next event arrives; None on timeout"""
        try:
            return self.events.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self):
        """Return every pending event without blocking"""
        pending = []
        while True:
            try:
                pending.append(self.events.get_nowait())
            except queue.Empty:
                return pending

    def unsubscribe(self):
        self.feed.remove(self)
        self.active = False


class ChangeFeed:
    """Per-table publish/subscribe registry"""

    def __init__(self):
        self._subscribers = defaultdict(list)
        self._lock = threading.Lock()
        self._tracked = set()
        self._session_hooked = False

    def subscribe(self, table):
        subscription = Subscription(self, table)
        with self._lock:
            self._subscribers[table].append(subscription)
        return subscription

    def remove(self, subscription):
        with self._lock:
            subscribers = self._subscribers.get(subscription.table, [])
            if subscription in subscribers:
                subscribers.remove(subscription)

    def subscriber_count(self, table):
        with self._lock:
            return len(self._subscribers.get(table, []))

    def publish(self, change):
        with self._lock:
            subscribers = list(self._subscribers.get(change.table, []))
        for subscription in subscribers:
            subscription.events.put(change)

    def track(self, model):
        """Publish insert/update/delete events of a mapped model after commit"""
        if model in self._tracked:
            return
        self._tracked.add(model)
        table = model.__tablename__

        def _queue(change_type):
            def listener(mapper, connection, target):
                session = object_session(target)
                if session is None:
                    return
                session.info.setdefault(_PENDING_KEY, []).append(
                    ChangeEvent(table, change_type, target.id))
            return listener

        event.listen(model, 'after_insert', _queue('INSERT'))
        event.listen(model, 'after_update', _queue('UPDATE'))
        event.listen(model, 'after_delete', _queue('DELETE'))

        if not self._session_hooked:
            event.listen(Session, 'after_commit', self._publish_pending)
            event.listen(Session, 'after_rollback', self._discard_pending)
            self._session_hooked = True

    def _publish_pending(self, session):
        for change in session.info.pop(_PENDING_KEY, []):
            self.publish(change)

    def _discard_pending(self, session):
        session.info.pop(_PENDING_KEY, None)


__all__ = ['ChangeEvent', 'ChangeFeed', 'Subscription']

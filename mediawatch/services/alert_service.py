"""
Keyword alert evaluation over freshly ingested posts.
"""
import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from mediawatch.core.config import settings
from mediawatch.core.exceptions import StoreError
from mediawatch.schemas.analysis_result import AlertEvent
from mediawatch.schemas.data_ingestion import AlertRule, Post
from mediawatch.services.stores import Notifier, PostStore, RuleStore

logger = logging.getLogger(__name__)


def rule_matches(rule: AlertRule, post: Post) -> bool:
    keyword = rule.keyword.lower()
    if keyword in (post.content or "").lower():
        return True
    return any(keyword in tag.lower() for tag in post.tags)


class AlertEvaluator:
    """
    Matches active rules against the posts of the trailing alert window.

    Every (rule, post) match counts once, so a rule hitting three posts moves
    its trigger count by three. Counts are summed per rule and written once at
    the end of the pass; delivery happens afterwards and never undoes a count.
    """

    def __init__(
        self,
        post_store: PostStore,
        rule_store: RuleStore,
        notifier: Optional[Notifier] = None,
        clock: Optional[Callable[[], datetime]] = None,
        window_minutes: Optional[int] = None,
    ):
        self.post_store = post_store
        self.rule_store = rule_store
        self.notifier = notifier
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.window_minutes = window_minutes or settings.alert_window_minutes

    def evaluate_alerts(self) -> List[AlertEvent]:
        rules = self.rule_store.active_rules()
        if not rules:
            return []

        now = self.clock()
        posts = self.post_store.posts_since(now - timedelta(minutes=self.window_minutes))
        if not posts:
            return []

        increments: Counter = Counter()
        events: List[AlertEvent] = []

        for rule in rules:
            if not rule.keyword or not rule.keyword.strip():
                logger.warning(f"Skipping alert rule {rule.id}: empty keyword")
                continue
            for post in posts:
                try:
                    matched = rule_matches(rule, post)
                except Exception as e:
                    logger.warning(f"Skipping post {post.id} for rule {rule.id}: {e}")
                    continue
                if matched:
                    increments[rule.id] += 1
                    events.append(AlertEvent(rule=rule, post=post, triggered_at=now))
                    logger.debug(f"Rule {rule.id} matched post {post.id}")

        self._commit(increments)
        self._deliver(events)
        return events

    def _commit(self, increments: Counter) -> None:
        for rule_id, by in increments.items():
            try:
                self.rule_store.increment_trigger(rule_id, by)
            except StoreError as e:
                logger.error(f"Could not record {by} triggers for rule {rule_id}: {e}")

    def _deliver(self, events: List[AlertEvent]) -> None:
        if self.notifier is None:
            return
        for event in events:
            try:
                event.delivered = bool(self.notifier.notify(event))
            except Exception as e:
                logger.error(f"Alert delivery failed for rule {event.rule.id}: {e}")
                event.delivered = False
            if not event.delivered:
                logger.error(f"Alert for rule {event.rule.id} on post {event.post.id} was not delivered")

"""
Collaborator interfaces used by the monitoring core, plus in-memory backends.

The core only talks to these protocols. The in-memory backends serve the
default single-process deployment and the test-suite.
"""
import logging
import threading
from datetime import datetime
from typing import Dict, List, Optional, Protocol

from mediawatch.core.exceptions import StoreError
from mediawatch.schemas.analysis_result import AlertEvent
from mediawatch.schemas.data_ingestion import AlertRule, Post, Sentiment

logger = logging.getLogger(__name__)


class PostStore(Protocol):
    def posts_since(self, timestamp: datetime) -> List[Post]: ...

    def append(self, post: Post) -> None: ...

    def update_sentiment(self, post_id: str, label: Sentiment, score: float) -> None: ...


class RuleStore(Protocol):
    def active_rules(self) -> List[AlertRule]: ...

    def increment_trigger(self, rule_id: str, by: int) -> None: ...


class Notifier(Protocol):
    def notify(self, event: AlertEvent) -> bool: ...


class InMemoryPostStore:
    """Append-only post collection ordered by insertion."""

    def __init__(self):
        self._posts: Dict[str, Post] = {}
        self._lock = threading.Lock()

    def posts_since(self, timestamp: datetime) -> List[Post]:
        with self._lock:
            return [p for p in self._posts.values() if p.created_at >= timestamp]

    def append(self, post: Post) -> None:
        with self._lock:
            if post.id in self._posts:
                raise StoreError(f"Post {post.id} already exists")
            self._posts[post.id] = post

    def update_sentiment(self, post_id: str, label: Sentiment, score: float) -> None:
        with self._lock:
            post = self._posts.get(post_id)
            if post is None:
                raise StoreError(f"Post {post_id} not found")
            if post.processed:
                logger.warning(f"Post {post_id} already classified, sentiment left unchanged")
                return
            self._posts[post_id] = post.model_copy(
                update={"sentiment": label, "sentiment_score": score, "processed": True})

    def get(self, post_id: str) -> Optional[Post]:
        with self._lock:
            return self._posts.get(post_id)

    def __len__(self) -> int:
        return len(self._posts)


class InMemoryRuleStore:
    """Alert rules keyed by id. Counters only move up."""

    def __init__(self, rules: Optional[List[AlertRule]] = None):
        self._rules: Dict[str, AlertRule] = {}
        self._lock = threading.Lock()
        for rule in rules or []:
            self.add(rule)

    def add(self, rule: AlertRule) -> AlertRule:
        with self._lock:
            self._rules[rule.id] = rule.model_copy()
            return rule

    def get(self, rule_id: str) -> Optional[AlertRule]:
        with self._lock:
            rule = self._rules.get(rule_id)
            return rule.model_copy() if rule else None

    def all(self) -> List[AlertRule]:
        with self._lock:
            return [r.model_copy() for r in self._rules.values()]

    def active_rules(self) -> List[AlertRule]:
        with self._lock:
            return [r.model_copy() for r in self._rules.values() if r.active]

    def increment_trigger(self, rule_id: str, by: int) -> None:
        if by < 0:
            raise ValueError("Trigger count can only increase")
        with self._lock:
            rule = self._rules.get(rule_id)
            if rule is None:
                raise StoreError(f"Alert rule {rule_id} not found")
            rule.trigger_count += by

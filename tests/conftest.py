from datetime import datetime, timedelta, timezone
from itertools import count

import pytest

from mediawatch.schemas.data_ingestion import AlertRule, Post, Sentiment
from mediawatch.services.nlp_service import SentimentClassifier
from mediawatch.services.stores import InMemoryPostStore, InMemoryRuleStore

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

_ids = count(1)


def make_post(content="Plain update", minutes_ago=0, category="General",
              sentiment=Sentiment.NEUTRAL, tags=None, source="Twitter", **kwargs):
    return Post(
        id=kwargs.pop("id", f"p{next(_ids)}"),
        source=source,
        content=content,
        created_at=NOW - timedelta(minutes=minutes_ago),
        category=category,
        sentiment=sentiment,
        tags=tags or [],
        processed=True,
        **kwargs,
    )


def make_rule(keyword, rule_id=None, **kwargs):
    return AlertRule(id=rule_id or f"r-{keyword}", keyword=keyword, **kwargs)


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def post_store():
    return InMemoryPostStore()


@pytest.fixture
def rule_store():
    return InMemoryRuleStore()


@pytest.fixture
def classifier(tmp_path):
    return SentimentClassifier(model_path=str(tmp_path / "models" / "sentiment.joblib"))

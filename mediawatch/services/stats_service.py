"""Dashboard aggregates over stored posts."""
from collections import Counter
from datetime import datetime, timedelta
from typing import Dict, List, Sequence

from mediawatch.schemas.analysis_result import CategoryCount, DashboardStats, TimeSeriesPoint
from mediawatch.schemas.data_ingestion import Post, Sentiment


def _top(counter: Counter, limit: int = 5) -> List[CategoryCount]:
    return [CategoryCount(name=name, count=count) for name, count in counter.most_common(limit)]


def dashboard_stats(posts: Sequence[Post]) -> DashboardStats:
    sentiments = Counter(p.sentiment for p in posts)
    return DashboardStats(
        total_posts=len(posts),
        positive=sentiments[Sentiment.POSITIVE],
        neutral=sentiments[Sentiment.NEUTRAL],
        negative=sentiments[Sentiment.NEGATIVE],
        categories=_top(Counter(p.category for p in posts)),
        sources=_top(Counter(p.source for p in posts)),
    )


def time_series(posts: Sequence[Post], now: datetime, hours: int = 24) -> List[TimeSeriesPoint]:
    """Hourly post counts for the last ``hours`` hours, oldest bucket first."""
    start = now - timedelta(hours=hours)
    buckets: Dict[datetime, List[Post]] = {}
    for post in posts:
        if post.created_at < start:
            continue
        hour = post.created_at.replace(minute=0, second=0, microsecond=0)
        buckets.setdefault(hour, []).append(post)

    return [
        TimeSeriesPoint(
            time=hour,
            count=len(items),
            positive=sum(1 for p in items if p.sentiment == Sentiment.POSITIVE),
            negative=sum(1 for p in items if p.sentiment == Sentiment.NEGATIVE),
        )
        for hour, items in sorted(buckets.items())
    ]

"""
Trend forecasting over the recent post history.

Combines a per-category least-squares projection of daily volume, a
recent-vs-older comparison of sentiment labels and a frequency count of
long words in the newest posts.
"""
import logging
import re
from collections import Counter, defaultdict
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from mediawatch.core.config import settings
from mediawatch.schemas.analysis_result import (
    EmergingTopic,
    Outlook,
    PredictedTrend,
    SentimentForecast,
    TrendDirection,
    TrendPrediction,
)
from mediawatch.schemas.data_ingestion import Post, Sentiment
from mediawatch.services.stores import PostStore

logger = logging.getLogger(__name__)

SLOPE_THRESHOLD = 0.5
SHIFT_THRESHOLD = 10.0
MAX_TRENDS = 5
MAX_TOPICS = 20
MIN_TOPIC_WORD_LENGTH = 5
RECENT_HOURS = 6
TOKEN_SPLIT_RE = re.compile(r"[\s.,!?:;]+")

INSUFFICIENT_DATA_MESSAGE = "Insufficient data for prediction"


def fit_line(counts: Sequence[int]) -> Tuple[float, float]:
    """Ordinary least squares over (i, counts[i]); returns (slope, intercept)."""
    n = len(counts)
    sum_x = sum(range(n))
    sum_y = sum(counts)
    sum_xy = sum(i * c for i, c in enumerate(counts))
    sum_x2 = sum(i * i for i in range(n))

    denominator = n * sum_x2 - sum_x * sum_x
    slope = (n * sum_xy - sum_x * sum_y) / denominator if denominator else 0.0
    intercept = (sum_y - slope * sum_x) / n
    return slope, intercept


def daily_counts(posts: Sequence[Post]) -> List[int]:
    per_day: Dict[date, int] = defaultdict(int)
    for post in posts:
        per_day[post.created_at.date()] += 1
    return [per_day[day] for day in sorted(per_day)]


def project_category(category: str, counts: Sequence[int]) -> PredictedTrend:
    slope, intercept = fit_line(counts)
    n = len(counts)
    predicted = slope * n + intercept

    if slope > SLOPE_THRESHOLD:
        direction = TrendDirection.RISING
    elif slope < -SLOPE_THRESHOLD:
        direction = TrendDirection.FALLING
    else:
        direction = TrendDirection.STABLE

    current_avg = sum(counts) / n
    change = (predicted - current_avg) / current_avg * 100 if current_avg > 0 else 0.0

    return PredictedTrend(
        category=category,
        current_volume=int(current_avg),
        predicted_volume=max(0, int(predicted)),
        trend=direction,
        change_percent=round(change, 1),
        confidence=min(95.0, 50 + abs(slope) * 10),
    )


def sentiment_shift(recent: int, older: int) -> float:
    if older == 0:
        return 100.0 if recent > 0 else 0.0
    return (recent - older) / older * 100


def forecast_sentiment(recent: Sequence[Post], older: Sequence[Post]) -> SentimentForecast:
    recent_counts: Counter = Counter(p.sentiment for p in recent)
    older_counts: Counter = Counter(p.sentiment for p in older)

    positive_shift = sentiment_shift(
        recent_counts[Sentiment.POSITIVE], older_counts[Sentiment.POSITIVE])
    negative_shift = sentiment_shift(
        recent_counts[Sentiment.NEGATIVE], older_counts[Sentiment.NEGATIVE])

    if positive_shift > SHIFT_THRESHOLD:
        outlook = Outlook.IMPROVING
    elif negative_shift > SHIFT_THRESHOLD:
        outlook = Outlook.DETERIORATING
    else:
        outlook = Outlook.NEUTRAL

    dominant = recent_counts.most_common(1)
    return SentimentForecast(
        outlook=outlook,
        positive_shift=positive_shift,
        negative_shift=negative_shift,
        predicted_dominant_sentiment=dominant[0][0] if dominant else Sentiment.NEUTRAL,
    )


def emerging_topics(posts: Sequence[Post]) -> List[EmergingTopic]:
    # Counter.most_common keeps first-seen order among equal counts.
    words: Counter = Counter()
    for post in posts:
        for token in TOKEN_SPLIT_RE.split(post.content.lower()):
            if len(token) >= MIN_TOPIC_WORD_LENGTH:
                words[token] += 1
    return [
        EmergingTopic(keyword=word, frequency=count, growth_rate=0.0)
        for word, count in words.most_common(MAX_TOPICS)
    ]


def recommendations(trends: Sequence[PredictedTrend], forecast: SentimentForecast) -> List[str]:
    result: List[str] = []

    rising = [t.category for t in trends if t.trend == TrendDirection.RISING]
    if rising:
        result.append(f"Monitor closely: {', '.join(rising[:3])} showing upward trend")

    if forecast.outlook == Outlook.DETERIORATING:
        result.append("Sentiment declining - consider proactive communication strategy")
    elif forecast.outlook == Outlook.IMPROVING:
        result.append("Positive sentiment momentum - opportunity for engagement")

    if not result:
        result.append("Continue standard monitoring protocols")
    return result


class TrendPredictor:
    """Builds a `TrendPrediction` from the trailing window of the post store."""

    def __init__(
        self,
        post_store: PostStore,
        clock: Optional[Callable[[], datetime]] = None,
        window_days: Optional[int] = None,
        min_posts: Optional[int] = None,
        min_category_posts: Optional[int] = None,
        min_days: Optional[int] = None,
    ):
        self.post_store = post_store
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.window_days = window_days or settings.trend_window_days
        self.min_posts = min_posts or settings.trend_min_posts
        self.min_category_posts = min_category_posts or settings.trend_min_category_posts
        self.min_days = min_days or settings.trend_min_days

    def predict_trends(self, hours_ahead: int = 24) -> TrendPrediction:
        now = self.clock()
        posts = self.post_store.posts_since(now - timedelta(days=self.window_days))

        if len(posts) < self.min_posts:
            logger.info(
                f"Trend prediction skipped: {len(posts)} posts in window, {self.min_posts} required")
            return TrendPrediction(
                generated_at=now,
                forecast_hours=hours_ahead,
                confidence=0,
                message=INSUFFICIENT_DATA_MESSAGE,
            )

        newest_first = sorted(posts, key=lambda p: p.created_at, reverse=True)
        half = len(newest_first) // 2

        trends = self.category_trends(posts)
        forecast = forecast_sentiment(newest_first[:half], newest_first[half:])
        topics = emerging_topics(newest_first[:len(newest_first) // 3])
        confidence = self.overall_confidence(posts, now)

        logger.info(
            f"Trend prediction over {len(posts)} posts: {len(trends)} category trends, "
            f"outlook {forecast.outlook.value}, confidence {confidence}")

        return TrendPrediction(
            generated_at=now,
            forecast_hours=hours_ahead,
            predicted_trends=trends,
            sentiment_forecast=forecast,
            emerging_topics=topics,
            confidence=confidence,
            recommendations=recommendations(trends, forecast),
        )

    def category_trends(self, posts: Sequence[Post]) -> List[PredictedTrend]:
        by_category: Dict[str, List[Post]] = defaultdict(list)
        for post in posts:
            by_category[post.category].append(post)

        trends: List[PredictedTrend] = []
        for category, category_posts in by_category.items():
            if len(category_posts) < self.min_category_posts:
                continue
            counts = daily_counts(category_posts)
            if len(counts) < self.min_days:
                continue
            trends.append(project_category(category, counts))

        trends.sort(key=lambda t: t.change_percent, reverse=True)
        return trends[:MAX_TRENDS]

    @staticmethod
    def overall_confidence(posts: Sequence[Post], now: datetime) -> int:
        volume_score = min(40, len(posts) // 10)
        cutoff = now - timedelta(hours=RECENT_HOURS)
        recency_score = 30 if any(p.created_at > cutoff for p in posts) else 15
        consistency_score = 25
        return volume_score + recency_score + consistency_score

import pytest

from mediawatch.schemas.analysis_result import Outlook, TrendDirection
from mediawatch.schemas.data_ingestion import Sentiment
from mediawatch.services.trend_service import (
    INSUFFICIENT_DATA_MESSAGE,
    TrendPredictor,
    emerging_topics,
    fit_line,
    forecast_sentiment,
    project_category,
    recommendations,
)

from conftest import NOW, make_post

DAY = 24 * 60


def _daily(store, category, counts, content="Routine update"):
    """Add ``counts[i]`` posts for day ``i``, the last entry being today."""
    days = len(counts)
    for i, n in enumerate(counts):
        for j in range(n):
            store.append(make_post(
                content, minutes_ago=(days - 1 - i) * DAY + j, category=category))


def test_fit_line_perfectly_linear():
    slope, intercept = fit_line([10, 20, 30])
    assert slope == pytest.approx(10)
    assert intercept == pytest.approx(10)


def test_project_category_rising():
    trend = project_category("Economy", [10, 20, 30])
    assert trend.trend == TrendDirection.RISING
    assert trend.current_volume == 20
    assert trend.predicted_volume == 40
    assert trend.change_percent == 100.0
    assert trend.confidence == 95


def test_project_category_falling_clamps_volume():
    trend = project_category("Health", [10, 2, 0])
    assert trend.trend == TrendDirection.FALLING
    assert trend.predicted_volume == 0
    assert trend.change_percent < 0


def test_project_category_stable():
    trend = project_category("Social", [4, 4, 4, 5])
    assert trend.trend == TrendDirection.STABLE
    assert trend.confidence == pytest.approx(53)


def test_sentiment_forecast_improving():
    recent = [make_post(sentiment=Sentiment.POSITIVE) for _ in range(8)]
    older = [make_post(sentiment=Sentiment.POSITIVE) for _ in range(4)]
    forecast = forecast_sentiment(recent, older)
    assert forecast.positive_shift == 100
    assert forecast.outlook == Outlook.IMPROVING
    assert forecast.predicted_dominant_sentiment == Sentiment.POSITIVE


def test_sentiment_forecast_deteriorating():
    recent = [make_post(sentiment=Sentiment.NEGATIVE) for _ in range(3)]
    older = [make_post(sentiment=Sentiment.POSITIVE) for _ in range(3)]
    forecast = forecast_sentiment(recent, older)
    assert forecast.positive_shift == -100
    assert forecast.negative_shift == 100
    assert forecast.outlook == Outlook.DETERIORATING


def test_sentiment_forecast_positive_wins_when_both_rise():
    recent = [make_post(sentiment=Sentiment.POSITIVE), make_post(sentiment=Sentiment.NEGATIVE)]
    forecast = forecast_sentiment(recent, [])
    assert forecast.outlook == Outlook.IMPROVING


def test_sentiment_forecast_empty_recent_half():
    forecast = forecast_sentiment([], [make_post()])
    assert forecast.outlook == Outlook.NEUTRAL
    assert forecast.predicted_dominant_sentiment == Sentiment.NEUTRAL


def test_emerging_topics_filters_short_words():
    posts = [
        make_post("Flood warning: river rising. Flood, again!"),
        make_post("river levels; the flood"),
    ]
    topics = emerging_topics(posts)
    assert [(t.keyword, t.frequency) for t in topics] == [
        ("flood", 3), ("river", 2), ("warning", 1), ("rising", 1), ("again", 1), ("levels", 1)]
    assert all(t.growth_rate == 0 for t in topics)


def test_emerging_topics_limited_to_twenty():
    words = " ".join(f"keyword{i:02d}" for i in range(30))
    assert len(emerging_topics([make_post(words)])) == 20


def test_recommendations_default():
    forecast = forecast_sentiment([], [])
    assert recommendations([], forecast) == ["Continue standard monitoring protocols"]


def test_recommendations_list_top_three_rising():
    trends = [project_category(name, [1, 5, 9]) for name in ("A", "B", "C", "D")]
    recent = [make_post(sentiment=Sentiment.NEGATIVE)]
    result = recommendations(trends, forecast_sentiment(recent, []))
    assert result[0] == "Monitor closely: A, B, C showing upward trend"
    assert result[1] == "Sentiment declining - consider proactive communication strategy"


def test_predict_with_insufficient_data(post_store, clock):
    _daily(post_store, "Tech", [3, 3, 3])
    prediction = TrendPredictor(post_store, clock=clock).predict_trends(24)
    assert prediction.confidence == 0
    assert prediction.predicted_trends == []
    assert prediction.emerging_topics == []
    assert prediction.message == INSUFFICIENT_DATA_MESSAGE


def test_predict_ignores_posts_outside_window(post_store, clock):
    for i in range(12):
        post_store.append(make_post(minutes_ago=8 * DAY + i))
    prediction = TrendPredictor(post_store, clock=clock).predict_trends(24)
    assert prediction.confidence == 0


def test_predict_rising_category_end_to_end(post_store, clock):
    _daily(post_store, "Tech", [2, 4, 6], content="Smartphone launch announced today")
    prediction = TrendPredictor(post_store, clock=clock).predict_trends(24)

    assert prediction.forecast_hours == 24
    assert prediction.generated_at == NOW
    [tech] = prediction.predicted_trends
    assert tech.category == "Tech"
    assert tech.trend == TrendDirection.RISING
    assert tech.confidence >= 50
    # 12 posts -> volume 1, fresh posts -> recency 30, fixed 25
    assert prediction.confidence == 56
    assert prediction.recommendations[0] == "Monitor closely: Tech showing upward trend"
    assert prediction.emerging_topics[0].frequency == 4


def test_predict_skips_sparse_categories(post_store, clock):
    _daily(post_store, "Tech", [2, 4, 6])
    _daily(post_store, "Health", [4])           # too few posts
    _daily(post_store, "Economy", [3, 3])       # too few days
    prediction = TrendPredictor(post_store, clock=clock).predict_trends(12)
    assert [t.category for t in prediction.predicted_trends] == ["Tech"]


def test_predict_keeps_top_five_by_change(post_store, clock):
    for i, counts in enumerate(([1, 2, 9], [3, 3, 3], [5, 3, 1], [2, 4, 6], [1, 1, 8], [6, 6, 7])):
        _daily(post_store, f"C{i}", counts)
    trends = TrendPredictor(post_store, clock=clock).predict_trends().predicted_trends
    assert len(trends) == 5
    changes = [t.change_percent for t in trends]
    assert changes == sorted(changes, reverse=True)
    assert "C2" not in [t.category for t in trends]


def test_predict_recency_score_drops_without_fresh_posts(post_store, clock):
    for i in range(20):
        post_store.append(make_post(minutes_ago=DAY + i))
    prediction = TrendPredictor(post_store, clock=clock).predict_trends()
    assert prediction.confidence == 2 + 15 + 25


def test_predict_uses_recent_half_for_sentiment(post_store, clock):
    for i in range(6):
        post_store.append(make_post(minutes_ago=10 + i, sentiment=Sentiment.NEGATIVE))
    for i in range(6):
        post_store.append(make_post(minutes_ago=DAY + i, sentiment=Sentiment.POSITIVE))
    forecast = TrendPredictor(post_store, clock=clock).predict_trends().sentiment_forecast
    assert forecast.outlook == Outlook.DETERIORATING
    assert forecast.predicted_dominant_sentiment == Sentiment.NEGATIVE

from datetime import datetime
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from mediawatch.schemas.data_ingestion import AlertRule, Post, Sentiment, utcnow


class TrendDirection(str, Enum):
    RISING = "RISING"
    FALLING = "FALLING"
    STABLE = "STABLE"


class Outlook(str, Enum):
    IMPROVING = "IMPROVING"
    DETERIORATING = "DETERIORATING"
    NEUTRAL = "NEUTRAL"


class SentimentResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: Sentiment
    score: float = Field(ge=-1.0, le=1.0)
    confident: bool


class PredictedTrend(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: str
    current_volume: int
    predicted_volume: int = Field(ge=0)
    trend: TrendDirection
    change_percent: float
    confidence: float


class SentimentForecast(BaseModel):
    model_config = ConfigDict(frozen=True)

    outlook: Outlook = Outlook.NEUTRAL
    positive_shift: float = 0.0
    negative_shift: float = 0.0
    predicted_dominant_sentiment: Sentiment = Sentiment.NEUTRAL


class EmergingTopic(BaseModel):
    model_config = ConfigDict(frozen=True)

    keyword: str
    frequency: int
    growth_rate: float = 0.0


class TrendPrediction(BaseModel):
    model_config = ConfigDict(frozen=True)

    generated_at: datetime
    forecast_hours: int
    predicted_trends: List[PredictedTrend] = Field(default_factory=list)
    sentiment_forecast: SentimentForecast = Field(default_factory=SentimentForecast)
    emerging_topics: List[EmergingTopic] = Field(default_factory=list)
    confidence: int = Field(ge=0, le=100)
    recommendations: List[str] = Field(default_factory=list)
    message: str = ""


class AlertEvent(BaseModel):
    rule: AlertRule
    post: Post
    triggered_at: datetime = Field(default_factory=utcnow)
    delivered: bool = False


class IngestResponse(BaseModel):
    posts: List[Post]
    alerts: List[AlertEvent]


class RetrainResponse(BaseModel):
    trained_on: int


class CategoryCount(BaseModel):
    name: str
    count: int


class DashboardStats(BaseModel):
    total_posts: int
    positive: int
    neutral: int
    negative: int
    categories: List[CategoryCount]
    sources: List[CategoryCount]


class TimeSeriesPoint(BaseModel):
    time: datetime
    count: int
    positive: int
    negative: int

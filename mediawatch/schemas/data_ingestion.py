from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Sentiment(str, Enum):
    POSITIVE = "Positive"
    NEGATIVE = "Negative"
    NEUTRAL = "Neutral"


class Severity(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class Post(BaseModel):
    """A monitored post. Stores hand out copies; sentiment is set once."""
    model_config = ConfigDict(frozen=True)

    id: str
    source: str
    content: str = ""
    url: str = ""
    author: str = ""
    location: str = ""
    language: str = "id"
    created_at: datetime = Field(default_factory=utcnow)
    posted_at: Optional[datetime] = None
    category: str = "General"
    sentiment: Sentiment = Sentiment.NEUTRAL
    sentiment_score: float = Field(default=0.0, ge=-1.0, le=1.0)
    tags: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    processed: bool = False

    @field_validator("tags")
    @classmethod
    def _unique_tags(cls, tags: List[str]) -> List[str]:
        return list(dict.fromkeys(t for t in tags if t))


class AlertRule(BaseModel):
    id: str
    keyword: str
    severity: Severity = Severity.MEDIUM
    active: bool = True
    notification_email: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    trigger_count: int = Field(default=0, ge=0)


class IncomingPost(BaseModel):
    """Raw post as submitted by a collector, before classification."""
    id: Optional[str] = None
    source: str
    content: str
    url: str = ""
    author: str = ""
    location: str = ""
    language: str = "id"
    posted_at: Optional[datetime] = None
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class IngestRequest(BaseModel):
    posts: List[IncomingPost] = Field(default_factory=list)


class ClassifyRequest(BaseModel):
    text: str


class AlertRuleCreate(BaseModel):
    keyword: str = Field(min_length=1)
    severity: Severity = Severity.MEDIUM
    active: bool = True
    notification_email: str = ""

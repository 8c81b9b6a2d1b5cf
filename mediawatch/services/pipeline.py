"""
Ingestion cycle: classify, categorise and store posts, then check alerts.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Tuple

from mediawatch.core.exceptions import StoreError
from mediawatch.schemas.analysis_result import AlertEvent
from mediawatch.schemas.data_ingestion import IncomingPost, Post, Sentiment
from mediawatch.services.alert_service import AlertEvaluator
from mediawatch.services.nlp_service import SentimentClassifier, categorize, extract_tags
from mediawatch.services.stores import PostStore

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class IngestionService:
    def __init__(
        self,
        post_store: PostStore,
        classifier: SentimentClassifier,
        evaluator: AlertEvaluator,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.post_store = post_store
        self.classifier = classifier
        self.evaluator = evaluator
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def prepare(self, incoming: IncomingPost) -> Post:
        """Turn a raw post into a classified, tagged `Post` ready for storage."""
        result = self.classifier.classify(incoming.content)
        return Post(
            id=incoming.id or uuid.uuid4().hex,
            source=incoming.source,
            content=incoming.content,
            url=incoming.url,
            author=incoming.author,
            location=incoming.location,
            language=incoming.language,
            created_at=self.clock(),
            posted_at=incoming.posted_at,
            category=incoming.category or categorize(incoming.content),
            sentiment=result.label,
            sentiment_score=result.score,
            tags=list(incoming.tags) + extract_tags(incoming.content),
            metadata=incoming.metadata,
            processed=True,
        )

    def ingest(self, incoming: Sequence[IncomingPost]) -> Tuple[List[Post], List[AlertEvent]]:
        stored: List[Post] = []
        for item in incoming:
            post = self.prepare(item)
            try:
                self.post_store.append(post)
            except StoreError as e:
                logger.warning(f"Skipping post {post.id}: {e}")
                continue
            stored.append(post)
        logger.info(f"Ingested {len(stored)} posts")

        events = self.evaluator.evaluate_alerts() if stored else []
        return stored, events

    def retrain_from_store(self, limit: int = 1000) -> int:
        """Retrain the classifier on the most recent processed, labelled posts."""
        posts = [p for p in self.post_store.posts_since(EPOCH) if p.processed]
        posts.sort(key=lambda p: p.created_at, reverse=True)
        labelled = [p for p in posts if p.sentiment != Sentiment.NEUTRAL][:limit]
        return self.classifier.retrain(labelled)

"""
Wires the monitoring components together according to the settings.
"""
import logging
import threading
from dataclasses import dataclass
from typing import Optional

from mediawatch.core.config import Settings, settings
from mediawatch.services.alert_service import AlertEvaluator
from mediawatch.services.nlp_service import SentimentClassifier
from mediawatch.services.notifier import CompositeNotifier, LoggingNotifier, WebhookNotifier
from mediawatch.services.pipeline import IngestionService
from mediawatch.services.stores import InMemoryPostStore, InMemoryRuleStore
from mediawatch.services.trend_service import TrendPredictor

logger = logging.getLogger(__name__)


@dataclass
class Container:
    post_store: object
    rule_store: object
    classifier: SentimentClassifier
    notifier: CompositeNotifier
    evaluator: AlertEvaluator
    predictor: TrendPredictor
    ingestion: IngestionService


def build_container(config: Settings = settings) -> Container:
    if config.store_backend == "neo4j":
        from mediawatch.services.neo4j_store import Neo4jPostStore, Neo4jRuleStore
        post_store, rule_store = Neo4jPostStore(), Neo4jRuleStore()
    elif config.store_backend == "memory":
        post_store, rule_store = InMemoryPostStore(), InMemoryRuleStore()
    else:
        raise ValueError(f"Unknown store backend: {config.store_backend}")

    channels = [LoggingNotifier()]
    if config.alert_webhook_url:
        channels.append(WebhookNotifier(config.alert_webhook_url))
    notifier = CompositeNotifier(channels)

    classifier = SentimentClassifier(model_path=config.model_path)
    evaluator = AlertEvaluator(post_store, rule_store, notifier=notifier)
    predictor = TrendPredictor(post_store)
    ingestion = IngestionService(post_store, classifier, evaluator)

    logger.info(f"Monitoring components ready (store backend: {config.store_backend})")
    return Container(
        post_store=post_store,
        rule_store=rule_store,
        classifier=classifier,
        notifier=notifier,
        evaluator=evaluator,
        predictor=predictor,
        ingestion=ingestion,
    )


_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """FastAPI dependency returning the process-wide component container."""
    global _container
    if _container is None:
        with _container_lock:
            if _container is None:
                _container = build_container()
    return _container

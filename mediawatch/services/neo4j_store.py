"""
Neo4j-backed post and rule stores.
"""
import json
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional

from neo4j import Driver, GraphDatabase
from neo4j.exceptions import DriverError, Neo4jError

from mediawatch.core.config import settings
from mediawatch.core.exceptions import StoreError
from mediawatch.schemas.data_ingestion import AlertRule, Post, Sentiment

logger = logging.getLogger(__name__)


class Neo4jConnection:
    """Shared driver for the Neo4j stores."""

    _driver: Optional[Driver] = None

    @classmethod
    def get_driver(cls) -> Driver:
        """Get or create Neo4j driver instance."""
        if cls._driver is None:
            cls._driver = GraphDatabase.driver(
                settings.neo4j_uri,
                auth=(settings.neo4j_user, settings.neo4j_password),
            )
        return cls._driver

    @classmethod
    def close(cls) -> None:
        if cls._driver is not None:
            cls._driver.close()
            cls._driver = None

    @classmethod
    @contextmanager
    def get_session(cls):
        """Context manager for a Neo4j session; driver errors surface as StoreError."""
        driver = cls.get_driver()
        session = driver.session(database=settings.neo4j_database)
        try:
            yield session
        except (Neo4jError, DriverError) as e:
            raise StoreError(f"Neo4j operation failed: {e}") from e
        finally:
            session.close()

    @classmethod
    def verify_connectivity(cls) -> bool:
        try:
            cls.get_driver().verify_connectivity()
            return True
        except (DriverError, Neo4jError):
            return False

    @classmethod
    def init_constraints(cls) -> None:
        constraints = [
            "CREATE CONSTRAINT post_id IF NOT EXISTS FOR (p:Post) REQUIRE p.id IS UNIQUE",
            "CREATE CONSTRAINT rule_id IF NOT EXISTS FOR (r:AlertRule) REQUIRE r.id IS UNIQUE",
            "CREATE INDEX post_created_at IF NOT EXISTS FOR (p:Post) ON (p.created_at)",
        ]
        with cls.get_session() as session:
            for constraint in constraints:
                session.run(constraint)


def _native(value: Any) -> Any:
    # neo4j.time.DateTime -> datetime.datetime
    return value.to_native() if hasattr(value, "to_native") else value


def _post_to_props(post: Post) -> Dict[str, Any]:
    props = post.model_dump(exclude={"metadata"})
    props["sentiment"] = post.sentiment.value
    props["metadata_json"] = json.dumps(post.metadata) if post.metadata else None
    return props


def _post_from_props(props: Dict[str, Any]) -> Post:
    data = {k: _native(v) for k, v in props.items()}
    metadata_json = data.pop("metadata_json", None)
    data["metadata"] = json.loads(metadata_json) if metadata_json else {}
    return Post(**data)


def _rule_from_props(props: Dict[str, Any]) -> AlertRule:
    return AlertRule(**{k: _native(v) for k, v in props.items()})


class Neo4jPostStore:
    connection = Neo4jConnection

    def posts_since(self, timestamp: datetime) -> List[Post]:
        with self.connection.get_session() as session:
            result = session.run(
                """
                MATCH (p:Post)
                WHERE p.created_at >= $since
                RETURN properties(p) AS p
                ORDER BY p.created_at
                """,
                since=timestamp,
            )
            return [_post_from_props(record["p"]) for record in result]

    def append(self, post: Post) -> None:
        with self.connection.get_session() as session:
            session.run("CREATE (p:Post) SET p = $props", props=_post_to_props(post))

    def update_sentiment(self, post_id: str, label: Sentiment, score: float) -> None:
        with self.connection.get_session() as session:
            result = session.run(
                """
                MATCH (p:Post {id: $post_id})
                WHERE coalesce(p.processed, false) = false
                SET p.sentiment = $label, p.sentiment_score = $score, p.processed = true
                RETURN p.id AS id
                """,
                post_id=post_id,
                label=Sentiment(label).value,
                score=score,
            )
            if result.single() is None:
                logger.warning(f"Post {post_id} missing or already classified, sentiment left unchanged")


class Neo4jRuleStore:
    connection = Neo4jConnection

    def add(self, rule: AlertRule) -> AlertRule:
        props = rule.model_dump()
        props["severity"] = rule.severity.value
        with self.connection.get_session() as session:
            session.run("MERGE (r:AlertRule {id: $id}) SET r = $props", id=rule.id, props=props)
        return rule

    def get(self, rule_id: str) -> Optional[AlertRule]:
        with self.connection.get_session() as session:
            record = session.run(
                "MATCH (r:AlertRule {id: $id}) RETURN properties(r) AS r", id=rule_id
            ).single()
            return _rule_from_props(record["r"]) if record else None

    def all(self) -> List[AlertRule]:
        with self.connection.get_session() as session:
            result = session.run("MATCH (r:AlertRule) RETURN properties(r) AS r ORDER BY r.created_at")
            return [_rule_from_props(record["r"]) for record in result]

    def active_rules(self) -> List[AlertRule]:
        with self.connection.get_session() as session:
            result = session.run(
                "MATCH (r:AlertRule) WHERE r.active = true RETURN properties(r) AS r ORDER BY r.created_at")
            return [_rule_from_props(record["r"]) for record in result]

    def increment_trigger(self, rule_id: str, by: int) -> None:
        if by < 0:
            raise ValueError("Trigger count can only increase")
        with self.connection.get_session() as session:
            record = session.run(
                """
                MATCH (r:AlertRule {id: $id})
                SET r.trigger_count = coalesce(r.trigger_count, 0) + $by
                RETURN r.trigger_count AS trigger_count
                """,
                id=rule_id,
                by=by,
            ).single()
            if record is None:
                raise StoreError(f"Alert rule {rule_id} not found")

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore",
        protected_namespaces=("settings_",))

    app_name: str = "Media Monitoring API"
    # If ALLOWED_ORIGINS env is provided, it should be a JSON array.
    # Example: ["http://localhost:8501", "http://127.0.0.1:8501"]
    allowed_origins: List[str] = Field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    # Sentiment model
    model_path: str = "ml_models/sentiment_model.joblib"
    classifier_neutral_margin: float = 0.1
    classifier_confidence_margin: float = 0.2
    retrain_min_posts: int = 10

    # Trend forecasting
    trend_window_days: int = 7
    trend_min_posts: int = 10
    trend_min_category_posts: int = 5
    trend_min_days: int = 3

    # Alerting
    alert_window_minutes: int = 5
    alert_webhook_url: Optional[str] = None

    # Storage backend: "memory" or "neo4j"
    store_backend: str = "memory"

    # Neo4j configuration
    neo4j_uri: str = "bolt://localhost:7687"
    neo4j_user: str = "neo4j"
    neo4j_password: str = "password"
    neo4j_database: str = "neo4j"


settings = Settings()

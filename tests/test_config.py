from mediawatch.core.config import Settings


def test_defaults():
    config = Settings()
    assert config.trend_window_days == 7
    assert config.alert_window_minutes == 5
    assert config.retrain_min_posts == 10
    assert config.store_backend == "memory"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("ALERT_WINDOW_MINUTES", "10")
    monkeypatch.setenv("ALERT_WEBHOOK_URL", "https://hooks.example.com/alerts")
    config = Settings()
    assert config.alert_window_minutes == 10
    assert config.alert_webhook_url == "https://hooks.example.com/alerts"


def test_no_email_delivery_settings():
    assert not any("email" in name for name in Settings.model_fields)

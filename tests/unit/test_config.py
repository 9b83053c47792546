"""Tests for configuration loading."""

from saaskit.config import Config


def test_loads_prefixed_environment(monkeypatch):
    monkeypatch.setenv("SAASKIT_DATABASE_URL", "mongodb://db/saaskit")
    monkeypatch.setenv("SAASKIT_GOOGLE_CLIENT_ID", "cid")
    monkeypatch.setenv("SAASKIT_GOOGLE_CLIENT_SECRET", "secret")
    monkeypatch.setenv("SAASKIT_STORAGE_PATH", "/var/lib/saaskit")
    monkeypatch.setenv("SAASKIT_ENVIRONMENT", "production")

    config = Config(_env_file=None)

    assert config.database_url == "mongodb://db/saaskit"
    assert config.is_production is True
    assert config.billing_enabled is False


def test_derived_urls(config):
    assert config.oauth_redirect_uri == "http://localhost:3000/oauth/google/callback"
    assert config.allowed_origins == ["http://localhost:3000"]

    custom = config.model_copy(
        update={
            "app_url": "https://app.example.com/",
            "google_redirect_uri": "https://auth.example.com/cb",
            "cors_origins": ["http://localhost:5173"],
        }
    )
    assert custom.oauth_redirect_uri == "https://auth.example.com/cb"
    assert custom.allowed_origins == ["https://app.example.com", "http://localhost:5173"]


def test_billing_enabled_by_api_key(config):
    assert config.model_copy(update={"stripe_api_key": "sk_test"}).billing_enabled is True

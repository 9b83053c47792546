from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str  # MongoDB URL including database name, e.g. mongodb://localhost/saaskit
    host: str = "127.0.0.1"
    port: int = 3000
    debug: bool = False
    environment: str = "development"  # "production" enables Secure cookies
    app_url: str = "http://localhost:3000"  # Public URL of this app, used for redirects and origin checks
    cors_origins: list[str] = []
    google_client_id: str
    google_client_secret: str
    google_redirect_uri: str | None = None  # Defaults to {app_url}/oauth/google/callback
    stripe_api_key: str | None = None  # Billing is disabled when unset
    stripe_price_id: str | None = None
    storage_path: str  # Directory path for user object storage

    model_config = {
        "env_file": [".env"],
        "env_prefix": "SAASKIT_",
        "extra": "ignore",
    }

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def billing_enabled(self) -> bool:
        return bool(self.stripe_api_key)

    @property
    def oauth_redirect_uri(self) -> str:
        return self.google_redirect_uri or f"{self.app_url.rstrip('/')}/oauth/google/callback"

    @property
    def allowed_origins(self) -> list[str]:
        return [self.app_url.rstrip("/"), *self.cors_origins]

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    environment: str = "development"

    # Adversus REST API (Basic auth)
    adversus_api_base: str = "https://api.adversus.io/v1"
    adversus_api_user: str = ""
    adversus_api_password: str = ""
    upstream_timeout_seconds: float = 20.0

    # Shared secret for the webhook and every debug/proxy endpoint
    adversus_webhook_secret: str = ""

    # Database (optional; empty disables persistence)
    database_url: str = ""
    db_pool_max_size: int = 5

    # In-memory debug buffer
    debug_buffer_size: int = 200

    # Field discovery
    probe_delay_seconds: float = 0.25  # pause between records in a result scan
    max_scan_records: int = 50
    contact_batch_size: int = 10
    success_terms: list[str] = [
        "success",
        "successful",
        "sale",
        "sold",
        "won",
        "closed won",
        "completed",
        "salg",
        "solgt",
        "vundet",
    ]

    cors_origins: list[str] = ["*"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


class DevProxySettings(BaseSettings):
    port: int = 8080
    backend_base: str = "https://gavdash-backend.onrender.com"
    dev_secret: str = "testsecret123"
    proxy_timeout_seconds: float = 15.0

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Force reload settings from .env (called on module reload by uvicorn --reload)."""
    global _settings
    _settings = None
    return get_settings()

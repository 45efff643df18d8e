"""
Application configuration via pydantic-settings.
All config read from TOPLISTS_* environment variables with sensible defaults for local dev.
"""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # App
    app_name: str = "toplists-api"
    app_version: str = "0.1.0"
    environment: str = Field(default="development", pattern=r"^(development|staging|production)$")
    debug: bool = False

    # Host platform report API
    host_api_base_url: str = Field(default="http://localhost:8080")
    host_api_token: str = ""
    report_timeout_s: float = Field(default=15.0, gt=0.0)

    # Account context
    # Empty account_id -> the host must resolve the account at runtime.
    account_id: str = ""
    # 40 polls x 250ms in the dashboard component this replaces
    account_wait_timeout_s: float = Field(default=10.0, ge=0.0)

    # Variable store (empty redis_url -> in-process store)
    redis_url: str = ""
    variable_namespace: str = "toplists:var"

    # Refresh behaviour
    fence_stale_refreshes: bool = True

    # CORS
    cors_origins: list[str] = Field(default=["http://localhost:3000"])

    # Sentry
    sentry_dsn: str = ""
    sentry_traces_sample_rate: float = Field(default=0.1, ge=0.0, le=1.0)

    model_config = {"env_prefix": "TOPLISTS_", "env_file": ".env", "extra": "ignore"}


settings = Settings()

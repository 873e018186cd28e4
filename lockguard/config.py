"""
LockGuard Configuration — pydantic-settings based.

All settings are read from environment variables or .env file.
Only the service layer reads them; the analysis core takes every value as
an explicit argument.
"""

from pydantic_settings import BaseSettings
from pydantic import Field

from lockguard.models.rule_models import Severity


class Settings(BaseSettings):
    """Application-wide settings sourced from environment variables."""

    # ── Analysis ──
    pg_version: int = Field(default=17, description="Target PostgreSQL major version")
    large_table_rows: int = Field(
        default=1_000_000, description="Row count at which the size factor scores 'large'"
    )
    severity_overrides: dict[str, Severity] = Field(
        default_factory=dict, description="Rule id -> severity, e.g. {\"LG010\": \"critical\"}"
    )
    disabled_rules: list[str] = Field(
        default_factory=list, description="Rule ids removed from the default catalog"
    )

    # ── Ordering ──
    known_tables: list[str] = Field(
        default_factory=list,
        description="Tables created outside the analyzed migrations (bootstrap, seeds)",
    )

    # ── Auto-fix ──
    lock_timeout_value: str = Field(default="5s", description="Value used when prepending lock_timeout")
    statement_timeout_value: str = Field(
        default="30s", description="Value used when prepending statement_timeout"
    )

    # ── Input limits ──
    max_sql_bytes: int = Field(
        default=1_000_000, description="Max size of a single migration accepted by the API"
    )

    # ── Server ──
    port: int = Field(default=5001, description="Server port")
    host: str = Field(default="0.0.0.0", description="Server bind host")
    cors_origins: list[str] = Field(
        default=["*"], description="Allowed CORS origins"
    )
    log_level: str = Field(default="INFO", description="Root log level")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


# Singleton instance — imported by other modules
settings = Settings()

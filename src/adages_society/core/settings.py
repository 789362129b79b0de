"""Application settings and configuration.

This module defines all configuration options for the American Adages Society
API. Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="American Adages Society", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    site_url: str = Field(default="http://localhost:3000", alias="SITE_URL")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )
    password_min_length: int = Field(default=8, alias="PASSWORD_MIN_LENGTH")
    password_reset_ttl_minutes: int = Field(default=60, alias="PASSWORD_RESET_TTL_MINUTES")

    # Shared secret for scheduler-invoked endpoints
    cron_secret: str | None = Field(default=None, alias="CRON_SECRET")

    # Database configuration
    database_url: str = Field(default="sqlite:///./adages.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Outbound email (SMTP)
    smtp_host: str | None = Field(default=None, alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_user: str | None = Field(default=None, alias="SMTP_USER")
    smtp_password: str | None = Field(default=None, alias="SMTP_PASSWORD")
    smtp_use_tls: bool = Field(default=True, alias="SMTP_USE_TLS")
    smtp_timeout_seconds: float = Field(default=30.0, alias="SMTP_TIMEOUT_SECONDS")
    email_from: str | None = Field(default=None, alias="EMAIL_FROM")

    # In-memory rate limiting
    rate_limit_default_requests: int = Field(default=10, alias="RATE_LIMIT_DEFAULT_REQUESTS")
    rate_limit_window_seconds: int = Field(default=15 * 60, alias="RATE_LIMIT_WINDOW_SECONDS")
    rate_limit_cleanup_interval_seconds: float = Field(
        default=5 * 60,
        alias="RATE_LIMIT_CLEANUP_INTERVAL_SECONDS",
    )
    vote_rate_limit: int = Field(default=30, alias="VOTE_RATE_LIMIT")
    comment_rate_limit: int = Field(default=10, alias="COMMENT_RATE_LIMIT")

    # Featured adage rotation
    featured_duration_days: int = Field(default=7, alias="FEATURED_DURATION_DAYS")
    featured_display_limit: int = Field(default=3, alias="FEATURED_DISPLAY_LIMIT")

    # Forum throttling
    forum_thread_cooldown_seconds: int = Field(default=30, alias="FORUM_THREAD_COOLDOWN_SECONDS")
    forum_probation_cooldown_seconds: int = Field(
        default=60 * 60,
        alias="FORUM_PROBATION_COOLDOWN_SECONDS",
    )
    forum_reply_cooldown_seconds: int = Field(default=15, alias="FORUM_REPLY_COOLDOWN_SECONDS")
    forum_max_replies_per_thread: int = Field(default=1000, alias="FORUM_MAX_REPLIES_PER_THREAD")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def smtp_configured(self) -> bool:
        """True when enough SMTP settings are present to send mail."""
        return bool(self.smtp_host and self.smtp_user and self.smtp_password)

    @property
    def sender_address(self) -> str:
        """Return the envelope sender used for outbound mail."""
        return self.email_from or self.smtp_user or "noreply@localhost"


settings = Settings()  # type: ignore[call-arg]

"""Application settings for the KlasMwen API.

Every option is read from the environment (or a ``.env`` file) under the
upper-case alias shown next to it.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_PSYCOPG_SCHEMES = ("postgres://", "postgresql://", "postgresql+asyncpg://")


class Settings(BaseSettings):
    """KlasMwen configuration."""

    app_name: str = Field(default="KlasMwen API", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Bearer tokens
    secret_key: str = Field(default="change-me-in-production", alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        ge=1,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    database_url: str = Field(default="sqlite:///./klasmwen.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Shared by every cursor and offset listing
    pagination_default_limit: int = Field(default=10, ge=1, alias="PAGINATION_DEFAULT_LIMIT")
    pagination_max_limit: int = Field(default=50, ge=1, alias="PAGINATION_MAX_LIMIT")

    # Content is hidden once it collects this many non-dismissed reports and
    # the report that reached the count is older than the grace period.
    report_auto_hide_threshold: int = Field(default=5, ge=1, alias="REPORT_AUTO_HIDE_THRESHOLD")
    report_auto_hide_grace_seconds: int = Field(
        default=24 * 60 * 60,
        ge=0,
        alias="REPORT_AUTO_HIDE_GRACE_SECONDS",
    )

    cors_origins: list[str] = Field(default=["http://localhost:5173"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def database_url_sync(self) -> str:
        """Return the URL with Postgres pinned to the psycopg 3 driver.

        Used by the engine and by Alembic; bare ``postgres://`` URLs from
        hosting providers would otherwise select a driver that is not installed.
        """
        url = self.database_url
        for scheme in _PSYCOPG_SCHEMES:
            if url.startswith(scheme):
                return "postgresql+psycopg://" + url[len(scheme):]
        return url


settings = Settings()

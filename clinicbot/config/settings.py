from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application configuration loaded from environment variables (and `.env`).
    """

    # API Configuration
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Clinic Notification Engine"
    VERSION: str = "0.1.0"

    # Application Settings
    DEBUG: bool = Field(False, description="Debug mode")
    ENVIRONMENT: str = Field("production", description="Runtime environment")
    LOG_LEVEL: str = Field("INFO", description="Root log level")

    # PostgreSQL Database Settings
    DB_HOST: str = Field("localhost", description="PostgreSQL host")
    DB_PORT: int = Field(5432, description="PostgreSQL port")
    DB_NAME: str = Field("postgres", description="Database name")
    DB_USER: str = Field("postgres", description="Database user")
    DB_PASSWORD: str | None = Field(None, description="Database password")
    DB_ECHO: bool = Field(False, description="Log SQL queries (debug only)")

    # Database connection pool settings
    DB_POOL_SIZE: int = Field(5, description="Connection pool size")
    DB_MAX_OVERFLOW: int = Field(10, description="Maximum pool overflow")
    DB_POOL_RECYCLE: int = Field(3600, description="Recycle connections every N seconds")
    DB_POOL_TIMEOUT: int = Field(30, description="Timeout to obtain a pooled connection")

    # Evolution API (WhatsApp gateway)
    EVOLUTION_API_URL: str = Field("http://evolution-api:8080", description="Evolution API base URL")
    EVOLUTION_API_KEY: str = Field("", description="Evolution API key sent in the `apikey` header")
    GATEWAY_TIMEOUT_SECONDS: float = Field(15.0, description="Per-request timeout for gateway calls")
    GATEWAY_INSTANCE_CACHE_TTL_SECONDS: float = Field(
        60.0, description="How long a connected instance name is reused before re-probing"
    )
    GATEWAY_SIMULATE_TYPING: bool = Field(
        True, description="Send a 'composing' presence and a short delay before each message"
    )

    # Scheduler
    SCHEDULER_ENABLED: bool = Field(True, description="Run the notification scheduler in this process")
    SCHEDULER_INTERVAL_MINUTES: int = Field(5, description="Tick interval in minutes (must divide 60)")
    SCHEDULER_INITIAL_DELAY_SECONDS: int = Field(10, description="Delay before the startup tick")

    # Notification policy
    NO_SHOW_GRACE_MINUTES: int = Field(30, description="Minutes past an appointment's end before no-show")
    DEFAULT_APPOINTMENT_DURATION_MINUTES: int = Field(30, description="Duration assumed when unset")
    RETRY_MAX_ATTEMPTS: int = Field(3, description="Maximum resend attempts for a failed message")
    RETRY_BATCH_SIZE: int = Field(10, description="Failed messages retried per tick")
    HANDOFF_STALE_MINUTES: int = Field(30, description="Inactivity before a handoff is auto-closed")

    # Rendering
    DEFAULT_LANGUAGE: str = Field("pt", description="Template language used when the preferred one is missing")
    CLINIC_TIMEZONE: str = Field("America/New_York", description="Timezone for rendered dates and attendant shifts")
    PANEL_BASE_URL: str = Field("http://localhost:3000", description="Public URL of the clinic panel")

    # Sentry Configuration
    SENTRY_DSN: str | None = Field(None, description="Sentry DSN for error tracking")

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("SCHEDULER_INTERVAL_MINUTES")
    @classmethod
    def validate_interval(cls, v):
        if v < 1 or 60 % v != 0:
            raise ValueError("SCHEDULER_INTERVAL_MINUTES must be a divisor of 60")
        return v

    @field_validator("RETRY_MAX_ATTEMPTS", "RETRY_BATCH_SIZE")
    @classmethod
    def validate_positive(cls, v):
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @field_validator("DB_POOL_SIZE")
    @classmethod
    def validate_pool_size(cls, v):
        if v < 1:
            raise ValueError("DB_POOL_SIZE must be at least 1")
        if v > 100:
            raise ValueError("DB_POOL_SIZE should not exceed 100")
        return v

    @computed_field
    @property
    def is_development(self) -> bool:
        """True for local/dev environments or when DEBUG is on."""
        return self.DEBUG or self.ENVIRONMENT.lower() in ["development", "dev", "local"]


_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """
    Return the cached settings instance.
    Avoids re-reading the environment on every call.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance

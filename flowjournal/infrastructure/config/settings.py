"""Environment-based configuration management."""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseSettings):
    """Database configuration with connection pooling."""

    model_config = SettingsConfigDict(env_prefix="DB_", extra="ignore")

    url: Optional[str] = Field(None, description="Full SQLAlchemy URL, overrides the parts below")
    host: str = Field("localhost", description="Database host")
    port: int = Field(5432, description="Database port", ge=1, le=65535)
    username: str = Field("postgres", description="Database username")
    password: SecretStr = Field(SecretStr("postgres"), description="Database password")
    database: str = Field("flowjournal", description="Database name")

    # Connection pool settings
    pool_size: int = Field(10, description="Connection pool size", ge=1, le=100)
    max_overflow: int = Field(20, description="Max pool overflow", ge=0, le=100)
    pool_recycle: int = Field(3600, description="Pool recycle seconds", ge=60)

    echo: bool = Field(False, description="Log SQL statements")
    create_tables: bool = Field(True, description="Create missing tables at startup")

    @property
    def connection_url(self) -> str:
        """Build the async database URL."""
        if self.url:
            return self.url
        return (
            f"postgresql+asyncpg://{self.username}:{self.password.get_secret_value()}"
            f"@{self.host}:{self.port}/{self.database}"
        )

    @property
    def is_sqlite(self) -> bool:
        return self.connection_url.startswith("sqlite")


class SecurityConfig(BaseSettings):
    """Security configuration for tokens and hashing."""

    model_config = SettingsConfigDict(env_prefix="SECURITY_", extra="ignore")

    jwt_secret_key: SecretStr = Field(..., description="JWT signing secret")
    jwt_algorithm: str = Field("HS256", description="JWT algorithm")
    access_token_expire_minutes: int = Field(
        60 * 24 * 7, description="Session token lifetime", ge=5, le=60 * 24 * 30
    )

    password_hash_rounds: int = Field(12, description="Bcrypt cost factor", ge=4, le=15)
    min_password_length: int = Field(8, description="Minimum password length", ge=8)

    verification_token_ttl_hours: int = Field(24, description="Email verification token lifetime", ge=1)

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret(cls, v: SecretStr) -> SecretStr:
        """Validate JWT secret key strength."""
        if len(v.get_secret_value()) < 32:
            raise ValueError("JWT secret must be at least 32 characters")
        return v

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_algorithm(cls, v: str) -> str:
        if v not in {"HS256", "HS384", "HS512"}:
            raise ValueError("Only HMAC JWT algorithms are supported")
        return v


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_", extra="ignore")

    level: str = Field("INFO", description="Log level")
    format: str = Field("json", description="Log format (json or console)")
    sensitive_fields: List[str] = Field(
        default=[
            "password", "password_hash", "token", "access_token",
            "verification_token", "client_secret", "authorization",
        ],
        description="Fields to mask in logs",
    )
    correlation_id_header: str = Field("X-Correlation-ID", description="Correlation ID header")

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v not in {"json", "console"}:
            raise ValueError("Log format must be 'json' or 'console'")
        return v


class MailConfig(BaseSettings):
    """Outbound email configuration. Without a host, emails are only logged."""

    model_config = SettingsConfigDict(env_prefix="MAIL_", extra="ignore")

    host: Optional[str] = Field(None, description="SMTP host")
    port: int = Field(587, description="SMTP port", ge=1, le=65535)
    username: Optional[str] = Field(None, description="SMTP username")
    password: Optional[SecretStr] = Field(None, description="SMTP password")
    use_tls: bool = Field(True, description="Upgrade the connection with STARTTLS")
    sender: str = Field("FlowJournal <noreply@flowjournal.app>", description="From header")
    timeout_seconds: int = Field(10, description="SMTP timeout", ge=1, le=120)

    @property
    def enabled(self) -> bool:
        return bool(self.host)


class GoogleOAuthConfig(BaseSettings):
    """Google identity provider configuration."""

    model_config = SettingsConfigDict(env_prefix="GOOGLE_", extra="ignore")

    client_id: Optional[str] = Field(None, description="OAuth client ID")
    client_secret: Optional[SecretStr] = Field(None, description="OAuth client secret")
    redirect_uri: str = Field(
        "http://localhost:3001/auth/google/callback", description="Registered callback URL"
    )
    timeout_seconds: float = Field(10.0, description="HTTP timeout", gt=0)

    @property
    def enabled(self) -> bool:
        return bool(self.client_id and self.client_secret)


class AppSettings(BaseSettings):
    """Main application settings with all subsystem configurations."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field("FlowJournal", description="Application name")
    app_version: str = Field("0.1.0", description="Application version")
    environment: str = Field("development", description="Environment name")
    debug: bool = Field(False, description="Debug mode")

    # API settings
    api_host: str = Field("0.0.0.0", description="API host")
    api_port: int = Field(3001, description="API port", ge=1, le=65535)
    frontend_url: str = Field("http://localhost:5173", description="Base URL of the web client")

    # CORS settings
    cors_origins: List[str] = Field(["http://localhost:5173"], description="CORS allowed origins")

    # Subsystem configurations
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    mail: MailConfig = Field(default_factory=MailConfig)
    google: GoogleOAuthConfig = Field(default_factory=GoogleOAuthConfig)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment name."""
        valid_envs = {"development", "testing", "staging", "production"}
        if v not in valid_envs:
            raise ValueError(f"Environment must be one of {valid_envs}")
        return v

    @field_validator("frontend_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    def validate_production(self) -> None:
        """Reject settings that must never reach production."""
        if self.environment != "production":
            return

        errors = []
        if self.debug:
            errors.append("Debug mode must be disabled in production")
        if self.database.echo:
            errors.append("SQL echo must be disabled in production")
        if self.security.password_hash_rounds < 12:
            errors.append("Password hash rounds must be at least 12 in production")
        if self.database.is_sqlite:
            errors.append("SQLite is not supported in production")

        if errors:
            raise ValueError(f"Production configuration invalid: {'; '.join(errors)}")


@lru_cache()
def get_settings() -> AppSettings:
    """Get application settings singleton."""
    settings = AppSettings()
    settings.validate_production()
    return settings

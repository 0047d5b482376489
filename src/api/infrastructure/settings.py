"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from enum import StrEnum
from functools import lru_cache

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CredentialSourceKind(StrEnum):
    """Where database credentials are read from."""

    ENVIRONMENT = "environment"
    SECRETS_MANAGER = "secrets_manager"


class DatabaseSettings(BaseSettings):
    """Database connection settings.

    Environment variables:
        SHOPPULSE_DB_CREDENTIAL_SOURCE: environment | secrets_manager (default: environment)
        SHOPPULSE_DB_SECRET_ID: Secrets Manager secret id or ARN
        SHOPPULSE_DB_AWS_REGION: Region of the secret (default: us-east-1)
        SHOPPULSE_DB_HOST: Database host (default: localhost)
        SHOPPULSE_DB_PORT: Database port (default: 5432)
        SHOPPULSE_DB_DATABASE: Database name (default: shoppulse)
        SHOPPULSE_DB_USERNAME: Database user (default: shoppulse)
        SHOPPULSE_DB_PASSWORD: Database password (required in production)
        SHOPPULSE_DB_CREDENTIAL_CACHE_TTL_SECONDS: Credential cache TTL (default: 300)
        SHOPPULSE_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 10)
        SHOPPULSE_DB_POOL_IDLE_TIMEOUT_SECONDS: Idle connection lifetime (default: 30)
        SHOPPULSE_DB_CONNECT_TIMEOUT_SECONDS: Connect / checkout timeout (default: 10)
        SHOPPULSE_DB_RETRY_*: Retry policy for transient failures
    """

    model_config = SettingsConfigDict(
        env_prefix="SHOPPULSE_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    credential_source: CredentialSourceKind = Field(
        default=CredentialSourceKind.ENVIRONMENT,
        description="Where database credentials are read from",
    )
    secret_id: str | None = Field(
        default=None,
        description="Secrets Manager secret holding the database credentials",
    )
    aws_region: str = Field(default="us-east-1", description="AWS region")

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="shoppulse", description="Database name")
    username: str = Field(default="shoppulse", description="Database username")
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password",
    )

    credential_cache_ttl_seconds: int = Field(
        default=300,
        description="How long fetched credentials are reused",
        ge=1,
    )
    pool_max_connections: int = Field(
        default=10,
        description="Maximum connections in pool",
        ge=1,
        le=100,
    )
    pool_idle_timeout_seconds: int = Field(
        default=30,
        description="Seconds before a pooled connection is recycled",
        ge=1,
    )
    connect_timeout_seconds: float = Field(
        default=10,
        description="Timeout for opening or checking out a connection",
        gt=0,
    )
    statement_timeout_seconds: float = Field(
        default=30,
        description="Per-statement timeout",
        gt=0,
    )
    ssl_root_cert: str | None = Field(
        default=None,
        description="CA bundle used to verify the database certificate",
    )

    retry_max_retries: int = Field(default=3, ge=0, le=10)
    retry_initial_delay_ms: int = Field(default=100, ge=1)
    retry_backoff_multiplier: float = Field(default=2.0, ge=1.0)
    retry_max_delay_ms: int = Field(default=5000, ge=1)
    retry_jitter: bool = Field(default=True)

    @model_validator(mode="after")
    def validate_credential_source(self) -> "DatabaseSettings":
        """Secrets Manager needs a secret to read."""
        if (
            self.credential_source == CredentialSourceKind.SECRETS_MANAGER
            and not self.secret_id
        ):
            raise ValueError("secret_id is required when credential_source is secrets_manager")
        return self

    @model_validator(mode="after")
    def validate_retry_settings(self) -> "DatabaseSettings":
        """Validate retry cap >= initial delay."""
        if self.retry_max_delay_ms < self.retry_initial_delay_ms:
            raise ValueError(
                f"retry_max_delay_ms ({self.retry_max_delay_ms}) must be >= "
                f"retry_initial_delay_ms ({self.retry_initial_delay_ms})"
            )
        return self

    @property
    def connection_string(self) -> str:
        """Generate a connection string (without password for logging)."""
        return f"postgresql://{self.username}@{self.host}:{self.port}/{self.database}"


class OIDCSettings(BaseSettings):
    """Identity token verification settings.

    Environment variables:
        SHOPPULSE_OIDC_ISSUER_URL: Token issuer (Cognito user pool URL)
        SHOPPULSE_OIDC_AUDIENCE: Expected audience (app client id)
        SHOPPULSE_OIDC_TENANT_ID_CLAIM: Claim holding the tenant id
        SHOPPULSE_OIDC_ROLE_CLAIM: Claim holding the role
        SHOPPULSE_OIDC_EMAIL_CLAIM: Claim holding the email
    """

    model_config = SettingsConfigDict(
        env_prefix="SHOPPULSE_OIDC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    issuer_url: str = Field(
        default="http://localhost:9229/local_pool",
        description="OIDC issuer URL",
    )
    audience: str = Field(default="shoppulse-web", description="Expected audience")
    subject_claim: str = Field(default="sub")
    tenant_id_claim: str = Field(default="custom:tenant_id")
    role_claim: str = Field(default="custom:role")
    email_claim: str = Field(default="email")
    jwks_cache_ttl_seconds: int = Field(default=86400, ge=60)


class IdentityProviderSettings(BaseSettings):
    """Cognito user pool settings.

    Environment variables:
        SHOPPULSE_COGNITO_USER_POOL_ID: User pool managed by the service
        SHOPPULSE_COGNITO_REGION: Region of the user pool
        SHOPPULSE_COGNITO_SUPPRESS_INVITATION: Do not email temporary passwords
    """

    model_config = SettingsConfigDict(
        env_prefix="SHOPPULSE_COGNITO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    user_pool_id: str = Field(default="", description="Cognito user pool id")
    region: str = Field(default="us-east-1")
    suppress_invitation: bool = Field(default=True)


class AnalyticsSettings(BaseSettings):
    """Dashboard embedding settings.

    Environment variables:
        SHOPPULSE_QUICKSIGHT_AWS_ACCOUNT_ID: Account owning the dashboard
        SHOPPULSE_QUICKSIGHT_DASHBOARD_ID: Dashboard to embed
        SHOPPULSE_QUICKSIGHT_Q_TOPIC_ID: Q topic for the question-answering embed
        SHOPPULSE_QUICKSIGHT_REGION: Region of the dashboard
        SHOPPULSE_QUICKSIGHT_NAMESPACE: QuickSight namespace (default: default)
        SHOPPULSE_QUICKSIGHT_SESSION_LIFETIME_MINUTES: Embed session lifetime
    """

    model_config = SettingsConfigDict(
        env_prefix="SHOPPULSE_QUICKSIGHT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    aws_account_id: str = Field(default="")
    dashboard_id: str = Field(default="")
    q_topic_id: str = Field(default="")
    region: str = Field(default="us-east-1")
    namespace: str = Field(default="default")
    session_lifetime_minutes: int = Field(default=15, ge=15, le=600)

    @property
    def dashboard_arn(self) -> str:
        """ARN of the embedded dashboard."""
        return (
            f"arn:aws:quicksight:{self.region}:{self.aws_account_id}"
            f":dashboard/{self.dashboard_id}"
        )

    @property
    def topic_arn(self) -> str:
        """ARN of the Q topic."""
        return (
            f"arn:aws:quicksight:{self.region}:{self.aws_account_id}"
            f":topic/{self.q_topic_id}"
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.aws_account_id and self.dashboard_id)


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="ShopPulse API", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def database(self) -> DatabaseSettings:
        """Get database settings."""
        return get_database_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings."""
    return DatabaseSettings()


@lru_cache
def get_oidc_settings() -> OIDCSettings:
    """Get cached OIDC settings."""
    return OIDCSettings()


@lru_cache
def get_identity_provider_settings() -> IdentityProviderSettings:
    """Get cached Cognito settings."""
    return IdentityProviderSettings()


@lru_cache
def get_analytics_settings() -> AnalyticsSettings:
    """Get cached dashboard embedding settings."""
    return AnalyticsSettings()

"""
Runtime Configuration

Loads service configuration from environment variables (and an optional .env
file). Values are read once at startup and passed to the app factory.
"""
import logging
from pathlib import Path

from pydantic import Field, ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from constants import AuthMode, ServerConfig
from exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Storage
    database_url: str = Field(min_length=1)

    # Authentication
    auth_mode: AuthMode = AuthMode.JWT
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 60
    auth_provider_jwks_url: str = ""
    auth_provider_audience: str = ""
    auth_provider_issuer: str = ""

    # Uploads
    upload_root: Path = Path("uploads/products")
    upload_url_prefix: str = "/uploads/products"
    upload_timeout_seconds: float = 60.0

    # Server
    host: str = ServerConfig.HOST
    port: int = ServerConfig.PORT
    log_level: str = "INFO"
    log_dir: Path = Path("logs")

    # Accepted for compatibility with existing deployments; the AI proxy is not served
    openai_api_key: str = ""

    @property
    def public_upload_prefix(self) -> str:
        """URL prefix without a trailing slash"""
        return "/" + self.upload_url_prefix.strip("/")


def load_settings() -> Settings:
    """
    Build Settings from the environment.

    Returns:
        Populated Settings instance

    Raises:
        ConfigurationError: If a required value is missing or malformed
    """
    try:
        settings = Settings()
    except PydanticValidationError as e:
        missing = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
        logger.error(f"Invalid configuration: {missing}")
        raise ConfigurationError("Invalid or missing configuration", missing_keys=missing) from e

    if settings.auth_mode in (AuthMode.JWT, AuthMode.BASIC) and not settings.jwt_secret:
        raise ConfigurationError(
            "JWT_SECRET must be set when AUTH_MODE is 'jwt' or 'basic'",
            missing_keys=["jwt_secret"],
        )
    if settings.auth_mode == AuthMode.PROVIDER and not settings.auth_provider_jwks_url:
        raise ConfigurationError(
            "AUTH_PROVIDER_JWKS_URL must be set when AUTH_MODE is 'provider'",
            missing_keys=["auth_provider_jwks_url"],
        )
    return settings

"""
Gateway configuration

Settings are loaded from the environment (and an optional .env file) into an
explicit Settings object that is passed to whatever needs it. There is no
process-wide settings instance: call load_settings() once at the edge and
hand the result down.

SECURITY: UPS credentials have no defaults (loading fails if not set).
"""
import logging
from typing import Any, List, Literal

from pydantic import ValidationError as PydanticValidationError
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from carrier_gateway.core.exceptions import ConfigurationError
from carrier_gateway.models.carrier import CurrencyCode

logger = logging.getLogger(__name__)

DEFAULT_UPS_BASE_URL = "https://wwwcie.ups.com"
DEFAULT_UPS_OAUTH_URL = "https://wwwcie.ups.com/security/v1/oauth/token"

REQUIRED_UPS_KEYS = ("UPS_CLIENT_ID", "UPS_CLIENT_SECRET", "UPS_MERCHANT_ID")


class Settings(BaseSettings):
    # App
    ENVIRONMENT: Literal["development", "production", "test"] = "development"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Network - one timeout covers both token refresh and carrier calls
    REQUEST_TIMEOUT_MS: int = 30000
    TOKEN_REFRESH_BUFFER_SECONDS: int = 300

    # Mapping
    DEFAULT_CURRENCY: CurrencyCode = CurrencyCode.USD

    # UPS - NO DEFAULT CREDENTIALS (will fail if not set)
    UPS_CLIENT_ID: str
    UPS_CLIENT_SECRET: str
    UPS_MERCHANT_ID: str
    UPS_ACCOUNT_NUMBER: str = ""
    UPS_BASE_URL: str = DEFAULT_UPS_BASE_URL
    UPS_OAUTH_URL: str = DEFAULT_UPS_OAUTH_URL
    UPS_USE_NEGOTIATED_RATES: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("LOG_LEVEL", "ENVIRONMENT", mode="before")
    @classmethod
    def normalize_case(cls, v, info):
        if isinstance(v, str):
            return v.upper() if info.field_name == "LOG_LEVEL" else v.lower()
        return v

    @field_validator("UPS_CLIENT_ID", "UPS_CLIENT_SECRET", "UPS_MERCHANT_ID")
    @classmethod
    def require_non_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator("REQUEST_TIMEOUT_MS", "TOKEN_REFRESH_BUFFER_SECONDS")
    @classmethod
    def require_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be positive")
        return v

    @field_validator("UPS_BASE_URL", "UPS_OAUTH_URL")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("must be a valid http(s) URL")
        return v.rstrip("/")

    @property
    def request_timeout_seconds(self) -> float:
        return self.REQUEST_TIMEOUT_MS / 1000.0

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def is_test(self) -> bool:
        return self.ENVIRONMENT == "test"


def load_settings(**overrides: Any) -> Settings:
    """
    Build a Settings instance from the environment plus explicit overrides.

    Raises:
        ConfigurationError: required keys are missing or values are invalid
    """
    try:
        return Settings(**overrides)
    except PydanticValidationError as e:
        missing: List[str] = []
        invalid: List[str] = []
        for err in e.errors():
            key = ".".join(str(part) for part in err["loc"])
            if err["type"] == "missing":
                missing.append(key)
            else:
                invalid.append(key)

        if missing:
            message = f"Missing required environment variables: {', '.join(missing)}"
        else:
            message = f"Invalid configuration: {', '.join(invalid)}"
        raise ConfigurationError(
            message,
            missing_keys=missing + invalid,
            context={"errors": [err["msg"] for err in e.errors()]},
            cause=e,
        ) from e


def configure_logging(settings: Settings) -> None:
    """Apply LOG_LEVEL to the root logger."""
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.debug(f"Logging configured at {settings.LOG_LEVEL} ({settings.ENVIRONMENT})")

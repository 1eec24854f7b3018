"""Configuration for Cloud Platform SDK.

Uses Pydantic v2 for validation with sensible defaults and
comprehensive configuration options.
"""

from __future__ import annotations

from typing import Annotated, Any, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    SecretStr,
    field_validator,
    model_validator,
)


class WaitConfig(BaseModel):
    """Default timing for status polling."""

    model_config = ConfigDict(frozen=True)

    refresh_delay: Annotated[float, Field(ge=0, le=3600)] = 5.0
    timeout: Annotated[float, Field(gt=0)] = 300.0  # 5 minutes


class TelemetryConfig(BaseModel):
    """OpenTelemetry and logging configuration."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    service_name: str = "cloud-platform-sdk"
    trace_requests: bool = True
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level name."""
        levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in levels:
            msg = f"Unsupported log level: {v}. Supported: {levels}"
            raise ValueError(msg)
        return v.upper()


class CloudPlatformConfig(BaseModel):
    """Main configuration for Cloud Platform SDK."""

    model_config = ConfigDict(frozen=True, validate_default=True)

    # Required
    identity_url: HttpUrl
    username: str = Field(..., min_length=1)

    # Credentials (exactly one of api_key / password)
    api_key: SecretStr | None = None
    password: SecretStr | None = None
    tenant_name: str | None = None
    tenant_id: str | None = None

    # Service endpoints
    compute_url: HttpUrl | None = None
    region: str | None = None
    microversion: str = "2.1"

    # HTTP settings
    timeout: Annotated[float, Field(gt=0, le=300)] = 30.0
    connect_timeout: Annotated[float, Field(gt=0, le=60)] = 10.0

    # Sub-configurations
    wait: WaitConfig = Field(default_factory=WaitConfig)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)

    @model_validator(mode="after")
    def check_credentials(self) -> Self:
        """Require exactly one secret."""
        if (self.api_key is None) == (self.password is None):
            msg = "exactly one of api_key or password must be set"
            raise ValueError(msg)
        return self

    @property
    def identity_url_str(self) -> str:
        """Get identity URL as string without trailing slash."""
        return str(self.identity_url).rstrip("/")

    @property
    def compute_url_str(self) -> str | None:
        """Get compute URL as string without trailing slash."""
        if self.compute_url is None:
            return None
        return str(self.compute_url).rstrip("/")

    def with_overrides(self, **kwargs: Any) -> Self:
        """Create new config with overridden values."""
        data = self.model_dump()
        data.update(kwargs)
        return self.__class__(**data)

    @classmethod
    def from_env(cls, prefix: str = "CLOUD_PLATFORM_") -> Self:
        """Create config from environment variables."""
        import os

        def get_env(key: str, default: Any = None) -> Any:
            return os.environ.get(f"{prefix}{key}", default)

        identity_url = get_env("IDENTITY_URL")
        if not identity_url:
            msg = f"{prefix}IDENTITY_URL environment variable is required"
            raise ValueError(msg)

        username = get_env("USERNAME")
        if not username:
            msg = f"{prefix}USERNAME environment variable is required"
            raise ValueError(msg)

        return cls(
            identity_url=identity_url,
            username=username,
            api_key=get_env("API_KEY"),
            password=get_env("PASSWORD"),
            tenant_name=get_env("TENANT_NAME"),
            tenant_id=get_env("TENANT_ID"),
            compute_url=get_env("COMPUTE_URL"),
            region=get_env("REGION"),
            timeout=float(get_env("TIMEOUT", "30.0")),
            wait=WaitConfig(
                refresh_delay=float(get_env("WAIT_REFRESH_DELAY", "5.0")),
                timeout=float(get_env("WAIT_TIMEOUT", "300.0")),
            ),
        )

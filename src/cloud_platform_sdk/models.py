"""Pydantic models for Cloud Platform SDK.

Uses Pydantic v2 with frozen models for immutability. Tokens and request
descriptors are replaced wholesale, never mutated in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, Self, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)

from .status import ImageStatus, ServerStatus

T = TypeVar("T")

AUTH_TOKEN_HEADER = "X-Auth-Token"


class AuthToken(BaseModel):
    """Bearer credential issued by the identity service.

    Validity is decided by the service rejecting the token with 401;
    ``expires_at`` is informational only.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    expires_at: datetime | None = None
    tenant_id: str | None = None

    def authorization_header(self) -> dict[str, str]:
        """Header mapping that authenticates a request with this token."""
        return {AUTH_TOKEN_HEADER: self.id}

    def __repr__(self) -> str:
        return f"AuthToken(expires_at={self.expires_at!r}, tenant_id={self.tenant_id!r})"


class Credentials(BaseModel):
    """Identity credentials: a username plus an API key or a password."""

    model_config = ConfigDict(frozen=True)

    username: str = Field(..., min_length=1)
    api_key: SecretStr | None = None
    password: SecretStr | None = None
    tenant_name: str | None = None
    tenant_id: str | None = None

    @model_validator(mode="after")
    def check_secret(self) -> Self:
        """Require exactly one secret."""
        if (self.api_key is None) == (self.password is None):
            msg = "exactly one of api_key or password must be set"
            raise ValueError(msg)
        return self


class ApiRequest(BaseModel):
    """Description of one HTTP call, created per call by a resource client."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    method: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    headers: dict[str, str] = Field(default_factory=dict)
    params: dict[str, Any] | None = None
    json_body: Any = Field(default=None, alias="json")

    def with_headers(self, headers: dict[str, str]) -> Self:
        """Return a copy with ``headers`` merged over the existing ones."""
        return self.model_copy(update={"headers": {**self.headers, **headers}})

    def request_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``httpx.Client.request``."""
        kwargs: dict[str, Any] = {"headers": self.headers}
        if self.params is not None:
            kwargs["params"] = self.params
        if self.json_body is not None:
            kwargs["json"] = self.json_body
        return kwargs


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a collection and the link to the next one, if any."""

    items: list[T] = field(default_factory=list)
    next_url: str | None = None

    @property
    def has_next(self) -> bool:
        """Whether another page follows this one."""
        return bool(self.next_url)


class Link(BaseModel):
    """Hypermedia link as found in OpenStack ``links`` arrays."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    href: str
    rel: str


class Server(BaseModel):
    """Compute server, as far as the SDK core needs it."""

    model_config = ConfigDict(frozen=True, extra="allow")

    id: str
    name: str | None = None
    status: ServerStatus = ServerStatus.UNKNOWN
    progress: int | None = None
    links: list[Link] = Field(default_factory=list)

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v: Any) -> ServerStatus:
        """Map wire values, including unrecognised ones, onto ServerStatus."""
        return ServerStatus(v)


class Image(BaseModel):
    """Compute image, as far as the SDK core needs it."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    id: str
    name: str | None = None
    status: ImageStatus = ImageStatus.UNKNOWN
    progress: int | None = None
    min_disk: int | None = Field(default=None, alias="minDisk")
    min_ram: int | None = Field(default=None, alias="minRam")
    metadata: dict[str, str] = Field(default_factory=dict)

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v: Any) -> ImageStatus:
        """Map wire values, including unrecognised ones, onto ImageStatus."""
        return ImageStatus(v)

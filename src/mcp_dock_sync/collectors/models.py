"""Typed views of upstream registry records.

Upstream JSON is partial and loosely typed. Every record is validated into
one of these models before any other stage touches it, so each optional
field has exactly one default, declared here. JSON ``null`` is treated the
same as an absent key, and unknown keys are ignored.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from mcp_dock_sync.config import REGISTRY_META_KEY

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def parse_timestamp(value: str | None) -> datetime:
    """Parse an ISO 8601 timestamp; missing or malformed values map to the epoch."""
    if not value:
        return EPOCH
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return EPOCH
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


class UpstreamModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    @model_validator(mode="before")
    @classmethod
    def drop_null_keys(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    @field_validator("*", mode="wrap")
    @classmethod
    def default_on_bad_value(
        cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo
    ) -> Any:
        # A wrongly typed field falls back to its default; the record is kept.
        try:
            return handler(value)
        except ValidationError:
            field = cls.model_fields[info.field_name]
            return field.get_default(call_default_factory=True)


# ---------------------------------------------------------------------------
# Official registry
# ---------------------------------------------------------------------------


class Icon(UpstreamModel):
    src: str = ""
    theme: str = ""


class Repository(UpstreamModel):
    url: str = ""
    source: str = ""
    subfolder: str = ""


class Transport(UpstreamModel):
    type: str = ""


class EnvironmentVariable(UpstreamModel):
    name: str = ""
    description: str = ""
    is_required: bool = False
    is_secret: bool = False
    default: Any = None
    choices: list[Any] | None = None


class Argument(UpstreamModel):
    name: str = ""
    description: str = ""
    type: str = ""
    is_required: bool = False
    default: Any = None
    value_hint: str = ""


class Package(UpstreamModel):
    registry_type: str = ""
    identifier: str = ""
    version: str = ""
    runtime_hint: str = ""
    transport: Transport | None = None
    environment_variables: list[EnvironmentVariable] = Field(default_factory=list)
    package_arguments: list[Argument] = Field(default_factory=list)
    runtime_arguments: list[Argument] = Field(default_factory=list)


class Header(UpstreamModel):
    name: str = ""
    description: str = ""
    is_required: bool = False
    is_secret: bool = False
    default: Any = None


class Remote(UpstreamModel):
    type: str = ""
    url: str = ""
    headers: list[Header] = Field(default_factory=list)


class OfficialServer(UpstreamModel):
    name: str = ""
    title: str = ""
    description: str = ""
    version: str = ""
    website_url: str = ""
    icons: list[Icon] = Field(default_factory=list)
    repository: Repository | None = None
    packages: list[Package] = Field(default_factory=list)
    remotes: list[Remote] = Field(default_factory=list)


class OfficialStatus(UpstreamModel):
    status: str = ""
    published_at: str = ""
    updated_at: str = ""
    is_latest: bool = False


class RegistryMeta(UpstreamModel):
    official: OfficialStatus = Field(
        default_factory=OfficialStatus, alias=REGISTRY_META_KEY
    )


class OfficialEntry(UpstreamModel):
    """One item of the official registry ``servers`` array."""

    server: OfficialServer = Field(default_factory=OfficialServer)
    meta: RegistryMeta = Field(default_factory=RegistryMeta, alias="_meta")

    @property
    def name(self) -> str:
        return self.server.name

    @property
    def is_latest(self) -> bool:
        return self.meta.official.is_latest

    @property
    def published_at(self) -> datetime:
        return parse_timestamp(self.meta.official.published_at)


# ---------------------------------------------------------------------------
# Smithery
# ---------------------------------------------------------------------------


class SmitheryServer(UpstreamModel):
    """A Smithery list item."""

    qualified_name: str = ""
    id: str = ""
    display_name: str = ""
    name: str = ""
    description: str = ""
    owner: Any = None
    icon_url: str = ""
    icon: str = ""
    verified: bool = False
    use_count: int = 0

    @property
    def key(self) -> str:
        return self.qualified_name or self.id


class Links(UpstreamModel):
    homepage: str = ""


class Connection(UpstreamModel):
    type: str = ""
    runtime: str = ""
    config_schema: dict[str, Any] | None = None


class Tool(UpstreamModel):
    name: str = ""
    title: str = ""
    description: str = ""


class SmitheryDetail(SmitheryServer):
    """A Smithery single-server response."""

    created_at: str = ""
    homepage: str = ""
    links: Links = Field(default_factory=Links)
    connections: list[Connection] = Field(default_factory=list)
    tools: list[Tool] = Field(default_factory=list)

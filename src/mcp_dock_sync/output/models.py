"""Pydantic models for the published JSON files.

Field names are serialized in camelCase. A field listed in
``omit_when_none`` is left out of the JSON entirely when it is None; every
other field is always present, with ``null`` where it has no value.
Consumers rely on that distinction, so new fields may be added but
existing ones must keep their names and types.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, model_serializer
from pydantic.alias_generators import to_camel


class OutputModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    omit_when_none: ClassVar[tuple[str, ...]] = ()

    @model_serializer(mode="wrap")
    def drop_absent_fields(self, handler):
        data = handler(self)
        for name in self.omit_when_none:
            alias = type(self).model_fields[name].alias or name
            for key in (name, alias):
                if key in data and data[key] is None:
                    del data[key]
        return data


# --- Shared ---


class RepositoryRef(OutputModel):
    omit_when_none = ("subfolder",)

    url: str = ""
    source: str = "github"
    subfolder: str | None = None


# --- Official registry ---


class EnvironmentVariableDescriptor(OutputModel):
    omit_when_none = ("description", "default", "choices")

    name: str
    description: str | None = None
    is_required: bool = False
    is_secret: bool = False
    default: Any = None
    choices: list[Any] | None = None


class ArgumentDescriptor(OutputModel):
    omit_when_none = ("description", "default", "value_hint")

    name: str
    description: str | None = None
    type: str
    is_required: bool = False
    default: Any = None
    value_hint: str | None = None


class TransportDescriptor(OutputModel):
    type: str = "stdio"


class PackageDescriptor(OutputModel):
    omit_when_none = ("version", "runtime_hint")

    registry_type: str = "npm"
    identifier: str = ""
    version: str | None = None
    runtime_hint: str | None = None
    transport: TransportDescriptor = Field(default_factory=TransportDescriptor)
    environment_variables: list[EnvironmentVariableDescriptor] = Field(
        default_factory=list
    )
    package_arguments: list[ArgumentDescriptor] = Field(default_factory=list)
    runtime_arguments: list[ArgumentDescriptor] = Field(default_factory=list)


class HeaderDescriptor(OutputModel):
    omit_when_none = ("description", "default")

    name: str
    description: str | None = None
    is_required: bool = False
    is_secret: bool = False
    default: Any = None


class RemoteDescriptor(OutputModel):
    type: str = "streamable-http"
    url: str
    headers: list[HeaderDescriptor] = Field(default_factory=list)


class OfficialIndexEntry(OutputModel):
    id: str
    display_name: str
    description: str = ""
    icon_url: str | None = None
    version: str = ""
    status: str = "active"
    published_at: str = ""
    repository: RepositoryRef | None = None
    stars: int = 0


class OfficialDetailRecord(OutputModel):
    """Per-server detail file. README content is fetched by clients, not stored."""

    id: str
    display_name: str
    description: str = ""
    version: str = ""
    status: str = "active"
    published_at: str = ""
    updated_at: str = ""
    icon_url: str | None = None
    website_url: str | None = None
    repository: RepositoryRef | None = None
    packages: list[PackageDescriptor] = Field(default_factory=list)
    remotes: list[RemoteDescriptor] = Field(default_factory=list)
    stars: int = 0


# --- Smithery ---


class SmitheryIndexEntry(OutputModel):
    id: str
    display_name: str
    description: str = ""
    author: str = "unknown"
    icon_url: str | None = None
    verified: bool = False
    downloads: int = 0


class ConnectionDescriptor(OutputModel):
    type: str = "stdio"
    runtime: str = "node"
    config_schema: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}, "required": []}
    )


class Capability(OutputModel):
    name: str
    description: str = ""


class SmitheryLinks(OutputModel):
    homepage: str = ""
    registry: str


class SmitheryDetailRecord(OutputModel):
    """Per-server detail file.

    Deployment, security, bundle and remote metadata are deliberately not
    part of this model.
    """

    id: str
    display_name: str
    description: str = ""
    created_at: str
    links: SmitheryLinks
    connection: ConnectionDescriptor | None = None
    capabilities: list[Capability] = Field(default_factory=list)

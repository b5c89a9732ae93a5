"""Immutable resource type descriptors."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from restbind.core.collection import Collection
from restbind.core.packer import DefaultPacker, Packer
from restbind.core.ports.transport import Transport
from restbind.core.record import Record

FieldCodec = Callable[[Any], Any]

_EMPTY: Mapping[str, FieldCodec] = MappingProxyType({})


@dataclass(frozen=True, eq=False)
class ResourceType:
    """Everything needed to bind records of one remote resource.

    ``decoders`` convert raw field values when data is fed into a record;
    ``encoders`` convert attribute values when a record is sent to the server.
    """

    path: str
    transport: Transport
    packer: Packer = field(default_factory=DefaultPacker)
    primary_key: str = "id"
    decoders: Mapping[str, FieldCodec] = field(default_factory=lambda: _EMPTY)
    encoders: Mapping[str, FieldCodec] = field(default_factory=lambda: _EMPTY)

    def build(self, attributes: Mapping[str, Any] | None = None) -> Record:
        return Record(self, attributes)

    def collection(self, params: Mapping[str, Any] | None = None) -> Collection:
        return Collection(self, params)

    def record_path(self, pk: Any) -> str:
        return f"{self.path.rstrip('/')}/{pk}"


def define_resource(
    path: str,
    transport: Transport,
    *,
    packer: Packer | None = None,
    primary_key: str = "id",
    decoders: Mapping[str, FieldCodec] | None = None,
    encoders: Mapping[str, FieldCodec] | None = None,
) -> ResourceType:
    return ResourceType(
        path=path,
        transport=transport,
        packer=packer if packer is not None else DefaultPacker(),
        primary_key=primary_key,
        decoders=MappingProxyType(dict(decoders or {})),
        encoders=MappingProxyType(dict(encoders or {})),
    )

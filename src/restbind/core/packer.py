"""Strategies that turn raw transport payloads into attribute mappings.

A packer is shared by every collection and record of a resource type, so it
must not keep per-call state. Envelope-style packers may copy response
metadata onto the collection they are unpacking for.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from restbind.core.collection import Collection
    from restbind.core.record import Record


class PackerError(ValueError):
    """Raised when a packer returns something other than attribute mappings."""


class Packer(Protocol):
    def unpack(self, raw: Any, record: Record) -> Mapping[str, Any]: ...

    def unpack_many(self, raw: Any, collection: Collection) -> Sequence[Mapping[str, Any]]: ...


class DefaultPacker:
    """Pass-through packer: objects are attributes, arrays are item lists."""

    def unpack(self, raw: Any, record: Record) -> Mapping[str, Any]:
        return raw

    def unpack_many(self, raw: Any, collection: Collection) -> Sequence[Mapping[str, Any]]:
        return raw


class EnvelopePacker:
    """Read items from ``raw[root]`` and keep ``raw[meta_key]`` as collection metadata."""

    def __init__(self, root: str, meta_key: str = "meta") -> None:
        self.root = root
        self.meta_key = meta_key

    def unpack(self, raw: Any, record: Record) -> Mapping[str, Any]:
        return raw

    def unpack_many(self, raw: Any, collection: Collection) -> Sequence[Mapping[str, Any]]:
        if not isinstance(raw, Mapping) or self.root not in raw:
            raise PackerError(f"Expected an object with a {self.root!r} key, got {type(raw).__name__}")
        collection.meta = dict(raw.get(self.meta_key) or {})
        return raw[self.root]


class JsonApiPacker:
    """Unpack JSON:API documents (``{"data": ..., "meta": ...}``)."""

    def unpack(self, raw: Any, record: Record) -> Mapping[str, Any]:
        return _flatten_resource(_document_data(raw))

    def unpack_many(self, raw: Any, collection: Collection) -> Sequence[Mapping[str, Any]]:
        data = _document_data(raw)
        if not isinstance(data, list):
            raise PackerError("JSON:API collection document must carry a list in 'data'")
        collection.meta = dict(raw.get("meta") or {})
        return [_flatten_resource(item) for item in data]


def _document_data(raw: Any) -> Any:
    if not isinstance(raw, Mapping) or "data" not in raw:
        raise PackerError("JSON:API document must be an object with a 'data' member")
    return raw["data"]


def _flatten_resource(resource: Any) -> dict[str, Any]:
    if not isinstance(resource, Mapping):
        raise PackerError(f"JSON:API resource object expected, got {type(resource).__name__}")
    attributes = dict(resource.get("attributes") or {})
    if "id" in resource:
        attributes["id"] = resource["id"]
    return attributes


def check_attributes(result: Any) -> Mapping[str, Any]:
    if not isinstance(result, Mapping):
        raise PackerError(f"unpack must return a mapping, got {type(result).__name__}")
    return result


def check_many(result: Any) -> list[Mapping[str, Any]]:
    """Validate an ``unpack_many`` result before anything is fed from it."""
    if isinstance(result, (str | bytes | Mapping)) or not isinstance(result, Sequence):
        raise PackerError(f"unpack_many must return a sequence of mappings, got {type(result).__name__}")
    for idx, item in enumerate(result):
        if not isinstance(item, Mapping):
            raise PackerError(f"unpack_many item {idx} is {type(item).__name__}, expected a mapping")
    return list(result)

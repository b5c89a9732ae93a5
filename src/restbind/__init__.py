from restbind.core.collection import Collection, CollectionState
from restbind.core.events import Event, EventBus
from restbind.core.packer import DefaultPacker, EnvelopePacker, JsonApiPacker, Packer, PackerError
from restbind.core.ports.transport import Transport, TransportError, compose_url
from restbind.core.record import Record
from restbind.core.resource import ResourceType, define_resource
from restbind.transport.httpx_adapter import HttpxTransport
from restbind.transport.memory import InMemoryTransport, RecordedRequest

__all__ = [
    "Collection",
    "CollectionState",
    "DefaultPacker",
    "EnvelopePacker",
    "Event",
    "EventBus",
    "HttpxTransport",
    "InMemoryTransport",
    "JsonApiPacker",
    "Packer",
    "PackerError",
    "RecordedRequest",
    "Record",
    "ResourceType",
    "Transport",
    "TransportError",
    "compose_url",
    "define_resource",
]

"""Single resource instances."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine, Mapping
from typing import TYPE_CHECKING, Any

from restbind.core.events import Event, EventBus
from restbind.core.packer import check_attributes

if TYPE_CHECKING:
    from restbind.core.collection import Collection
    from restbind.core.resource import ResourceType

logger = logging.getLogger(__name__)


class Record:
    """A model instance holding the attributes of one remote entity.

    Attributes are readable as ``record.name`` or ``record["name"]``. Records
    compare by identity: two decodes of the same server entity stay distinct.

    Remote operations (``save``, ``fetch``, ``destroy``) are scheduled on the
    running event loop and return the record at once; ``await record`` waits for
    the latest one and re-raises its failure.
    """

    def __init__(
        self,
        resource: ResourceType,
        attributes: Mapping[str, Any] | None = None,
        collection: Collection | None = None,
    ) -> None:
        self.resource = resource
        self.collection = collection
        self.attributes: dict[str, Any] = dict(attributes or {})
        self.events = EventBus()
        self._pending: asyncio.Task[Record] | None = None
        self._tasks: set[asyncio.Task[Record]] = set()

    def __getattr__(self, name: str) -> Any:
        attributes = self.__dict__.get("attributes")
        if attributes is not None and name in attributes:
            return attributes[name]
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def __getitem__(self, key: str) -> Any:
        return self.attributes[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.attributes[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self.attributes

    def __repr__(self) -> str:
        return f"<Record {self.resource.path} {self.attributes!r}>"

    def __await__(self):  # type: ignore[no-untyped-def]
        return self.wait().__await__()

    @property
    def pk(self) -> Any:
        return self.attributes.get(self.resource.primary_key)

    @property
    def path(self) -> str | None:
        pk = self.pk
        return None if pk is None else self.resource.record_path(pk)

    @property
    def pending_request(self) -> asyncio.Task[Record] | None:
        return self._pending

    def feed(self, raw: Mapping[str, Any]) -> Record:
        """Decode ``raw`` field by field and merge it into the attributes."""
        decoders = self.resource.decoders
        for key, value in raw.items():
            decoder = decoders.get(key)
            self.attributes[key] = decoder(value) if decoder is not None else value
        self.events.emit(Event.AFTER_FEED, self)
        return self

    def on(self, event: Event | str, handler: Callable[..., Any]) -> Callable[..., Any]:
        return self.events.on(event, handler)

    def encode(self) -> dict[str, Any]:
        encoders = self.resource.encoders
        body: dict[str, Any] = {}
        for key, value in self.attributes.items():
            encoder = encoders.get(key)
            body[key] = encoder(value) if encoder is not None else value
        return body

    # -- remote operations ---------------------------------------------------

    def save(self) -> Record:
        return self._track(self._save_cycle())

    def fetch(self) -> Record:
        path = self._require_path("fetch")
        return self._track(self._fetch_cycle(path))

    def destroy(self) -> Record:
        path = self._require_path("destroy")
        return self._track(self._destroy_cycle(path))

    async def wait(self) -> Record:
        task = self._pending
        if task is not None:
            await task
        return self

    def _track(self, coro: Coroutine[Any, Any, Record]) -> Record:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            raise
        self._pending = loop.create_task(coro)
        self._tasks.add(self._pending)
        self._pending.add_done_callback(self._task_done)
        return self

    def _task_done(self, task: asyncio.Task[Record]) -> None:
        self._tasks.discard(task)
        if not task.cancelled():
            task.exception()

    def _require_path(self, operation: str) -> str:
        path = self.path
        if path is None:
            raise ValueError(f"Cannot {operation} a record without {self.resource.primary_key!r}")
        return path

    def _collection_path(self) -> str:
        return self.collection.path if self.collection is not None else self.resource.path

    async def _save_cycle(self) -> Record:
        if self.pk is None:
            method, path = "POST", self._collection_path()
        else:
            method, path = "PUT", self.resource.record_path(self.pk)
        self.events.emit(Event.BEFORE_SAVE, self)
        try:
            raw = await self.resource.transport.request(method, path, body=self.encode())
            fields = None if raw is None else check_attributes(self.resource.packer.unpack(raw, self))
        except Exception as exc:
            logger.debug("%s %s failed: %s", method, path, exc)
            self.events.emit(Event.AFTER_SAVE_ERROR, exc)
            raise
        if fields is not None:
            self.feed(fields)
        self.events.emit(Event.AFTER_SAVE, self)
        return self

    async def _fetch_cycle(self, path: str) -> Record:
        self.events.emit(Event.BEFORE_FETCH)
        try:
            raw = await self.resource.transport.request("GET", path)
            fields = check_attributes(self.resource.packer.unpack(raw, self))
        except Exception as exc:
            self.events.emit(Event.AFTER_FETCH_ERROR, exc)
            raise
        self.feed(fields)
        self.events.emit(Event.AFTER_FETCH)
        return self

    async def _destroy_cycle(self, path: str) -> Record:
        self.events.emit(Event.BEFORE_DESTROY, self)
        try:
            await self.resource.transport.request("DELETE", path)
        except Exception as exc:
            self.events.emit(Event.AFTER_DESTROY_ERROR, exc)
            raise
        if self.collection is not None:
            self.collection.remove(self)
        self.events.emit(Event.AFTER_DESTROY, self)
        return self

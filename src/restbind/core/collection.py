"""Ordered, observable mirror of a remote resource collection.

Fetch-family calls (``fetch``, ``refresh`` and a ``reset`` followed by
``fetch``) share one generation counter. Every issued request is tagged with
the generation current at call time, and its response is applied only if no
newer cycle has started in the meantime, so the last request always wins
regardless of completion order.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterator, Mapping, Sequence
from enum import Enum
from typing import TYPE_CHECKING, Any, overload

from restbind.core.events import Event, EventBus
from restbind.core.packer import check_many
from restbind.core.ports.transport import compose_url
from restbind.core.record import Record

if TYPE_CHECKING:
    from restbind.core.resource import ResourceType

logger = logging.getLogger(__name__)


class CollectionState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    RESOLVED = "resolved"
    FAILED = "failed"


class Collection(Sequence[Record]):
    def __init__(self, resource: ResourceType, params: Mapping[str, Any] | None = None) -> None:
        self.resource = resource
        self.query_params: dict[str, Any] = dict(params or {})
        self.meta: dict[str, Any] = {}
        self.events = EventBus()
        self.last_error: BaseException | None = None
        self._items: list[Record] = []
        self._state = CollectionState.IDLE
        self._generation = 0
        # Latest fetch-family task; kept after completion so its outcome can be awaited
        self._request: asyncio.Task[Collection] | None = None
        self._tasks: set[asyncio.Task[Collection]] = set()

    # -- sequence protocol ---------------------------------------------------

    @overload
    def __getitem__(self, index: int) -> Record: ...

    @overload
    def __getitem__(self, index: slice) -> list[Record]: ...

    def __getitem__(self, index: int | slice) -> Record | list[Record]:
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Record]:
        return iter(list(self._items))

    def __repr__(self) -> str:
        return f"<Collection {compose_url(self.path, self.query_params)} state={self._state.value} len={len(self)}>"

    def __await__(self):  # type: ignore[no-untyped-def]
        return self.wait().__await__()

    # -- state ---------------------------------------------------------------

    @property
    def path(self) -> str:
        return self.resource.path

    @property
    def items(self) -> list[Record]:
        return list(self._items)

    @property
    def state(self) -> CollectionState:
        return self._state

    @property
    def resolved(self) -> bool:
        return self._state is CollectionState.RESOLVED

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pending_request(self) -> asyncio.Task[Collection] | None:
        """The in-flight fetch-family task, if any."""
        task = self._request
        return task if task is not None and not task.done() else None

    # -- fetch family --------------------------------------------------------

    def fetch(self, params: Mapping[str, Any] | None = None) -> Collection:
        """Request the next page of data and append it on success.

        While a request is already outstanding no new one is issued; the merged
        params are picked up by that request if it has not been sent yet,
        otherwise by the next call.
        """
        if params:
            self.query_params.update(params)
        if self._state is CollectionState.FETCHING and not self._request_cancelled():
            return self

        loop = asyncio.get_running_loop()
        self._generation += 1
        self._state = CollectionState.FETCHING
        self._request = loop.create_task(self._fetch_cycle(self._generation))
        # Superseded tasks stay referenced until they finish
        self._tasks.add(self._request)
        self._request.add_done_callback(self._task_done)
        return self

    def reset(self) -> Collection:
        """Drop all items and supersede any outstanding request. Purely local."""
        self._generation += 1
        self._state = CollectionState.IDLE
        self._request = None
        self._items.clear()
        return self

    def refresh(self, params: Mapping[str, Any] | None = None) -> Collection:
        return self.reset().fetch(params)

    async def wait(self) -> Collection:
        """Wait for the latest fetch-family request and re-raise its failure."""
        while (task := self._request) is not None:
            await task
            if task is self._request:
                break
        return self

    def _request_cancelled(self) -> bool:
        task = self._request
        return task is not None and (task.cancelled() or task.cancelling() > 0)

    def _task_done(self, task: asyncio.Task[Collection]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            if task is self._request and self._state is CollectionState.FETCHING:
                self._state = CollectionState.IDLE
            return
        # Failures stay in last_error and are re-raised by wait(); mark them retrieved
        task.exception()

    async def _fetch_cycle(self, generation: int) -> Collection:
        if generation != self._generation:
            logger.debug("Skipping superseded request %d for %s", generation, self.path)
            return self

        params = dict(self.query_params)
        url = compose_url(self.path, params)
        self.events.emit(Event.BEFORE_FETCH)
        logger.debug("GET %s (generation %d)", url, generation)
        try:
            raw = await self.resource.transport.request("GET", self.path, params=params)
            if generation != self._generation:
                logger.debug("Discarding stale response for %s (generation %d)", url, generation)
                return self
            self.feed(self.unwrap(raw))
        except Exception as exc:
            if generation != self._generation:
                logger.debug("Discarding stale failure for %s: %s", url, exc)
                return self
            self._state = CollectionState.FAILED
            self.last_error = exc
            self.events.emit(Event.AFTER_FETCH_ERROR, exc)
            raise

        self.last_error = None
        self._state = CollectionState.RESOLVED
        self.events.emit(Event.AFTER_FETCH)
        return self

    # -- unwrap / feed -------------------------------------------------------

    def unwrap(self, raw: Any) -> list[Mapping[str, Any]]:
        """Turn a raw listing payload into attribute mappings via the packer."""
        return check_many(self.resource.packer.unpack_many(raw, self))

    def feed(self, raw_items: Sequence[Mapping[str, Any]]) -> Collection:
        """Create one record per mapping and append them without ``after-add``."""
        records = [self.build().feed(raw) for raw in raw_items]
        self._items.extend(records)
        return self

    # -- local mutation ------------------------------------------------------

    def build(self, attributes: Mapping[str, Any] | None = None) -> Record:
        """Return a new record scoped to this collection, without adding it."""
        return Record(self.resource, attributes, collection=self)

    def create(self, attributes: Mapping[str, Any] | None = None) -> Record:
        """Build a record and POST it; it joins the collection once the server confirms."""
        record = self.build(attributes)
        return record._track(self._create_cycle(record))

    async def _create_cycle(self, record: Record) -> Record:
        self.events.emit(Event.BEFORE_SAVE, record)
        await record._save_cycle()
        self.events.emit(Event.AFTER_SAVE, record)
        self.add(record)
        return record

    def add(self, record: Record, index: int | None = None) -> Collection:
        """Insert ``record``, taking it out of the collection that held it before."""
        if index is not None and not 0 <= index <= len(self._items):
            raise IndexError(f"Insert index {index} out of range for collection of length {len(self._items)}")
        previous = record.collection
        if previous is not None and previous is not self:
            previous.remove(record)
        if index is None:
            self._items.append(record)
        else:
            self._items.insert(index, record)
        record.collection = self
        self.events.emit(Event.AFTER_ADD, record)
        return self

    def remove(self, record: Record) -> Collection:
        idx = self.index_of(record)
        if idx != -1:
            del self._items[idx]
            self.events.emit(Event.AFTER_REMOVE, record)
        return self

    def index_of(self, target: Record | Callable[[Record], bool]) -> int:
        if isinstance(target, Record):
            for idx, item in enumerate(self._items):
                if item is target:
                    return idx
            return -1
        if callable(target):
            for idx, item in enumerate(self._items):
                if target(item):
                    return idx
            return -1
        raise TypeError(f"index_of expects a Record or a predicate, got {type(target).__name__}")

    def on(self, event: Event | str, handler: Callable[..., Any]) -> Callable[..., Any]:
        return self.events.on(event, handler)

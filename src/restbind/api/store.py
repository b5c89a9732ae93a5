from __future__ import annotations

from collections.abc import Mapping
from typing import Any


class InMemoryResourceStore:
    """Keeps JSON objects per resource name, with integer ids assigned on create."""

    def __init__(self) -> None:
        self.resources: dict[str, dict[str, dict[str, Any]]] = {}
        self._next_id: dict[str, int] = {}

    def seed(self, data: Mapping[str, list[dict[str, Any]]]) -> None:
        for resource, objects in data.items():
            for obj in objects:
                self._insert(resource, dict(obj))

    async def list_objects(self, resource: str, filters: Mapping[str, str] | None = None) -> list[dict[str, Any]]:
        rows = list(self.resources.get(resource, {}).values())
        if filters:
            rows = [r for r in rows if all(str(r.get(k)) == v for k, v in filters.items())]
        return [dict(r) for r in rows]

    async def get_object(self, resource: str, object_id: str) -> dict[str, Any] | None:
        obj = self.resources.get(resource, {}).get(object_id)
        return dict(obj) if obj is not None else None

    async def create_object(self, resource: str, attributes: Mapping[str, Any]) -> dict[str, Any]:
        return dict(self._insert(resource, dict(attributes)))

    async def update_object(
        self, resource: str, object_id: str, attributes: Mapping[str, Any]
    ) -> dict[str, Any] | None:
        obj = self.resources.get(resource, {}).get(object_id)
        if obj is None:
            return None
        # The id in the URL is authoritative
        obj.update({k: v for k, v in attributes.items() if k != "id"})
        return dict(obj)

    async def delete_object(self, resource: str, object_id: str) -> bool:
        return self.resources.get(resource, {}).pop(object_id, None) is not None

    def _insert(self, resource: str, obj: dict[str, Any]) -> dict[str, Any]:
        bucket = self.resources.setdefault(resource, {})
        if "id" not in obj:
            obj["id"] = self._next_id.get(resource, 1)
        if isinstance(obj["id"], int):
            self._next_id[resource] = max(self._next_id.get(resource, 1), obj["id"] + 1)
        bucket[str(obj["id"])] = obj
        return obj

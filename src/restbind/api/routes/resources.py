"""Generic JSON endpoints for any resource name held by the store."""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request, Response, status

from restbind.api.dependencies import get_store
from restbind.api.schemas import ErrorResponse
from restbind.api.store import InMemoryResourceStore

router = APIRouter(tags=["resources"])

_NOT_FOUND: dict[int | str, dict[str, Any]] = {404: {"model": ErrorResponse}}


def _not_found(resource: str, object_id: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{resource}/{object_id} not found")


@router.get("/{resource}")
async def list_objects(
    resource: str,
    request: Request,
    store: InMemoryResourceStore = Depends(get_store),
) -> list[dict[str, Any]]:
    """List objects, keeping those whose fields equal every query parameter."""
    return await store.list_objects(resource, dict(request.query_params))


@router.post("/{resource}", status_code=status.HTTP_201_CREATED)
async def create_object(
    resource: str,
    attributes: dict[str, Any] = Body(...),
    store: InMemoryResourceStore = Depends(get_store),
) -> dict[str, Any]:
    return await store.create_object(resource, attributes)


@router.get("/{resource}/{object_id}", responses=_NOT_FOUND)
async def get_object(
    resource: str,
    object_id: str,
    store: InMemoryResourceStore = Depends(get_store),
) -> dict[str, Any]:
    obj = await store.get_object(resource, object_id)
    if obj is None:
        raise _not_found(resource, object_id)
    return obj


@router.put("/{resource}/{object_id}", responses=_NOT_FOUND)
async def update_object(
    resource: str,
    object_id: str,
    attributes: dict[str, Any] = Body(...),
    store: InMemoryResourceStore = Depends(get_store),
) -> dict[str, Any]:
    obj = await store.update_object(resource, object_id, attributes)
    if obj is None:
        raise _not_found(resource, object_id)
    return obj


@router.delete("/{resource}/{object_id}", status_code=status.HTTP_204_NO_CONTENT, responses=_NOT_FOUND)
async def delete_object(
    resource: str,
    object_id: str,
    store: InMemoryResourceStore = Depends(get_store),
) -> Response:
    if not await store.delete_object(resource, object_id):
        raise _not_found(resource, object_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

"""
api/routes/v1/items.py -- Owner-scoped item CRUD endpoints.

Routes:
  GET    /api/v1/items        -- list the caller's items
  POST   /api/v1/items        -- create an item owned by the caller
  GET    /api/v1/items/{id}   -- one item (404 if missing or not the caller's)
  PUT    /api/v1/items/{id}   -- replace title/description
  DELETE /api/v1/items/{id}   -- delete

Every route requires authentication. The caller's identity id is passed to
ItemStore as the owner key on every call; the store's WHERE clause matches id
and owner together. A miss is always 404 not_found -- the response never says
whether the id exists under another account.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from api.models import ItemResponse, ItemWrite
from auth.dependencies import get_current_identity
from auth.models import Identity
from items.models import ItemValidationError, normalize_item_input
from items.store import ItemStore

router = APIRouter()


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"code": "not_found", "message": "Item not found."},
    )


def _normalize(body: ItemWrite) -> tuple[str, str | None]:
    try:
        return normalize_item_input(body.title, body.description)
    except ItemValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail={"code": "validation_error", "message": str(exc)},
        ) from exc


@router.get("/items", response_model=list[ItemResponse])
def list_items(request: Request, identity: Identity = Depends(get_current_identity)) -> list[ItemResponse]:
    item_store: ItemStore = request.app.state.item_store
    return [ItemResponse.from_item(i) for i in item_store.list_items(identity.id)]


@router.post("/items", response_model=ItemResponse, status_code=201)
def create_item(
    request: Request,
    body: ItemWrite,
    identity: Identity = Depends(get_current_identity),
) -> ItemResponse:
    item_store: ItemStore = request.app.state.item_store
    title, description = _normalize(body)
    item = item_store.create_item(identity.id, title, description)
    return ItemResponse.from_item(item)


@router.get("/items/{item_id}", response_model=ItemResponse)
def get_item(request: Request, item_id: int, identity: Identity = Depends(get_current_identity)) -> ItemResponse:
    item_store: ItemStore = request.app.state.item_store
    item = item_store.get_item(item_id, identity.id)
    if item is None:
        raise _not_found()
    return ItemResponse.from_item(item)


@router.put("/items/{item_id}", response_model=ItemResponse)
def update_item(
    request: Request,
    item_id: int,
    body: ItemWrite,
    identity: Identity = Depends(get_current_identity),
) -> ItemResponse:
    item_store: ItemStore = request.app.state.item_store
    title, description = _normalize(body)
    item = item_store.update_item(item_id, identity.id, title, description)
    if item is None:
        raise _not_found()
    return ItemResponse.from_item(item)


@router.delete("/items/{item_id}", status_code=204)
def delete_item(request: Request, item_id: int, identity: Identity = Depends(get_current_identity)) -> Response:
    item_store: ItemStore = request.app.state.item_store
    if not item_store.delete_item(item_id, identity.id):
        raise _not_found()
    return Response(status_code=204)

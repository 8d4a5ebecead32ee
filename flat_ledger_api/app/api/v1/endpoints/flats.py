"""
Flat endpoints for API v1.

These routes expose the flat handlers as a small REST API for clients
that do not speak the invoke convention.  They share the handlers used
by ``/chaincode/invoke``, so records written here are visible there
and vice versa.
"""

from typing import AsyncIterator, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from flat_ledger_api.app.core.config import settings
from flat_ledger_api.app.core.errors import ChaincodeError
from flat_ledger_api.app.core.ledger import SqliteLedger, ledger_transaction
from flat_ledger_api.app.schemas.flat import FieldUpdate, Flat, FlatPage
from flat_ledger_api.app.services.flat_service import FlatService

router = APIRouter()


async def get_ledger() -> AsyncIterator[SqliteLedger]:
    """Dependency yielding a ledger bound to one transaction."""
    with ledger_transaction() as ledger:
        yield ledger


def _http_error(exc: ChaincodeError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.message)


@router.get("/", response_model=FlatPage)
async def list_flats(
    limit: Optional[int] = Query(None, ge=1, le=settings.max_page_size),
    bookmark: str = Query(""),
    ledger: SqliteLedger = Depends(get_ledger),
) -> FlatPage:
    """Return flats in key order.

    Without ``limit`` the whole configured key range is returned.  With
    ``limit`` at most that many flats are returned, starting at
    ``bookmark``; pass the returned ``bookmark`` back to get the next
    page.
    """
    try:
        return FlatService.list_flats(ledger, page_size=limit, bookmark=bookmark)
    except ChaincodeError as exc:
        raise _http_error(exc)


@router.post("/seed", status_code=status.HTTP_204_NO_CONTENT)
async def seed_flats(ledger: SqliteLedger = Depends(get_ledger)) -> None:
    """Write the ten demo flats to keys ``1`` through ``10``."""
    try:
        FlatService.seed_ledger(ledger)
    except ChaincodeError as exc:
        raise _http_error(exc)
    return None


@router.get("/{key}", response_model=Flat)
async def get_flat(key: str, ledger: SqliteLedger = Depends(get_ledger)) -> Flat:
    """Retrieve a single flat by key; 404 if it does not exist."""
    try:
        return FlatService.get_flat(ledger, key)
    except ChaincodeError as exc:
        raise _http_error(exc)


@router.put("/{key}", response_model=Flat)
async def record_flat(key: str, flat: Flat, ledger: SqliteLedger = Depends(get_ledger)) -> Flat:
    """Create or overwrite the flat stored at ``key``."""
    try:
        return FlatService.record_flat(ledger, key, flat)
    except ChaincodeError as exc:
        raise _http_error(exc)


@router.patch("/{key}/{field}", response_model=Flat)
async def update_flat_field(
    key: str,
    field: str,
    body: FieldUpdate,
    ledger: SqliteLedger = Depends(get_ledger),
) -> Flat:
    """Change the holder, condition or ranking of an existing flat."""
    updaters = {
        "holder": FlatService.change_holder,
        "condition": FlatService.change_condition,
        "ranking": FlatService.change_ranking,
    }
    updater = updaters.get(field)
    if updater is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown field: {field}")
    try:
        return updater(ledger, key, body.value)
    except ChaincodeError as exc:
        raise _http_error(exc)

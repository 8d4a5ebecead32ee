"""
Operation dispatcher.

``invoke`` routes an operation name and its positional string
arguments to a handler and wraps the outcome in an
:class:`~flat_ledger_api.app.schemas.flat.InvokeResponse`.  Operation
names are matched exactly against :class:`Operation`; there is no
prefix or case-insensitive matching.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Callable, Dict, List, Sequence

from flat_ledger_api.app.core.config import settings
from flat_ledger_api.app.core.errors import (
    ChaincodeError,
    InvalidArgument,
    InvalidArgumentCount,
    UnknownOperation,
)
from flat_ledger_api.app.core.ledger import Ledger
from flat_ledger_api.app.schemas.flat import Flat, InvokeResponse, ResponseMetadata
from flat_ledger_api.app.services.flat_service import FlatService


logger = logging.getLogger(__name__)


class Operation(str, Enum):
    QUERY = "query"
    SEED_INITIAL_DATA = "seedInitialData"
    CREATE = "create"
    LIST_ALL = "listAll"
    UPDATE_HOLDER = "updateHolder"
    UPDATE_CONDITION = "updateCondition"
    UPDATE_RANKING = "updateRanking"


Handler = Callable[[Ledger, List[str]], InvokeResponse]


def _expect_args(args: Sequence[str], count: int) -> None:
    if len(args) != count:
        raise InvalidArgumentCount(count)


def _query(ledger: Ledger, args: List[str]) -> InvokeResponse:
    _expect_args(args, 1)
    return InvokeResponse.ok(FlatService.query_flat(ledger, args[0]))


def _seed_initial_data(ledger: Ledger, args: List[str]) -> InvokeResponse:
    FlatService.seed_ledger(ledger)
    return InvokeResponse.ok()


def _create(ledger: Ledger, args: List[str]) -> InvokeResponse:
    _expect_args(args, 5)
    key, condition, ranking, location, holder = args
    flat = Flat(condition=condition, ranking=ranking, location=location, holder=holder)
    FlatService.record_flat(ledger, key, flat)
    return InvokeResponse.ok()


def _parse_page_size(raw: str) -> int:
    try:
        page_size = int(raw)
    except ValueError:
        raise InvalidArgument(f"Page size must be an integer, got {raw!r}") from None
    if not 0 < page_size <= settings.max_page_size:
        raise InvalidArgument(
            f"Page size must be between 1 and {settings.max_page_size}, got {page_size}"
        )
    return page_size


def _list_all(ledger: Ledger, args: List[str]) -> InvokeResponse:
    if len(args) > 2:
        raise InvalidArgumentCount(2)
    if not args:
        page = FlatService.list_flats(ledger)
        metadata = None
    else:
        page_size = _parse_page_size(args[0])
        bookmark = args[1] if len(args) == 2 else ""
        page = FlatService.list_flats(ledger, page_size=page_size, bookmark=bookmark)
        metadata = ResponseMetadata(
            fetched_records_count=page.fetched_records_count,
            bookmark=page.bookmark,
        )
    body = [item.model_dump(by_alias=True) for item in page.records]
    payload = json.dumps(body, separators=(",", ":")).encode("utf-8")
    logger.debug("listAll returned %d records", len(body))
    return InvokeResponse.ok(payload, metadata=metadata)


def _updater(field: str) -> Handler:
    def handler(ledger: Ledger, args: List[str]) -> InvokeResponse:
        _expect_args(args, 2)
        FlatService.update_field(ledger, args[0], field, args[1])
        return InvokeResponse.ok()

    handler.__name__ = f"_update_{field}"
    return handler


HANDLERS: Dict[Operation, Handler] = {
    Operation.QUERY: _query,
    Operation.SEED_INITIAL_DATA: _seed_initial_data,
    Operation.CREATE: _create,
    Operation.LIST_ALL: _list_all,
    Operation.UPDATE_HOLDER: _updater("holder"),
    Operation.UPDATE_CONDITION: _updater("condition"),
    Operation.UPDATE_RANKING: _updater("ranking"),
}


def resolve(function: str) -> Handler:
    """Return the handler registered for ``function``."""
    try:
        operation = Operation(function)
    except ValueError:
        raise UnknownOperation(function) from None
    return HANDLERS[operation]


def invoke(ledger: Ledger, function: str, args: Sequence[str]) -> InvokeResponse:
    """Run ``function`` with ``args`` against ``ledger``.

    Handler errors are reported as a failure response; they are never
    retried.  Unexpected exceptions propagate to the caller.
    """
    args = list(args)
    try:
        handler = resolve(function)
        response = handler(ledger, args)
    except ChaincodeError as exc:
        logger.warning("%s failed: %s", function, exc.message)
        return InvokeResponse.fail(exc)
    logger.info("%s succeeded", function)
    return response


def init(ledger: Ledger) -> InvokeResponse:
    """Instantiate hook; seeds the ledger when ``settings.seed_on_init`` is set."""
    if not settings.seed_on_init:
        return InvokeResponse.ok()
    try:
        FlatService.seed_ledger(ledger)
    except ChaincodeError as exc:
        logger.warning("init failed: %s", exc.message)
        return InvokeResponse.fail(exc)
    return InvokeResponse.ok()

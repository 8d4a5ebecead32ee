"""
Service layer for flat records.

Every handler takes the ledger it should work against as its first
argument and keeps nothing between calls; each call re-reads the
ledger.  Handlers raise :class:`~flat_ledger_api.app.core.errors.ChaincodeError`
subclasses on failure and never retry.

Writes overwrite whatever is stored at a key: there is no existence
check on create, and the three field updates share one
read-modify-write routine.
"""

from __future__ import annotations

import json
import logging
from typing import List, Optional

from pydantic import ValidationError

from flat_ledger_api.app.core.config import settings
from flat_ledger_api.app.core.errors import (
    DecodeError,
    LedgerError,
    PersistenceError,
    RecordNotFound,
    ScanError,
)
from flat_ledger_api.app.core.ledger import Ledger
from flat_ledger_api.app.schemas.flat import FLAT_FIELDS, Flat, FlatPage, FlatQueryResult


SEED_FLATS: List[Flat] = [
    Flat(condition="923F", location="67.0006, -70.5476", ranking="1504054225", holder="Marjan"),
    Flat(condition="M83T", location="91.2395, -49.4594", ranking="1504057825", holder="Som"),
    Flat(condition="T012", location="58.0148, 59.01391", ranking="1493517025", holder="Helal"),
    Flat(condition="P490", location="-45.0945, 0.7949", ranking="1496105425", holder="Jaman"),
    Flat(condition="S439", location="-107.6043, 19.5003", ranking="1493512301", holder="Rafa"),
    Flat(condition="J205", location="-155.2304, -15.8723", ranking="1494117101", holder="Shen"),
    Flat(condition="S22L", location="103.8842, 22.1277", ranking="1496104301", holder="Leila"),
    Flat(condition="EI89", location="-132.3207, -34.0983", ranking="1485066691", holder="Yuan"),
    Flat(condition="129R", location="153.0054, 12.6429", ranking="1485153091", holder="Carlo"),
    Flat(condition="49W4", location="51.9435, 8.2735", ranking="1487745091", holder="Fatima"),
]


class FlatService:
    """Handlers for reading and writing flat records."""

    @classmethod
    def query_flat(cls, ledger: Ledger, key: str) -> bytes:
        """Return the bytes stored at ``key`` unchanged."""
        try:
            raw = ledger.get_state(key)
        except LedgerError as exc:
            raise PersistenceError(f"Failed to read flat: {key}") from exc
        if raw is None:
            raise RecordNotFound(key)
        return raw

    @classmethod
    def get_flat(cls, ledger: Ledger, key: str) -> Flat:
        """Read and decode the flat at ``key``."""
        raw = cls.query_flat(ledger, key)
        try:
            return Flat.from_bytes(raw)
        except ValidationError as exc:
            raise DecodeError(key) from exc

    @classmethod
    def seed_ledger(cls, ledger: Ledger) -> None:
        """Write the demo flats to keys ``"1"`` through ``"10"``.

        Existing values at those keys are overwritten.  The first
        failing write aborts seeding with ``PersistenceError``.
        """
        logger = logging.getLogger(__name__)
        for index, flat in enumerate(SEED_FLATS):
            key = str(index + 1)
            cls.record_flat(ledger, key, flat)
            logger.info("Added flat %s: %s", key, flat.model_dump())

    @classmethod
    def record_flat(cls, ledger: Ledger, key: str, flat: Flat) -> Flat:
        """Store ``flat`` at ``key``, replacing any previous record."""
        try:
            ledger.put_state(key, flat.to_bytes())
        except LedgerError as exc:
            raise PersistenceError(f"Failed to record flat: {key}") from exc
        logging.getLogger(__name__).debug("Recorded flat %s", key)
        return flat

    @classmethod
    def list_flats(
        cls,
        ledger: Ledger,
        start_key: Optional[str] = None,
        end_key: Optional[str] = None,
        page_size: Optional[int] = None,
        bookmark: str = "",
    ) -> FlatPage:
        """Scan a key range and collect every ``{Key, Record}`` pair.

        Bounds default to ``settings.scan_start_key`` and
        ``settings.scan_end_key``.  Results keep the ledger's iteration
        order.  Stored values are decoded and re-encoded, so a value
        that is not a JSON object fails the whole scan with
        ``DecodeError`` instead of corrupting the output.  Any ledger
        failure during the scan raises ``ScanError`` and the partial
        result is dropped.  The scan iterator is closed on every path.
        """
        logger = logging.getLogger(__name__)
        start = settings.scan_start_key if start_key is None else start_key
        end = settings.scan_end_key if end_key is None else end_key
        try:
            iterator = ledger.get_state_by_range(start, end, page_size=page_size, bookmark=bookmark)
        except LedgerError as exc:
            raise ScanError(str(exc)) from exc

        results: List[FlatQueryResult] = []
        with iterator:
            try:
                for kv in iterator:
                    results.append(FlatQueryResult(key=kv.key, record=cls._decode_record(kv.key, kv.value)))
            except LedgerError as exc:
                raise ScanError(str(exc)) from exc
            next_bookmark = iterator.bookmark
            fetched = iterator.fetched_records_count

        logger.debug("Scanned %d flats in [%r, %r)", fetched, start, end)
        return FlatPage(records=results, fetched_records_count=fetched, bookmark=next_bookmark)

    @staticmethod
    def _decode_record(key: str, raw: bytes) -> dict:
        try:
            record = json.loads(raw)
        except ValueError as exc:
            raise DecodeError(key) from exc
        if not isinstance(record, dict):
            raise DecodeError(key)
        return record

    @classmethod
    def update_field(cls, ledger: Ledger, key: str, field: str, value: str) -> Flat:
        """Replace one field of the flat at ``key`` and write it back.

        The stored record must decode cleanly; a malformed record is
        reported as ``DecodeError`` and left untouched rather than
        being overwritten with blank fields.
        """
        if field not in FLAT_FIELDS:
            raise ValueError(f"unknown flat field: {field}")
        flat = cls.get_flat(ledger, key)
        updated = flat.model_copy(update={field: value})
        try:
            ledger.put_state(key, updated.to_bytes())
        except LedgerError as exc:
            raise PersistenceError(f"Failed to change flat {field}: {key}") from exc
        logging.getLogger(__name__).info("Changed %s of flat %s", field, key)
        return updated

    @classmethod
    def change_holder(cls, ledger: Ledger, key: str, holder: str) -> Flat:
        # Whether the caller may transfer the flat is decided upstream.
        return cls.update_field(ledger, key, "holder", holder)

    @classmethod
    def change_condition(cls, ledger: Ledger, key: str, condition: str) -> Flat:
        return cls.update_field(ledger, key, "condition", condition)

    @classmethod
    def change_ranking(cls, ledger: Ledger, key: str, ranking: str) -> Flat:
        return cls.update_field(ledger, key, "ranking", ranking)

"""
Ledger capability consumed by the flat handlers.

Handlers never open storage themselves: they receive an object that
implements :class:`Ledger` and talk to it through three calls,
``get_state``, ``put_state`` and ``get_state_by_range``.  Range scans
return a :class:`StateIterator`, which must be closed (or used as a
context manager) so the underlying handle is released on every path.

Range semantics follow the host platform: the start key is inclusive,
the end key exclusive, and an empty end key means "to the end of the
key space".

Two implementations are provided:

* :class:`SqliteLedger` keeps the world state in the ``world_state``
  table and is used by the HTTP layer through :func:`ledger_transaction`.
* :class:`MemoryLedger` keeps the world state in a dictionary.  It is
  handy for tests and for embedding the handlers in another process.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from typing import Callable, Dict, Iterable, Iterator, List, NamedTuple, Optional, Protocol

from .db import get_connection
from .errors import LedgerError

logger = logging.getLogger(__name__)


class KV(NamedTuple):
    key: str
    value: bytes


class StateIterator:
    """Iterator over the ``KV`` pairs produced by a range scan.

    ``bookmark`` is the key the next page starts at, or ``""`` when the
    scan reached the end of the requested range.
    """

    def __init__(
        self,
        rows: Iterable[KV],
        bookmark: str = "",
        on_close: Optional[Callable[[], None]] = None,
    ) -> None:
        self._rows = iter(rows)
        self._on_close = on_close
        self.bookmark = bookmark
        self.fetched_records_count = 0
        self.closed = False

    def __iter__(self) -> "StateIterator":
        return self

    def __next__(self) -> KV:
        if self.closed:
            raise StopIteration
        kv = next(self._rows)
        self.fetched_records_count += 1
        return kv

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        close_rows = getattr(self._rows, "close", None)
        if close_rows is not None:
            close_rows()
        if self._on_close is not None:
            self._on_close()

    def __enter__(self) -> "StateIterator":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class Ledger(Protocol):
    def get_state(self, key: str) -> Optional[bytes]:
        ...

    def put_state(self, key: str, value: bytes) -> None:
        ...

    def get_state_by_range(
        self,
        start_key: str,
        end_key: str,
        page_size: Optional[int] = None,
        bookmark: str = "",
    ) -> StateIterator:
        ...


def _effective_start(start_key: str, bookmark: str) -> str:
    return max(start_key, bookmark) if bookmark else start_key


class SqliteLedger:
    """World state stored in the ``world_state`` SQLite table.

    The ledger does not commit; the caller owns the transaction (see
    :func:`ledger_transaction`).  Every write bumps the row's
    ``version``.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self.aborted = False

    def get_state(self, key: str) -> Optional[bytes]:
        try:
            row = self._conn.execute(
                "SELECT value FROM world_state WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as exc:
            raise LedgerError(f"failed to read {key!r}: {exc}") from exc
        logger.debug("Read %r (%s)", key, "hit" if row is not None else "miss")
        return bytes(row[0]) if row is not None else None

    def get_state_version(self, key: str) -> Optional[int]:
        try:
            row = self._conn.execute(
                "SELECT version FROM world_state WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as exc:
            raise LedgerError(f"failed to read {key!r}: {exc}") from exc
        return row[0] if row is not None else None

    def put_state(self, key: str, value: bytes) -> None:
        try:
            self._conn.execute(
                """
                INSERT INTO world_state (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    version = world_state.version + 1,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (key, sqlite3.Binary(value)),
            )
        except sqlite3.Error as exc:
            raise LedgerError(f"failed to write {key!r}: {exc}") from exc
        logger.debug("Wrote %r (%d bytes)", key, len(value))

    def get_state_by_range(
        self,
        start_key: str,
        end_key: str,
        page_size: Optional[int] = None,
        bookmark: str = "",
    ) -> StateIterator:
        query = "SELECT key, value FROM world_state WHERE key >= ?"
        params: List[object] = [_effective_start(start_key, bookmark)]
        if end_key:
            query += " AND key < ?"
            params.append(end_key)
        query += " ORDER BY key"
        logger.debug("Range scan [%r, %r) page_size=%s bookmark=%r", start_key, end_key, page_size, bookmark)
        if page_size is not None:
            # One extra row tells us where the next page starts.
            query += " LIMIT ?"
            params.append(page_size + 1)

        try:
            cursor = self._conn.execute(query, params)
        except sqlite3.Error as exc:
            raise LedgerError(f"failed to start range scan: {exc}") from exc

        if page_size is None:
            return StateIterator(self._stream(cursor), on_close=cursor.close)

        try:
            rows = [KV(row[0], bytes(row[1])) for row in cursor.fetchall()]
        except sqlite3.Error as exc:
            raise LedgerError(f"range scan failed: {exc}") from exc
        finally:
            cursor.close()
        bookmark = ""
        if len(rows) > page_size:
            bookmark = rows[page_size].key
            rows = rows[:page_size]
        return StateIterator(rows, bookmark=bookmark)

    @staticmethod
    def _stream(cursor: sqlite3.Cursor) -> Iterator[KV]:
        try:
            for row in cursor:
                yield KV(row[0], bytes(row[1]))
        except sqlite3.Error as exc:
            raise LedgerError(f"range scan failed: {exc}") from exc

    def abort(self) -> None:
        """Mark the surrounding transaction for rollback."""
        self.aborted = True


@contextmanager
def ledger_transaction() -> Iterator[SqliteLedger]:
    """Yield a :class:`SqliteLedger` bound to one transaction.

    The transaction commits when the block exits normally and the
    ledger was not aborted; otherwise it is rolled back.  The
    connection is always closed.
    """
    conn = get_connection()
    ledger = SqliteLedger(conn)
    try:
        yield ledger
        if ledger.aborted:
            logger.debug("Rolling back aborted ledger transaction")
            conn.rollback()
        else:
            conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


class MemoryLedger:
    """Dictionary-backed ledger.

    Scans iterate over a snapshot taken when the scan starts, so writes
    made while iterating are not observed.
    """

    def __init__(self, state: Optional[Dict[str, bytes]] = None) -> None:
        self._state: Dict[str, bytes] = dict(state or {})
        self.open_iterators = 0

    def get_state(self, key: str) -> Optional[bytes]:
        return self._state.get(key)

    def put_state(self, key: str, value: bytes) -> None:
        self._state[key] = bytes(value)

    def get_state_by_range(
        self,
        start_key: str,
        end_key: str,
        page_size: Optional[int] = None,
        bookmark: str = "",
    ) -> StateIterator:
        start = _effective_start(start_key, bookmark)
        keys = sorted(k for k in self._state if k >= start and (not end_key or k < end_key))
        next_bookmark = ""
        if page_size is not None and len(keys) > page_size:
            next_bookmark = keys[page_size]
            keys = keys[:page_size]
        rows = [KV(k, self._state[k]) for k in keys]
        self.open_iterators += 1
        return StateIterator(rows, bookmark=next_bookmark, on_close=self._release)

    def _release(self) -> None:
        self.open_iterators -= 1

    def snapshot(self) -> Dict[str, bytes]:
        return dict(self._state)

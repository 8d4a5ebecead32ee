"""
Service layer.

``flat_service`` holds the record handlers; ``dispatcher`` maps
operation names to them.  Services receive the ledger as an argument
so tests can pass a :class:`~flat_ledger_api.app.core.ledger.MemoryLedger`.
"""

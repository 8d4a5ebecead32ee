"""
Pydantic schema definitions for records and API payloads.

Schemas describe both the JSON shape of records stored in the ledger
and the request/response bodies of the HTTP layer.
"""

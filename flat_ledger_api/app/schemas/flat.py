"""
Pydantic schemas for flat records and chaincode invocations.

A flat is stored in the ledger as a compact JSON object with exactly
four string fields: ``condition``, ``ranking``, ``location`` and
``holder``.  Missing fields default to empty strings and are always
written out, because updates read, modify and write back the whole
record.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from flat_ledger_api.app.core.errors import ChaincodeError


class Flat(BaseModel):
    """A property record as stored in the ledger."""

    condition: str = Field("", examples=["923F"])
    ranking: str = Field("", examples=["1504054225"])
    location: str = Field("", examples=["67.0006, -70.5476"])
    holder: str = Field("", examples=["Marjan"])

    def to_bytes(self) -> bytes:
        return self.model_dump_json().encode("utf-8")

    @classmethod
    def from_bytes(cls, raw: bytes) -> "Flat":
        return cls.model_validate_json(raw)


FLAT_FIELDS = tuple(Flat.model_fields)


class FlatQueryResult(BaseModel):
    """One element of the ``listAll`` result: a key and its stored record."""

    model_config = ConfigDict(populate_by_name=True)

    key: str = Field(..., alias="Key")
    record: Dict[str, Any] = Field(..., alias="Record")


class FlatPage(BaseModel):
    """A page of range scan results with the bookmark for the next page."""

    records: List[FlatQueryResult]
    fetched_records_count: int
    bookmark: str = ""


class FieldUpdate(BaseModel):
    """Body for the single-field update routes."""

    value: str


class InvokeRequest(BaseModel):
    """An operation name plus its positional string arguments."""

    function: str = Field(..., examples=["query"])
    args: List[str] = Field(default_factory=list, examples=[["1"]])


class ResponseMetadata(BaseModel):
    fetched_records_count: int
    bookmark: str = ""


class InvokeResponse(BaseModel):
    """Result of an invocation.

    ``payload`` holds the raw bytes returned by the handler (stored
    record bytes, a JSON array, or nothing).  On failure ``message``
    explains what went wrong, ``error`` names the error kind and
    ``status`` is the matching HTTP status code.
    """

    success: bool
    status: int = 200
    payload: bytes = b""
    message: str = ""
    error: Optional[str] = None
    metadata: Optional[ResponseMetadata] = None

    @classmethod
    def ok(cls, payload: bytes = b"", metadata: Optional[ResponseMetadata] = None) -> "InvokeResponse":
        return cls(success=True, payload=payload, metadata=metadata)

    @classmethod
    def fail(cls, exc: ChaincodeError) -> "InvokeResponse":
        return cls(success=False, status=exc.status_code, message=exc.message, error=exc.kind)

"""
Error types raised by the ledger and the flat handlers.

``LedgerError`` is raised by ledger implementations when the
underlying store fails.  Handlers translate it into one of the
``ChaincodeError`` subclasses, which the dispatcher turns into a
failure response.  Each subclass carries the HTTP status code used by
the API layer.
"""

from fastapi import status


class LedgerError(Exception):
    """The ledger could not complete a read, write or scan."""


class ChaincodeError(Exception):
    """Base class for errors reported back to the caller of an operation."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def kind(self) -> str:
        return type(self).__name__


class InvalidArgumentCount(ChaincodeError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, expected: int) -> None:
        super().__init__(f"Incorrect number of arguments. Expecting {expected}")
        self.expected = expected


class InvalidArgument(ChaincodeError):
    status_code = status.HTTP_400_BAD_REQUEST


class UnknownOperation(ChaincodeError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, function: str) -> None:
        super().__init__(f"Invalid Smart Contract function name: {function!r}")
        self.function = function


class RecordNotFound(ChaincodeError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, key: str) -> None:
        super().__init__(f"Could not locate flat: {key}")
        self.key = key


class PersistenceError(ChaincodeError):
    pass


class ScanError(ChaincodeError):
    pass


class DecodeError(ChaincodeError):
    def __init__(self, key: str) -> None:
        super().__init__(f"Stored flat is not a valid record: {key}")
        self.key = key

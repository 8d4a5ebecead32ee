"""
Application package initializer.

The application is organised in layers: ``core`` (configuration,
logging, storage and the ledger capability), ``schemas`` (pydantic
models), ``services`` (record handlers and the operation dispatcher)
and ``api`` (versioned FastAPI routers).
"""

from .main import app  # noqa: F401

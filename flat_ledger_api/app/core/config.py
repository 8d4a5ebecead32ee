"""
Simple configuration management.

To avoid external dependencies on the ``pydantic_settings`` package,
the ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields.  In a
production deployment the ledger bounds and database location should
be set via environment variables.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Flat Ledger API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")
    # Level for the ledger logger only; empty inherits ``log_level``.
    ledger_log_level: str = os.getenv("LEDGER_LOG_LEVEL", "")

    # Path to the SQLite file holding the world state.  A relative path
    # is resolved against the package root by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "flat_ledger.db")

    # Lexical bounds used by ``listAll``.  The start key is inclusive and
    # the end key exclusive; an empty end key scans to the end of the
    # key space.
    scan_start_key: str = os.getenv("SCAN_START_KEY", "0")
    scan_end_key: str = os.getenv("SCAN_END_KEY", "999")

    # Upper limit for the ``pageSize`` argument of a paginated listAll.
    max_page_size: int = int(os.getenv("MAX_PAGE_SIZE", "1000"))

    # When enabled, the init hook writes the demo records.
    seed_on_init: bool = os.getenv("SEED_ON_INIT", "false").lower() in {"1", "true", "yes"}


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables must
# be set before importing this module.
settings = Settings()

"""
Top‑level package for the Flat Ledger API.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []

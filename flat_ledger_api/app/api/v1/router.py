"""
Top‑level router for version 1 of the API.

This router aggregates domain‑specific routers under a unified prefix.
When new endpoints are added, update this file to include their
routers.
"""

from fastapi import APIRouter

from .endpoints import chaincode, flats

router = APIRouter()

router.include_router(chaincode.router, prefix="/chaincode", tags=["chaincode"])
router.include_router(flats.router, prefix="/flats", tags=["flats"])

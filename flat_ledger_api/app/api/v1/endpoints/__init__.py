"""
Endpoint subpackage for API v1.

``chaincode`` exposes the invoke convention; ``flats`` exposes the
same handlers as REST routes.  Both routers are aggregated in
``router.py``.
"""

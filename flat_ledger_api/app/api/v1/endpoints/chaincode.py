"""
Chaincode invocation endpoints for API v1.

``POST /chaincode/invoke`` accepts an operation name and positional
string arguments, exactly as the host platform would pass them, and
returns the handler's response.  Each request runs in its own ledger
transaction: a failed invocation is rolled back so it leaves no
writes behind.
"""

from fastapi import APIRouter, Response

from flat_ledger_api.app.core.ledger import ledger_transaction
from flat_ledger_api.app.schemas.flat import InvokeRequest, InvokeResponse
from flat_ledger_api.app.services import dispatcher

router = APIRouter()


@router.post("/invoke", response_model=InvokeResponse)
async def invoke(request: InvokeRequest, response: Response) -> InvokeResponse:
    """Run one operation against the ledger.

    The HTTP status mirrors the outcome: 200 on success, 400 for bad
    arguments or an unknown operation, 404 when the flat does not
    exist and 500 when the ledger fails.
    """
    with ledger_transaction() as ledger:
        result = dispatcher.invoke(ledger, request.function, request.args)
        if not result.success:
            ledger.abort()
    response.status_code = result.status
    return result


@router.post("/init", response_model=InvokeResponse)
async def init(response: Response) -> InvokeResponse:
    """Run the instantiate hook."""
    with ledger_transaction() as ledger:
        result = dispatcher.init(ledger)
        if not result.success:
            ledger.abort()
    response.status_code = result.status
    return result

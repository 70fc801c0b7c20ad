"""``POST /api/test-connection``."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ...core.exceptions import ConnectionValidationError
from ...database.dispatcher import Dispatcher
from ...logging import get_logger
from ...validation.connection import parse_connection
from ..deps import get_dispatcher
from ..schemas import TestConnectionRequest, TestConnectionResponse

router = APIRouter()

logger = get_logger(__name__)


@router.post("/test-connection", response_model=TestConnectionResponse)
async def test_connection(
    request: TestConnectionRequest,
    dispatcher: Annotated[Dispatcher, Depends(get_dispatcher)],
) -> JSONResponse:
    try:
        connection = parse_connection(request.connection)
    except ConnectionValidationError as e:
        logger.info("Rejected connection payload", error_code=e.code, field=e.context.get("field"))
        return JSONResponse(status_code=400, content={"success": False, "message": e.message})

    result = await dispatcher.test_connection(connection)
    return JSONResponse(content=result.to_dict())

"""``POST /api/execute-query``."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ...core.exceptions import ValidationError
from ...core.utils import to_json_safe
from ...database.dispatcher import Dispatcher
from ...logging import get_logger
from ...validation.connection import parse_connection
from ...validation.sql import validate_sql
from ..deps import get_dispatcher
from ..schemas import ExecuteQueryRequest, ExecuteQueryResponse

router = APIRouter()

logger = get_logger(__name__)


def _bad_request(error: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"success": False, "error": error})


@router.post("/execute-query", response_model=ExecuteQueryResponse)
async def execute_query(
    request: ExecuteQueryRequest,
    dispatcher: Annotated[Dispatcher, Depends(get_dispatcher)],
) -> JSONResponse:
    try:
        connection = parse_connection(request.connection)
        if not isinstance(request.sql, str) or not request.sql:
            return _bad_request("SQL is required")
        validate_sql(request.sql)
    except ValidationError as e:
        logger.info("Rejected query request", error_code=e.code)
        return _bad_request(e.message)

    result = await dispatcher.dispatch(
        connection,
        request.sql,
        explain_only=request.explain_only,
        parameters=request.parameters,
    )
    return JSONResponse(content=to_json_safe(result.to_dict()))

"""Entry point turning any raw plan variant into a ``ParsedExplainPlan``."""

from typing import Callable, Dict, Type

from ..logging import get_logger
from .common import CANNOT_PARSE_PLAN, unparseable
from .models import (
    FlatRowsPlan,
    IndentedTextPlan,
    JsonTreePlan,
    ParentPointerRowsPlan,
    ParsedExplainPlan,
    RawPlan,
)
from .mssql import parse_mssql_plan
from .mysql import parse_mysql_plan
from .oracle import parse_oracle_plan
from .postgresql import parse_postgresql_plan

logger = get_logger(__name__)

PARSERS: Dict[Type, Callable[..., ParsedExplainPlan]] = {
    JsonTreePlan: parse_postgresql_plan,
    FlatRowsPlan: parse_mysql_plan,
    ParentPointerRowsPlan: parse_oracle_plan,
    IndentedTextPlan: parse_mssql_plan,
}


def normalize_plan(raw: RawPlan) -> ParsedExplainPlan:
    """Parse a raw plan with the parser registered for its variant type.

    Never raises: an unexpected shape degrades to an empty node list
    with a ``cannot parse plan`` warning.
    """
    parser = PARSERS.get(type(raw))
    engine = getattr(raw, "engine", "unknown")
    if parser is None:
        logger.warning("No parser for plan variant", variant=type(raw).__name__)
        return unparseable(engine, getattr(raw, "payload", raw))

    try:
        return parser(raw)
    except Exception as e:
        logger.warning(
            "Plan normalization failed",
            engine=engine,
            error_type=type(e).__name__,
        )
        return unparseable(engine, raw.payload, CANNOT_PARSE_PLAN)

"""Named bind parameter conversion.

Clients write ``:name`` placeholders. Each driver wants its own style:
asyncpg takes ``$1``-style positions, aiomysql and pymssql take
``%(name)s``, and oracledb accepts ``:name`` natively.

Only names present in the supplied parameters are rewritten, and text
inside quoted literals or after a ``::`` cast is left alone.
"""

import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

_TOKEN_PATTERN = re.compile(
    r"""
      (?P<literal>'(?:[^']|'')*'|"(?:[^"]|"")*")
    | (?P<cast>::)
    | (?<![:\w]):(?P<name>[A-Za-z_]\w*)
    | (?P<percent>%)
    """,
    re.VERBOSE,
)


def _rewrite(sql: str, params: Mapping[str, Any], render, escape_percent: bool) -> str:
    def replace(match: "re.Match[str]") -> str:
        name = match.group("name")
        if name is not None:
            if name in params:
                return render(name)
            return match.group(0)
        text = match.group(0)
        if escape_percent and (match.group("percent") or match.group("literal")):
            return text.replace("%", "%%")
        return text

    return _TOKEN_PATTERN.sub(replace, sql)


def to_numeric(sql: str, params: Optional[Mapping[str, Any]]) -> Tuple[str, List[Any]]:
    """Rewrite for asyncpg: ``:name`` → ``$n``; repeated names share a position.

    Example:
        >>> to_numeric("SELECT * FROM t WHERE a = :a OR b = :a", {"a": 1})
        ('SELECT * FROM t WHERE a = $1 OR b = $1', [1])
    """
    if not params:
        return sql, []

    positions: Dict[str, int] = {}
    args: List[Any] = []

    def render(name: str) -> str:
        if name not in positions:
            args.append(params[name])
            positions[name] = len(args)
        return f"${positions[name]}"

    return _rewrite(sql, params, render, escape_percent=False), args


def to_pyformat(sql: str, params: Optional[Mapping[str, Any]]) -> Tuple[str, Optional[Dict[str, Any]]]:
    """Rewrite for aiomysql/pymssql: ``:name`` → ``%(name)s``.

    Literal ``%`` is doubled only when parameters are present, since the
    drivers only apply ``%`` formatting in that case.
    """
    if not params:
        return sql, None
    return _rewrite(sql, params, lambda name: f"%({name})s", escape_percent=True), dict(params)


def to_named(sql: str, params: Optional[Mapping[str, Any]]) -> Tuple[str, Dict[str, Any]]:
    """oracledb binds ``:name`` natively; only unused names are dropped."""
    if not params:
        return sql, {}
    used = {
        match.group("name")
        for match in _TOKEN_PATTERN.finditer(sql)
        if match.group("name") is not None
    }
    return sql, {name: value for name, value in params.items() if name in used}

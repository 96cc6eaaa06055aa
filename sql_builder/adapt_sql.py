"""Adaptation of qmark SQL to named parameters."""

from typing import Any, Dict, Sequence, Tuple


def _escape(part: str) -> str:
    # text() reads ':word' as a bind parameter and turns '\:' back into ':'
    return part.replace(':', '\\:')


def adapt_sql(sql: str, binds: Sequence[Any]) -> Tuple[str, Dict[str, Any]]:
    """Convert '?' placeholders to :p0, :p1, ... and the bind list to a matching dict.

    Colons already in the statement are escaped so text() keeps them literal.
    """
    parts = sql.split('?')
    if len(parts) - 1 != len(binds):
        raise ValueError(f'Parameter count mismatch: expected {len(parts) - 1}, got {len(binds)}')
    out = _escape(parts[0])
    params = {}
    for idx, (part, value) in enumerate(zip(parts[1:], binds)):
        out += f':p{idx}{_escape(part)}'
        params[f'p{idx}'] = value
    return out, params

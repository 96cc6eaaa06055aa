"""Expansion of sequence binds into IN-list placeholders."""

from typing import Any, List, Sequence, Tuple


def is_sequence(value: Any) -> bool:
    """True for bind values that expand into several placeholders."""
    return isinstance(value, (list, tuple))


def expand_in(sql: str, binds: Sequence[Any]) -> Tuple[str, List[Any]]:
    """Rewrite each '?' bound to a list/tuple into one '?' per element and flatten the binds.

    'IN (?)' keeps the caller's parentheses, a bare 'IN ?' gets them added.
    """
    binds = list(binds)
    if not any(is_sequence(b) for b in binds):
        return sql, binds
    parts = sql.split('?')
    if len(parts) - 1 != len(binds):
        raise ValueError(f'Parameter count mismatch: expected {len(parts) - 1}, got {len(binds)}')
    out = [parts[0]]
    args = []
    for i, value in enumerate(binds):
        after = parts[i + 1]
        if not is_sequence(value):
            out.append('?')
            args.append(value)
        elif not value:
            raise ValueError(f'Empty sequence bound to placeholder {i + 1}')
        else:
            ph = ', '.join('?' for _ in value)
            wrapped = out[-1].rstrip().endswith('(') and after.lstrip().startswith(')')
            out.append(ph if wrapped else f'({ph})')
            args.extend(value)
        out.append(after)
    return ''.join(out), args

"""JSON envelope for Flask handlers."""

from typing import Any
from flask import Response, jsonify

_MISSING = object()


def return_json(code: int, msg: str, data: Any = _MISSING) -> Response:
    """Return {'code', 'msg'[, 'data']} with HTTP 200; the status lives in `code`."""
    obj = {'code': code, 'msg': msg}
    if data is not _MISSING:
        obj['data'] = data
    resp = jsonify(obj)
    resp.status_code = 200
    return resp

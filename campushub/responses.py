"""
JSON envelope shared by every endpoint: `{success, msg?, ...payload}`.
"""

from typing import Any, Optional, Tuple

from flask import Response, jsonify

from campushub.errors import CampusHubError


def ok(msg: Optional[str] = None, status: int = 200, **payload: Any) -> Tuple[Response, int]:
    body = {"success": True}
    if msg:
        body["msg"] = msg
    body.update(payload)
    return jsonify(body), status


def error_response(err: CampusHubError) -> Tuple[Response, int]:
    return jsonify(err.to_dict()), err.status_code

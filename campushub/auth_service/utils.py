"""
Flask-side authentication helpers.
Wraps the AccessGuard for route handlers.
"""

from typing import Optional, Tuple

from flask import Response, current_app, request

from campushub.auth_service.guard import Anonymous, Authenticated, Principal, Role
from campushub.errors import CampusHubError
from campushub.responses import error_response


def get_services():
    """The Services bundle the application factory attached to the app."""
    return current_app.extensions["campushub"]


def verify_token_from_request(
    required_role: Optional[Role] = None,
) -> Tuple[Optional[Authenticated], Optional[Response], Optional[int]]:
    """
    Verify the JWT in the Authorization header.

    Args:
        required_role (Role, optional): Role the caller must hold.

    Returns:
        tuple: (principal, error_response, status_code)
               If successful, error_response and status_code are None.
               If failed, principal is None.
    """
    guard = get_services().guard
    try:
        principal = guard.classify(request.headers.get("Authorization"))
        return guard.require(principal, required_role), None, None
    except CampusHubError as e:
        resp, code = error_response(e)
        return None, resp, code


def optional_principal() -> Principal:
    """
    Classify the caller without requiring a login.

    A bad token on a public route is treated as anonymous.
    """
    guard = get_services().guard
    try:
        return guard.classify(request.headers.get("Authorization"))
    except CampusHubError:
        return Anonymous()

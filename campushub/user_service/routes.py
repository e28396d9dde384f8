"""
Student-facing routes.

Provides routes for:
- Signup / signin
- Profile retrieval
- Event listing and detail
- Event registration
"""

import logging
import uuid
from typing import Tuple

from flask import Blueprint, Response, request

from campushub.auth_service.guard import Authenticated
from campushub.auth_service.utils import get_services, optional_principal, verify_token_from_request
from campushub.responses import ok
from campushub.serializers import serialize_account, serialize_event, serialize_registration

user_bp = Blueprint("user", __name__)


# --- REQUEST LOGGING ---
@user_bp.before_request
def before_request() -> None:
    """Log every incoming request to the user API."""
    logging.info(f"[User] Incoming {request.method} {request.path}")


@user_bp.after_request
def after_request(response: Response) -> Response:
    logging.info(f"[User] Response {response.status}")
    return response


@user_bp.route("/", methods=["GET"])
def hello() -> Tuple[Response, int]:
    return ok("Hello, from user server")


# --- SIGNUP ---
@user_bp.route("/signup", methods=["POST"])
def signup() -> Tuple[Response, int]:
    """
    Create a student account.

    Expects a JSON body with:
    - email (str): Unique email address.
    - password (str): Minimum 6 characters.

    Returns:
        201: token and user.
        400: Invalid input or email already registered.
    """
    token, user = get_services().accounts.signup("user", request.get_json(silent=True))
    return ok("User signed up successfully", 201, token=token, user=serialize_account(user))


# --- SIGNIN ---
@user_bp.route("/signin", methods=["POST"])
def signin() -> Tuple[Response, int]:
    """
    Returns:
        200: token and user.
        400: Invalid input or invalid credentials.
    """
    token, user = get_services().accounts.signin("user", request.get_json(silent=True))
    return ok("User logged in successfully", token=token, user=serialize_account(user))


# --- PROFILE ---
@user_bp.route("/profile", methods=["GET"])
def profile() -> Tuple[Response, int]:
    """
    Requires Authorization header: Bearer <token>

    Returns:
        200: The user's profile.
        400/401: Invalid or missing token.
        404: User no longer exists.
    """
    principal, err, code = verify_token_from_request()
    if err:
        return err, code

    user = get_services().accounts.profile("user", principal.account_id)
    return ok(user=serialize_account(user))


# --- EVENTS ---
@user_bp.route("/events", methods=["GET"])
def list_events() -> Tuple[Response, int]:
    """
    All events, soonest first.

    With a valid user token each event also carries `isRegistered`.
    """
    principal = optional_principal()
    events = [serialize_event(e) for e in get_services().events.list_events()]

    if isinstance(principal, Authenticated):
        me = str(principal.account_id)
        for event in events:
            event["isRegistered"] = me in event["attendeeIds"]

    return ok(events=events)


@user_bp.route("/events/<uuid:event_id>", methods=["GET"])
def get_event(event_id: uuid.UUID) -> Tuple[Response, int]:
    """
    Returns:
        200: The event.
        404: Event not found.
    """
    event = get_services().events.get_event(event_id)
    return ok(event=serialize_event(event))


# --- REGISTRATION ---
@user_bp.route("/register-event/<uuid:event_id>", methods=["POST"])
def register_event(event_id: uuid.UUID) -> Tuple[Response, int]:
    """
    Register the caller for an event.

    Requires Authorization header: Bearer <token>

    Returns:
        200: Registered.
        400: Already registered, or invalid token.
        401: Missing token.
        404: Event (or user) not found.
    """
    principal, err, code = verify_token_from_request()
    if err:
        return err, code

    registration = get_services().registrations.register_user_for_event(principal.account_id, event_id)
    return ok("Registered successfully!", registration=serialize_registration(registration))

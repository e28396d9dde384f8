"""
Admin console routes.

Provides routes for:
- Admin signup / signin / profile
- Admin account listing and removal
- Event creation, editing and deletion
- Event listing with attendee counts
- Per-event registration lists

Everything except signup/signin requires an admin token.
"""

import logging
import uuid
from typing import Tuple

from flask import Blueprint, Response, request

from campushub.auth_service.guard import Role
from campushub.auth_service.utils import get_services, verify_token_from_request
from campushub.responses import ok
from campushub.serializers import serialize_account, serialize_event, serialize_registration

admin_bp = Blueprint("admin", __name__)


# --- REQUEST LOGGING ---
@admin_bp.before_request
def before_request() -> None:
    """Log every incoming request to the admin API."""
    logging.info(f"[Admin] Incoming {request.method} {request.path}")


@admin_bp.after_request
def after_request(response: Response) -> Response:
    logging.info(f"[Admin] Response {response.status}")
    return response


@admin_bp.route("/", methods=["GET"])
def hello() -> Tuple[Response, int]:
    return ok("Hello, from Admin server")


# --- AUTH ---
@admin_bp.route("/signup", methods=["POST"])
def signup() -> Tuple[Response, int]:
    """
    Returns:
        201: token and admin.
        400: Invalid input or admin already exists.
    """
    token, admin = get_services().accounts.signup("admin", request.get_json(silent=True))
    return ok("Admin signed up successfully", 201, token=token, admin=serialize_account(admin))


@admin_bp.route("/signin", methods=["POST"])
def signin() -> Tuple[Response, int]:
    token, admin = get_services().accounts.signin("admin", request.get_json(silent=True))
    return ok("Admin logged in successfully", token=token, admin=serialize_account(admin))


@admin_bp.route("/profile", methods=["GET"])
def profile() -> Tuple[Response, int]:
    principal, err, code = verify_token_from_request(Role.ADMIN)
    if err:
        return err, code

    admin = get_services().accounts.profile("admin", principal.account_id)
    return ok(admin=serialize_account(admin))


# --- ADMIN ACCOUNTS ---
@admin_bp.route("/admins", methods=["GET"])
def list_admins() -> Tuple[Response, int]:
    _, err, code = verify_token_from_request(Role.ADMIN)
    if err:
        return err, code

    admins = get_services().accounts.list_admins()
    return ok(admins=[serialize_account(a) for a in admins])


@admin_bp.route("/admins/<uuid:admin_id>", methods=["DELETE"])
def delete_admin(admin_id: uuid.UUID) -> Tuple[Response, int]:
    """
    Returns:
        200: Deleted.
        403: Caller is not an admin.
        404: No such admin.
    """
    _, err, code = verify_token_from_request(Role.ADMIN)
    if err:
        return err, code

    get_services().accounts.delete_admin(admin_id)
    return ok("Admin deleted successfully")


# --- EVENTS ---
@admin_bp.route("/events", methods=["GET"])
def list_events() -> Tuple[Response, int]:
    """
    All events with attendeeCount and registrationCount.

    Returns:
        200: events[]
        401/403: Not an admin.
    """
    _, err, code = verify_token_from_request(Role.ADMIN)
    if err:
        return err, code

    events = get_services().events.list_events_with_attendee_counts()
    return ok(events=[serialize_event(e) for e in events])


@admin_bp.route("/create-event", methods=["POST"])
def create_event() -> Tuple[Response, int]:
    """
    Create an event.

    Expects JSON: title, date, time, location (required); description,
    imageUrl, videoUrl (optional).

    Returns:
        201: The new event.
        400: Missing or invalid fields.
        401/403: Not an admin.
    """
    principal, err, code = verify_token_from_request(Role.ADMIN)
    if err:
        return err, code

    event = get_services().events.create_event(principal.account_id, request.get_json(silent=True))
    return ok("Event created successfully", 201, event=serialize_event(event))


@admin_bp.route("/edit-event/<uuid:event_id>", methods=["PUT"])
def edit_event(event_id: uuid.UUID) -> Tuple[Response, int]:
    """
    Replace an event's fields (same body as create-event).

    Returns:
        200: The updated event.
        400: Missing or invalid fields.
        404: Event not found.
    """
    _, err, code = verify_token_from_request(Role.ADMIN)
    if err:
        return err, code

    event = get_services().events.update_event(event_id, request.get_json(silent=True))
    return ok("Event updated successfully", event=serialize_event(event))


@admin_bp.route("/delete-event/<uuid:event_id>", methods=["DELETE"])
def delete_event(event_id: uuid.UUID) -> Tuple[Response, int]:
    """
    Delete an event and its registrations.

    Returns:
        200: Deleted.
        404: Event not found.
    """
    _, err, code = verify_token_from_request(Role.ADMIN)
    if err:
        return err, code

    get_services().events.delete_event(event_id)
    return ok("Event deleted successfully")


@admin_bp.route("/event/<uuid:event_id>/registrations", methods=["GET"])
def event_registrations(event_id: uuid.UUID) -> Tuple[Response, int]:
    """Users registered for an event. Unknown or deleted events give an empty list."""
    _, err, code = verify_token_from_request(Role.ADMIN)
    if err:
        return err, code

    registrations = get_services().registrations.list_registrations(event_id)
    return ok(registrations=[serialize_registration(r) for r in registrations])

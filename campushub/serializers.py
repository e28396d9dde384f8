"""
Row -> JSON conversion.

Store rows use snake_case column names and native types; the API speaks
camelCase with string ids and ISO-8601 dates.
"""

from typing import Any, Dict, Optional


def _iso(value: Any) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _str(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


def serialize_account(row: Dict[str, Any]) -> Dict[str, Any]:
    """Public view of a user or admin. The password hash is never included."""
    return {
        "id": _str(row["id"]),
        "username": row["username"],
        "email": row["email"],
        "role": row.get("role"),
        "createdAt": _iso(row.get("created_at")),
    }


def serialize_event(row: Dict[str, Any]) -> Dict[str, Any]:
    event = {
        "id": _str(row["id"]),
        "title": row["title"],
        "description": row.get("description"),
        "date": _iso(row["date"]),
        "time": row["time"],
        "location": row["location"],
        "organizerId": _str(row.get("organizer_id")),
        "attendeeIds": [str(a) for a in (row.get("attendee_ids") or [])],
        "imageUrl": row.get("image_url"),
        "videoUrl": row.get("video_url"),
        "createdAt": _iso(row.get("created_at")),
        "updatedAt": _iso(row.get("updated_at")),
    }
    if row.get("organizer_username") or row.get("organizer_email"):
        event["organizer"] = {
            "username": row.get("organizer_username"),
            "email": row.get("organizer_email"),
        }
    if "attendee_count" in row:
        event["attendeeCount"] = int(row["attendee_count"] or 0)
    if "registration_count" in row:
        event["registrationCount"] = int(row["registration_count"] or 0)
    return event


def serialize_registration(row: Dict[str, Any]) -> Dict[str, Any]:
    registration = {
        "id": _str(row["id"]),
        "userId": _str(row["user_id"]),
        "eventId": _str(row["event_id"]),
        "registeredAt": _iso(row.get("registered_at")),
    }
    if row.get("email"):
        registration["user"] = {"username": row.get("username"), "email": row["email"]}
    return registration

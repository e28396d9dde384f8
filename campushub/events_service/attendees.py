"""
Attendee cache helpers.

`events.attendee_ids` is a denormalized copy of the user ids found in the
event's registrations. append_attendee keeps updates to it idempotent.
"""

from typing import List, Sequence


def append_attendee(attendee_ids: Sequence, user_id) -> List:
    """
    Add user_id to the attendee list unless it is already there.

    Args:
        attendee_ids (Sequence): Current cache contents (None counts as empty).
        user_id: The registering user's id.

    Returns:
        list: A new list; equal to the input when user_id was present.
    """
    current = list(attendee_ids or [])
    if user_id in current:
        return current
    current.append(user_id)
    return current


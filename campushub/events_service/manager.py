"""
Event lifecycle manager: create, edit and delete events, plus the admin
listing and the attendee-cache repair pass.
"""

import logging
from typing import Any, Dict, List

from campushub.errors import EventNotFound
from campushub.events_service.schemas import BLANK, EventFields
from campushub.serializers import serialize_event
from campushub.validation import parse_payload

logger = logging.getLogger(__name__)

MISSING_FIELDS_MSG = "Missing required fields"


class EventManager:
    """
    Args:
        store: Persistence (PostgresStore or compatible).
        notifier: Receives event broadcast jobs.
        notify_on_update (bool): Broadcast on every edit, not only on creation.
    """

    def __init__(self, store, notifier, notify_on_update: bool = True) -> None:
        self.store = store
        self.notifier = notifier
        self.notify_on_update = notify_on_update

    def create_event(self, organizer_id, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate and persist a new event with no attendees, then announce it.

        Raises:
            ValidationError: Missing or malformed fields.
        """
        fields = parse_payload(EventFields, data, MISSING_FIELDS_MSG, ("missing", BLANK))
        event = self.store.insert_event(organizer_id, fields.to_record())
        logger.info(f"Event {event['id']} created by {organizer_id}")

        self.notifier.event_created(serialize_event(event))
        return event

    def get_event(self, event_id) -> Dict[str, Any]:
        event = self.store.get_event(event_id)
        if event is None:
            raise EventNotFound()
        return event

    def update_event(self, event_id, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Replace an event's editable fields.

        Raises:
            ValidationError: Missing or malformed fields.
            EventNotFound: No such event.
        """
        fields = parse_payload(EventFields, data, MISSING_FIELDS_MSG, ("missing", BLANK))
        event = self.store.update_event(event_id, fields.to_record())
        if event is None:
            raise EventNotFound()
        logger.info(f"Event {event_id} updated")

        if self.notify_on_update:
            self.notifier.event_updated(serialize_event(event))
        return event

    def delete_event(self, event_id) -> int:
        """
        Delete an event and every registration that references it.

        Returns:
            int: Number of registrations removed.

        Raises:
            EventNotFound: No such event.
        """
        removed = self.store.delete_event(event_id)
        logger.info(f"Event {event_id} deleted along with {removed} registration(s)")
        return removed

    def list_events(self) -> List[Dict[str, Any]]:
        return self.store.list_events()

    def list_events_with_attendee_counts(self) -> List[Dict[str, Any]]:
        return self.store.list_events(with_counts=True)

    def reconcile(self) -> List:
        """Rebuild drifted attendee caches. Returns the ids of repaired events."""
        repaired = self.store.reconcile_attendees()
        if repaired:
            logger.warning(f"Repaired attendee cache for {len(repaired)} event(s)")
        else:
            logger.info("Attendee caches are consistent")
        return repaired

"""
Registration workflow.

Keeps at most one registration per (user, event) and keeps the event's
attendee cache in step with the registration rows.
"""

import logging
from typing import Any, Dict, List

from campushub.errors import AccountNotFound, AlreadyRegistered, EventNotFound
from campushub.serializers import serialize_event

logger = logging.getLogger(__name__)


class RegistrationWorkflow:
    """
    Args:
        store: Persistence (PostgresStore or compatible).
        notifier: Receives the confirmation email job.
    """

    def __init__(self, store, notifier) -> None:
        self.store = store
        self.notifier = notifier

    def register_user_for_event(self, user_id, event_id) -> Dict[str, Any]:
        """
        Register a user for an event.

        The pre-check gives a clean answer in the common case; the store's
        unique (user_id, event_id) index settles concurrent duplicates.

        Returns:
            dict: The new registration row.

        Raises:
            EventNotFound: No such event.
            AccountNotFound: The user was removed after the token was issued.
            AlreadyRegistered: A registration for the pair exists.
            PersistenceFailure: Any other storage error.
        """
        event = self.store.get_event(event_id)
        if event is None:
            raise EventNotFound()

        user = self.store.get_account("user", user_id)
        if user is None:
            raise AccountNotFound("User not found")

        if self.store.find_registration(user_id, event_id):
            raise AlreadyRegistered()

        registration = self.store.create_registration(user_id, event_id)
        logger.info(f"User {user_id} registered for event {event_id}")

        self.notifier.registered(serialize_event(event), user)
        return registration

    def list_registrations(self, event_id) -> List[Dict[str, Any]]:
        """Registrations for an event with the user's username and email; empty for unknown events."""
        return self.store.list_registrations(event_id)

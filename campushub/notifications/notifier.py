"""
Background email notifications.

Request handlers enqueue a job and return; a daemon worker thread delivers it.
Nothing a notification does (including looking up the audience) can fail or
delay the request that triggered it.
"""

import logging
import queue
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from campushub.notifications.email_service import EmailService

logger = logging.getLogger(__name__)

_STOP = object()


@dataclass
class NotificationJob:
    kind: str
    subject: str
    text_body: str
    recipients: List[str] = field(default_factory=list)
    # Broadcast jobs resolve their audience on the worker
    broadcast: bool = False


def _event_line(event: Dict[str, Any]) -> str:
    return f"on {event['date']} at {event['time']} in {event['location']}"


class Notifier:
    """
    Queue-backed notifier.

    Args:
        email_service (EmailService): Delivery backend.
        audience (callable): Returns every address a broadcast goes to.
        synchronous (bool): Deliver inline instead of queueing.
        max_queue (int): Jobs beyond this are dropped with an error log.
    """

    def __init__(
        self,
        email_service: EmailService,
        audience: Callable[[], List[str]],
        synchronous: bool = False,
        max_queue: int = 1000,
    ) -> None:
        self.email_service = email_service
        self.audience = audience
        self.synchronous = synchronous
        self._queue: "queue.Queue[Any]" = queue.Queue(maxsize=max_queue)
        self._worker: Optional[threading.Thread] = None

    # --- WORKER LIFECYCLE ---
    def start(self) -> None:
        if self.synchronous or (self._worker and self._worker.is_alive()):
            return
        self._worker = threading.Thread(target=self._run, name="campushub-notifier", daemon=True)
        self._worker.start()
        logger.info("Notification worker started")

    def stop(self, timeout: float = 5.0) -> None:
        """Ask the worker to finish queued jobs and exit."""
        if not self._worker:
            return
        self._queue.put(_STOP)
        self._worker.join(timeout)
        self._worker = None

    def drain(self) -> int:
        """Deliver queued jobs on the calling thread, up to any pending stop request. Returns the job count."""
        delivered = 0
        while True:
            try:
                job = self._queue.get_nowait()
            except queue.Empty:
                return delivered
            if job is _STOP:
                # Leave the shutdown request for the worker
                self._queue.task_done()
                self._queue.put_nowait(_STOP)
                return delivered
            try:
                self._deliver(job)
                delivered += 1
            finally:
                self._queue.task_done()

    def _run(self) -> None:
        while True:
            job = self._queue.get()
            try:
                if job is _STOP:
                    return
                self._deliver(job)
            finally:
                self._queue.task_done()

    def _deliver(self, job: NotificationJob) -> None:
        try:
            if job.broadcast:
                sent = self.email_service.send_bulk(self.audience(), job.subject, job.text_body)
            else:
                sent = self.email_service.send_email(job.recipients, job.subject, job.text_body)
            if not sent:
                logger.error(f"Notification '{job.kind}' was not delivered")
        except Exception:
            logger.exception(f"Notification '{job.kind}' failed")

    def _enqueue(self, job: NotificationJob) -> None:
        if self.synchronous:
            self._deliver(job)
            return
        try:
            self._queue.put_nowait(job)
        except queue.Full:
            logger.error(f"Notification queue full; dropping '{job.kind}' job")

    # --- TEMPLATES ---
    def welcome(self, account: Dict[str, Any]) -> None:
        self._enqueue(NotificationJob(
            kind="welcome",
            recipients=[account["email"]],
            subject="Welcome to CampusHub!",
            text_body=(
                f"Hey {account['username']}!\n\n"
                "Welcome to CampusHub, your place for campus events.\n\n"
                "Stay tuned for meetups, workshops and activities.\n\n"
                "Happy exploring!\nThe CampusHub team"
            ),
        ))

    def registered(self, event: Dict[str, Any], user: Dict[str, Any]) -> None:
        self._enqueue(NotificationJob(
            kind="registered",
            recipients=[user["email"]],
            subject=f"You're Registered: {event['title']}!",
            text_body=(
                f"Hey {user['username']},\n\n"
                f"You're registered for {event['title']}.\n\n"
                f"Date: {event['date']}\nTime: {event['time']}\nLocation: {event['location']}\n\n"
                "See you there!\nThe CampusHub team"
            ),
        ))

    def event_created(self, event: Dict[str, Any]) -> None:
        self._enqueue(NotificationJob(
            kind="event_created",
            broadcast=True,
            subject=f"New Event: {event['title']}",
            text_body=f'A new event "{event["title"]}" is happening {_event_line(event)}. Don\'t miss it!',
        ))

    def event_updated(self, event: Dict[str, Any]) -> None:
        self._enqueue(NotificationJob(
            kind="event_updated",
            broadcast=True,
            subject=f"Event Updated: {event['title']}",
            text_body=f'"{event["title"]}" has been updated. It is now {_event_line(event)}.',
        ))

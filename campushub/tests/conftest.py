import uuid
from datetime import datetime, timezone

import pytest

from campushub.config import Config
from campushub.errors import AccountExists, AlreadyRegistered, EventNotFound
from campushub.events_service.attendees import append_attendee
from campushub.gateway.server import create_app

TABLES = {"user": "users", "admin": "admins"}
DEFAULT_ROLES = {"user": "student", "admin": "admin"}


def _now():
    return datetime.now(timezone.utc)


class InMemoryStore:
    """Dict-backed stand-in for PostgresStore with the same unique constraints."""

    def __init__(self):
        self.users = {}
        self.admins = {}
        self.events = {}
        self.registrations = {}

    def _accounts(self, kind):
        return getattr(self, TABLES[kind])

    # --- ACCOUNTS ---
    def find_account_by_email(self, kind, email):
        for account in self._accounts(kind).values():
            if account["email"] == email:
                return dict(account)
        return None

    def get_account(self, kind, account_id):
        account = self._accounts(kind).get(account_id)
        return dict(account) if account else None

    def insert_account(self, kind, username, email, password_hash):
        if self.find_account_by_email(kind, email):
            raise AccountExists()
        account = {
            "id": uuid.uuid4(),
            "username": username,
            "email": email,
            "password_hash": password_hash,
            "role": DEFAULT_ROLES[kind],
            "created_at": _now(),
        }
        self._accounts(kind)[account["id"]] = account
        return dict(account)

    def list_accounts(self, kind):
        return [dict(a) for a in self._accounts(kind).values()]

    def delete_account(self, kind, account_id):
        return self._accounts(kind).pop(account_id, None) is not None

    def list_account_emails(self):
        emails = {a["email"] for a in self.users.values()} | {a["email"] for a in self.admins.values()}
        return sorted(emails)

    # --- EVENTS ---
    def get_event(self, event_id):
        event = self.events.get(event_id)
        return dict(event, attendee_ids=list(event["attendee_ids"])) if event else None

    def list_events(self, with_counts=False):
        rows = []
        for event in sorted(self.events.values(), key=lambda e: (e["date"], e["time"])):
            row = dict(event, attendee_ids=list(event["attendee_ids"]))
            organizer = self.admins.get(event["organizer_id"]) or self.users.get(event["organizer_id"])
            row["organizer_username"] = organizer["username"] if organizer else None
            row["organizer_email"] = organizer["email"] if organizer else None
            if with_counts:
                row["attendee_count"] = len(event["attendee_ids"])
                row["registration_count"] = sum(
                    1 for r in self.registrations.values() if r["event_id"] == event["id"]
                )
            rows.append(row)
        return rows

    def insert_event(self, organizer_id, fields):
        now = _now()
        event = dict(fields, id=uuid.uuid4(), organizer_id=organizer_id, attendee_ids=[],
                     created_at=now, updated_at=now)
        self.events[event["id"]] = event
        return self.get_event(event["id"])

    def update_event(self, event_id, fields):
        event = self.events.get(event_id)
        if event is None:
            return None
        event.update(fields, updated_at=_now())
        return self.get_event(event_id)

    def delete_event(self, event_id):
        if event_id not in self.events:
            raise EventNotFound()
        doomed = [rid for rid, r in self.registrations.items() if r["event_id"] == event_id]
        for rid in doomed:
            del self.registrations[rid]
        del self.events[event_id]
        return len(doomed)

    # --- REGISTRATIONS ---
    def find_registration(self, user_id, event_id):
        for reg in self.registrations.values():
            if reg["user_id"] == user_id and reg["event_id"] == event_id:
                return dict(reg)
        return None

    def create_registration(self, user_id, event_id):
        event = self.events.get(event_id)
        if event is None:
            raise EventNotFound()
        # Mirrors the (user_id, event_id) unique constraint
        if any(r["user_id"] == user_id and r["event_id"] == event_id for r in self.registrations.values()):
            raise AlreadyRegistered()
        reg = {"id": uuid.uuid4(), "user_id": user_id, "event_id": event_id, "registered_at": _now()}
        self.registrations[reg["id"]] = reg
        event["attendee_ids"] = append_attendee(event["attendee_ids"], user_id)
        return dict(reg)

    def list_registrations(self, event_id):
        rows = []
        for reg in sorted(self.registrations.values(), key=lambda r: r["registered_at"]):
            if reg["event_id"] != event_id:
                continue
            user = self.users[reg["user_id"]]
            rows.append(dict(reg, username=user["username"], email=user["email"]))
        return rows

    def reconcile_attendees(self):
        repaired = []
        for event in self.events.values():
            expected = [r["user_id"] for r in sorted(self.registrations.values(), key=lambda r: r["registered_at"])
                        if r["event_id"] == event["id"]]
            current = event["attendee_ids"]
            if set(current) != set(expected) or len(current) != len(expected):
                event["attendee_ids"] = expected
                repaired.append(event["id"])
        return repaired


class RecordingEmailService:
    """Captures outgoing mail instead of calling SES."""

    def __init__(self):
        self.sent = []
        self.fail = False

    def send_email(self, to, subject, text_body, html_body=None, bcc=()):
        if self.fail:
            raise RuntimeError("smtp down")
        self.sent.append({"to": list(to), "bcc": list(bcc), "subject": subject, "body": text_body})
        return True

    def send_bulk(self, recipients, subject, text_body, html_body=None):
        return self.send_email([], subject, text_body, bcc=recipients)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def email_service():
    return RecordingEmailService()


@pytest.fixture
def config():
    return Config(jwt_secret="test_secret", sync_notifications=True)


@pytest.fixture
def app(config, store, email_service):
    app = create_app(config=config, store=store, email_service=email_service)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    return app.extensions["campushub"]


@pytest.fixture
def signup(client):
    """POST a signup and return (token, account json)."""

    def _signup(email="o123@rguktong.ac.in", password="secret1", kind="user"):
        response = client.post(f"/{kind}/signup", json={"email": email, "password": password})
        assert response.status_code == 201, response.get_json()
        data = response.get_json()
        return data["token"], data[kind]

    return _signup


@pytest.fixture
def user_token(signup):
    token, _ = signup("o123@rguktong.ac.in")
    return token


@pytest.fixture
def admin_token(signup):
    token, _ = signup("dean@rguktong.ac.in", kind="admin")
    return token


@pytest.fixture
def mock_db(mocker):
    """
    Mocks the database connection and cursor for PostgresStore tests.
    """
    mock_conn = mocker.MagicMock()
    mock_cursor = mocker.MagicMock()

    # Setup the context manager for connection
    mock_conn.__enter__.return_value = mock_conn
    mock_conn.__exit__.return_value = None

    # Setup the context manager for cursor
    mock_cursor.__enter__.return_value = mock_cursor
    mock_cursor.__exit__.return_value = None

    # Connect cursor to connection
    mock_conn.cursor.return_value = mock_cursor

    database = mocker.Mock()
    database.get_db.return_value = mock_conn

    return database, mock_conn, mock_cursor
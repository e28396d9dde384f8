"""
PostgreSQL-backed persistence for accounts, events and registrations.

Every public method runs in its own transaction via Database.get_db().
Rows are returned as plain dicts with the primary key aliased to `id`.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import psycopg2.errors

from campushub.database.db_connection import Database
from campushub.errors import AccountExists, AlreadyRegistered, EventNotFound
from campushub.events_service.attendees import append_attendee

logger = logging.getLogger(__name__)

# kind -> (table, primary key column)
ACCOUNT_TABLES = {
    "user": ("users", "user_id"),
    "admin": ("admins", "admin_id"),
}

EVENT_COLUMNS = """
    e.event_id AS id, e.title, e.description, e.date, e.time, e.location,
    e.organizer_id, e.attendee_ids, e.image_url, e.video_url,
    e.created_at, e.updated_at
"""

# Order matters: matches the placeholders in insert_event / update_event
EVENT_FIELDS = ["title", "description", "date", "time", "location", "image_url", "video_url"]


def _account_table(kind: str) -> Tuple[str, str]:
    try:
        return ACCOUNT_TABLES[kind]
    except KeyError:
        raise ValueError(f"Unknown account kind: {kind!r}")


class PostgresStore:
    """
    Storage gateway used by the workflows.

    Args:
        database (Database): Connection provider.
    """

    def __init__(self, database: Database) -> None:
        self.database = database

    # --- ACCOUNTS ---
    def find_account_by_email(self, kind: str, email: str) -> Optional[Dict[str, Any]]:
        table, pk = _account_table(kind)
        sql = f"""
            SELECT {pk} AS id, username, email, password_hash, role, created_at
            FROM {table}
            WHERE email = %s;
        """
        with self.database.get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, (email,))
                row = cur.fetchone()
        return dict(row) if row else None

    def get_account(self, kind: str, account_id) -> Optional[Dict[str, Any]]:
        table, pk = _account_table(kind)
        sql = f"""
            SELECT {pk} AS id, username, email, password_hash, role, created_at
            FROM {table}
            WHERE {pk} = %s;
        """
        with self.database.get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, (account_id,))
                row = cur.fetchone()
        return dict(row) if row else None

    def insert_account(self, kind: str, username: str, email: str, password_hash: str) -> Dict[str, Any]:
        """
        Persist a new account.

        Raises:
            AccountExists: The email is already taken (unique index).
        """
        table, pk = _account_table(kind)
        sql = f"""
            INSERT INTO {table} (username, email, password_hash)
            VALUES (%s, %s, %s)
            RETURNING {pk} AS id, username, email, password_hash, role, created_at;
        """
        with self.database.get_db() as conn:
            with conn.cursor() as cur:
                try:
                    cur.execute(sql, (username, email, password_hash))
                except psycopg2.errors.UniqueViolation:
                    raise AccountExists()
                row = cur.fetchone()
        return dict(row)

    def list_accounts(self, kind: str) -> List[Dict[str, Any]]:
        table, pk = _account_table(kind)
        sql = f"""
            SELECT {pk} AS id, username, email, role, created_at
            FROM {table}
            ORDER BY created_at ASC;
        """
        with self.database.get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(sql)
                return [dict(r) for r in cur.fetchall()]

    def delete_account(self, kind: str, account_id) -> bool:
        table, pk = _account_table(kind)
        with self.database.get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(f"DELETE FROM {table} WHERE {pk} = %s RETURNING {pk};", (account_id,))
                return cur.fetchone() is not None

    def list_account_emails(self) -> List[str]:
        """Every known address, users and admins, without duplicates."""
        sql = "SELECT email FROM users UNION SELECT email FROM admins ORDER BY email;"
        with self.database.get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(sql)
                return [r["email"] for r in cur.fetchall()]

    # --- EVENTS ---
    def get_event(self, event_id) -> Optional[Dict[str, Any]]:
        sql = f"SELECT {EVENT_COLUMNS} FROM events e WHERE e.event_id = %s;"
        with self.database.get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, (event_id,))
                row = cur.fetchone()
        return dict(row) if row else None

    def list_events(self, with_counts: bool = False) -> List[Dict[str, Any]]:
        """
        All events with their organizer's username and email.

        Args:
            with_counts (bool): Also compute attendee_count (from the cache)
                and registration_count (from registration rows).
        """
        counts = ""
        if with_counts:
            counts = """,
                cardinality(e.attendee_ids) AS attendee_count,
                (SELECT COUNT(*) FROM registrations r WHERE r.event_id = e.event_id) AS registration_count
            """
        sql = f"""
            SELECT {EVENT_COLUMNS},
                COALESCE(a.username, u.username) AS organizer_username,
                COALESCE(a.email, u.email) AS organizer_email
                {counts}
            FROM events e
            LEFT JOIN admins a ON a.admin_id = e.organizer_id
            LEFT JOIN users u ON u.user_id = e.organizer_id
            ORDER BY e.date, e.time;
        """
        with self.database.get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(sql)
                return [dict(r) for r in cur.fetchall()]

    def insert_event(self, organizer_id, fields: Dict[str, Any]) -> Dict[str, Any]:
        sql = f"""
            INSERT INTO events (
                title, description, date, time, location, image_url, video_url,
                organizer_id, attendee_ids
            ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, '{{}}')
            RETURNING event_id;
        """
        values = [fields.get(k) for k in EVENT_FIELDS] + [organizer_id]
        with self.database.get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, values)
                event_id = cur.fetchone()["event_id"]
                cur.execute(f"SELECT {EVENT_COLUMNS} FROM events e WHERE e.event_id = %s;", (event_id,))
                return dict(cur.fetchone())

    def update_event(self, event_id, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Overwrite the editable fields. Returns None when the event does not exist."""
        set_clause = ", ".join(f"{k} = %s" for k in EVENT_FIELDS)
        set_clause += ", updated_at = CURRENT_TIMESTAMP"
        values = [fields.get(k) for k in EVENT_FIELDS] + [event_id]
        with self.database.get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(f"UPDATE events SET {set_clause} WHERE event_id = %s RETURNING event_id;", values)
                if cur.fetchone() is None:
                    return None
                cur.execute(f"SELECT {EVENT_COLUMNS} FROM events e WHERE e.event_id = %s;", (event_id,))
                return dict(cur.fetchone())

    def delete_event(self, event_id) -> int:
        """
        Delete an event together with its registrations, in one transaction.

        Returns:
            int: Number of registrations removed.

        Raises:
            EventNotFound: No event with that id (nothing is deleted).
        """
        with self.database.get_db() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM registrations WHERE event_id = %s;", (event_id,))
                removed = cur.rowcount
                cur.execute("DELETE FROM events WHERE event_id = %s RETURNING event_id;", (event_id,))
                if cur.fetchone() is None:
                    raise EventNotFound()
        return removed

    # --- REGISTRATIONS ---
    def find_registration(self, user_id, event_id) -> Optional[Dict[str, Any]]:
        sql = """
            SELECT registration_id AS id, user_id, event_id, registered_at
            FROM registrations
            WHERE user_id = %s AND event_id = %s;
        """
        with self.database.get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id, event_id))
                row = cur.fetchone()
        return dict(row) if row else None

    def create_registration(self, user_id, event_id) -> Dict[str, Any]:
        """
        Insert the registration and add the user to the attendee cache.

        Both writes share one transaction; the event row is locked first so
        concurrent registrations for the same event apply one at a time.

        Raises:
            EventNotFound: The event vanished before the lock was taken.
            AlreadyRegistered: The (user_id, event_id) unique index rejected the row.
        """
        with self.database.get_db() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT attendee_ids FROM events WHERE event_id = %s FOR UPDATE;", (event_id,))
                event = cur.fetchone()
                if event is None:
                    raise EventNotFound()

                try:
                    cur.execute(
                        """
                        INSERT INTO registrations (user_id, event_id)
                        VALUES (%s, %s)
                        RETURNING registration_id AS id, user_id, event_id, registered_at;
                        """,
                        (user_id, event_id),
                    )
                except psycopg2.errors.UniqueViolation:
                    raise AlreadyRegistered()
                registration = dict(cur.fetchone())

                current = list(event["attendee_ids"] or [])
                attendees = append_attendee(current, user_id)
                if attendees != current:
                    cur.execute(
                        "UPDATE events SET attendee_ids = %s WHERE event_id = %s;",
                        (attendees, event_id),
                    )
        return registration

    def list_registrations(self, event_id) -> List[Dict[str, Any]]:
        sql = """
            SELECT r.registration_id AS id, r.user_id, r.event_id, r.registered_at,
                   u.username, u.email
            FROM registrations r
            JOIN users u ON u.user_id = r.user_id
            WHERE r.event_id = %s
            ORDER BY r.registered_at ASC;
        """
        with self.database.get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, (event_id,))
                return [dict(r) for r in cur.fetchall()]

    def reconcile_attendees(self) -> List:
        """
        Rebuild attendee_ids from registrations wherever the two disagree.

        Returns:
            list: Ids of the events that were repaired.
        """
        sql = """
            UPDATE events e
            SET attendee_ids = sub.ids
            FROM (
                SELECT ev.event_id,
                       COALESCE(
                           array_agg(r.user_id ORDER BY r.registered_at)
                               FILTER (WHERE r.user_id IS NOT NULL),
                           '{}'
                       ) AS ids
                FROM events ev
                LEFT JOIN registrations r ON r.event_id = ev.event_id
                GROUP BY ev.event_id
            ) sub
            WHERE e.event_id = sub.event_id
              AND NOT (
                  e.attendee_ids @> sub.ids
                  AND e.attendee_ids <@ sub.ids
                  AND cardinality(e.attendee_ids) = cardinality(sub.ids)
              )
            RETURNING e.event_id;
        """
        with self.database.get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(sql)
                return [r["event_id"] for r in cur.fetchall()]

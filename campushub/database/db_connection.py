"""
PostgreSQL connection helper.
Provides Database.get_db() for use by the store.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

import psycopg2
import psycopg2.extras
from psycopg2.extras import DictCursor

from campushub.errors import CampusHubError, PersistenceFailure

logger = logging.getLogger(__name__)

# Adapt uuid.UUID parameters and return uuid columns as uuid.UUID
psycopg2.extras.register_uuid()


class Database:
    """
    Owns the connection parameters for one PostgreSQL database.

    Args:
        database_url (str): libpq connection string or URL.
    """

    def __init__(self, database_url: str) -> None:
        if not database_url:
            raise RuntimeError("DATABASE_URL is not set. Please set the environment variable.")
        self.database_url = database_url

    def connect(self):
        """
        Returns a new psycopg2 connection with dictionary-based row access.

        Raises:
            PersistenceFailure: If the connection cannot be opened.
        """
        try:
            conn = psycopg2.connect(self.database_url)
        except psycopg2.Error as e:
            logger.error(f"Error connecting to database: {e}")
            raise PersistenceFailure() from e

        # Rows come back as dictionaries (e.g., {"user_id": ..., "email": "..."})
        conn.cursor_factory = DictCursor
        return conn

    @contextmanager
    def get_db(self) -> Iterator["psycopg2.extensions.connection"]:
        """
        One transaction on a fresh connection.

        Commits when the block exits normally, rolls back otherwise, and always
        closes the connection. Driver errors are logged and re-raised as
        PersistenceFailure so storage details never reach a client.

        Usage:
            with db.get_db() as conn:
                with conn.cursor() as cur:
                    cur.execute(...)
        """
        conn = self.connect()
        try:
            yield conn
            conn.commit()
        except CampusHubError:
            conn.rollback()
            raise
        except psycopg2.Error as e:
            conn.rollback()
            logger.exception(f"Database error: {e}")
            raise PersistenceFailure() from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

"""
Schema bootstrap.

Applies schema.sql and verifies that every table the services rely on exists.
Run through the Flask CLI (`flask --app campushub.gateway.server init-db`)
or directly with `python -m campushub.database.init_db`.
"""

import logging
import os
from typing import List

from campushub.database.db_connection import Database

SCHEMA_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "schema.sql")
REQUIRED_TABLES = ["users", "admins", "events", "registrations"]

logger = logging.getLogger(__name__)


def init_db(database: Database) -> List[str]:
    """
    Create any missing tables and indexes.

    Args:
        database (Database): Target database.

    Returns:
        list: Names of required tables that are still missing afterwards
              (empty on success).
    """
    with open(SCHEMA_PATH, encoding="utf-8") as fh:
        schema_sql = fh.read()

    with database.get_db() as conn:
        with conn.cursor() as cur:
            cur.execute(schema_sql)

    missing = missing_tables(database)
    if missing:
        logger.error(f"Tables still missing after init: {', '.join(missing)}")
    else:
        logger.info("Database schema is up to date.")
    return missing


def missing_tables(database: Database) -> List[str]:
    """Return the required tables that do not exist yet."""
    missing = []
    with database.get_db() as conn:
        with conn.cursor() as cur:
            for table in REQUIRED_TABLES:
                cur.execute("SELECT to_regclass(%s);", (table,))
                if cur.fetchone()[0] is None:
                    missing.append(table)
    return missing


if __name__ == "__main__":
    from campushub.config import load_config

    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(asctime)s - %(message)s")
    config = load_config()
    still_missing = init_db(Database(config.database_url))
    raise SystemExit(1 if still_missing else 0)

import mysql.connector
import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Optional, Sequence
from . import config

logger = logging.getLogger(__name__)


def get_db_connection():
    """Open a new MySQL connection from the configured credentials.

    Unlike a retrying client, failures surface immediately: the reply
    pipeline never retries a stage.
    """
    return mysql.connector.connect(
        host=config.DB_HOST,
        port=config.DB_PORT,
        user=config.DB_USER,
        password=config.DB_PASSWORD,
        database=config.DB_NAME,
    )


class Database:
    """Thin blocking query helper shared by the resolver, retriever and logger.

    Every call opens and closes its own connection, so instances are safe to
    use from `asyncio.to_thread` workers concurrently.
    """

    def __init__(self, connect: Callable[[], Any] = get_db_connection):
        self._connect = connect

    @contextmanager
    def get_conn(self):
        conn = self._connect()
        try:
            yield conn
        finally:
            conn.close()

    def fetch_one(self, query: str, params: Sequence[Any] = ()) -> Optional[Dict[str, Any]]:
        with self.get_conn() as conn:
            cursor = conn.cursor(dictionary=True)
            try:
                cursor.execute(query, tuple(params))
                return cursor.fetchone()
            finally:
                cursor.close()

    def fetch_all(self, query: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        with self.get_conn() as conn:
            cursor = conn.cursor(dictionary=True)
            try:
                cursor.execute(query, tuple(params))
                return list(cursor.fetchall())
            finally:
                cursor.close()

    def execute(self, query: str, params: Sequence[Any] = ()) -> int:
        """Run a write statement and commit. Returns the affected row count."""
        with self.get_conn() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(query, tuple(params))
                conn.commit()
                return cursor.rowcount
            finally:
                cursor.close()

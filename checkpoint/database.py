# =======================================================================================
# checkpoint/database.py - Local Document Storage
# =======================================================================================
import json
import logging
import threading
from contextlib import contextmanager
from typing import Any, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .config import config
from .utils.exceptions import LocalStorageError

logger = logging.getLogger(__name__)

SCHEMA = """
    CREATE TABLE IF NOT EXISTS local_documents (
        name VARCHAR(100) PRIMARY KEY,
        body TEXT NOT NULL
    )
"""

class DatabaseManager:
    """
    On-device persistence for the fallback stores.

    Each logical collection is one named JSON document; callers always read
    and rewrite the whole document. Transactions are serialized through
    `lock`, so a read-modify-write inside one `get_connection()` block is
    atomic even when callers run on worker threads.
    """

    def __init__(self, url: Optional[str] = None):
        self.url = url or config.LOCAL_DB_URL
        self.engine: Engine = self._create_engine(self.url)
        self._schema_ready = False
        self.lock = threading.RLock()

    @staticmethod
    def _create_engine(url: str) -> Engine:
        if url.startswith("sqlite"):
            return create_engine(
                url,
                connect_args={"check_same_thread": False},
                future=True,
            )
        return create_engine(
            url,
            pool_size=config.DB_POOL_SIZE,
            max_overflow=config.DB_MAX_OVERFLOW,
            pool_pre_ping=True,
            future=True,
        )

    @contextmanager
    def get_connection(self):
        """Get a transactional connection, translating driver errors."""
        try:
            with self.lock:
                if not self._schema_ready:
                    with self.engine.begin() as conn:
                        conn.execute(text(SCHEMA))
                    self._schema_ready = True
                with self.engine.begin() as conn:
                    yield conn
        except SQLAlchemyError as e:
            logger.exception("Local storage failure on %s", self.url)
            raise LocalStorageError(f"Local storage failure: {e}") from e

    def read_document(self, conn, name: str) -> Optional[Any]:
        """Load a named document inside an open transaction."""
        row = conn.execute(
            text("SELECT body FROM local_documents WHERE name = :name"),
            {"name": name},
        ).mappings().first()
        if row is None:
            return None
        try:
            return json.loads(row["body"])
        except ValueError as e:
            logger.error("Local document %s is not valid JSON", name)
            raise LocalStorageError(f"Corrupt local document: {name}") from e

    def write_document(self, conn, name: str, value: Any) -> None:
        """Replace a named document inside an open transaction."""
        body = json.dumps(value)
        result = conn.execute(
            text("UPDATE local_documents SET body = :body WHERE name = :name"),
            {"name": name, "body": body},
        )
        if result.rowcount == 0:
            conn.execute(
                text("INSERT INTO local_documents (name, body) VALUES (:name, :body)"),
                {"name": name, "body": body},
            )

    def get_document(self, name: str) -> Optional[Any]:
        with self.get_connection() as conn:
            return self.read_document(conn, name)

    def put_document(self, name: str, value: Any) -> None:
        with self.get_connection() as conn:
            self.write_document(conn, name, value)

    def remove_document(self, name: str) -> None:
        with self.get_connection() as conn:
            conn.execute(
                text("DELETE FROM local_documents WHERE name = :name"),
                {"name": name},
            )

    def dispose(self) -> None:
        self.engine.dispose()

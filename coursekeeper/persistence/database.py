"""
Database management and pooled connection handling.
"""

import queue
import sqlite3
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

try:
    import psycopg2
    from psycopg2 import pool as psycopg2_pool
    from psycopg2.extras import RealDictCursor
    PSYCOPG2_AVAILABLE = True
except ImportError:
    PSYCOPG2_AVAILABLE = False

from ..config import DatabaseConfig
from ..core.enums import BackendType
from ..core.exceptions import CourseKeeperError, PersistenceError, ConfigurationError
from ..logging_config import get_logger

logger = get_logger(__name__)


class Transaction:
    """Cursor wrapper bound to one pooled connection for one transaction.

    Queries are written with ``?`` placeholders and translated to the
    driver's parameter style.
    """

    def __init__(self, cursor: Any, placeholder: str):
        self._cursor = cursor
        self._placeholder = placeholder

    def execute(self, query: str, params: Optional[Sequence[Any]] = None) -> int:
        """Execute a statement and return the affected row count."""
        if self._placeholder != "?":
            query = query.replace("?", self._placeholder)
        self._cursor.execute(query, tuple(params) if params else ())
        return self._cursor.rowcount

    def fetchone(self) -> Optional[Dict[str, Any]]:
        row = self._cursor.fetchone()
        return dict(row) if row is not None else None

    def fetchall(self) -> List[Dict[str, Any]]:
        return [dict(row) for row in self._cursor.fetchall()]

    def query(self, query: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        """Execute a SELECT and return every row as a dict."""
        self.execute(query, params)
        return self.fetchall()


class DatabaseManager(ABC):
    """Abstract base class for pooled database access."""

    placeholder = "?"
    backend: BackendType

    @abstractmethod
    def _acquire(self) -> Any:
        """Take a connection from the pool."""
        pass

    @abstractmethod
    def _release(self, conn: Any) -> None:
        """Return a connection to the pool."""
        pass

    @abstractmethod
    def _cursor(self, conn: Any) -> Any:
        """Open a dict-row cursor on a connection."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close every pooled connection."""
        pass

    @abstractmethod
    def table_exists(self, table_name: str) -> bool:
        """Check if a table exists."""
        pass

    @contextmanager
    def transaction(self) -> Iterator[Transaction]:
        """Run a block inside one transaction on one pooled connection.

        Commits when the block finishes, rolls back explicitly on any failure
        and always hands the connection back to the pool.
        """
        conn = self._acquire()
        try:
            cursor = self._cursor(conn)
            try:
                yield Transaction(cursor, self.placeholder)
            finally:
                cursor.close()
            conn.commit()
        except Exception as e:
            self._rollback(conn)
            if isinstance(e, CourseKeeperError):
                raise
            raise PersistenceError(f"Transaction failed: {str(e)}") from e
        finally:
            self._release(conn)

    def _rollback(self, conn: Any) -> None:
        try:
            conn.rollback()
        except Exception as e:
            logger.error("Failed to rollback transaction: %s", e)

    def execute_query(self, query: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        """Execute a query in its own transaction and return results."""
        with self.transaction() as tx:
            return tx.query(query, params)

    def execute_update(self, query: str, params: Optional[Sequence[Any]] = None) -> int:
        """Execute an update in its own transaction and return affected rows."""
        with self.transaction() as tx:
            return tx.execute(query, params)

    def create_tables(self, statements: Dict[str, str]) -> None:
        """Run create-if-absent DDL statements in one transaction."""
        with self.transaction() as tx:
            for name, statement in statements.items():
                logger.debug("Ensuring schema object %s", name)
                tx.execute(statement)


class SQLiteDatabase(DatabaseManager):
    """SQLite database implementation backed by a bounded connection pool."""

    backend = BackendType.SQLITE

    def __init__(self, database_path: str = "coursekeeper.db", pool_size: int = 5,
                 timeout: float = 30.0):
        if database_path == ":memory:":
            raise ConfigurationError("In-memory SQLite databases cannot be pooled; use a file path")
        self._database_path = database_path
        self._timeout = timeout
        self._pool: "queue.LifoQueue[sqlite3.Connection]" = queue.LifoQueue(maxsize=pool_size)
        self._slots = threading.BoundedSemaphore(pool_size)
        self._closed = False

    @property
    def database_path(self) -> str:
        return self._database_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._database_path, timeout=self._timeout, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _acquire(self) -> sqlite3.Connection:
        if self._closed:
            raise PersistenceError("Database pool is closed")
        if not self._slots.acquire(timeout=self._timeout):
            raise PersistenceError("Timed out waiting for a pooled connection")
        try:
            return self._pool.get_nowait()
        except queue.Empty:
            try:
                return self._connect()
            except sqlite3.Error as e:
                self._slots.release()
                raise PersistenceError(f"Database connection error: {str(e)}") from e

    def _release(self, conn: sqlite3.Connection) -> None:
        try:
            if self._closed:
                conn.close()
            else:
                self._pool.put_nowait(conn)
        finally:
            self._slots.release()

    def _cursor(self, conn: sqlite3.Connection) -> sqlite3.Cursor:
        return conn.cursor()

    def close(self) -> None:
        self._closed = True
        while True:
            try:
                self._pool.get_nowait().close()
            except queue.Empty:
                break

    def table_exists(self, table_name: str) -> bool:
        """Check if a table exists."""
        query = "SELECT name FROM sqlite_master WHERE type='table' AND name=?"
        return len(self.execute_query(query, (table_name,))) > 0


class PostgreSQLDatabase(DatabaseManager):
    """PostgreSQL database implementation using psycopg2's threaded pool."""

    placeholder = "%s"
    backend = BackendType.POSTGRESQL

    def __init__(self, host: str = "localhost", port: int = 5432, database: str = "coursekeeper",
                 user: str = "coursekeeper", password: str = "", min_connections: int = 2,
                 max_connections: int = 10, connect_timeout: float = 30.0):
        if not PSYCOPG2_AVAILABLE:
            raise ConfigurationError("psycopg2 is required for PostgreSQL support")

        try:
            self._pool = psycopg2_pool.ThreadedConnectionPool(
                min_connections,
                max_connections,
                host=host,
                port=port,
                dbname=database,
                user=user,
                password=password,
                connect_timeout=int(connect_timeout),
            )
        except psycopg2.Error as e:
            raise PersistenceError(f"Database connection error: {str(e)}") from e

    def _acquire(self) -> Any:
        try:
            conn = self._pool.getconn()
        except psycopg2.Error as e:
            raise PersistenceError(f"Database connection error: {str(e)}") from e
        conn.autocommit = False
        return conn

    def _release(self, conn: Any) -> None:
        self._pool.putconn(conn)

    def _cursor(self, conn: Any) -> Any:
        return conn.cursor(cursor_factory=RealDictCursor)

    def close(self) -> None:
        if not self._pool.closed:
            self._pool.closeall()

    def table_exists(self, table_name: str) -> bool:
        """Check if a table exists."""
        query = "SELECT table_name FROM information_schema.tables WHERE table_name = ?"
        return len(self.execute_query(query, (table_name,))) > 0


class DatabaseFactory:
    """Factory for creating database instances."""

    @staticmethod
    def create_database(config: DatabaseConfig) -> DatabaseManager:
        """Create a database instance from explicit configuration."""
        if config.backend == BackendType.SQLITE:
            return SQLiteDatabase(
                database_path=config.database_path,
                pool_size=config.max_connections,
                timeout=config.connection_timeout,
            )
        elif config.backend == BackendType.POSTGRESQL:
            return PostgreSQLDatabase(
                host=config.host,
                port=config.port,
                database=config.database,
                user=config.user,
                password=config.password,
                min_connections=config.min_connections,
                max_connections=config.max_connections,
                connect_timeout=config.connection_timeout,
            )
        else:
            raise ConfigurationError(f"Unsupported database type: {config.backend.value}")

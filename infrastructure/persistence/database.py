import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime

from infrastructure.persistence.db_schema import CATALOG_SEED_SQL, SCHEMA_SQL

logger = logging.getLogger(__name__)


def now_str() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def today_str() -> str:
    return datetime.now().strftime("%Y-%m-%d")


class Database:
    """Punto de acceso a la base SQLite.

    `connection()` entrega una conexión en autocommit para lecturas.
    `transaction()` abre BEGIN IMMEDIATE y hace COMMIT al salir o ROLLBACK
    ante cualquier excepción; los repositorios que comparten la conexión
    quedan dentro de la misma transacción.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, isolation_level=None, timeout=10)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def connection(self):
        conn = self._connect()
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def transaction(self):
        conn = self._connect()
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        finally:
            conn.close()

    def init_schema(self, seed_catalogs: bool = True) -> None:
        with self.connection() as conn:
            conn.executescript(SCHEMA_SQL)
            if seed_catalogs:
                conn.executescript(CATALOG_SEED_SQL)
        logger.info("action=init_schema db=%s", self.db_path)


class BaseRepository:
    """Repositorio atado a una conexión (o a la transacción en curso)."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def _one(self, query: str, params=()):
        row = self.conn.execute(query, params).fetchone()
        return dict(row) if row else None

    def _all(self, query: str, params=()) -> list:
        return [dict(row) for row in self.conn.execute(query, params).fetchall()]

    def _scalar(self, query: str, params=(), default=0):
        row = self.conn.execute(query, params).fetchone()
        if row is None or row[0] is None:
            return default
        return row[0]


def placeholders(values) -> str:
    return ",".join(["?"] * len(values))

"""PostgreSQL execution transport: run SQL text, classify driver errors."""

from __future__ import annotations

from typing import Protocol

import psycopg2
import psycopg2.extensions
import psycopg2.extras as extras

from sampledump.config import DumpSettings
from sampledump.exceptions import ErrorKind, TransportError
from sampledump.logging_utils import get_logger
from sampledump.models import QueryResult

logger = get_logger(__name__)

# Driver errors that mean the session itself is unusable
_CONNECTIVITY_ERRORS = (psycopg2.OperationalError, psycopg2.InterfaceError)

# Types read back as the server's text form so the dump can quote them as strings:
# json, jsonb, interval, the built-in ranges and arrays of common element types.
TEXT_RESULT_OIDS = (
    114, 3802,                                  # json, jsonb
    1186,                                       # interval
    3904, 3906, 3908, 3910, 3912, 3926,         # int4range, numrange, tsrange, tstzrange, daterange, int8range
    199, 3807,                                  # json[], jsonb[]
    1000, 1001, 1005, 1007, 1016,               # bool[], bytea[], int2[], int4[], int8[]
    1009, 1014, 1015,                           # text[], bpchar[], varchar[]
    1021, 1022, 1231,                           # float4[], float8[], numeric[]
    1182, 1183, 1115, 1185, 1187, 1270,         # date[], time[], timestamp[], timestamptz[], interval[], timetz[]
    2951, 651, 1041,                            # uuid[], cidr[], inet[]
)


def _as_text(value: str | None, cursor) -> str | None:
    return value


TEXT_RESULT_TYPE = psycopg2.extensions.new_type(TEXT_RESULT_OIDS, "SAMPLEDUMP_TEXT", _as_text)


class Transport(Protocol):
    def execute(self, sql: str) -> QueryResult:
        ...


def classify_error(error: psycopg2.Error) -> ErrorKind:
    if isinstance(error, _CONNECTIVITY_ERRORS):
        return ErrorKind.CONNECTIVITY
    return ErrorKind.STATEMENT


def _preview(sql: str, limit: int = 200) -> str:
    flat = " ".join(sql.split())
    return flat if len(flat) <= limit else flat[:limit] + "..."


class PostgresTransport:
    """Synchronous statement execution over a single psycopg2 connection.

    The connection runs in autocommit mode; a rejected statement leaves the
    session usable for the next one.
    """

    def __init__(self, settings: DumpSettings):
        self._settings = settings
        self._conn: psycopg2.extensions.connection | None = None

    def connect(self) -> psycopg2.extensions.connection:
        if self._conn is not None and not self._conn.closed:
            return self._conn
        try:
            conn = psycopg2.connect(self._settings.dsn)
        except psycopg2.Error as e:
            raise TransportError(
                "Failed to connect to PostgreSQL",
                kind=ErrorKind.CONNECTIVITY,
                details={
                    "host": self._settings.pg_host,
                    "database": self._settings.pg_database,
                    "error": str(e),
                },
            ) from e
        conn.autocommit = True
        psycopg2.extensions.register_type(TEXT_RESULT_TYPE, conn)
        self._conn = conn
        logger.info(
            "Connected to PostgreSQL",
            extra={"host": self._settings.pg_host, "database": self._settings.pg_database},
        )
        return conn

    def execute(self, sql: str) -> QueryResult:
        conn = self.connect()
        logger.debug("Executing SQL", extra={"sql": _preview(sql)})
        try:
            with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
                cur.execute(sql)
                if cur.description is None:
                    return QueryResult(rows=[], row_count=max(cur.rowcount, 0))
                rows = [dict(row) for row in cur.fetchall()]
                return QueryResult(rows=rows, row_count=len(rows))
        except psycopg2.Error as e:
            kind = classify_error(e)
            raise TransportError(
                "Statement rejected by PostgreSQL" if kind is ErrorKind.STATEMENT else "Lost connection to PostgreSQL",
                kind=kind,
                details={"pgcode": e.pgcode, "error": str(e).strip(), "sql": _preview(sql)},
            ) from e

    def ping(self) -> bool:
        try:
            return self.execute("SELECT 1 AS ok").first() == {"ok": 1}
        except TransportError as e:
            logger.warning(f"Database health check failed: {e}")
            return False

    def close(self) -> None:
        if self._conn is not None and not self._conn.closed:
            self._conn.close()
        self._conn = None

    def __enter__(self) -> "PostgresTransport":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

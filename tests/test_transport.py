"""Tests for sampledump.transport — psycopg2 execution and error classification."""

from unittest.mock import MagicMock, patch

import psycopg2
import pytest

from sampledump.exceptions import ErrorKind, TransportError
from sampledump.transport import TEXT_RESULT_OIDS, TEXT_RESULT_TYPE, PostgresTransport, _as_text, classify_error


@pytest.fixture(autouse=True)
def mock_register_type():
    with patch("sampledump.transport.psycopg2.extensions.register_type") as register:
        yield register


def _mock_connection(description=(("id",),), rows=None, rowcount=0, execute_error=None):
    cursor = MagicMock()
    cursor.description = description
    cursor.fetchall.return_value = rows or []
    cursor.rowcount = rowcount
    if execute_error is not None:
        cursor.execute.side_effect = execute_error
    conn = MagicMock()
    conn.closed = 0
    conn.cursor.return_value.__enter__.return_value = cursor
    return conn, cursor


class TestClassifyError:
    def test_operational_is_connectivity(self):
        assert classify_error(psycopg2.OperationalError("server closed")) is ErrorKind.CONNECTIVITY

    def test_interface_is_connectivity(self):
        assert classify_error(psycopg2.InterfaceError("connection already closed")) is ErrorKind.CONNECTIVITY

    def test_programming_is_statement(self):
        assert classify_error(psycopg2.ProgrammingError("syntax error")) is ErrorKind.STATEMENT

    def test_data_error_is_statement(self):
        assert classify_error(psycopg2.DataError("invalid input")) is ErrorKind.STATEMENT


class TestExecute:
    @patch("sampledump.transport.psycopg2.connect")
    def test_returns_rows(self, mock_connect, sample_settings):
        conn, cursor = _mock_connection(rows=[{"id": 1}, {"id": 2}])
        mock_connect.return_value = conn

        result = PostgresTransport(sample_settings).execute("SELECT id FROM t")

        assert result.rows == [{"id": 1}, {"id": 2}]
        assert result.row_count == 2
        cursor.execute.assert_called_once_with("SELECT id FROM t")
        assert conn.autocommit is True

    @patch("sampledump.transport.psycopg2.connect")
    def test_statement_without_result_set(self, mock_connect, sample_settings):
        conn, _ = _mock_connection(description=None, rowcount=3)
        mock_connect.return_value = conn

        result = PostgresTransport(sample_settings).execute("DELETE FROM t")

        assert result.rows == []
        assert result.row_count == 3

    @patch("sampledump.transport.psycopg2.connect")
    def test_statement_error_classified(self, mock_connect, sample_settings):
        conn, _ = _mock_connection(execute_error=psycopg2.ProgrammingError("column \"nope\" does not exist"))
        mock_connect.return_value = conn

        with pytest.raises(TransportError) as exc_info:
            PostgresTransport(sample_settings).execute("SELECT nope FROM t")

        assert exc_info.value.kind is ErrorKind.STATEMENT
        assert exc_info.value.is_statement_error
        assert exc_info.value.details["sql"] == "SELECT nope FROM t"

    @patch("sampledump.transport.psycopg2.connect")
    def test_connectivity_error_classified(self, mock_connect, sample_settings):
        conn, _ = _mock_connection(execute_error=psycopg2.OperationalError("server closed the connection"))
        mock_connect.return_value = conn

        with pytest.raises(TransportError) as exc_info:
            PostgresTransport(sample_settings).execute("SELECT 1")

        assert exc_info.value.kind is ErrorKind.CONNECTIVITY
        assert not exc_info.value.is_statement_error

    @patch("sampledump.transport.psycopg2.connect")
    def test_connection_reused(self, mock_connect, sample_settings):
        conn, _ = _mock_connection()
        mock_connect.return_value = conn
        transport = PostgresTransport(sample_settings)

        transport.execute("SELECT 1")
        transport.execute("SELECT 2")

        mock_connect.assert_called_once_with(sample_settings.dsn)

    @patch("sampledump.transport.psycopg2.connect")
    def test_connect_failure(self, mock_connect, sample_settings):
        mock_connect.side_effect = psycopg2.OperationalError("could not connect")

        with pytest.raises(TransportError, match="Failed to connect") as exc_info:
            PostgresTransport(sample_settings).execute("SELECT 1")

        assert exc_info.value.kind is ErrorKind.CONNECTIVITY


class TestPingAndClose:
    @patch("sampledump.transport.psycopg2.connect")
    def test_ping_healthy(self, mock_connect, sample_settings):
        conn, _ = _mock_connection(rows=[{"ok": 1}])
        mock_connect.return_value = conn
        assert PostgresTransport(sample_settings).ping() is True

    @patch("sampledump.transport.psycopg2.connect")
    def test_ping_unreachable(self, mock_connect, sample_settings):
        mock_connect.side_effect = psycopg2.OperationalError("could not connect")
        assert PostgresTransport(sample_settings).ping() is False

    @patch("sampledump.transport.psycopg2.connect")
    def test_context_manager_closes(self, mock_connect, sample_settings):
        conn, _ = _mock_connection()
        mock_connect.return_value = conn

        with PostgresTransport(sample_settings) as transport:
            transport.execute("SELECT 1")

        conn.close.assert_called_once()


class TestTextResultTypes:
    def test_interval_range_json_and_arrays_read_as_text(self):
        for oid in (1186, 114, 3802, 3904, 3906, 3912, 1009, 1007, 1231):
            assert oid in TEXT_RESULT_OIDS

    def test_cast_returns_server_text(self):
        assert _as_text("1 mon 2 days", None) == "1 mon 2 days"
        assert _as_text('{a,"b c"}', None) == '{a,"b c"}'
        assert _as_text(None, None) is None

    @patch("sampledump.transport.psycopg2.connect")
    def test_registered_on_connect(self, mock_connect, mock_register_type, sample_settings):
        conn, _ = _mock_connection()
        mock_connect.return_value = conn

        PostgresTransport(sample_settings).connect()

        mock_register_type.assert_called_once_with(TEXT_RESULT_TYPE, conn)

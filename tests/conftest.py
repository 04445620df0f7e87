"""
This file contains fixtures for the tests in the mysqli_python package.
Functions:
- fake_server: Fixture replacing pymysql.connect with an in-memory server.
- db_connection: Fixture to create and yield a Connection against the fake server.
- mysql_params: Fixture to get real server credentials from environment variables.
- mysql_connection: Fixture to create and yield a Connection to a real server.
"""

import os
import re

import pymysql
import pytest
from pymysql import converters

from mysqli_python import Connection
from mysqli_python.driver import DriverConnection

_INSERT = re.compile(r"^\s*INSERT INTO (\w+) \(([^)]*)\) VALUES", re.IGNORECASE)
_SELECT = re.compile(r"^\s*SELECT (.+?) FROM (\w+)\s*$", re.IGNORECASE | re.DOTALL)


class FakeCursor:
    """Cursor of FakePyMySQLConnection, answering from the server's scripted responses."""

    def __init__(self, connection):
        self._connection = connection
        self.description = None
        self._rows = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        return False

    def execute(self, sql, args=None):
        server = self._connection.server
        server.executed.append((sql, args))

        error = server.errors.get(sql)
        if error is not None:
            raise error

        response = server.results.get(sql)
        if response is None:
            response = server.select_from_table(sql)
        if response is None and sql.lstrip().upper().startswith(("SELECT", "SHOW")):
            response = ([], [])

        if response is None:
            server.insert_into_table(sql, args)
            self.description = None
            self._rows = []
            self._connection.last_affected_rows = server.affected_rows
            self._connection.last_insert_id = server.next_insert_id
        else:
            columns, rows = response
            self.description = [(column, None, None, None, None, None, None) for column in columns]
            self._rows = list(rows)
            self._connection.last_affected_rows = len(self._rows)
            self._connection.last_insert_id = 0
        return self._connection.last_affected_rows

    def fetchall(self):
        return tuple(self._rows)


class FakePyMySQLConnection:
    """The subset of pymysql.connections.Connection used by the driver adapter."""

    def __init__(self, server, **kwargs):
        self.server = server
        self.kwargs = kwargs
        self.open = True
        self.autocommit_mode = kwargs.get("autocommit")
        self.last_affected_rows = 0
        self.last_insert_id = 0
        self.calls = []

    def _operation(self, name, *args):
        self.calls.append((name,) + args)
        error = self.server.operation_errors.get(name)
        if error is not None:
            raise error

    def cursor(self):
        return FakeCursor(self)

    def autocommit(self, value):
        self._operation("autocommit", value)
        self.autocommit_mode = value

    def begin(self):
        self._operation("begin")

    def commit(self):
        self._operation("commit")

    def rollback(self):
        self._operation("rollback")

    def ping(self, reconnect=True):
        self._operation("ping", reconnect)

    def close(self):
        if not self.open:
            raise pymysql.err.Error("Already closed")
        self._operation("close")
        self.open = False

    def insert_id(self):
        return self.last_insert_id

    def affected_rows(self):
        return self.last_affected_rows

    def escape_string(self, value):
        return converters.escape_string(value)

    def get_host_info(self):
        return "socket localhost:3306"

    def get_proto_info(self):
        return 10

    def get_server_info(self):
        return "8.0.36-fake"


class FakeServer:
    """
    Scripted stand-in for a MySQL server.

    Attributes:
        results: Maps the SQL text sent by the driver to (columns, rows).
            SELECT and SHOW statements without an entry read from tables, or
            return an empty result.
        tables: Rows stored by INSERT INTO <table> (<columns>) VALUES statements
            with bound values, by table name. SELECT <columns> FROM <table>
            reads them back.
        errors: Maps the SQL text sent by the driver to the exception to raise.
        operation_errors: Maps connection methods (commit, ping...) to the
            exception to raise.
        reject_password: Password for which connecting fails with error 1045.
    """

    def __init__(self):
        self.results = {}
        self.tables = {}
        self.errors = {}
        self.operation_errors = {}
        self.executed = []
        self.connections = []
        self.affected_rows = 1
        self.next_insert_id = 0
        self.reject_password = "wrong"

    def connect(self, **kwargs):
        if kwargs.get("password") == self.reject_password:
            raise pymysql.err.OperationalError(
                1045, f"Access denied for user '{kwargs.get('user')}'@'localhost' (using password: YES)"
            )
        connect_timeout = kwargs.get("connect_timeout")
        if connect_timeout is not None and not (0 < connect_timeout <= 31536000):
            raise ValueError("connect_timeout should be >0 and <=31536000")
        connection = FakePyMySQLConnection(self, **kwargs)
        self.connections.append(connection)
        return connection

    def insert_into_table(self, sql, args):
        match = _INSERT.match(sql)
        if match is None or not args:
            return
        columns = [column.strip() for column in match.group(2).split(",")]
        self.tables.setdefault(match.group(1), []).append(dict(zip(columns, args)))

    def select_from_table(self, sql):
        match = _SELECT.match(sql)
        if match is None or match.group(2) not in self.tables:
            return None
        rows = self.tables[match.group(2)]
        columns = [column.strip() for column in match.group(1).split(",")]
        if columns == ["*"]:
            columns = []
            for row in rows:
                columns += [column for column in row if column not in columns]
        return columns, [tuple(row.get(column) for column in columns) for row in rows]


class CountingDriver(DriverConnection):
    """DriverConnection counting the statements it prepares."""

    def __init__(self, *args, **kwargs):
        self.prepare_count = 0
        super().__init__(*args, **kwargs)

    def prepare(self, sql):
        self.prepare_count += 1
        return super().prepare(sql)


@pytest.fixture
def fake_server(monkeypatch):
    server = FakeServer()
    monkeypatch.setattr(pymysql, "connect", server.connect)
    return server


@pytest.fixture
def db_connection(fake_server):
    conn = Connection(driver_factory=CountingDriver)
    conn.connect("localhost", "user", "secret", "testdb")
    yield conn
    if conn.is_connected:
        conn.close()


@pytest.fixture(scope="session")
def mysql_params():
    host = os.getenv("DB_HOST")
    if not host:
        pytest.skip("DB_HOST is not set; skipping tests against a real server")
    return {
        "host": host,
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", ""),
        "dbname": os.getenv("DB_NAME", "test"),
        "port": int(os.getenv("DB_PORT", "3306")),
    }


@pytest.fixture(scope="module")
def mysql_connection(mysql_params):
    conn = Connection()
    try:
        conn.connect(**mysql_params)
    except Exception as e:
        pytest.fail(f"Database connection failed: {e}")
    yield conn
    if conn.is_connected:
        conn.close()

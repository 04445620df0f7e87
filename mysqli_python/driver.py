"""
Copyright (c) The mysqli-python developers.
Licensed under the MIT license.
This module adapts PyMySQL to the small set of calls the Connection class makes
against the underlying driver: connect, prepare, bind, execute, fetch and close.

Errors are raised as PyMySQL exceptions (pymysql.MySQLError subclasses) and
translated by the caller. The last error code and message are kept on the
driver connection so they can be read back through errno() and errstr().
"""

from typing import Any, List, Optional, Sequence, Tuple

import pymysql
from pymysql import converters
from pymysql.charset import charset_by_name
from pymysql.constants import FIELD_TYPE

from mysqli_python.constants import ClientErrors
from mysqli_python.helpers import log
from mysqli_python.parameter_helper import convert_qmark_params

# Base class of every error raised by the driver layer
DriverError = pymysql.MySQLError

# DECIMAL and temporal columns are returned as the strings the server sent
_CONVERSIONS = dict(converters.conversions)
for _field_type in (
    FIELD_TYPE.DECIMAL,
    FIELD_TYPE.NEWDECIMAL,
    FIELD_TYPE.DATE,
    FIELD_TYPE.DATETIME,
    FIELD_TYPE.TIMESTAMP,
    FIELD_TYPE.TIME,
):
    _CONVERSIONS[_field_type] = converters.through


class DriverResult:
    """
    The rows of one result set, fully buffered on the client.

    Attributes:
        columns: Column names in select-list order.
        rows: One tuple of field values per row.
    """

    def __init__(self, columns: Sequence[str], rows: Sequence[Tuple[Any, ...]]) -> None:
        self.columns: List[str] = list(columns)
        self.rows: List[Tuple[Any, ...]] = [tuple(row) for row in rows]


class DriverStatement:
    """
    A statement prepared on a DriverConnection.

    The statement text is parsed once, when prepared. Values bound with bind()
    stay bound for every following execute() until they are replaced.
    """

    def __init__(self, connection: "DriverConnection", sql: str) -> None:
        self.sql = sql
        self._connection = connection
        self._format_sql, self.param_count = convert_qmark_params(sql)
        self._values: Optional[Tuple[Any, ...]] = None
        self.closed = False

    def bind(self, types: str, values: Sequence[Any]) -> None:
        """
        Bind values to the placeholders of the statement.

        Raises:
            pymysql.err.ProgrammingError: If the number of types or values does
                not match the number of placeholders.
        """
        if len(types) != len(values) or len(values) != self.param_count:
            error = pymysql.err.ProgrammingError(
                ClientErrors.CR_INVALID_PARAMETER_NO.value,
                f"Number of bound values ({len(values)}) does not match number "
                f"of placeholders ({self.param_count}) in prepared statement",
            )
            self._connection.record_error(error)
            raise error
        self._values = tuple(values)

    def execute(self) -> Optional[DriverResult]:
        """
        Execute the statement with the values currently bound.

        Returns:
            DriverResult for statements producing a result set, None otherwise.
        """
        if self.param_count == 0:
            return self._connection.run(self.sql, None)
        if self._values is None:
            error = pymysql.err.ProgrammingError(
                ClientErrors.CR_PARAMS_NOT_BOUND.value,
                "No data supplied for parameters in prepared statement",
            )
            self._connection.record_error(error)
            raise error
        return self._connection.run(self._format_sql, self._values)

    def close(self) -> None:
        self._values = None
        self.closed = True


class DriverConnection:
    """
    A PyMySQL connection with the call surface the Connection class relies on.

    Raises:
        pymysql.MySQLError: If the connection cannot be established, including
            an unknown charset (2019) and connection arguments PyMySQL rejects.
    """

    def __init__(
        self,
        host: str,
        user: str,
        password: str,
        database: str,
        port: int,
        charset: str,
        collation: str,
        connect_timeout: int = 10,
    ) -> None:
        self.errno = 0
        self.error = ""

        # pymysql.connect does not validate the charset name
        if charset_by_name(charset) is None:
            error = pymysql.err.OperationalError(
                ClientErrors.CR_CANT_READ_CHARSET.value,
                f"Can't initialize character set {charset}",
            )
            self.record_error(error)
            raise error

        try:
            self._conn = self._call(
                pymysql.connect,
                host=host,
                user=user,
                password=password,
                database=database or None,
                port=port,
                charset=charset,
                collation=collation,
                connect_timeout=connect_timeout,
                # None keeps the server's autocommit setting
                autocommit=None,
                conv=_CONVERSIONS,
            )
        except ValueError as e:
            error = pymysql.err.OperationalError(
                ClientErrors.CR_UNKNOWN_ERROR.value, f"Invalid connection argument: {e}"
            )
            self.record_error(error)
            raise error from e

    def record_error(self, error: BaseException) -> None:
        args = getattr(error, "args", ())
        if len(args) >= 2 and isinstance(args[0], int):
            self.errno, self.error = args[0], str(args[1])
        else:
            self.errno = ClientErrors.CR_UNKNOWN_ERROR.value
            self.error = str(error)

    def _call(self, func, *args, **kwargs):
        try:
            result = func(*args, **kwargs)
        except pymysql.MySQLError as e:
            self.record_error(e)
            raise
        self.errno, self.error = 0, ""
        return result

    def prepare(self, sql: str) -> DriverStatement:
        if not self._conn.open:
            error = pymysql.err.OperationalError(
                ClientErrors.CR_SERVER_GONE_ERROR.value, "MySQL server has gone away"
            )
            self.record_error(error)
            raise error
        if not sql.strip():
            error = pymysql.err.ProgrammingError(1065, "Query was empty")
            self.record_error(error)
            raise error
        return DriverStatement(self, sql)

    def run(self, sql: str, args: Optional[Tuple[Any, ...]]) -> Optional[DriverResult]:
        """Send a statement and buffer its result set, if it has one."""
        return self._call(self._run, sql, args)

    def _run(self, sql, args):
        with self._conn.cursor() as cursor:
            cursor.execute(sql, args)
            if cursor.description is None:
                return None
            columns = [description[0] for description in cursor.description]
            rows = cursor.fetchall()
        log("debug", "Driver returned %d rows in %d columns", len(rows), len(columns))
        return DriverResult(columns, rows)

    def autocommit(self, mode: bool) -> None:
        self._call(self._conn.autocommit, mode)

    def begin(self) -> None:
        self._call(self._conn.begin)

    def commit(self) -> None:
        self._call(self._conn.commit)

    def rollback(self) -> None:
        self._call(self._conn.rollback)

    def ping(self) -> None:
        self._call(self._conn.ping, reconnect=False)

    def close(self) -> None:
        self._call(self._conn.close)

    def insert_id(self) -> int:
        return self._conn.insert_id()

    def affected_rows(self) -> int:
        return self._conn.affected_rows()

    def escape_string(self, value: str) -> str:
        return self._conn.escape_string(value)

    def client_info(self) -> str:
        return pymysql.get_client_info()

    def host_info(self) -> str:
        return self._conn.get_host_info()

    def proto_info(self) -> int:
        return int(self._conn.get_proto_info())

    def server_info(self) -> str:
        return self._conn.get_server_info()


def escape_string(value: str) -> str:
    """Escape a string without a connection, assuming backslash escapes are enabled."""
    return converters.escape_string(value)

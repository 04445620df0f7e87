"""
Copyright (c) The mysqli-python developers.
Licensed under the MIT license.
This module defines the Connection class, which manages one connection to a
MySQL server and executes queries on it.
Resource Management:
- The connection keeps the most recently prepared statement and reuses it when
  the same SQL text is queried again with parameters.
- Results returned by query() and execute() belong to the caller.
- close() releases the cached statement and the server connection. A closed
  connection can be opened again with reconnect().
- A Connection must not be used from several threads at the same time.
"""

import time
from typing import Any, Callable, Optional, Union

from mysqli_python import driver
from mysqli_python.constants import ClientErrors
from mysqli_python.cursor import Result
from mysqli_python.driver import DriverError
from mysqli_python.exceptions import (
    BindError,
    ConnectionError,
    DatabaseError,
    NoAutoIncrementError,
    NotConnectedError,
    PrepareError,
    QueryError,
    StatementInvalidError,
    translate_exception,
)
from mysqli_python.helpers import get_settings, log, quote_identifier, shorten
from mysqli_python.logging import logger
from mysqli_python.parameter_helper import Parameter, bind_parameters
from mysqli_python.statement_cache import StatementCache

QUERY_ERROR_PREFIX = "error in mysql query"


class Connection:
    """
    A connection to a MySQL server.

    The object is created disconnected; connect() opens the connection. Every
    other method except escape(), get_db_time() and get_total_queries()
    requires an open connection and raises NotConnectedError otherwise.

    Methods:
        connect(host, user, password, dbname, port, charset, collation) -> None
        reconnect() -> None
        close() -> None
        autocommit(mode), begin_transaction(), commit(), rollback() -> None
        query(sql, *parameters) -> Result or True
        execute(*parameters) -> Result or True
        ping() -> None
        insert_id() -> int
        affected_rows() -> int
    """

    def __init__(self, driver_factory: Optional[Callable[..., Any]] = None) -> None:
        """
        Args:
            driver_factory: Callable opening the underlying driver connection.
                Called with the keyword arguments host, user, password,
                database, port, charset, collation and connect_timeout.
                Defaults to the PyMySQL adapter.
        """
        self._driver_factory = driver_factory or driver.DriverConnection
        self._conn = None
        self._connected = False
        self._connect_args: Optional[dict] = None
        self._statements = StatementCache()

        self._db_time = 0.0
        self._total_queries = 0

        self._client_info = ""
        self._host_info = ""
        self._proto_info = 0
        self._server_info = ""
        self._dbname = ""
        self._trace_id: Optional[str] = None

    def connect(
        self,
        host: str,
        user: str,
        password: str,
        dbname: str,
        port: Optional[int] = None,
        charset: Optional[str] = None,
        collation: Optional[str] = None,
    ) -> None:
        """
        Open the connection to the server.

        Args:
            host: The host name or IP address of the server.
            user: The user name.
            password: The password.
            dbname: The database to select.
            port: The port, defaults to Settings.default_port (3306).
            charset: The connection charset, defaults to "utf8mb4".
            collation: The connection collation, defaults to "utf8mb4_unicode_ci".

        Raises:
            ConnectionError: If the connection cannot be established or the
                charset/collation is rejected.
        """
        settings = get_settings()
        port = settings.default_port if port is None else port
        charset = charset or settings.default_charset
        collation = collation or settings.default_collation

        if self._connected:
            try:
                self.close()
            except DatabaseError as e:
                # the old connection is replaced and disconnected regardless
                log("warning", "Error closing the previous connection: %s", e)

        self._trace_id = logger.generate_trace_id("CONN")
        logger.set_trace_id(self._trace_id)
        log("info", "Connecting to %s@%s:%s/%s (charset=%s, collation=%s)",
            user, host, port, dbname, charset, collation)

        try:
            conn = self._driver_factory(
                host=host,
                user=user,
                password=password,
                database=dbname,
                port=port,
                charset=charset,
                collation=collation,
                connect_timeout=settings.connect_timeout,
            )
            client_info = conn.client_info()
            host_info = conn.host_info()
            proto_info = conn.proto_info()
            server_info = conn.server_info()
        except DriverError as e:
            raise translate_exception(e, ConnectionError) from e

        self._conn = conn
        self._connected = True
        self._connect_args = {
            "host": host,
            "user": user,
            "password": password,
            "dbname": dbname,
            "port": port,
            "charset": charset,
            "collation": collation,
        }
        self._dbname = dbname
        self._client_info = client_info
        self._host_info = host_info
        self._proto_info = proto_info
        self._server_info = server_info
        log("info", "Connected to server %s via %s", server_info, host_info)

    def reconnect(self) -> None:
        """
        Close the connection (if open) and connect again with the parameters of
        the last successful connect().

        Raises:
            NotConnectedError: If connect() never succeeded.
            ConnectionError: If the connection cannot be established.
        """
        if self._connect_args is None:
            raise NotConnectedError(
                f"this {type(self).__name__} object was never connected. use connect() first"
            )

        log("info", "Reconnecting to %s", self._connect_args["host"])
        if self._connected:
            self.close()
        self.connect(**self._connect_args)

    def close(self) -> None:
        """
        Close the connection. The cached statement and the server metadata are
        discarded and the connection state becomes disconnected, even when the
        driver reports a failure.

        Raises:
            DatabaseError: If the driver fails to close the connection.
        """
        self._check_connected()

        self._statements.clear()
        self._client_info = self._host_info = self._server_info = ""
        self._proto_info = 0

        conn, self._conn = self._conn, None
        self._connected = False
        try:
            conn.close()
        except DriverError as e:
            raise translate_exception(e, DatabaseError, "unable to close connection to database") from e
        finally:
            if logger.get_trace_id() == self._trace_id:
                logger.clear_trace_id()

        log("info", "Connection closed successfully.")

    @property
    def is_connected(self) -> bool:
        return self._connected

    def _check_connected(self) -> None:
        if not self._connected:
            raise NotConnectedError(
                f"this {type(self).__name__} object is not connected. use connect() first"
            )

    def _timed_call(self, failure_message: str, method: str, *args) -> None:
        self._check_connected()

        start = time.perf_counter()
        try:
            getattr(self._conn, method)(*args)
        except DriverError as e:
            raise translate_exception(e, DatabaseError, failure_message) from e
        finally:
            self._db_time += time.perf_counter() - start

    def autocommit(self, mode: bool) -> None:
        """
        Turn autocommit on or off.

        Raises:
            DatabaseError: If the mode cannot be changed.
        """
        self._timed_call("unable to change autocommit mode", "autocommit", mode)
        log("info", "Autocommit mode set to %s.", mode)

    def begin_transaction(self) -> None:
        """
        Start a transaction.

        Raises:
            DatabaseError: If the transaction cannot be started.
        """
        self._timed_call("unable to start transaction", "begin")
        log("info", "Transaction started.")

    def commit(self) -> None:
        """
        Commit the current transaction.

        Raises:
            DatabaseError: If the transaction cannot be committed.
        """
        self._timed_call("unable to commit transaction", "commit")
        log("info", "Transaction committed successfully.")

    def rollback(self) -> None:
        """
        Roll back the current transaction.

        Raises:
            DatabaseError: If the transaction cannot be rolled back.
        """
        self._timed_call("unable to rollback transaction", "rollback")
        log("info", "Transaction rolled back successfully.")

    def query(self, sql: str, *parameters: Parameter) -> Union[Result, bool]:
        """
        Execute a statement.

        When sql is the text of the cached statement and parameters are given,
        the cached statement is executed again with the new parameters instead
        of preparing it anew (see execute()). Otherwise the statement is
        prepared, parameters (if any) are bound, and it is executed; the new
        statement replaces the cached one.

        Args:
            sql: The statement, with ? placeholders for the parameters.
            *parameters: One Parameter per placeholder.

        Returns:
            Result for statements producing a result set (SELECT, SHOW...),
            True for all others.

        Raises:
            PrepareError: If the statement cannot be prepared.
            BindError: If the parameters cannot be bound.
            QueryError: If the execution fails.

        Example:
            for i in range(3):
                db.query("INSERT INTO t (a) VALUES (?)", Parameter("i", i))
            result = db.query("SELECT a FROM t")
        """
        self._check_connected()

        if parameters and self._statements.lookup(sql) is not None:
            log("debug", "Reusing prepared statement: %s", shorten(sql, 200))
            return self.execute(*parameters)

        start = time.perf_counter()
        try:
            log("debug", "Preparing statement: %s", shorten(sql, 200))
            try:
                statement = self._conn.prepare(sql)
            except DriverError as e:
                self._statements.clear()
                raise translate_exception(e, PrepareError, QUERY_ERROR_PREFIX, parameters) from e

            self._statements.store(sql, statement)
            result = self._run(statement, parameters)
        finally:
            self._db_time += time.perf_counter() - start

        self._total_queries += 1
        return result

    def execute(self, *parameters: Parameter) -> Union[Result, bool]:
        """
        Execute the cached statement again, binding the given parameters. Without
        parameters, the values bound before are used again.

        Returns:
            Result for statements producing a result set, True for all others.

        Raises:
            StatementInvalidError: If there is no cached statement.
            BindError: If the parameters cannot be bound.
            QueryError: If the execution fails.
        """
        self._check_connected()

        statement = self._statements.statement
        if statement is None:
            raise StatementInvalidError(
                "saved statement is invalid", ClientErrors.CR_NO_PREPARE_STMT.value
            )

        start = time.perf_counter()
        try:
            result = self._run(statement, parameters)
        finally:
            self._db_time += time.perf_counter() - start

        self._total_queries += 1
        return result

    def _run(self, statement, parameters) -> Union[Result, bool]:
        if parameters:
            types, values = bind_parameters(parameters)
            try:
                statement.bind(types, values)
            except DriverError as e:
                raise translate_exception(e, BindError, QUERY_ERROR_PREFIX, parameters) from e

        try:
            raw_result = statement.execute()
        except DriverError as e:
            raise translate_exception(e, QueryError, QUERY_ERROR_PREFIX, parameters) from e

        if raw_result is None:
            return True
        return Result(raw_result)

    def ping(self) -> None:
        """
        Check that the connection to the server is alive.

        Raises:
            DatabaseError: If the server cannot be reached.
        """
        self._check_connected()
        try:
            self._conn.ping()
        except DriverError as e:
            raise translate_exception(e, DatabaseError, "connection to database server lost") from e

    def insert_id(self) -> int:
        """
        Return the AUTO_INCREMENT value generated by the last statement.

        Raises:
            NoAutoIncrementError: If the last statement generated no value.
        """
        self._check_connected()
        insert_id = self._conn.insert_id()
        if insert_id == 0:
            raise NoAutoIncrementError("the last query did not generate an auto increment id")
        return insert_id

    def affected_rows(self) -> int:
        """Number of rows changed, deleted or inserted by the last statement."""
        self._check_connected()
        return self._conn.affected_rows()

    def escape(self, value: str) -> str:
        """
        Escape a string for use inside a quoted SQL literal. Uses the rules of
        the open connection, or standard backslash escaping when not connected.
        """
        if self._connected:
            return self._conn.escape_string(value)
        return driver.escape_string(value)

    def errno(self) -> int:
        """Error code of the last driver call, 0 if it succeeded."""
        self._check_connected()
        return self._conn.errno

    def errstr(self) -> str:
        """Error message of the last driver call, empty if it succeeded."""
        self._check_connected()
        return self._conn.error

    def client_info(self) -> str:
        self._check_connected()
        return self._client_info

    def host_info(self) -> str:
        self._check_connected()
        return self._host_info

    def proto_info(self) -> int:
        self._check_connected()
        return self._proto_info

    def server_info(self) -> str:
        self._check_connected()
        return self._server_info

    def size(self, dbname: Optional[str] = None) -> int:
        """
        Return the size in bytes (data and indexes) of a database.

        Args:
            dbname: The database, defaults to the one selected by connect().

        Raises:
            ValueError: If no database is given and none is selected.
            QueryError: If the table status cannot be read.
        """
        self._check_connected()

        if dbname is None:
            if not self._dbname:
                raise ValueError("no database name is set")
            dbname = self._dbname

        result = self.query("SHOW TABLE STATUS FROM " + quote_identifier(dbname))
        if not isinstance(result, Result):
            raise QueryError("unable to fetch tables in database")

        size = 0
        for row in result:
            size += row.get_as_int("Data_length") + row.get_as_int("Index_length")
        result.free()
        return size

    def get_db_time(self) -> float:
        """Seconds spent waiting for the database, summed over all calls."""
        return self._db_time

    def get_total_queries(self) -> int:
        """Number of statements executed successfully."""
        return self._total_queries

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        if self._connected:
            self.close()

    def __del__(self):
        """
        Close a connection that was not closed explicitly.
        Errors are logged, never raised, since this runs during garbage collection.
        """
        if self.__dict__.get("_connected"):
            try:
                self.close()
            except DatabaseError as e:
                log("error", "Error during connection cleanup: %s", e)

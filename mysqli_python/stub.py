"""
Copyright (c) The mysqli-python developers.
Licensed under the MIT license.
This module contains Stub, a stand-in for Connection that performs no network
I/O, and StubResult, a Result over rows held in memory.

Code depending on a connection can be tested against Stub: it accepts every
call of the Connection interface and answers with fixed values, except for
SELECT statements, which return the rows given to add_payload().
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from mysqli_python.cursor import Result
from mysqli_python.driver import DriverResult
from mysqli_python.helpers import log
from mysqli_python.parameter_helper import Parameter


def _payload_table(payload: Sequence[Mapping[str, Any]]) -> DriverResult:
    columns: List[str] = []
    for row in payload:
        for column in row:
            if column not in columns:
                columns.append(column)
    rows = [tuple(row.get(column) for column in columns) for row in payload]
    return DriverResult(columns, rows)


class StubResult(Result):
    """
    A Result over an in-memory table.

    The columns are the keys of the payload rows in the order they are first
    seen; a row missing a column has None in it.

    Raises:
        TypeError: If the payload is not a list of mappings.
    """

    def __init__(self, payload: List[Mapping[str, Any]]) -> None:
        if not isinstance(payload, list):
            raise TypeError(f"payload must be a list. '{type(payload).__name__}' given")
        for row in payload:
            if not isinstance(row, Mapping):
                raise TypeError(f"payload rows must be mappings. '{type(row).__name__}' given")
        super().__init__(_payload_table(payload))


class Stub:
    """
    A Connection look-alike without a server.

    Connection state is not tracked: every method may be called before
    connect() and after close().
    """

    def __init__(self) -> None:
        self._connect_args: Optional[Dict[str, Any]] = None
        self._payload: List[Mapping[str, Any]] = []
        self._last_sql: Optional[str] = None

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
        """Record the connection parameters."""
        self._connect_args = {
            "host": host,
            "user": user,
            "password": password,
            "dbname": dbname,
            "port": port,
            "charset": charset,
            "collation": collation,
        }
        log("debug", "Stub connected to %s@%s/%s", user, host, dbname)

    @property
    def connect_args(self) -> Optional[Dict[str, Any]]:
        """The parameters of the last connect() call, or None."""
        return self._connect_args

    def reconnect(self) -> None:
        if self._connect_args is not None:
            self.connect(**self._connect_args)

    def close(self) -> None:
        pass

    @property
    def is_connected(self) -> bool:
        return self._connect_args is not None

    def autocommit(self, mode: bool) -> None:
        pass

    def begin_transaction(self) -> None:
        pass

    def commit(self) -> None:
        pass

    def rollback(self) -> None:
        pass

    def add_payload(self, payload: List[Mapping[str, Any]]) -> None:
        """
        Set the rows returned by SELECT statements.

        Raises:
            TypeError: If payload is not a list.
        """
        if not isinstance(payload, list):
            raise TypeError(f"payload must be a list. '{type(payload).__name__}' given")
        self._payload = payload

    def _answer(self, sql: Optional[str]) -> Union[Result, bool]:
        if sql is not None and sql.strip().lower().startswith("select"):
            return StubResult(self._payload)
        return True

    def query(self, sql: str, *parameters: Parameter) -> Union[Result, bool]:
        """Return a StubResult over the payload for SELECT statements, True otherwise."""
        self._last_sql = sql
        return self._answer(sql)

    def execute(self, *parameters: Parameter) -> Union[Result, bool]:
        """Answer like query() did for the last statement."""
        return self._answer(self._last_sql)

    def ping(self) -> None:
        pass

    def insert_id(self) -> int:
        return 1

    def affected_rows(self) -> int:
        return 1

    def escape(self, value: str) -> str:
        return value

    def client_info(self) -> str:
        return "client info"

    def host_info(self) -> str:
        return "host info"

    def proto_info(self) -> int:
        return 1

    def server_info(self) -> str:
        return "server info"

    def size(self, dbname: Optional[str] = None) -> int:
        return 1

    def errno(self) -> int:
        return 1

    def errstr(self) -> str:
        return "error"

    def get_db_time(self) -> float:
        return 1.0

    def get_total_queries(self) -> int:
        return 1

    def __enter__(self) -> "Stub":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

"""
Copyright (c) The mysqli-python developers.
Licensed under the MIT license.
This module contains the StatementCache class, which keeps the most recently
prepared statement of a connection so that a statement executed repeatedly
with different values is prepared only once.
"""

from typing import Any, Optional

from mysqli_python.helpers import log


class StatementCache:
    """
    A single-slot cache of prepared statements keyed by their exact SQL text.

    Storing a statement replaces (and closes) the one held before, so only
    back-to-back executions of the same SQL text hit the cache.

    Not thread-safe; it shares the threading rules of its connection.
    """

    def __init__(self) -> None:
        self._sql: Optional[str] = None
        self._statement: Optional[Any] = None

    @property
    def sql(self) -> Optional[str]:
        """SQL text of the cached statement, or None."""
        return self._sql

    @property
    def statement(self) -> Optional[Any]:
        """The cached statement, or None."""
        return self._statement

    def lookup(self, sql: str) -> Optional[Any]:
        """Return the cached statement if it was prepared from exactly this SQL text."""
        if self._statement is not None and sql == self._sql:
            return self._statement
        return None

    def store(self, sql: str, statement: Any) -> None:
        """Cache a newly prepared statement in place of the current one."""
        if self._statement is not None and self._statement is not statement:
            self._close(self._statement)
        self._sql = sql
        self._statement = statement

    def clear(self) -> None:
        """Drop the cached statement."""
        if self._statement is not None:
            self._close(self._statement)
        self._sql = None
        self._statement = None

    @staticmethod
    def _close(statement) -> None:
        close = getattr(statement, "close", None)
        if close is not None:
            close()
        log("debug", "Released cached statement")

    def __len__(self) -> int:
        return 0 if self._statement is None else 1

    def __contains__(self, sql: object) -> bool:
        return self._statement is not None and sql == self._sql

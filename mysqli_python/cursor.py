"""
Copyright (c) The mysqli-python developers.
Licensed under the MIT license.
This module contains the Result class, a cursor over the rows returned by a
query.
Resource Management:
- A Result is owned by the caller that received it; the connection keeps no
  reference to it.
- free() releases the buffered rows. Any use of the result afterwards raises
  DatabaseError.
"""

from typing import Dict, Iterator, List, Optional, Union

from mysqli_python.exceptions import DatabaseError, FieldNotFoundError, NoRowsError
from mysqli_python.row import Row
from mysqli_python.type import (
    FieldValue,
    ResultType,
    to_bool,
    to_float,
    to_int,
    to_nullable_bool,
    to_nullable_float,
    to_nullable_int,
    to_nullable_str,
    to_str,
)


class Result:
    """
    A cursor over a result set.

    The cursor starts before the first row. Each fetch returns the row at the
    cursor and advances it by one; data_seek() moves it to any row.

    Methods:
        fetch_array(result_type) -> dict or None at end of data.
        fetch_single_array(result_type) -> dict, NoRowsError at end of data.
        fetch_object(result_type) -> Row or None at end of data.
        fetch_single_object(result_type) -> Row, NoRowsError at end of data.
        fetch_all(result_type) -> list of dicts.
        fetch_all_object(result_type) -> list of Rows.
        num_rows() -> number of rows of the result.
        data_seek(offset) -> True if the cursor was moved.
        result(row, field) -> raw value of one field.
        free() -> None.
    """

    def __init__(self, result) -> None:
        """
        Args:
            result: The raw result, an object exposing ``columns`` (column
                names) and ``rows`` (sequences of field values).
        """
        self._result = result
        self._position = 0

    def _check_freed(self):
        if self._result is None:
            raise DatabaseError("result has already been freed")

    @property
    def column_names(self) -> List[str]:
        self._check_freed()
        return list(self._result.columns)

    def _make_row(self, values, result_type: ResultType) -> Dict[Union[int, str], FieldValue]:
        columns = self._result.columns
        if result_type is ResultType.NUM:
            return dict(enumerate(values))
        if result_type is ResultType.ASSOC:
            return dict(zip(columns, values))
        if result_type is ResultType.BOTH:
            data = {}
            for index, (column, value) in enumerate(zip(columns, values)):
                data[index] = value
                data[column] = value
            return data
        raise ValueError(f"Invalid result type: {result_type!r}")

    def fetch_array(self, result_type: ResultType = ResultType.BOTH) -> Optional[Dict[Union[int, str], FieldValue]]:
        """
        Fetch the next row as a dict keyed according to result_type.

        Returns:
            The row, or None if there are no more rows.
        """
        self._check_freed()

        if self._position >= len(self._result.rows):
            return None

        values = self._result.rows[self._position]
        self._position += 1
        return self._make_row(values, result_type)

    def fetch_single_array(self, result_type: ResultType = ResultType.BOTH) -> Dict[Union[int, str], FieldValue]:
        """
        Fetch the next row as a dict keyed according to result_type.

        Raises:
            NoRowsError: If there are no more rows.
        """
        data = self.fetch_array(result_type)
        if data is None:
            raise NoRowsError("no more rows to fetch")
        return data

    def fetch_object(self, result_type: ResultType = ResultType.BOTH) -> Optional[Row]:
        """Fetch the next row as a Row, or None if there are no more rows."""
        data = self.fetch_array(result_type)
        return None if data is None else Row(data, result_type)

    def fetch_single_object(self, result_type: ResultType = ResultType.BOTH) -> Row:
        """
        Fetch the next row as a Row.

        Raises:
            NoRowsError: If there are no more rows.
        """
        return Row(self.fetch_single_array(result_type), result_type)

    def fetch_assoc(self) -> Optional[Dict[str, FieldValue]]:
        return self.fetch_array(ResultType.ASSOC)

    def fetch_row_assoc(self) -> Dict[str, FieldValue]:
        return self.fetch_single_array(ResultType.ASSOC)

    def fetch_row(self) -> Optional[Dict[int, FieldValue]]:
        return self.fetch_array(ResultType.NUM)

    def fetch_all(self, result_type: ResultType = ResultType.NUM) -> List[Dict[Union[int, str], FieldValue]]:
        """
        Fetch all remaining rows. The cursor is left at the end of the result.

        Returns:
            List of dicts, empty if there are no more rows.
        """
        rows = []
        data = self.fetch_array(result_type)
        while data is not None:
            rows.append(data)
            data = self.fetch_array(result_type)
        return rows

    def fetch_all_object(self, result_type: ResultType = ResultType.NUM) -> List[Row]:
        """Fetch all remaining rows as Row objects."""
        return [Row(data, result_type) for data in self.fetch_all(result_type)]

    def num_rows(self) -> int:
        """Total number of rows of the result, regardless of the cursor position."""
        self._check_freed()
        return len(self._result.rows)

    def data_seek(self, offset: int) -> bool:
        """
        Move the cursor to the row at offset.

        Returns:
            True on success, False if offset is not a row of the result. The
            cursor does not move when False is returned.
        """
        self._check_freed()

        if offset < 0 or offset >= len(self._result.rows):
            return False
        self._position = offset
        return True

    def free(self) -> None:
        """Release the rows held by this result."""
        self._check_freed()
        self._result = None

    def result(self, row: int, field: str) -> FieldValue:
        """
        Return one field of one row. The cursor is left after that row.

        Raises:
            DatabaseError: If the row cannot be fetched.
            FieldNotFoundError: If the row has no such field.
        """
        data = self.fetch_array(ResultType.ASSOC) if self.data_seek(row) else None

        if data is None:
            raise DatabaseError(f"unable to fetch row {row}")

        if field not in data:
            raise FieldNotFoundError(f"field '{field}' does not exist")

        return data[field]

    def result_as_int(self, row: int, field: str) -> int:
        return to_int(self.result(row, field))

    def result_as_float(self, row: int, field: str) -> float:
        return to_float(self.result(row, field))

    def result_as_string(self, row: int, field: str) -> str:
        return to_str(self.result(row, field))

    def result_as_bool(self, row: int, field: str) -> bool:
        return to_bool(self.result(row, field))

    def result_as_nullable_int(self, row: int, field: str) -> Optional[int]:
        return to_nullable_int(self.result(row, field))

    def result_as_nullable_float(self, row: int, field: str) -> Optional[float]:
        return to_nullable_float(self.result(row, field))

    def result_as_nullable_string(self, row: int, field: str) -> Optional[str]:
        return to_nullable_str(self.result(row, field))

    def result_as_nullable_bool(self, row: int, field: str) -> Optional[bool]:
        return to_nullable_bool(self.result(row, field))

    def __iter__(self) -> Iterator[Row]:
        """Iterate over the remaining rows as associative Row objects."""
        row = self.fetch_object(ResultType.ASSOC)
        while row is not None:
            yield row
            row = self.fetch_object(ResultType.ASSOC)

    def __repr__(self) -> str:
        if self._result is None:
            return "<Result freed>"
        return f"<Result rows={len(self._result.rows)} position={self._position}>"

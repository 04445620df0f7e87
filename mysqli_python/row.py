"""
Copyright (c) The mysqli-python developers.
Licensed under the MIT license.
This module contains the Row class, which represents a single row of data
from a result fetch operation.
"""

from types import MappingProxyType
from typing import Any, Dict, Iterator, Optional, Union

from mysqli_python.exceptions import FieldNotFoundError
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

Key = Union[int, str]


class Row:
    """
    An immutable row of data from a result fetch operation.

    The keys of the row depend on the result type it was fetched with: column
    names (ResultType.ASSOC), ordinal positions (ResultType.NUM) or both
    (ResultType.BOTH).
    """

    __slots__ = ("_data", "_result_type")

    def __init__(self, data: Dict[Key, FieldValue], result_type: ResultType) -> None:
        """
        Args:
            data: The fields of the row, in column order.
            result_type: The result type the row was fetched with.
        """
        object.__setattr__(self, "_data", MappingProxyType(dict(data)))
        object.__setattr__(self, "_result_type", result_type)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Row objects are immutable")

    def get_all(self) -> Dict[Key, FieldValue]:
        """Return a copy of all fields of the row."""
        return dict(self._data)

    def get(self, key: Key) -> FieldValue:
        """
        Return the raw value of a field.

        Raises:
            FieldNotFoundError: If the row has no field with this key.
        """
        try:
            return self._data[key]
        except KeyError:
            raise FieldNotFoundError(f"key '{key}' does not exist") from None

    def get_as_int(self, key: Key) -> int:
        return to_int(self.get(key))

    def get_as_float(self, key: Key) -> float:
        return to_float(self.get(key))

    def get_as_string(self, key: Key) -> str:
        return to_str(self.get(key))

    def get_as_bool(self, key: Key) -> bool:
        return to_bool(self.get(key))

    def get_as_nullable_int(self, key: Key) -> Optional[int]:
        return to_nullable_int(self.get(key))

    def get_as_nullable_float(self, key: Key) -> Optional[float]:
        return to_nullable_float(self.get(key))

    def get_as_nullable_string(self, key: Key) -> Optional[str]:
        return to_nullable_str(self.get(key))

    def get_as_nullable_bool(self, key: Key) -> Optional[bool]:
        return to_nullable_bool(self.get(key))

    @property
    def result_type(self) -> ResultType:
        """The result type this row was fetched with."""
        return self._result_type

    def get_result_type(self) -> ResultType:
        return self._result_type

    def __getitem__(self, key: Key) -> FieldValue:
        """Allow accessing by key: row["name"] or row[0]"""
        return self.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        """Return the number of entries in the row"""
        return len(self._data)

    def __iter__(self) -> Iterator[Key]:
        """Iterate over the keys of the row, like a mapping"""
        return iter(self._data)

    def __eq__(self, other: Any) -> bool:
        """Rows compare equal to rows with the same data and to plain dicts."""
        if isinstance(other, dict):
            return dict(self._data) == other
        if isinstance(other, Row):
            return dict(self._data) == dict(other._data) and self._result_type == other._result_type
        return NotImplemented

    __hash__ = None

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging"""
        return f"Row({dict(self._data)!r}, {self._result_type})"

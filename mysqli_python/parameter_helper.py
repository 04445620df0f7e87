"""
Copyright (c) The mysqli-python developers.
Licensed under the MIT license.

Parameter handling for mysqli_python.

A statement is written with qmark (?) placeholders and executed with an ordered
sequence of Parameter objects. Each Parameter carries a one-character type tag:

    i   64-bit integer
    s   string
    d   double
    b   binary blob
"""

from dataclasses import dataclass
from typing import Any, List, Sequence, Tuple

from mysqli_python.constants import PARAMETER_TYPE_TAGS
from mysqli_python.exceptions import BindError, InvalidParameterType
from mysqli_python.helpers import get_settings, shorten
from mysqli_python.type import to_str


@dataclass(frozen=True)
class Parameter:
    """
    A typed value bound to one placeholder of a prepared statement.

    Attributes:
        type: The type tag, one of i, s, d or b.
        value: The value to bind. None binds NULL.

    Raises:
        InvalidParameterType: If the type tag is not one of i, s, d or b.
    """

    type: str
    value: Any = None

    def __post_init__(self) -> None:
        if self.type not in PARAMETER_TYPE_TAGS:
            raise InvalidParameterType(
                f"type must be i, s, d or b. '{self.type}' given"
            )


def _to_blob(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    raise TypeError(f"cannot bind {type(value).__name__} as a blob")


def _to_integer(value: Any) -> int:
    if isinstance(value, str):
        return int(value.strip())
    return int(value)


_CONVERTERS = {
    "i": _to_integer,
    "d": float,
    "s": to_str,
    "b": _to_blob,
}


def convert_value(parameter: Parameter) -> Any:
    """
    Convert the value of a parameter to the Python type its tag stands for.

    Raises:
        BindError: If the value cannot be represented with the parameter's type.
    """
    if parameter.value is None:
        return None
    try:
        return _CONVERTERS[parameter.type](parameter.value)
    except (TypeError, ValueError, OverflowError) as e:
        raise BindError(
            f"unable to bind {type(parameter.value).__name__} value "
            f"'{shorten(parameter.value, get_settings().param_log_length)}' "
            f"as type '{parameter.type}': {e}"
        ) from e


def bind_parameters(parameters: Sequence[Parameter]) -> Tuple[str, List[Any]]:
    """
    Pack parameters for a positional bind call.

    Args:
        parameters: The parameters in placeholder order.

    Returns:
        tuple: (types, values) where types concatenates the type tags and values
        holds the converted values in the same order. Both are empty when no
        parameters are given.

    Examples:
        >>> bind_parameters([Parameter("s", "a"), Parameter("i", 1)])
        ('si', ['a', 1])
    """
    types = "".join(parameter.type for parameter in parameters)
    values = [convert_value(parameter) for parameter in parameters]
    return types, values


def format_parameters(parameters: Sequence[Parameter]) -> List[str]:
    """
    Render parameters for error messages, one line each: `` - <tag>: '<value>'``.
    Values are put on a single line and shortened to Settings.param_log_length.
    """
    max_length = get_settings().param_log_length
    return [
        f" - {parameter.type}: '{shorten(parameter.value, max_length)}'"
        for parameter in parameters
    ]


def convert_qmark_params(sql: str) -> Tuple[str, int]:
    """
    Rewrite ? placeholders to the %s format used by the driver.

    Placeholders inside string literals, quoted identifiers and comments are
    left alone. Every literal % is doubled since the driver interpolates the
    whole statement with the % operator.

    Args:
        sql: SQL statement with ? placeholders

    Returns:
        tuple: (converted_sql, placeholder_count)

    Examples:
        >>> convert_qmark_params("SELECT * FROM t WHERE a = ? AND b LIKE '%?'")
        ("SELECT * FROM t WHERE a = %s AND b LIKE '%%?'", 1)
    """
    out = []
    count = 0
    i = 0
    length = len(sql)
    quote = None

    while i < length:
        char = sql[i]

        if char == "%":
            out.append("%%")
            i += 1
            continue

        if quote:
            out.append(char)
            if char == "\\" and quote != "`" and i + 1 < length:
                # Backslash escape inside a string literal
                i += 1
                if sql[i] == "%":
                    out.append("%%")
                else:
                    out.append(sql[i])
            elif char == quote:
                if i + 1 < length and sql[i + 1] == quote:
                    # Doubled quote stays inside the literal
                    out.append(sql[i + 1])
                    i += 1
                else:
                    quote = None
            i += 1
            continue

        if char in ("'", '"', "`"):
            quote = char
            out.append(char)
            i += 1
            continue

        # Comments run to the end of the line (-- and #) or to */ (/* ... */)
        if char == "#" or (sql.startswith("--", i) and (i + 2 == length or sql[i + 2].isspace())):
            end = sql.find("\n", i)
            end = length if end == -1 else end
            out.append(sql[i:end].replace("%", "%%"))
            i = end
            continue

        if sql.startswith("/*", i):
            end = sql.find("*/", i + 2)
            end = length if end == -1 else end + 2
            out.append(sql[i:end].replace("%", "%%"))
            i = end
            continue

        if char == "?":
            out.append("%s")
            count += 1
        else:
            out.append(char)
        i += 1

    return "".join(out), count

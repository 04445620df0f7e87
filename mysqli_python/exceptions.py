"""
Copyright (c) The mysqli-python developers.
Licensed under the MIT license.
This module contains the exception classes of the mysqli_python package and the
translation of driver errors into them.
"""

from typing import Optional, Sequence, Type

from mysqli_python.helpers import log


class Error(Exception):
    """
    Base class for all errors raised by this package.
    Carries the human readable message and the numeric error code reported by
    the driver (0 when the error did not originate in the driver).
    """

    def __init__(self, message: str = "An error occurred", errno: int = 0) -> None:
        self.message = message
        self.errno = errno
        super().__init__(self.message)


class InterfaceError(Error):
    """
    Error related to the use of the interface rather than the database, such
    as calling an operation on a handle that is not connected.
    """


class NotConnectedError(InterfaceError):
    """
    Raised when an operation other than connect() is used on a connection
    that has not been connected yet, or that has been closed.
    """


class InvalidParameterType(InterfaceError, ValueError):
    """
    Raised when a Parameter is constructed with a type tag outside of i, s, d and b.
    """


class DatabaseError(Error):
    """
    Base class for database errors.
    Every failure reported by the underlying driver is re-raised as this class
    or one of its subclasses, with the driver error attached as __cause__.
    """


class ConnectionError(DatabaseError):
    """
    Raised when the connection to the server cannot be established, including
    bad credentials, an unreachable host or a rejected charset.
    """


class QueryError(DatabaseError):
    """
    Raised when a statement fails. The message lists the bound parameters.
    """


class PrepareError(QueryError):
    """Raised when the server refuses to prepare a statement."""


class BindError(QueryError):
    """Raised when parameters cannot be bound to a prepared statement."""


class StatementInvalidError(DatabaseError):
    """Raised by execute() when there is no prepared statement to execute."""


class NoAutoIncrementError(DatabaseError):
    """Raised by insert_id() when the last statement generated no identifier."""


class NoRowsError(DatabaseError):
    """Raised by the fetch_single_* family when the result has no more rows."""


class FieldNotFoundError(DatabaseError):
    """Raised when a row does not contain the requested field."""


def build_error_message(
    driver_message: str,
    prefix: Optional[str] = None,
    parameters: Sequence = (),
) -> str:
    """
    Build the message of a translated error.

    Args:
        driver_message: The message reported by the driver.
        prefix: Optional text put in front of the driver message.
        parameters: Parameters bound to the failed statement. When given, they
            are listed below the message, one per line.

    Returns:
        str: The complete message.
    """
    # Local import to avoid circular dependency
    from mysqli_python.parameter_helper import format_parameters

    message = f"{prefix}: {driver_message}" if prefix else driver_message
    if parameters:
        message += "\n\tparameters given:\n\t"
        message += "\n\t".join(format_parameters(parameters))
        message += "\n\t"
    return message


def driver_error_details(driver_error: BaseException):
    """
    Extract (errno, message) from a driver exception.
    PyMySQL errors carry them as args[0] and args[1]; anything else has errno 0.
    """
    args = getattr(driver_error, "args", ())
    if len(args) >= 2 and isinstance(args[0], int):
        return args[0], str(args[1])
    if len(args) == 1:
        return 0, str(args[0])
    return 0, str(driver_error) or type(driver_error).__name__


def translate_exception(
    driver_error: BaseException,
    error_class: Type[DatabaseError] = DatabaseError,
    prefix: Optional[str] = None,
    parameters: Sequence = (),
) -> DatabaseError:
    """
    Convert a driver failure into a typed error of this package.

    The returned error keeps the driver's numeric code and message; it should
    be raised with ``raise ... from driver_error`` so that the driver error is
    preserved as the cause.

    Args:
        driver_error: The exception raised by the driver.
        error_class: The DatabaseError subclass to build.
        prefix: Optional text put in front of the driver message.
        parameters: Parameters bound to the failed statement, if any.

    Returns:
        DatabaseError: The translated error.
    """
    errno, driver_message = driver_error_details(driver_error)
    message = build_error_message(driver_message, prefix, parameters)
    log("error", "%s (errno %d): %s", error_class.__name__, errno, message)
    return error_class(message, errno)

import pymysql
import pytest

from mysqli_python import (
    BindError,
    ConnectionError,
    DatabaseError,
    Error,
    FieldNotFoundError,
    InterfaceError,
    InvalidParameterType,
    NoAutoIncrementError,
    NoRowsError,
    NotConnectedError,
    Parameter,
    PrepareError,
    QueryError,
    StatementInvalidError,
)
from mysqli_python.exceptions import (
    build_error_message,
    driver_error_details,
    translate_exception,
)


@pytest.mark.parametrize(
    "error_class, base",
    [
        (InterfaceError, Error),
        (NotConnectedError, InterfaceError),
        (InvalidParameterType, InterfaceError),
        (InvalidParameterType, ValueError),
        (DatabaseError, Error),
        (ConnectionError, DatabaseError),
        (QueryError, DatabaseError),
        (PrepareError, QueryError),
        (BindError, QueryError),
        (StatementInvalidError, DatabaseError),
        (NoAutoIncrementError, DatabaseError),
        (NoRowsError, DatabaseError),
        (FieldNotFoundError, DatabaseError),
        (Error, Exception),
    ],
)
def test_exception_hierarchy(error_class, base):
    assert issubclass(error_class, base)


def test_connection_error_is_not_builtin():
    assert not issubclass(ConnectionError, OSError)


def test_error_defaults():
    error = Error()
    assert error.message == "An error occurred"
    assert error.errno == 0
    assert str(error) == "An error occurred"


def test_error_carries_errno():
    error = QueryError("boom", 1064)
    assert error.message == "boom"
    assert error.errno == 1064
    assert str(error) == "boom"


def test_driver_error_details():
    assert driver_error_details(pymysql.err.OperationalError(2003, "Can't connect")) == (2003, "Can't connect")
    assert driver_error_details(pymysql.err.InterfaceError("no args")) == (0, "no args")
    assert driver_error_details(pymysql.err.InterfaceError()) == (0, "InterfaceError")


def test_build_error_message():
    assert build_error_message("oops") == "oops"
    assert build_error_message("oops", "unable to commit transaction") == "unable to commit transaction: oops"
    assert build_error_message("oops", "error in mysql query", [Parameter("s", "a"), Parameter("i", 2)]) == (
        "error in mysql query: oops\n\tparameters given:\n\t - s: 'a'\n\t - i: '2'\n\t"
    )


def test_translate_exception():
    driver_error = pymysql.err.OperationalError(2003, "Can't connect to MySQL server on 'nowhere'")
    error = translate_exception(driver_error, ConnectionError)
    assert isinstance(error, ConnectionError)
    assert error.errno == 2003
    assert str(error) == "Can't connect to MySQL server on 'nowhere'"


def test_translate_exception_defaults_to_database_error():
    error = translate_exception(pymysql.err.InternalError(1105, "Unknown error"))
    assert type(error) is DatabaseError
    assert error.errno == 1105


def test_translate_exception_with_parameters():
    error = translate_exception(
        pymysql.err.DataError(1406, "Data too long for column 'name' at row 1"),
        QueryError,
        "error in mysql query",
        [Parameter("s", "x" * 300)],
    )
    assert str(error) == (
        "error in mysql query: Data too long for column 'name' at row 1\n"
        "\tparameters given:\n"
        f"\t - s: '{'x' * 100}'\n"
        "\t"
    )


def test_raise_from_keeps_cause():
    driver_error = pymysql.err.ProgrammingError(1064, "syntax")
    with pytest.raises(QueryError) as excinfo:
        try:
            raise driver_error
        except pymysql.MySQLError as e:
            raise translate_exception(e, QueryError) from e
    assert excinfo.value.__cause__ is driver_error

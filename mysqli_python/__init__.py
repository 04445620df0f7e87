"""
Copyright (c) The mysqli-python developers.
Licensed under the MIT license.
This module initializes the mysqli_python package.
"""

# Import settings from helpers module
from .helpers import Settings, get_settings

# Driver version
__version__ = "1.0.0"

# Exceptions
from .exceptions import (
    Error,
    InterfaceError,
    NotConnectedError,
    InvalidParameterType,
    DatabaseError,
    ConnectionError,
    QueryError,
    PrepareError,
    BindError,
    StatementInvalidError,
    NoAutoIncrementError,
    NoRowsError,
    FieldNotFoundError,
)

# Parameters and result types
from .parameter_helper import Parameter
from .type import ResultType

# Connection Objects
from .db_connection import connect
from .connection import Connection

# Result Objects
from .cursor import Result
from .row import Row

# Test double
from .stub import Stub, StubResult

# Logging Configuration
from .logging import logger, setup_logging

# GLOBALS
# Read-Only
paramstyle: str = "qmark"
threadsafety: int = 1

"""
Copyright (c) The mysqli-python developers.
Licensed under the MIT license.
This module contains the constants used by the mysqli_python package.
"""

from enum import Enum


class ClientErrors(Enum):
    """
    MySQL client library error numbers (CR_*) raised by the driver adapter
    itself rather than by the server.
    """

    CR_UNKNOWN_ERROR = 2000
    CR_SERVER_GONE_ERROR = 2006
    CR_CANT_READ_CHARSET = 2019
    CR_NO_PREPARE_STMT = 2030
    CR_PARAMS_NOT_BOUND = 2031
    CR_INVALID_PARAMETER_NO = 2034


class ParameterTypes(Enum):
    """Type tags accepted by Parameter, one character each."""

    INTEGER = "i"
    STRING = "s"
    DOUBLE = "d"
    BLOB = "b"


PARAMETER_TYPE_TAGS = tuple(member.value for member in ParameterTypes)

"""
Copyright (c) The mysqli-python developers.
Licensed under the MIT license.
This module provides helper functions and the package settings for mysqli_python.
"""

import re
import threading
from typing import Any

from mysqli_python.logging import logger


def log(level: str, message: str, *args) -> None:
    """
    Universal logging helper.

    Args:
        level: Log level ('debug', 'info', 'warning', 'error')
        message: Log message with optional format placeholders
        *args: Arguments for message formatting
    """
    getattr(logger, level)(message, *args)


def normalize_whitespace(value: str) -> str:
    """Collapse line breaks and runs of whitespace into single spaces."""
    value = value.replace("\r\n", " ")
    return re.sub(r"\s+", " ", value).strip()


def shorten(value: Any, max_length: int) -> str:
    """
    Render a value as a single line of at most max_length characters, for use
    in log and error messages.
    """
    if value is None:
        text = ""
    elif isinstance(value, (bytes, bytearray)):
        text = bytes(value).decode("utf-8", errors="replace")
    else:
        text = str(value)
    return normalize_whitespace(text)[:max_length].strip()


def quote_identifier(name: str) -> str:
    """Quote a schema or table name with backticks."""
    return "`" + name.replace("`", "``") + "`"


class Settings:
    """
    Settings class for mysqli_python package configuration.

    Holds the process-wide defaults used when a connection is opened without
    explicit values, and the limits applied to diagnostic output.
    """

    def __init__(self) -> None:
        self.default_port: int = 3306
        self.default_charset: str = "utf8mb4"
        self.default_collation: str = "utf8mb4_unicode_ci"
        self.connect_timeout: int = 10
        # Characters of each bound value shown in query error messages
        self.param_log_length: int = 100


# Global settings instance
_settings: Settings = Settings()
_settings_lock: threading.Lock = threading.Lock()


def get_settings() -> Settings:
    """Return the global settings object"""
    with _settings_lock:
        return _settings

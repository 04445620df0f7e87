"""
Copyright (c) The mysqli-python developers.
Licensed under the MIT license.

Logging module for mysqli_python.
Logging is disabled by default and costs a single level check per call until
setup_logging() is used.
"""

import contextvars
import datetime
import logging
import os
import re
import sys
import threading
from logging.handlers import RotatingFileHandler
from typing import Optional


DEBUG = logging.DEBUG

# Output destination constants
STDOUT = "stdout"  # Log to stdout only
FILE = "file"  # Log to file only (default)
BOTH = "both"  # Log to both file and stdout

LOG_DIR_NAME = "mysqli_python_logs"

# Module-level context variable for trace IDs (thread-safe, async-safe)
_trace_id_var = contextvars.ContextVar("trace_id", default=None)


class TraceIDFilter(logging.Filter):
    """Filter that adds trace_id to all log records."""

    def filter(self, record):
        trace_id = _trace_id_var.get()
        record.trace_id = trace_id if trace_id else "-"
        return True


class DriverLogger:
    """
    Singleton logger for mysqli_python.

    Features:
    - Single DEBUG level once enabled
    - Automatic file rotation (512MB, 5 backups)
    - Password sanitization
    - Trace ID support with contextvars
    """

    _instance: Optional["DriverLogger"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "DriverLogger":
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(DriverLogger, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        if hasattr(self, "_initialized"):
            return

        self._initialized = True

        self._logger = logging.getLogger("mysqli_python")
        self._logger.setLevel(logging.CRITICAL)  # Disabled by default
        self._logger.propagate = False

        self._logger.addFilter(TraceIDFilter())

        self._trace_counter = 0
        self._trace_lock = threading.Lock()

        self._output_mode = FILE
        self._file_handler = None
        self._stdout_handler = None
        self._log_file = None
        self._custom_log_path = None
        # Handlers are created lazily so that no log file appears until logging is enabled
        self._handlers_initialized = False

    def _setup_handlers(self):
        """Create the file and/or stdout handler for the current output mode."""
        for handler in self._logger.handlers[:]:
            handler.close()
            self._logger.removeHandler(handler)

        self._file_handler = None
        self._stdout_handler = None

        formatter = logging.Formatter(
            "%(asctime)s [%(trace_id)s] - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
        )

        if self._output_mode in (FILE, BOTH):
            if self._custom_log_path:
                self._log_file = self._custom_log_path
                log_dir = os.path.dirname(self._custom_log_path)
                if log_dir:
                    os.makedirs(log_dir, exist_ok=True)
            else:
                log_dir = os.path.join(os.getcwd(), LOG_DIR_NAME)
                os.makedirs(log_dir, exist_ok=True)
                timestamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
                self._log_file = os.path.join(
                    log_dir, f"mysqli_python_trace_{timestamp}_{os.getpid()}.log"
                )

            self._file_handler = RotatingFileHandler(
                self._log_file,
                maxBytes=512 * 1024 * 1024,  # 512MB
                backupCount=5,
            )
            self._file_handler.setFormatter(formatter)
            self._logger.addHandler(self._file_handler)
        else:
            self._log_file = None

        if self._output_mode in (STDOUT, BOTH):
            self._stdout_handler = logging.StreamHandler(sys.stdout)
            self._stdout_handler.setFormatter(formatter)
            self._logger.addHandler(self._stdout_handler)

    @staticmethod
    def _sanitize_message(msg: str) -> str:
        """
        Replace credentials in a log message with ***.

        Args:
            msg: The message to sanitize

        Returns:
            str: Sanitized message
        """
        patterns = [
            (r"(PWD|Password|pwd|password|pass)\s*=\s*[^;,\s]+", r"\1=***"),
            (r"(['\"]?(?:password|passwd|pass)['\"]?\s*:\s*)['\"][^'\"]*['\"]", r"\1'***'"),
        ]

        sanitized = msg
        for pattern, replacement in patterns:
            sanitized = re.sub(pattern, replacement, sanitized, flags=re.IGNORECASE)

        return sanitized

    def generate_trace_id(self, prefix: str = "TRACE") -> str:
        """
        Generate a unique trace ID in the format PREFIX-PID-ThreadID-Counter,
        e.g. CONN-12345-67890-1.
        """
        with self._trace_lock:
            self._trace_counter += 1
            counter = self._trace_counter

        return f"{prefix}-{os.getpid()}-{threading.get_ident()}-{counter}"

    def set_trace_id(self, trace_id: Optional[str]):
        """Set the trace ID for the current context."""
        _trace_id_var.set(trace_id)

    def get_trace_id(self) -> Optional[str]:
        """Get the trace ID for the current context."""
        return _trace_id_var.get()

    def clear_trace_id(self):
        """Clear the trace ID for the current context."""
        _trace_id_var.set(None)

    def _log(self, level: int, msg: str, *args, **kwargs):
        if not self._logger.isEnabledFor(level):
            return

        if args:
            msg = msg % args

        self._logger.log(level, self._sanitize_message(msg), **kwargs)

    def debug(self, msg: str, *args, **kwargs):
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        self._log(logging.ERROR, msg, *args, **kwargs)

    def _setLevel(self, level: int, output: Optional[str] = None, log_file_path: Optional[str] = None):
        """
        Internal method to set the logging level (use setup_logging() instead).

        Raises:
            ValueError: If output mode is invalid
        """
        if output is not None:
            if output not in (FILE, STDOUT, BOTH):
                raise ValueError(
                    f"Invalid output mode: {output}. "
                    f"Must be one of: {FILE}, {STDOUT}, {BOTH}"
                )
            self._output_mode = output

        if log_file_path is not None:
            self._custom_log_path = log_file_path

        if not self._handlers_initialized or output is not None or log_file_path is not None:
            self._setup_handlers()
            self._handlers_initialized = True

        self._logger.setLevel(level)

    def getLevel(self) -> int:
        return self._logger.level

    def isEnabledFor(self, level: int) -> bool:
        return self._logger.isEnabledFor(level)

    @property
    def handlers(self) -> list:
        return self._logger.handlers

    @property
    def output(self) -> str:
        """Get the current output mode"""
        return self._output_mode

    @output.setter
    def output(self, mode: str):
        if mode not in (FILE, STDOUT, BOTH):
            raise ValueError(
                f"Invalid output mode: {mode}. "
                f"Must be one of: {FILE}, {STDOUT}, {BOTH}"
            )
        self._output_mode = mode

        if self._handlers_initialized:
            self._setup_handlers()

    @property
    def log_file(self) -> Optional[str]:
        """Current log file path (None if file output is disabled)"""
        return self._log_file

    @property
    def level(self) -> int:
        return self._logger.level


# Singleton logger instance
logger = DriverLogger()


def setup_logging(output: str = FILE, log_file_path: Optional[str] = None) -> DriverLogger:
    """
    Enable DEBUG logging for troubleshooting.

    Args:
        output: Where to send logs: 'file' (default), 'stdout' or 'both'
        log_file_path: Optional custom path for the log file. If not given, a
            file is created in ./mysqli_python_logs/

    Examples:
        import mysqli_python

        mysqli_python.setup_logging()
        mysqli_python.setup_logging(output='stdout')
        mysqli_python.setup_logging(output='both', log_file_path="/tmp/debug.log")
    """
    logger._setLevel(logging.DEBUG, output, log_file_path)
    return logger

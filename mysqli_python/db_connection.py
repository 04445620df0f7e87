"""
Copyright (c) The mysqli-python developers.
Licensed under the MIT license.
This module provides the connect() constructor.
"""

from typing import Optional

from mysqli_python.connection import Connection
from mysqli_python.helpers import log


def connect(
    host: str,
    user: str,
    password: str,
    dbname: str,
    port: Optional[int] = None,
    charset: Optional[str] = None,
    collation: Optional[str] = None,
) -> Connection:
    """
    Constructor for creating a connection to the database.

    Args:
        host: The host name or IP address of the server.
        user: The user name.
        password: The password.
        dbname: The database to select.
        port: The port, defaults to 3306.
        charset: The connection charset, defaults to "utf8mb4".
        collation: The connection collation, defaults to "utf8mb4_unicode_ci".

    Returns:
        Connection: A new, connected connection object.

    Raises:
        ConnectionError: If the connection cannot be established.

    Example:
        with connect("localhost", "app", "secret", "shop") as db:
            db.query("DELETE FROM carts WHERE expired = ?", Parameter("i", 1))
    """
    conn = Connection()
    log("info", "Connecting to the database")
    conn.connect(host, user, password, dbname, port, charset, collation)
    return conn

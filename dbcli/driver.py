from __future__ import annotations

import enum
import logging
import re
import time
import typing as t
import urllib.parse
from contextlib import contextmanager

import mysql.connector
import oracledb
import psycopg2

from dbcli.errors import ConfigError, UnsupportedDriverError

log = logging.getLogger(__name__)

_ORACLE_SID_RE = re.compile(r"^(?P<host>[^:/]+):(?P<port>\d+):(?P<sid>\w+)$")


def _split_url(url: str) -> urllib.parse.SplitResult:
    """Drop the ``jdbc:`` marker so the rest parses as an ordinary URL."""
    return urllib.parse.urlsplit(url[len("jdbc:"):])


def _port(parts: urllib.parse.SplitResult, default: int) -> int:
    try:
        return parts.port or default
    except ValueError as exc:
        raise ConfigError(f"Invalid port in JDBC url: {exc}") from exc


def _credentials(parts: urllib.parse.SplitResult, user: str, password: str) -> dict[str, str]:
    """Command-line credentials win; fall back to ``user:pass@`` in the URL."""
    creds: dict[str, str] = {}
    user = user or urllib.parse.unquote(parts.username or "")
    password = password or urllib.parse.unquote(parts.password or "")
    if user:
        creds["user"] = user
    if password:
        creds["password"] = password
    return creds


def mysql_params(url: str, user: str = "", password: str = "") -> dict[str, t.Any]:
    """Translate ``jdbc:mysql://host[:port][/db]`` into mysql‑connector kwargs."""
    parts = _split_url(url)
    params: dict[str, t.Any] = {
        "host": parts.hostname or "localhost",
        "port": _port(parts, 3306),
    }
    database = parts.path.lstrip("/")
    if database:
        params["database"] = database
    params.update(_credentials(parts, user, password))
    return params


def postgresql_params(url: str, user: str = "", password: str = "") -> dict[str, t.Any]:
    """
    Translate ``jdbc:postgresql://host[:port][/db][?k=v]`` (or the short
    ``jdbc:postgresql:db`` form) into psycopg2 kwargs.  Query parameters are
    forwarded as libpq keywords.
    """
    parts = _split_url(url)
    params: dict[str, t.Any] = dict(urllib.parse.parse_qsl(parts.query))
    if parts.netloc:
        params["host"] = parts.hostname or "localhost"
        params["port"] = _port(parts, 5432)
    database = parts.path.lstrip("/")
    if database:
        params["dbname"] = database
    query_user = params.pop("user", "")
    query_password = params.pop("password", "")
    params.update(_credentials(parts, user or query_user, password or query_password))
    return params


def oracle_params(url: str, user: str = "", password: str = "") -> dict[str, t.Any]:
    """
    Translate the thin-driver forms

    * ``jdbc:oracle:thin:@host:port/service``
    * ``jdbc:oracle:thin:@//host:port/service``
    * ``jdbc:oracle:thin:@host:port:SID``
    * ``jdbc:oracle:thin:scott/tiger@...``

    into ``oracledb.connect`` kwargs.
    """
    body = url.split(":", 3)[3] if url.count(":") >= 3 else ""
    creds, _, target = body.rpartition("@")
    if not target:
        raise ConfigError(f"Malformed Oracle JDBC url: {url!r}")

    params: dict[str, t.Any] = {}
    url_user, _, url_password = creds.partition("/")
    if user or url_user:
        params["user"] = user or url_user
    if password or url_password:
        params["password"] = password or url_password

    target = target[2:] if target.startswith("//") else target
    m = _ORACLE_SID_RE.match(target)
    if m:
        params["dsn"] = oracledb.makedsn(m["host"], int(m["port"]), sid=m["sid"])
    else:
        params["dsn"] = target
    return params


def _connect_mysql(url: str, user: str, password: str):
    return mysql.connector.connect(**mysql_params(url, user, password), autocommit=True)


def _connect_postgresql(url: str, user: str, password: str):
    conn = psycopg2.connect(**postgresql_params(url, user, password))
    conn.autocommit = True
    return conn


def _connect_oracle(url: str, user: str, password: str):
    conn = oracledb.connect(**oracle_params(url, user, password))
    conn.autocommit = True
    return conn


class Driver(enum.Enum):
    """The closed set of supported databases, keyed by URL prefix."""

    MYSQL = "jdbc:mysql:"
    ORACLE = "jdbc:oracle:"
    POSTGRESQL = "jdbc:postgresql:"

    @property
    def prefix(self) -> str:
        return self.value

    @property
    def errors(self) -> tuple[type[Exception], ...]:
        """PEP 249 base error(s) raised by this driver."""
        return _ERRORS[self]

    def connect(self, url: str, user: str = "", password: str = ""):
        return _CONNECTORS[self](url, user, password)


_CONNECTORS: dict[Driver, t.Callable[[str, str, str], t.Any]] = {
    Driver.MYSQL: _connect_mysql,
    Driver.ORACLE: _connect_oracle,
    Driver.POSTGRESQL: _connect_postgresql,
}

_ERRORS: dict[Driver, tuple[type[Exception], ...]] = {
    Driver.MYSQL: (mysql.connector.Error,),
    Driver.ORACLE: (oracledb.Error,),
    Driver.POSTGRESQL: (psycopg2.Error,),
}


def select_driver(url: str) -> Driver:
    """Pick the driver whose prefix *url* starts with; no I/O happens here."""
    for driver in Driver:
        if url.startswith(driver.prefix):
            return driver
    raise UnsupportedDriverError(url)


@contextmanager
def connection(driver, url: str, user: str = "", password: str = "", logger: logging.Logger = log):
    """
    Context‑manager yielding an open auto‑commit connection that is closed
    on every exit path.
    """
    start = time.perf_counter()
    conn = driver.connect(url, user, password)
    logger.info("Connection opened in %d ms", int((time.perf_counter() - start) * 1000))
    try:
        yield conn
    finally:
        conn.close()

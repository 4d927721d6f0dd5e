"""Relational database user strategies (Postgres and the MySQL family)."""

import logging
from abc import abstractmethod
from typing import Any, Callable, Dict, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Connection
from sqlalchemy.exc import DBAPIError
from sqlalchemy.pool import NullPool

from src.logging_config import log_performance
from src.rotation_errors import BackingSystemError, CredentialTestError
from src.secret_rotation.config import RotationConfig
from src.secret_rotation.credentials import generate_password
from src.secret_rotation.strategies.base import Payload, RotationStrategy
from src.secrets_vault import VersionedSecretStore

logger = logging.getLogger(__name__)


class RelationalStrategy(RotationStrategy):
    """Single-user password rotation for a relational database.

    The user changes its own password: setSecret logs in with the
    CURRENT credential (or PREVIOUS, if CURRENT no longer works) and
    alters the password to the pending value.
    """

    required_fields = ("username", "password", "host")
    drivername = ""
    default_port = 0
    default_database: Optional[str] = None
    check_sql = "SELECT 1"

    def __init__(
        self,
        store: VersionedSecretStore,
        config: Optional[RotationConfig] = None,
        engine_factory: Optional[Callable[..., Any]] = None,
    ):
        super().__init__(store, config)
        self.engine_factory = engine_factory or create_engine

    # ── Connections ───────────────────────────────────────────────────

    def connection_url(self, payload: Payload) -> URL:
        return URL.create(
            self.drivername,
            username=payload["username"],
            password=payload["password"],
            host=payload["host"],
            port=int(payload.get("port") or self.default_port),
            database=payload.get("dbname") or self.default_database,
        )

    def connect_args(self) -> Dict[str, Any]:
        return {"connect_timeout": self.config.db_connect_timeout}

    @log_performance()
    def open_connection(self, payload: Payload) -> Optional[Connection]:
        """Log in with a credential; None when the database refuses it."""
        engine = self.engine_factory(
            self.connection_url(payload),
            poolclass=NullPool,
            connect_args=self.connect_args(),
        )
        try:
            return engine.connect()
        except DBAPIError as exc:
            logger.info(
                "Login as %s on %s failed: %s",
                payload.get("username"), payload.get("host"), type(exc.orig).__name__,
            )
            engine.dispose()
            return None

    @staticmethod
    def close(conn: Connection) -> None:
        engine = conn.engine
        conn.close()
        engine.dispose()

    # ── Phases ────────────────────────────────────────────────────────

    def generate_payload(self, current: Payload) -> Payload:
        payload = dict(current)
        payload["password"] = generate_password(self.config)
        return payload

    def set_secret(self, secret_id: str, token: str, pending: Payload, current: Payload) -> None:
        self.validate(secret_id, pending)
        self.require_same_user(secret_id, pending, current)

        conn = self.open_connection(pending)
        if conn is not None:
            self.close(conn)
            logger.info("Pending password for %s is already active", pending["username"])
            return

        conn = self.open_connection(current)
        if conn is None:
            previous = self.previous_payload(secret_id)
            if previous is not None and previous.get("password"):
                conn = self.open_connection({**current, "password": previous["password"]})
        if conn is None:
            raise BackingSystemError(
                f"Unable to log into {self.name} as {current.get('username')!r} "
                "with the current or previous password",
                secret_id=secret_id,
                step="setSecret",
            )

        try:
            with conn.begin():
                self.alter_password(conn, pending["username"], pending["password"])
        finally:
            self.close(conn)
        logger.info("Activated pending password for %s on %s", pending["username"], pending["host"])

    def test_secret(self, secret_id: str, token: str, pending: Payload) -> None:
        self.validate(secret_id, pending)
        conn = self.open_connection(pending)
        if conn is None:
            raise CredentialTestError(
                f"Unable to log into {self.name} with the pending credential of {secret_id!r}",
                secret_id=secret_id,
            )
        try:
            conn.execute(text(self.check_sql))
        finally:
            self.close(conn)
        logger.info("Pending credential for %s authenticated", pending["username"])

    @abstractmethod
    def alter_password(self, conn: Connection, username: str, password: str) -> None:
        """Set the user's password; must be safe to repeat."""


class PostgresStrategy(RelationalStrategy):
    """Password rotation for a PostgreSQL user."""

    name = "postgres"
    drivername = "postgresql+psycopg2"
    default_port = 5432
    default_database = "postgres"
    check_sql = "SELECT NOW()"

    def alter_password(self, conn: Connection, username: str, password: str) -> None:
        ident = conn.execute(
            text("SELECT quote_ident(:username)"), {"username": username}
        ).scalar_one()
        conn.execute(text(f"ALTER USER {ident} WITH PASSWORD :password"), {"password": password})


class MySQLStrategy(RelationalStrategy):
    """Password rotation for a MySQL or MariaDB user."""

    name = "mysql"
    drivername = "mysql+pymysql"
    default_port = 3306

    def alter_password(self, conn: Connection, username: str, password: str) -> None:
        conn.execute(
            text("ALTER USER :username IDENTIFIED BY :password"),
            {"username": username, "password": password},
        )

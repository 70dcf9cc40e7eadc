# src/plumbline/core/sql.py
"""SQL helpers used by the engine: scripts and invalidate-item views.

Statements run on an already-open SQLAlchemy Connection through
exec_driver_sql(), so user SQL reaches the driver exactly as written and a
":name" inside a string literal is never read as a bind parameter. Each
helper commits its own work so later plugins on the same connection see
the effect.
"""

from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from plumbline.contracts import NULL_SCRIPT, ScriptExecutionError
from plumbline.core.logging import get_logger

logger = get_logger(__name__)


def is_blank_script(script: str | None) -> bool:
    """True if ``script`` means "no script": None, empty, or the literal "null"."""
    if script is None:
        return True
    stripped = script.strip()
    return not stripped or stripped.lower() == NULL_SCRIPT


def execute_script(script: str | None, connection: Connection) -> bool:
    """Execute a pre/post script on ``connection``.

    Blank scripts are skipped.

    Returns:
        True if a statement was executed, False if the script was blank.

    Raises:
        ScriptExecutionError: If the database rejects the script. The
            transaction is rolled back before raising.
    """
    if script is None or is_blank_script(script):
        return False

    logger.info("Executing script", script=script)
    try:
        connection.exec_driver_sql(script)
        connection.commit()
    except SQLAlchemyError as e:
        connection.rollback()
        raise ScriptExecutionError(script, e) from e
    return True


def quote_identifier(name: str, connection: Connection) -> str:
    """Quote a (possibly schema-qualified) identifier for this dialect."""
    preparer = connection.dialect.identifier_preparer
    return ".".join(preparer.quote(part) for part in name.split("."))


def create_view(name: str, select_sql: str, connection: Connection) -> None:
    """Create (or replace) view ``name`` from ``select_sql``.

    Raises:
        SQLAlchemyError: If the database rejects the statement.
    """
    quoted = quote_identifier(name, connection)
    drop_view(name, connection)
    connection.exec_driver_sql(f"CREATE VIEW {quoted} AS {select_sql}")
    connection.commit()


def drop_view(name: str, connection: Connection) -> None:
    """Drop view ``name`` if it exists.

    Raises:
        SQLAlchemyError: If the database rejects the statement. The
            transaction is rolled back before raising.
    """
    quoted = quote_identifier(name, connection)
    try:
        connection.exec_driver_sql(f"DROP VIEW IF EXISTS {quoted}")
        connection.commit()
    except SQLAlchemyError:
        connection.rollback()
        raise

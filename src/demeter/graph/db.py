from __future__ import annotations

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from ..config import DatabaseSettings


def _enable_sqlite_savepoints(engine: Engine) -> None:
    """
    Let SQLAlchemy drive BEGIN itself so SAVEPOINT (Session.begin_nested)
    behaves on pysqlite.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, _connection_record):  # type: ignore[no-untyped-def]
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):  # type: ignore[no-untyped-def]
        conn.exec_driver_sql("BEGIN")


def create_engine_from_settings(settings: DatabaseSettings) -> Engine:
    """
    Build the engine backing the graph store.

    Pool sizing only applies to server databases; SQLite engines get
    savepoint support instead.
    """
    if settings.url.startswith("sqlite"):
        engine = create_engine(settings.url, echo=settings.echo)
        _enable_sqlite_savepoints(engine)
        return engine

    return create_engine(
        settings.url,
        echo=settings.echo,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
    )

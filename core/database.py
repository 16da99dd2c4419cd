"""
core/database.py -- Shared SQLAlchemy Core schema and engine factory.

Accounts and items live in one database because items carry a foreign key to
their owning account (ON DELETE CASCADE). Both tables are declared on a single
MetaData so create_all() can resolve the foreign key, and one Engine (one
connection pool) is shared by UserStore and ItemStore.

Uses SQLAlchemy Core (not ORM) so the dataclasses in auth/models.py and
items/models.py remain the authoritative domain representation. Swapping
SQLite for PostgreSQL is a connection string change.

Security: all queries built on these tables use bound parameters. No f-strings
in SQL.
"""

from sqlalchemy import Column, ForeignKey, Index, Integer, MetaData, String, Table, Text, create_engine, event
from sqlalchemy.engine import Engine

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(50), nullable=False, unique=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),  # Argon2 PHC string
    Column("created_at", String(32), nullable=False),
)

items = Table(
    "items",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("owner_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("title", String(200), nullable=False),
    Column("description", Text),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
    Index("idx_items_owner_id", "owner_id"),
)


# ---------------------------------------------------------------------------
# SQLite connection setup
# ---------------------------------------------------------------------------


def _configure_sqlite(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode and foreign key enforcement.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool. foreign_keys=ON is what makes the items
    ON DELETE CASCADE actually fire.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(db_url: str) -> Engine:
    """Create the shared Engine and make sure the schema exists.

    Usage:
        engine = create_db_engine("sqlite:///itemkeeper.db")
        users = UserStore(engine)
        items = ItemStore(engine)
        ...
        engine.dispose()
    """
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        # TestClient and FastAPI's threadpool use connections across threads.
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _configure_sqlite)
    metadata.create_all(engine)
    return engine

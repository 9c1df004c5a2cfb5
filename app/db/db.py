import os
import logging
from sqlalchemy import event
from sqlmodel import Session, SQLModel, create_engine

# Table models must be imported before create_all
from app.models.category import Category  # noqa: F401
from app.models.claim import Claim  # noqa: F401
from app.models.item import Item  # noqa: F401

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./lostfound.db")


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def register_sqlite_functions(bind):
    """Replace SQLite's ASCII-only lower() so search folds accented text too."""
    if bind.dialect.name != "sqlite":
        return

    @event.listens_for(bind, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    DATABASE_URL,
    echo=os.getenv("SQL_ECHO", "false").lower() == "true",
    connect_args=connect_args,
)
register_sqlite_functions(engine)


def create_db_and_tables(bind=None):
    from app.services.catalog import CategoryCatalog

    bind = bind or engine
    SQLModel.metadata.create_all(bind)

    with Session(bind) as session:
        added = CategoryCatalog(session).seed_defaults()

    if added:
        logger.info("Seeded %d default categories", added)


def get_session():
    with Session(engine) as session:
        yield session

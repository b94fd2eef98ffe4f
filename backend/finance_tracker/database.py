import logging
from functools import lru_cache
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlmodel import SQLModel, Session, create_engine

from .config import get_settings
from .errors import DatabaseUnavailable

logger = logging.getLogger(__name__)


@lru_cache
def get_engine() -> Engine:
    settings = get_settings()
    connect_args = {}
    if settings.DATABASE_URL.startswith("sqlite"):
        # FastAPI runs sync endpoints in a threadpool
        connect_args["check_same_thread"] = False
    return create_engine(
        settings.DATABASE_URL,
        echo=settings.DATABASE_ECHO,
        connect_args=connect_args,
    )


def create_db_and_tables(engine: Optional[Engine] = None) -> None:
    SQLModel.metadata.create_all(engine or get_engine())


def get_session():
    """Yield a session whose connection is already checked out.

    A database that cannot be reached fails the request here, before any
    work is done. The session is closed on every exit path.
    """
    with Session(get_engine()) as session:
        try:
            session.connection()
        except OperationalError as exc:
            logger.exception("Database connection failed")
            raise DatabaseUnavailable(f"Connection failed: {exc.orig}") from exc
        yield session

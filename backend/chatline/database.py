# backend/chatline/database.py
from datetime import datetime
import logging
from typing import Any, Callable, Dict, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .core.config import settings

logger = logging.getLogger(__name__)


def _engine_options() -> Dict[str, Any]:
    if settings.is_sqlite:
        # Sessions are used from worker threads (asyncio.to_thread)
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": 20,  # Number of persistent connections
        "max_overflow": 10,  # Maximum overflow connections
        "pool_timeout": 30,  # Timeout for getting connection
        "pool_recycle": 3600,  # Recycle connections after 1 hour
        "pool_pre_ping": True,  # Test connections before using
    }


engine: Engine = create_engine(
    settings.database_url,
    echo=settings.sql_echo,
    **_engine_options(),
)


# Log pool events for monitoring
@event.listens_for(engine, "connect")
def receive_connect(dbapi_connection: Any, connection_record: Any) -> None:
    connection_record.info["connect_time"] = datetime.now()
    logger.debug("Database connection established")


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Get database session with proper cleanup."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_session_factory() -> Callable[[], Session]:
    """
    Session factory for long-lived connections.

    The realtime endpoint opens short sessions on demand instead of holding one
    for the whole lifetime of a socket.
    """
    return SessionLocal


def init_db(bind: Engine | None = None) -> None:
    """Create all tables that do not exist yet."""
    from . import models  # noqa: F401  # register mappers

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ensured")

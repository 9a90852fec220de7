import contextlib
import logging
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from core.config_loader import get_config

logger = logging.getLogger(__name__)

# Engines are created on first use so that importing this module never
# requires a reachable database or an installed driver.
SessionLocal = sessionmaker(autoflush=False, expire_on_commit=False)
ExternalSessionLocal = sessionmaker(autoflush=False, expire_on_commit=False)

_engine: Optional[Engine] = None
_external_engine: Optional[Engine] = None


def get_engine() -> Engine:
    """Engine for the application database (job state)."""
    global _engine
    if _engine is None:
        configure_engine(create_engine(get_config().database.url, pool_pre_ping=True))
    return _engine


def get_external_engine() -> Engine:
    """Engine for the read-only exam platform database."""
    global _external_engine
    if _external_engine is None:
        configure_external_engine(create_engine(get_config().external_database.url, pool_pre_ping=True))
    return _external_engine


def configure_engine(engine: Engine) -> None:
    """Bind the application session factory to an engine (also used by tests)."""
    global _engine
    _engine = engine
    SessionLocal.configure(bind=engine)


def configure_external_engine(engine: Engine) -> None:
    global _external_engine
    _external_engine = engine
    ExternalSessionLocal.configure(bind=engine)


def get_db():
    get_engine()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextlib.contextmanager
def db_session_scope():
    """Provide a transactional scope around a series of operations."""
    get_engine()
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@contextlib.contextmanager
def external_session_scope():
    """Read-only scope on the exam platform database. Never commits."""
    get_external_engine()
    session = ExternalSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

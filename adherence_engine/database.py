from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool
from adherence_engine.config import settings
from adherence_engine.utils.logger import get_logger

logger = get_logger(__name__)

# Database connection pooling configuration
POOL_SIZE = 5          # Base connections per worker
MAX_OVERFLOW = 10      # Additional connections when needed
POOL_TIMEOUT = 30      # Seconds to wait for connection
POOL_RECYCLE = 1800    # Recycle connections every 30 minutes
POOL_PRE_PING = True   # Validate connections before use

# Global variables for lazy initialization
_engine = None
_session_local = None

Base = declarative_base()

def get_engine():
    """Get database engine with lazy initialization."""
    global _engine
    if _engine is None:
        _engine = create_engine(
            settings.DATABASE_URL,
            poolclass=QueuePool,
            pool_size=POOL_SIZE,
            max_overflow=MAX_OVERFLOW,
            pool_timeout=POOL_TIMEOUT,
            pool_recycle=POOL_RECYCLE,
            pool_pre_ping=POOL_PRE_PING,
            echo=settings.DEBUG,
        )
        logger.info(f"Database pool configured: size={POOL_SIZE}, max_overflow={MAX_OVERFLOW}, timeout={POOL_TIMEOUT}s")
    return _engine

def get_session_local():
    """Get SessionLocal with lazy initialization."""
    global _session_local
    if _session_local is None:
        _session_local = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=get_engine())
    return _session_local

@contextmanager
def session_scope() -> Iterator[Session]:
    """
    Provide a session for one unit of work (a sweep, a scoring pass).

    Callers commit explicitly; anything left uncommitted when an exception
    escapes is rolled back.
    """
    SessionLocal = get_session_local()
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error(f"Database session error: {e}")
        try:
            db.rollback()
        except Exception as rollback_error:
            logger.error(f"Error during rollback: {rollback_error}")
        raise
    finally:
        db.close()

def dialect_name(db: Session) -> str:
    """Name of the SQL dialect the session is bound to."""
    return db.get_bind().dialect.name

def dialect_insert(db: Session, table):
    """
    ``INSERT`` construct supporting ``ON CONFLICT`` for the bound dialect.

    Upserts run on PostgreSQL in production and on SQLite in tests; both
    dialects expose the same ``on_conflict_do_update`` API.
    """
    name = dialect_name(db)
    if name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif name == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise NotImplementedError(f"Upserts are not supported on dialect {name!r}")
    return insert(table)

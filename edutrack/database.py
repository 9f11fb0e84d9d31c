"""
Database engine, session handling and transaction helper
"""
import logging
from datetime import datetime, timezone
from typing import Callable, Iterator, Optional, TypeVar

from sqlalchemy import JSON, create_engine
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from edutrack.config import settings
from edutrack.errors import StorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in local runs and tests)
JSONDocument = JSON().with_variant(JSONB(), "postgresql")

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, the format every TIMESTAMP column stores"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def init_db():
    """Create all tables"""
    # Register models on Base.metadata
    import edutrack.models  # noqa: F401
    Base.metadata.create_all(bind=engine)


def get_db() -> Iterator[Session]:
    """FastAPI dependency yielding one session per request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def run_transaction(
    db: Session,
    work: Callable[[Session], T],
    max_retries: Optional[int] = None
) -> T:
    """
    Run a read-compute-write unit atomically

    `work` reads what it needs through `db`, mutates ORM objects and returns
    a result. The helper commits; when the commit loses a race (stale
    version counter or unique constraint), it rolls back and runs `work`
    again against fresh state.

    Args:
        db: Database session
        work: Callable doing the reads and writes; must be safe to re-run
        max_retries: Attempts before giving up (default from settings)

    Returns:
        Whatever `work` returned on the successful run

    Raises:
        StorageError: retries exhausted or the database failed
    """
    attempts = max_retries or settings.TRANSACTION_MAX_RETRIES

    for attempt in range(1, attempts + 1):
        try:
            result = work(db)
            db.commit()
            return result
        except (StaleDataError, IntegrityError) as e:
            db.rollback()
            logger.warning(f"Transaction conflict (attempt {attempt}/{attempts}): {str(e)}")
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Transaction failed: {str(e)}")
            raise StorageError(f"Database error: {str(e)}") from e
        except Exception:
            db.rollback()
            raise

    raise StorageError("The record was modified concurrently. Please try again.")

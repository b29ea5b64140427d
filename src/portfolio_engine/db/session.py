"""
Database Session Management

Engine, session factory and transaction helpers for the portfolio store.
Discovery runs open one short transaction per portfolio through
get_db_session(); the API opens one session per request.
"""
import time
from contextlib import contextmanager
from functools import wraps
from typing import Any, Dict, Generator

from sqlalchemy import create_engine, event, exc, pool, text
from sqlalchemy.orm import Session, sessionmaker

from config.settings import settings
from src.portfolio_engine.utils.logger import get_logger

logger = get_logger(__name__)

# Errors worth retrying: dropped connections, failovers, lock timeouts
TRANSIENT_ERRORS = (exc.OperationalError, exc.DisconnectionError)


def _engine_options(database_url: str) -> Dict[str, Any]:
    """Pool options; SQLite uses its own pool classes."""
    options: Dict[str, Any] = {"echo": settings.database_echo}
    if database_url.startswith("sqlite"):
        return options

    options.update(
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_timeout=settings.database_pool_timeout,
        pool_recycle=settings.database_pool_recycle,
        pool_pre_ping=True,
    )
    return options


engine = create_engine(settings.database_url, **_engine_options(settings.database_url))


@event.listens_for(engine, "connect")
def receive_connect(dbapi_conn, connection_record):
    logger.debug("portfolio_db_connected", dialect=engine.dialect.name)


@event.listens_for(pool.Pool, "invalidate")
def receive_invalidate(dbapi_conn, connection_record, exception):
    """Log connections dropped from the pool."""
    logger.warning(
        "portfolio_db_connection_invalidated",
        exception=str(exception) if exception else None
    )


SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False
)


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """
    Transaction scope for one unit of work.

    Commits when the block exits cleanly. On any error the transaction is
    rolled back and the error re-raised; the session is always closed.

    Usage:
        with get_db_session() as session:
            PortfolioRepository().upsert_portfolio(session, data, rows)
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(
            "portfolio_db_rollback",
            error=str(e),
            error_type=type(e).__name__,
            database_error=isinstance(e, exc.SQLAlchemyError),
        )
        raise
    finally:
        session.close()


def health_check() -> bool:
    """
    Check that the portfolio store answers a trivial query.

    Returns:
        True if database is accessible, False otherwise
    """
    try:
        with get_db_session() as session:
            session.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(
            "portfolio_db_health_check_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        return False


def close_connections():
    """Dispose of the engine's pool. Called on API shutdown."""
    engine.dispose()
    logger.info("portfolio_db_connections_closed")


def create_all_tables():
    """
    Create the portfolio tables directly from the models.

    Local setup and tests only; deployed databases go through Alembic.
    """
    from src.portfolio_engine.db.base import Base, import_all_models

    import_all_models()
    Base.metadata.create_all(bind=engine)
    logger.info("portfolio_tables_created", tables=sorted(Base.metadata.tables))


def with_retry(max_retries: int = 3, retry_delay: int = 1):
    """
    Retry a database operation on transient connection errors.

    The delay grows linearly: retry_delay, 2 * retry_delay, ...
    Any other exception propagates on the first attempt.

    Args:
        max_retries: Total attempts, including the first
        retry_delay: Base delay between attempts in seconds
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(1, max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except TRANSIENT_ERRORS as e:
                    if attempt == max_retries:
                        logger.error(
                            "portfolio_db_retries_exhausted",
                            operation=func.__name__,
                            attempts=attempt,
                            error=str(e)
                        )
                        raise
                    logger.warning(
                        "portfolio_db_retry",
                        operation=func.__name__,
                        attempt=attempt,
                        max_retries=max_retries,
                        error=str(e)
                    )
                    time.sleep(retry_delay * attempt)

        return wrapper
    return decorator

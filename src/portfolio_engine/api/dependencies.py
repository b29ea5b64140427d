"""
FastAPI Dependencies

Provides dependency injection for database sessions and the discovery pipeline.
"""
from typing import Generator
from sqlalchemy.orm import Session

from src.portfolio_engine.db.session import SessionLocal
from src.portfolio_engine.pipelines.discovery import PortfolioDiscoveryPipeline


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields:
        SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_discovery_pipeline() -> PortfolioDiscoveryPipeline:
    """
    Discovery pipeline dependency.

    Returns:
        Pipeline wired to the live Socrata sources and database
    """
    return PortfolioDiscoveryPipeline()

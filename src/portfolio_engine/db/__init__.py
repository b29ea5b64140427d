"""
Database Package

Database models and repositories for discovered portfolios.

Session management lives in src.portfolio_engine.db.session and is imported
explicitly, since importing it creates the engine.
"""
from src.portfolio_engine.db.base import Base
from src.portfolio_engine.db.models import Portfolio, PortfolioBuilding
from src.portfolio_engine.db.repository import PortfolioRepository, PORTFOLIO_SORT_FIELDS

__all__ = [
    # Base
    "Base",
    # Models
    "Portfolio",
    "PortfolioBuilding",
    # Repositories
    "PortfolioRepository",
    "PORTFOLIO_SORT_FIELDS",
]

"""
Create Database Tables Using SQLAlchemy

Creates the portfolio tables directly with create_all(). Useful for local
setup and tests; production schemas go through Alembic.
"""
import sys
from pathlib import Path

# Add parent directory to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.portfolio_engine.db.session import create_all_tables, health_check
from src.portfolio_engine.utils.logger import setup_logging, get_logger

logger = get_logger(__name__)


def main():
    """Create all database tables."""
    setup_logging()

    if not health_check():
        logger.error("database_unreachable")
        sys.exit(1)

    create_all_tables()
    logger.info("database_setup_complete")


if __name__ == "__main__":
    main()

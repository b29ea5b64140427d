"""
Run Portfolio Discovery

Scans a bounding box (Williamsburg/Greenpoint by default), clusters buildings
by shared ownership signals and upserts the resulting portfolios.
"""
import sys
from pathlib import Path

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.portfolio_engine.db.repository import PortfolioRepository
from src.portfolio_engine.db.session import get_db_session
from src.portfolio_engine.models.building import BoundingBox
from src.portfolio_engine.pipelines.discovery import PortfolioDiscoveryPipeline, parse_args
from src.portfolio_engine.utils.logger import setup_logging


def main():
    """Run one discovery pass and print the summary."""
    setup_logging()
    args = parse_args()

    bounds = BoundingBox(
        min_lat=args.min_lat,
        max_lat=args.max_lat,
        min_lng=args.min_lng,
        max_lng=args.max_lng,
    )
    result = PortfolioDiscoveryPipeline().run(bounds, min_units=args.min_units)

    with get_db_session() as session:
        stored = PortfolioRepository().count(session)

    print(
        f"Saved {result.portfolios_saved} portfolios "
        f"({result.buildings_scanned} buildings, {result.contacts_fetched} contacts); "
        f"{stored} portfolios stored"
    )


if __name__ == "__main__":
    main()

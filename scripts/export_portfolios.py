"""
Export Portfolios to CSV

Writes the discovered portfolios, largest first, to a CSV file.
"""
import argparse
import sys
from pathlib import Path

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.portfolio_engine.db.repository import PORTFOLIO_SORT_FIELDS
from src.portfolio_engine.db.session import get_db_session
from src.portfolio_engine.pipelines.export import export_portfolios
from src.portfolio_engine.utils.logger import setup_logging


def main():
    parser = argparse.ArgumentParser(description="Export discovered portfolios to CSV")
    parser.add_argument("output", type=Path, help="CSV file to write")
    parser.add_argument("--order-by", choices=sorted(PORTFOLIO_SORT_FIELDS), default="total_units")
    parser.add_argument("--limit", type=int, default=None)
    args = parser.parse_args()

    setup_logging()

    with get_db_session() as session:
        count = export_portfolios(session, args.output, order_by=args.order_by, limit=args.limit)

    print(f"Exported {count} portfolios to {args.output}")


if __name__ == "__main__":
    main()

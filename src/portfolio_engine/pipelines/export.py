"""
Tabular export of discovered portfolios.
"""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

import pandas as pd
from sqlalchemy.orm import Session

from src.portfolio_engine.db.models import Portfolio
from src.portfolio_engine.db.repository import PortfolioRepository
from src.portfolio_engine.utils.logger import get_logger

logger = get_logger(__name__)

EXPORT_COLUMNS = [
    "slug",
    "name",
    "total_buildings",
    "total_units",
    "total_value",
    "borough",
    "head_officers",
    "addresses",
    "bbls",
]


def portfolios_to_dataframe(portfolios: Sequence[Portfolio]) -> pd.DataFrame:
    """One row per portfolio; list columns are joined with '; '."""
    rows: List[dict] = [
        {
            "slug": p.slug,
            "name": p.name,
            "total_buildings": p.total_buildings,
            "total_units": p.total_units,
            "total_value": float(p.total_value or 0),
            "borough": p.borough,
            "head_officers": "; ".join(p.head_officers or []),
            "addresses": "; ".join(p.addresses or []),
            "bbls": "; ".join(b.bbl for b in p.buildings),
        }
        for p in portfolios
    ]
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def export_portfolios(
    session: Session,
    path: Path,
    order_by: str = "total_units",
    limit: Optional[int] = None,
) -> int:
    """
    Write portfolios to a CSV file.

    Args:
        session: Database session
        path: Output CSV path
        order_by: Sort field passed to PortfolioRepository.list_portfolios
        limit: Maximum number of portfolios

    Returns:
        Number of portfolios written
    """
    portfolios = PortfolioRepository().list_portfolios(session, order_by=order_by, limit=limit)
    df = portfolios_to_dataframe(portfolios)
    df.to_csv(path, index=False)

    logger.info("portfolios_exported", path=str(path), count=len(df), order_by=order_by)
    return len(df)

"""
Repository Pattern for Data Access

Portfolio upsert by slug and the portfolio read queries.
"""
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import desc, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from src.portfolio_engine.db.models import Portfolio, PortfolioBuilding
from src.portfolio_engine.utils.logger import get_logger

logger = get_logger(__name__)

PORTFOLIO_SORT_FIELDS = {
    "total_units": Portfolio.total_units,
    "total_buildings": Portfolio.total_buildings,
    "total_value": Portfolio.total_value,
}

# Fields refreshed when a run re-discovers an existing slug
PORTFOLIO_UPDATE_FIELDS = (
    "name",
    "total_buildings",
    "total_units",
    "total_value",
    "borough",
    "entity_names",
    "head_officers",
    "addresses",
)


class PortfolioRepository:
    """Repository for Portfolio model with discovery upsert and read queries."""

    def count(self, session: Session) -> int:
        """Number of stored portfolios."""
        return session.scalar(select(func.count()).select_from(Portfolio))

    def get_by_slug(self, session: Session, slug: str) -> Optional[Portfolio]:
        """
        Get portfolio (with member buildings) by slug.

        Args:
            session: Database session
            slug: Portfolio slug

        Returns:
            Portfolio instance or None
        """
        query = (
            select(Portfolio)
            .options(selectinload(Portfolio.buildings))
            .where(Portfolio.slug == slug)
        )
        return session.execute(query).scalar_one_or_none()

    def list_portfolios(
        self,
        session: Session,
        order_by: str = "total_units",
        limit: Optional[int] = None,
    ) -> List[Portfolio]:
        """
        List portfolios sorted descending by an aggregate field.

        Args:
            session: Database session
            order_by: One of total_units, total_buildings, total_value
            limit: Maximum number of portfolios

        Returns:
            List of portfolios with member buildings loaded

        Raises:
            ValueError: If order_by is not a sortable aggregate
        """
        if order_by not in PORTFOLIO_SORT_FIELDS:
            raise ValueError(
                f"Unknown sort field '{order_by}'. Valid options: {', '.join(PORTFOLIO_SORT_FIELDS)}"
            )

        query = (
            select(Portfolio)
            .options(selectinload(Portfolio.buildings))
            .order_by(desc(PORTFOLIO_SORT_FIELDS[order_by]), Portfolio.id)
        )
        if limit:
            query = query.limit(limit)

        portfolios = session.execute(query).scalars().all()
        logger.debug("portfolios_listed", order_by=order_by, count=len(portfolios))
        return portfolios

    def find_by_building(self, session: Session, bbl: str) -> Optional[Portfolio]:
        """
        Find the portfolio that owns a building.

        A building can appear in more than one portfolio when a cluster
        changed size between runs; the most recently updated one wins.

        Args:
            session: Database session
            bbl: Borough-block-lot parcel id

        Returns:
            Portfolio instance or None
        """
        query = (
            select(Portfolio)
            .join(PortfolioBuilding, PortfolioBuilding.portfolio_id == Portfolio.id)
            .options(selectinload(Portfolio.buildings))
            .where(PortfolioBuilding.bbl == bbl)
            .order_by(desc(Portfolio.updated_at), desc(Portfolio.id))
            .limit(1)
        )
        return session.execute(query).scalars().first()

    def upsert_portfolio(
        self,
        session: Session,
        portfolio_data: Dict[str, Any],
        buildings: Sequence[Dict[str, Any]],
    ) -> Tuple[Portfolio, bool]:
        """
        Insert or update a portfolio by slug.

        New portfolios are created together with their building snapshot
        rows. Existing portfolios get aggregates and signal lists refreshed;
        their building rows are left untouched.

        Args:
            session: Database session
            portfolio_data: Portfolio field values (must include slug)
            buildings: Building snapshot dictionaries

        Returns:
            Tuple of (portfolio, created)
        """
        slug = portfolio_data.get("slug")
        if not slug:
            raise ValueError("slug is required for upsert")

        existing = self.get_by_slug(session, slug)
        if existing is None:
            portfolio = Portfolio(
                **portfolio_data,
                buildings=[PortfolioBuilding(**b) for b in buildings],
            )
            session.add(portfolio)
            try:
                session.flush()
            except IntegrityError as e:
                # A concurrent run created the same slug first
                logger.warning("portfolio_create_conflict", slug=slug, error=str(e))
                raise
            logger.info("portfolio_created", slug=slug, buildings=len(buildings))
            return portfolio, True

        for field_name in PORTFOLIO_UPDATE_FIELDS:
            if field_name in portfolio_data:
                setattr(existing, field_name, portfolio_data[field_name])
        existing.updated_at = func.now()

        session.flush()
        logger.info("portfolio_updated", slug=slug, portfolio_id=existing.id)
        return existing, False

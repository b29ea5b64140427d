"""
Portfolio discovery pipeline.

Fetches buildings and registry contacts for an area, clusters buildings
that share ownership signals, and upserts the resulting portfolios.
"""
from __future__ import annotations

import argparse
import asyncio
from contextlib import AbstractContextManager
from dataclasses import asdict, dataclass
from typing import Callable, Optional

from sqlalchemy.orm import Session

from config.settings import settings
from src.portfolio_engine.db.session import get_db_session, with_retry
from src.portfolio_engine.graph.components import ComponentFinder
from src.portfolio_engine.graph.graph_builder import OwnershipGraphBuilder
from src.portfolio_engine.models.building import BoundingBox, WILLIAMSBURG_BOUNDS
from src.portfolio_engine.pipelines.materializer import PortfolioDraft, PortfolioMaterializer
from src.portfolio_engine.scrapers.building_scraper import BuildingScraper
from src.portfolio_engine.scrapers.contact_scraper import ContactScraper
from src.portfolio_engine.utils.logger import bind_run_context, get_logger

logger = get_logger(__name__)

SessionScope = Callable[[], AbstractContextManager[Session]]


@dataclass
class DiscoveryResult:
    """Aggregate counts returned by a discovery run."""
    portfolios_saved: int = 0
    buildings_scanned: int = 0
    contacts_fetched: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


class PortfolioDiscoveryPipeline:
    """Runs one discovery pass: fetch, graph, cluster, persist."""

    def __init__(
        self,
        building_scraper: BuildingScraper | None = None,
        contact_scraper: ContactScraper | None = None,
        graph_builder: OwnershipGraphBuilder | None = None,
        component_finder: ComponentFinder | None = None,
        materializer: PortfolioMaterializer | None = None,
        session_scope: SessionScope | None = None,
    ):
        self.building_scraper = building_scraper or BuildingScraper()
        self.contact_scraper = contact_scraper or ContactScraper()
        self.graph_builder = graph_builder or OwnershipGraphBuilder()
        self.component_finder = component_finder or ComponentFinder()
        self.materializer = materializer or PortfolioMaterializer()
        self.session_scope = session_scope or get_db_session

    async def run_async(self, bounds: BoundingBox, min_units: Optional[int] = None) -> DiscoveryResult:
        """
        Discover and persist portfolios inside a bounding box.

        Stages run strictly in sequence. Fetch failures shrink the input and
        a failed portfolio is skipped; the run itself does not raise.

        Args:
            bounds: Area to scan
            min_units: Minimum residential units per building

        Returns:
            DiscoveryResult with saved/scanned/fetched counts
        """
        if min_units is None:
            min_units = settings.default_min_units

        bind_run_context()
        logger.info("portfolio_discovery_started", bounds=bounds.to_dict(), min_units=min_units)

        try:
            buildings = await asyncio.to_thread(
                self.building_scraper.fetch_buildings, bounds, min_units
            )
        except Exception as e:
            logger.error("building_stage_failed", error=str(e), error_type=type(e).__name__)
            buildings = []

        if not buildings:
            logger.warning("portfolio_discovery_no_buildings", bounds=bounds.to_dict())
            return DiscoveryResult()

        try:
            contacts = await self.contact_scraper.fetch_contacts(buildings)
        except Exception as e:
            logger.error("contact_stage_failed", error=str(e), error_type=type(e).__name__)
            contacts = []

        graph = self.graph_builder.build(buildings, contacts)
        candidates = self.component_finder.find_candidates(graph)

        buildings_by_bbl = {b.bbl: b for b in buildings}
        contacts_by_bbl = self.materializer.index_contacts(contacts)

        saved = 0
        for component in candidates:
            try:
                draft = self.materializer.build_portfolio(component, buildings_by_bbl, contacts_by_bbl)
                if draft is None:
                    continue
                self._save_draft(draft)
                saved += 1
            except Exception as e:
                logger.error(
                    "portfolio_save_failed",
                    buildings=component.buildings,
                    error=str(e),
                    error_type=type(e).__name__,
                )

        result = DiscoveryResult(
            portfolios_saved=saved,
            buildings_scanned=len(buildings),
            contacts_fetched=len(contacts),
        )
        logger.info("portfolio_discovery_complete", candidates=len(candidates), **result.to_dict())
        return result

    def run(self, bounds: BoundingBox, min_units: Optional[int] = None) -> DiscoveryResult:
        """Blocking entry point for scripts and scheduled jobs."""
        return asyncio.run(self.run_async(bounds, min_units))

    @with_retry(max_retries=3, retry_delay=1)
    def _save_draft(self, draft: PortfolioDraft) -> None:
        """Persist one portfolio in its own transaction."""
        with self.session_scope() as session:
            self.materializer.save(session, draft)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Discover multi-building ownership portfolios")
    parser.add_argument("--min-lat", type=float, default=WILLIAMSBURG_BOUNDS.min_lat)
    parser.add_argument("--max-lat", type=float, default=WILLIAMSBURG_BOUNDS.max_lat)
    parser.add_argument("--min-lng", type=float, default=WILLIAMSBURG_BOUNDS.min_lng)
    parser.add_argument("--max-lng", type=float, default=WILLIAMSBURG_BOUNDS.max_lng)
    parser.add_argument(
        "--min-units",
        type=int,
        default=settings.default_min_units,
        help="Minimum residential units per building",
    )
    return parser.parse_args()


if __name__ == "__main__":
    from src.portfolio_engine.utils.logger import setup_logging

    setup_logging()
    args = parse_args()
    area = BoundingBox(
        min_lat=args.min_lat,
        max_lat=args.max_lat,
        min_lng=args.min_lng,
        max_lng=args.max_lng,
    )
    PortfolioDiscoveryPipeline().run(area, min_units=args.min_units)

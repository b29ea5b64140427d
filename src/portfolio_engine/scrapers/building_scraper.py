"""
Building Scraper

Pulls assessor-roll building records (NYC PLUTO) inside a bounding box
from the NYC Open Data Socrata API.
"""
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from sodapy import Socrata

from config.settings import settings
from src.portfolio_engine.models.building import BoundingBox, BuildingRecord
from src.portfolio_engine.transformers.entity_normalizer import EntityNormalizer
from src.portfolio_engine.utils.logger import get_logger

logger = get_logger(__name__)

PLUTO_FIELDS = (
    "borocode,block,lot,address,borough,unitsres,numfloors,"
    "yearbuilt,assesstot,ownername,bldgclass,zonedist1,bbl"
)


def _to_int(value: Any) -> int:
    """Parse a Socrata numeric string, defaulting to 0."""
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


class BuildingScraper:
    """
    Scraper for PLUTO building records (Socrata dataset).
    """

    def __init__(
        self,
        dataset_id: Optional[str] = None,
        domain: Optional[str] = None,
        page_size: Optional[int] = None,
        client: Optional[Socrata] = None,
    ):
        """
        Initialize the Socrata client.

        Args:
            dataset_id: Override default PLUTO dataset identifier
            domain: Override Socrata domain
            page_size: Records to pull per request
            client: Pre-built Socrata client (for testing)
        """
        self.dataset_id = dataset_id or settings.pluto_dataset
        self.domain = domain or settings.socrata_domain
        self.page_size = page_size or settings.building_page_size
        self.normalizer = EntityNormalizer()

        if not self.dataset_id:
            raise ValueError("Socrata dataset id is required")
        if self.page_size <= 0:
            raise ValueError("page_size must be positive")

        self.client = client or Socrata(
            self.domain,
            app_token=settings.socrata_app_token,
            username=settings.socrata_api_key,
            password=settings.socrata_api_secret,
            timeout=settings.http_timeout_seconds,
        )

        logger.info(
            "building_scraper_initialized",
            domain=self.domain,
            dataset=self.dataset_id,
            page_size=self.page_size,
        )

    def build_where_clause(self, bounds: BoundingBox, min_units: int) -> str:
        """Socrata filter for the bounding box and unit threshold."""
        return (
            f"latitude >= {bounds.min_lat} AND latitude <= {bounds.max_lat} "
            f"AND longitude >= {bounds.min_lng} AND longitude <= {bounds.max_lng} "
            f"AND unitsres >= {min_units}"
        )

    def fetch_buildings(self, bounds: BoundingBox, min_units: int = 20) -> List[BuildingRecord]:
        """
        Fetch all buildings inside the bounding box with at least min_units units.

        Pagination stops at the first empty or short page. A failed page ends
        pagination early and the records gathered so far are returned.

        Args:
            bounds: Area to scan
            min_units: Minimum residential units

        Returns:
            List of validated BuildingRecord instances, largest first
        """
        where = self.build_where_clause(bounds, min_units)
        buildings: List[BuildingRecord] = []
        offset = 0

        logger.info("fetching_buildings", bounds=bounds.to_dict(), min_units=min_units)

        while True:
            try:
                batch = self.client.get(
                    self.dataset_id,
                    select=PLUTO_FIELDS,
                    where=where,
                    limit=self.page_size,
                    offset=offset,
                    order="unitsres DESC",
                )
            except Exception as e:
                # sodapy raises bare Exception for non-JSON bodies
                logger.error(
                    "building_page_fetch_failed",
                    offset=offset,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                break

            if not isinstance(batch, list):
                # Empty 200 bodies come back as the raw Response
                logger.error(
                    "building_page_unexpected_payload",
                    offset=offset,
                    payload_type=type(batch).__name__,
                )
                break

            if not batch:
                break

            buildings.extend(self._parse_rows(batch))
            offset += self.page_size

            if len(batch) < self.page_size:
                break

        if not buildings:
            logger.warning("no_buildings_fetched", bounds=bounds.to_dict())
        else:
            logger.info("buildings_fetched", total=len(buildings))

        return buildings

    def _parse_rows(self, rows: List[Dict[str, Any]]) -> List[BuildingRecord]:
        """
        Parse raw PLUTO rows into validated BuildingRecord instances.

        Args:
            rows: Raw Socrata rows

        Returns:
            List of validated building records
        """
        buildings = []
        validation_errors = 0

        for idx, row in enumerate(rows):
            if not isinstance(row, dict):
                validation_errors += 1
                logger.warning("building_row_malformed", row_index=idx, row_type=type(row).__name__)
                continue

            bbl = self.normalizer.build_bbl(
                row.get("bbl"), row.get("borocode"), row.get("block"), row.get("lot")
            )
            if not bbl:
                validation_errors += 1
                logger.warning("building_missing_bbl", row_index=idx)
                continue

            try:
                buildings.append(
                    BuildingRecord(
                        bbl=bbl,
                        boro_code=row.get("borocode") or "",
                        block=row.get("block") or "",
                        lot=row.get("lot") or "",
                        address=row.get("address") or "",
                        borough=row.get("borough") or "",
                        units=_to_int(row.get("unitsres")),
                        floors=_to_int(row.get("numfloors")),
                        year_built=_to_int(row.get("yearbuilt")),
                        assessed_value=_to_float(row.get("assesstot")),
                        owner_name=row.get("ownername") or "",
                        building_class=row.get("bldgclass") or "",
                        zoning=row.get("zonedist1") or "",
                    )
                )
            except ValidationError as e:
                validation_errors += 1
                logger.warning(
                    "building_validation_failed",
                    row_index=idx,
                    bbl=bbl,
                    error=str(e),
                )

        if validation_errors > 0:
            logger.warning(
                "validation_errors_occurred",
                total_errors=validation_errors,
                success_count=len(buildings),
            )

        return buildings

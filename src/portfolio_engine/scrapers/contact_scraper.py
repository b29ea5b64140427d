"""
Contact Scraper

Resolves HPD registrations for each building and pulls the registration
contacts (officers, owners, agents) from the NYC Open Data Socrata API.

Lookups run in fixed-size concurrent batches with a pause between batches
to stay under the upstream rate limit.
"""
import asyncio
from typing import Any, Dict, List, Optional, Sequence

from sodapy import Socrata

from config.settings import settings
from src.portfolio_engine.models.building import BuildingRecord
from src.portfolio_engine.models.contact import ContactRecord
from src.portfolio_engine.transformers.entity_normalizer import EntityNormalizer
from src.portfolio_engine.utils.logger import get_logger

logger = get_logger(__name__)


def _quote(value: Any) -> str:
    """Quote a SoQL string literal."""
    return "'" + str(value).replace("'", "''") + "'"


def _as_rows(payload: Any, dataset: str) -> List[Dict[str, Any]]:
    """
    Check that a Socrata payload is a list of row dicts.

    Raises:
        ValueError: For anything else, e.g. the raw Response sodapy returns
            for an empty body
    """
    if payload is None:
        return []
    if not isinstance(payload, list) or not all(isinstance(r, dict) for r in payload):
        raise ValueError(f"Unexpected payload from {dataset}: {type(payload).__name__}")
    return payload


class ContactScraper:
    """
    Scraper for HPD registration contacts (two Socrata datasets).
    """

    def __init__(
        self,
        registrations_dataset: Optional[str] = None,
        contacts_dataset: Optional[str] = None,
        domain: Optional[str] = None,
        batch_size: Optional[int] = None,
        batch_delay_seconds: Optional[float] = None,
        registration_limit: Optional[int] = None,
        contact_limit: Optional[int] = None,
        client: Optional[Socrata] = None,
    ):
        """
        Initialize the Socrata client.

        Args:
            registrations_dataset: Override HPD registrations dataset id
            contacts_dataset: Override HPD contacts dataset id
            domain: Override Socrata domain
            batch_size: Buildings looked up concurrently per batch
            batch_delay_seconds: Pause between batches
            registration_limit: Max registrations resolved per building
            contact_limit: Max contact rows fetched per building
            client: Pre-built Socrata client (for testing)
        """
        self.registrations_dataset = registrations_dataset or settings.hpd_registrations_dataset
        self.contacts_dataset = contacts_dataset or settings.hpd_contacts_dataset
        self.domain = domain or settings.socrata_domain
        self.batch_size = batch_size or settings.contact_batch_size
        self.batch_delay_seconds = (
            settings.contact_batch_delay_seconds
            if batch_delay_seconds is None
            else batch_delay_seconds
        )
        self.registration_limit = registration_limit or settings.registration_limit
        self.contact_limit = contact_limit or settings.contact_limit
        self.normalizer = EntityNormalizer()

        if self.batch_size <= 0:
            raise ValueError("batch_size must be positive")

        self.client = client or Socrata(
            self.domain,
            app_token=settings.socrata_app_token,
            username=settings.socrata_api_key,
            password=settings.socrata_api_secret,
            timeout=settings.http_timeout_seconds,
        )

        logger.info(
            "contact_scraper_initialized",
            domain=self.domain,
            registrations_dataset=self.registrations_dataset,
            contacts_dataset=self.contacts_dataset,
            batch_size=self.batch_size,
            batch_delay_seconds=self.batch_delay_seconds,
        )

    async def fetch_contacts(self, buildings: Sequence[BuildingRecord]) -> List[ContactRecord]:
        """
        Fetch contacts for every building in concurrent batches.

        A failure for one building yields no contacts for that building and
        does not affect the rest of its batch.

        Args:
            buildings: Buildings to look up

        Returns:
            Flat list of ContactRecord across all buildings
        """
        contacts: List[ContactRecord] = []
        total = len(buildings)

        logger.info("fetching_contacts", buildings=total, batch_size=self.batch_size)

        for start in range(0, total, self.batch_size):
            batch = buildings[start:start + self.batch_size]
            results = await asyncio.gather(
                *(self._fetch_building_contacts_safe(b) for b in batch)
            )
            for building_contacts in results:
                contacts.extend(building_contacts)

            logger.info(
                "contact_batch_processed",
                processed=min(start + self.batch_size, total),
                total=total,
                contacts_so_far=len(contacts),
            )

            # Rate limiting
            if start + self.batch_size < total:
                await asyncio.sleep(self.batch_delay_seconds)

        logger.info("contacts_fetched", total=len(contacts), buildings=total)
        return contacts

    def fetch_contacts_sync(self, buildings: Sequence[BuildingRecord]) -> List[ContactRecord]:
        """Blocking wrapper around fetch_contacts."""
        return asyncio.run(self.fetch_contacts(buildings))

    async def _fetch_building_contacts_safe(self, building: BuildingRecord) -> List[ContactRecord]:
        try:
            return await asyncio.to_thread(self.fetch_building_contacts, building)
        except Exception as e:
            logger.warning(
                "building_contacts_failed",
                bbl=building.bbl,
                error=str(e),
                error_type=type(e).__name__,
            )
            return []

    def fetch_registration_ids(self, building: BuildingRecord) -> List[str]:
        """
        Resolve HPD registration ids for a building's borough/block/lot.

        Args:
            building: Building to resolve

        Returns:
            Up to registration_limit registration ids
        """
        where = (
            f"boroid={_quote(building.boro_code)} "
            f"AND block={_quote(building.block)} "
            f"AND lot={_quote(building.lot)}"
        )
        rows = self.client.get(
            self.registrations_dataset,
            select="registrationid",
            where=where,
            limit=self.registration_limit,
        )
        return [
            str(r["registrationid"])
            for r in _as_rows(rows, self.registrations_dataset)
            if r.get("registrationid")
        ]

    def fetch_building_contacts(self, building: BuildingRecord) -> List[ContactRecord]:
        """
        Fetch and normalize contacts for one building (blocking).

        Raises whatever the Socrata client raises; callers in the batch
        loop catch it.
        """
        registration_ids = self.fetch_registration_ids(building)
        if not registration_ids:
            logger.debug("no_registrations", bbl=building.bbl)
            return []

        id_list = ",".join(_quote(rid) for rid in registration_ids)
        rows = self.client.get(
            self.contacts_dataset,
            where=f"registrationid in({id_list})",
            limit=self.contact_limit,
        )
        return [
            self._parse_contact(building.bbl, row)
            for row in _as_rows(rows, self.contacts_dataset)
        ]

    def _parse_contact(self, bbl: str, row: Dict[str, Any]) -> ContactRecord:
        """Normalize one HPD contact row."""
        return ContactRecord(
            bbl=bbl,
            contact_type=(row.get("type") or "").strip(),
            name=self.normalizer.normalize_person_name(
                row.get("firstname"), row.get("lastname")
            ),
            corporate_name=self.normalizer.normalize_corporate_name(
                row.get("corporationname")
            ),
            business_address=self.normalizer.normalize_business_address(
                row.get("businesshousenumber"),
                row.get("businessstreetname"),
                row.get("businesscity"),
                row.get("businessstate"),
            ),
        )

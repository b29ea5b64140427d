"""
Portfolio Materializer

Turns a connected component into a named portfolio with aggregate metrics
and upserts it by slug.
"""
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from src.portfolio_engine.db.models import Portfolio
from src.portfolio_engine.db.repository import PortfolioRepository
from src.portfolio_engine.graph.components import ConnectedComponent, MIN_PORTFOLIO_BUILDINGS
from src.portfolio_engine.graph.nodes import GraphNode, NodeKind
from src.portfolio_engine.models.building import BuildingRecord
from src.portfolio_engine.models.contact import ContactRecord
from src.portfolio_engine.utils.logger import get_logger

logger = get_logger(__name__)

UNKNOWN_PORTFOLIO_NAME = "Unknown Portfolio"

# Address keys never name a portfolio
NAME_PREFERENCE = (NodeKind.CORP, NodeKind.OWNER, NodeKind.PERSON)

SLUG_MAX_LENGTH = 80
MAX_ADDRESSES = 5
MIN_OFFICER_NAME_LENGTH = 3
MIN_ADDRESS_LENGTH = 6

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def slugify(name: str, building_count: int) -> str:
    """
    Derive a portfolio slug from its display name and size.

    Example:
        >>> slugify("84TH ST LLC", 3)
        '84th-st-llc-3b'
    """
    base = _NON_ALNUM_RE.sub("-", name.lower()).strip("-")[:SLUG_MAX_LENGTH]
    if not base:
        base = "portfolio"
    return f"{base}-{building_count}b"


def choose_portfolio_name(component: ConnectedComponent) -> str:
    """
    Pick the display name for a component.

    Corporate names beat assessor owner names, which beat individual names.
    Within a kind the entity linking the most buildings wins, then the
    alphabetically first.
    """
    nodes = [GraphNode.from_key(key) for key in component.entities]

    for kind in NAME_PREFERENCE:
        candidates = [n for n in nodes if n.kind is kind]
        if candidates:
            best = min(
                candidates,
                key=lambda n: (-component.entity_links.get(n.key, 0), n.value),
            )
            return best.value

    return UNKNOWN_PORTFOLIO_NAME


def _distinct(values: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(values))


@dataclass
class PortfolioDraft:
    """Portfolio computed from one component, not yet persisted."""
    name: str
    slug: str
    buildings: List[BuildingRecord]
    total_units: int
    total_value: float
    borough: str
    entity_names: List[str] = field(default_factory=list)
    head_officers: List[str] = field(default_factory=list)
    addresses: List[str] = field(default_factory=list)

    @property
    def total_buildings(self) -> int:
        return len(self.buildings)

    def to_portfolio_data(self) -> dict:
        return {
            "name": self.name,
            "slug": self.slug,
            "total_buildings": self.total_buildings,
            "total_units": self.total_units,
            "total_value": self.total_value,
            "avg_distress": 0.0,
            "borough": self.borough,
            "entity_names": self.entity_names,
            "head_officers": self.head_officers,
            "addresses": self.addresses,
        }

    def building_rows(self) -> List[dict]:
        return [b.to_dict() for b in self.buildings]


class PortfolioMaterializer:
    """
    Builds and persists portfolios from connected components.
    """

    def __init__(self, repository: Optional[PortfolioRepository] = None):
        self.repository = repository or PortfolioRepository()

    @staticmethod
    def index_contacts(contacts: Sequence[ContactRecord]) -> Dict[str, List[ContactRecord]]:
        """Group contacts by bbl, preserving order."""
        by_bbl: Dict[str, List[ContactRecord]] = {}
        for contact in contacts:
            by_bbl.setdefault(contact.bbl, []).append(contact)
        return by_bbl

    def build_portfolio(
        self,
        component: ConnectedComponent,
        buildings_by_bbl: Mapping[str, BuildingRecord],
        contacts_by_bbl: Mapping[str, Sequence[ContactRecord]],
    ) -> Optional[PortfolioDraft]:
        """
        Compute the portfolio for one component.

        Args:
            component: Portfolio candidate
            buildings_by_bbl: Buildings scanned in this run
            contacts_by_bbl: Contacts grouped by bbl

        Returns:
            PortfolioDraft, or None if fewer than two member buildings resolve
        """
        members = [
            buildings_by_bbl[bbl]
            for bbl in _distinct(component.buildings)
            if bbl in buildings_by_bbl
        ]
        if len(members) < MIN_PORTFOLIO_BUILDINGS:
            logger.warning(
                "portfolio_candidate_skipped",
                component_buildings=len(component.buildings),
                resolved=len(members),
            )
            return None

        name = choose_portfolio_name(component)

        member_contacts = [
            contact
            for building in members
            for contact in contacts_by_bbl.get(building.bbl, ())
        ]

        head_officers = _distinct(
            c.name
            for c in member_contacts
            if c.is_head_officer() and len(c.name) >= MIN_OFFICER_NAME_LENGTH
        )
        addresses = _distinct(
            c.business_address
            for c in member_contacts
            if len(c.business_address) >= MIN_ADDRESS_LENGTH
        )[:MAX_ADDRESSES]

        return PortfolioDraft(
            name=name,
            slug=slugify(name, len(members)),
            buildings=members,
            total_units=sum(b.units for b in members),
            total_value=round(sum(b.assessed_value for b in members), 2),
            borough=members[0].borough,
            entity_names=_distinct(GraphNode.from_key(k).value for k in component.entities),
            head_officers=head_officers,
            addresses=addresses,
        )

    def materialize(
        self,
        component: ConnectedComponent,
        buildings: Sequence[BuildingRecord],
        contacts: Sequence[ContactRecord],
    ) -> Optional[PortfolioDraft]:
        """Convenience wrapper around build_portfolio for unindexed inputs."""
        return self.build_portfolio(
            component,
            {b.bbl: b for b in buildings},
            self.index_contacts(contacts),
        )

    def save(self, session: Session, draft: PortfolioDraft) -> Tuple[Portfolio, bool]:
        """
        Upsert a portfolio by slug.

        Args:
            session: Database session
            draft: Computed portfolio

        Returns:
            Tuple of (portfolio, created)
        """
        portfolio, created = self.repository.upsert_portfolio(
            session,
            draft.to_portfolio_data(),
            draft.building_rows(),
        )
        logger.info(
            "portfolio_saved",
            name=draft.name,
            slug=draft.slug,
            buildings=draft.total_buildings,
            units=draft.total_units,
            created=created,
        )
        return portfolio, created

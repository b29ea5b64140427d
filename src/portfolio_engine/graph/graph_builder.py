"""
Ownership graph builder.

Builds a bipartite graph of building nodes and entity nodes (people,
corporations, business addresses, assessor owner names). Two buildings
end up connected when they share an entity key.
"""
from typing import Dict, Iterator, List, Optional, Sequence

import networkx as nx

from src.portfolio_engine.graph.nodes import GraphNode, NodeKind
from src.portfolio_engine.models.building import BuildingRecord
from src.portfolio_engine.models.contact import ContactRecord
from src.portfolio_engine.transformers.entity_normalizer import EntityNormalizer
from src.portfolio_engine.utils.logger import get_logger

logger = get_logger(__name__)

MIN_PERSON_NAME_LENGTH = 5
MIN_PERSON_NAME_TOKENS = 2
MIN_CORPORATE_NAME_LENGTH = 4
MIN_ADDRESS_LENGTH = 11
MIN_OWNER_NAME_LENGTH = 4
MIN_LINKED_BUILDINGS = 2


class OwnershipGraph:
    """
    Undirected building/entity graph owned by a single discovery run.

    Nodes are keyed by their canonical string (see GraphNode.key) and
    iterate in insertion order: buildings first, then entities.
    """

    def __init__(self):
        self.graph = nx.Graph()

    def add_node(self, node: GraphNode) -> str:
        self.graph.add_node(node.key, kind=node.kind, value=node.value)
        return node.key

    def connect(self, a: str, b: str) -> None:
        self.graph.add_edge(a, b)

    def node(self, key: str) -> GraphNode:
        data = self.graph.nodes[key]
        return GraphNode(data["kind"], data["value"])

    def neighbors(self, key: str) -> Iterator[str]:
        return iter(self.graph.adj[key])

    def degree(self, key: str) -> int:
        """Number of adjacent nodes (linked buildings, for an entity)."""
        return self.graph.degree[key]

    def keys(self) -> List[str]:
        return list(self.graph.nodes)

    def has_node(self, key: str) -> bool:
        return self.graph.has_node(key)

    @property
    def building_count(self) -> int:
        return sum(1 for _, kind in self.graph.nodes(data="kind") if kind is NodeKind.BUILDING)

    @property
    def entity_count(self) -> int:
        return self.graph.number_of_nodes() - self.building_count

    @property
    def edge_count(self) -> int:
        return self.graph.number_of_edges()

    def __len__(self) -> int:
        return self.graph.number_of_nodes()

    def __contains__(self, key: str) -> bool:
        return self.has_node(key)


class OwnershipGraphBuilder:
    """
    Builds an OwnershipGraph from buildings and their registry contacts.

    Entity keys that link fewer than two buildings are dropped; they cannot
    join buildings together.
    """

    def __init__(self, normalizer: Optional[EntityNormalizer] = None):
        self.normalizer = normalizer or EntityNormalizer()

    def contact_entities(self, contact: ContactRecord) -> List[GraphNode]:
        """
        Derive entity nodes from one contact.

        Args:
            contact: Normalized registry contact

        Returns:
            Zero or more PERSON, CORP and ADDRESS nodes
        """
        entities: List[GraphNode] = []

        name = contact.name
        if len(name) >= MIN_PERSON_NAME_LENGTH and len(name.split()) >= MIN_PERSON_NAME_TOKENS:
            entities.append(GraphNode(NodeKind.PERSON, name))

        if len(contact.corporate_name) >= MIN_CORPORATE_NAME_LENGTH:
            entities.append(GraphNode(NodeKind.CORP, contact.corporate_name))

        address = self.normalizer.collapse_address(contact.business_address)
        if len(address) >= MIN_ADDRESS_LENGTH:
            entities.append(GraphNode(NodeKind.ADDRESS, address))

        return entities

    def owner_entity(self, building: BuildingRecord) -> Optional[GraphNode]:
        """Derive the assessor-roll owner node for a building, if any."""
        if len(building.owner_name) < MIN_OWNER_NAME_LENGTH:
            return None
        return GraphNode(NodeKind.OWNER, self.normalizer.normalize_owner_name(building.owner_name))

    def link_entities(
        self,
        buildings: Sequence[BuildingRecord],
        contacts: Sequence[ContactRecord],
    ) -> Dict[GraphNode, Dict[str, None]]:
        """
        Map each entity to the ordered set of bbls that produced it.

        Contacts for buildings outside the input set are ignored.
        """
        known = {b.bbl for b in buildings}
        entity_to_bbls: Dict[GraphNode, Dict[str, None]] = {}
        skipped = 0

        for contact in contacts:
            if contact.bbl not in known:
                skipped += 1
                continue
            for entity in self.contact_entities(contact):
                entity_to_bbls.setdefault(entity, {})[contact.bbl] = None

        for building in buildings:
            entity = self.owner_entity(building)
            if entity is not None:
                entity_to_bbls.setdefault(entity, {})[building.bbl] = None

        if skipped:
            logger.warning("contacts_for_unknown_buildings", skipped=skipped)

        return entity_to_bbls

    def build(
        self,
        buildings: Sequence[BuildingRecord],
        contacts: Sequence[ContactRecord],
    ) -> OwnershipGraph:
        """
        Build the ownership graph.

        Args:
            buildings: Buildings scanned in this run
            contacts: Registry contacts for those buildings

        Returns:
            OwnershipGraph with one node per building and one node per
            entity that links two or more buildings
        """
        graph = OwnershipGraph()

        for building in buildings:
            graph.add_node(GraphNode.building(building.bbl))

        entity_to_bbls = self.link_entities(buildings, contacts)
        dropped = 0

        for entity, bbls in entity_to_bbls.items():
            if len(bbls) < MIN_LINKED_BUILDINGS:
                dropped += 1
                continue

            entity_key = graph.add_node(entity)
            for bbl in bbls:
                graph.connect(GraphNode.building(bbl).key, entity_key)

        logger.info(
            "ownership_graph_built",
            buildings=graph.building_count,
            entities=graph.entity_count,
            edges=graph.edge_count,
            single_building_keys_dropped=dropped,
        )
        return graph

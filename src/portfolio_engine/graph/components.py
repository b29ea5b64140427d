"""
Connected component search over the ownership graph.
"""
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List

from src.portfolio_engine.graph.graph_builder import OwnershipGraph
from src.portfolio_engine.graph.nodes import NodeKind
from src.portfolio_engine.utils.logger import get_logger

logger = get_logger(__name__)

MIN_PORTFOLIO_BUILDINGS = 2


@dataclass
class ConnectedComponent:
    """
    Buildings and entities reachable from one another.

    Attributes:
        buildings: bbls in visit order
        entities: Entity keys ("C:...", "P:...", ...) in visit order
        entity_links: Number of buildings each entity key links
    """
    buildings: List[str] = field(default_factory=list)
    entities: List[str] = field(default_factory=list)
    entity_links: Dict[str, int] = field(default_factory=dict)

    @property
    def building_count(self) -> int:
        return len(set(self.buildings))

    def is_portfolio_candidate(self) -> bool:
        return self.building_count >= MIN_PORTFOLIO_BUILDINGS

    def membership(self) -> frozenset:
        """Order-independent identity of the component."""
        return frozenset(self.buildings) | frozenset(self.entities)


class ComponentFinder:
    """Breadth-first connected component search."""

    def find_components(self, graph: OwnershipGraph) -> List[ConnectedComponent]:
        """
        Partition every node of the graph into connected components.

        Args:
            graph: Ownership graph for one run

        Returns:
            All components, including single-building ones
        """
        visited = set()
        components: List[ConnectedComponent] = []

        for start in graph.keys():
            if start in visited:
                continue

            component = ConnectedComponent()
            queue = deque([start])
            visited.add(start)

            while queue:
                current = queue.popleft()
                node = graph.node(current)

                if node.kind is NodeKind.BUILDING:
                    component.buildings.append(node.value)
                else:
                    component.entities.append(current)
                    component.entity_links[current] = graph.degree(current)

                for neighbor in graph.neighbors(current):
                    if neighbor not in visited:
                        visited.add(neighbor)
                        queue.append(neighbor)

            components.append(component)

        return components

    def find_candidates(self, graph: OwnershipGraph) -> List[ConnectedComponent]:
        """
        Components with at least two buildings.

        Args:
            graph: Ownership graph for one run

        Returns:
            Portfolio candidates
        """
        components = self.find_components(graph)
        candidates = [c for c in components if c.is_portfolio_candidate()]

        logger.info(
            "components_found",
            total=len(components),
            candidates=len(candidates),
            clustered_buildings=sum(c.building_count for c in candidates),
        )
        return candidates

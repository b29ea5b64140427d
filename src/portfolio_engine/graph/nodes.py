"""
Graph node identities for the ownership graph.

Each node is a (kind, value) pair with a canonical string key such as
"B:3023450001" or "C:84TH ST LLC".
"""
from dataclasses import dataclass
from enum import Enum


class NodeKind(str, Enum):
    """Node type and its key prefix."""

    BUILDING = "B"
    PERSON = "P"
    CORP = "C"
    ADDRESS = "A"
    OWNER = "O"

    @property
    def is_entity(self) -> bool:
        return self is not NodeKind.BUILDING


@dataclass(frozen=True)
class GraphNode:
    """
    Identity of a node in the ownership graph.

    Attributes:
        kind: Node type
        value: bbl for buildings, normalized name or address for entities
    """

    kind: NodeKind
    value: str

    @property
    def key(self) -> str:
        """Canonical map key, e.g. 'P:JOHN SMITH'."""
        return f"{self.kind.value}:{self.value}"

    @classmethod
    def building(cls, bbl: str) -> "GraphNode":
        return cls(NodeKind.BUILDING, bbl)

    @classmethod
    def from_key(cls, key: str) -> "GraphNode":
        """
        Parse a canonical key back into a node.

        Raises:
            ValueError: If the prefix is not a known node kind
        """
        prefix, sep, value = key.partition(":")
        if not sep:
            raise ValueError(f"Malformed node key: {key!r}")
        return cls(NodeKind(prefix), value)

    def __str__(self) -> str:
        return self.key

"""Data classes for co-sponsorship records and derived graph views."""

from dataclasses import dataclass, field
from typing import Optional


# -- Record Store rows ---------------------------------------------------------


@dataclass(frozen=True)
class Member:
    """One legislator seated in one assembly term."""
    member_id: str
    name: str
    term: int
    party: Optional[str] = None


@dataclass(frozen=True)
class Bill:
    """One bill and its primary sponsor."""
    bill_id: str
    name: str
    term: int
    sponsor_id: str
    propose_date: Optional[str] = None  # ISO date, YYYY-MM-DD


@dataclass(frozen=True)
class CosponsorLink:
    """A member joining a bill without leading it."""
    bill_id: str
    member_id: str


@dataclass(frozen=True)
class DataIntegrityWarning:
    """A defect found in the data that was skipped rather than raised."""

    # self_cosponsor, missing_field, bad_value, dangling_link, duplicate_row,
    # duplicate_link
    kind: str
    message: str
    bill_id: Optional[str] = None
    member_id: Optional[str] = None


# -- Derived graph records -----------------------------------------------------


@dataclass(frozen=True)
class SupportEdge:
    """Aggregated cosponsor -> primary sponsor support within a term."""
    src_id: str
    dst_id: str
    weight: int
    last_date: Optional[str] = None


@dataclass(frozen=True)
class GraphNode:
    node_id: str
    label: str
    in_weight: int = 0
    out_weight: int = 0
    party: Optional[str] = None

    @property
    def degree(self) -> int:
        return self.in_weight + self.out_weight


@dataclass(frozen=True)
class EgoGraph:
    """Star-shaped subgraph around one focus member.

    Every edge has the focus as its source or its destination.
    """

    focus_id: str
    nodes: tuple[GraphNode, ...]
    edges: tuple[SupportEdge, ...]

    @property
    def focus(self) -> GraphNode:
        for node in self.nodes:
            if node.node_id == self.focus_id:
                return node
        raise KeyError(self.focus_id)

    @property
    def neighbors(self) -> tuple[GraphNode, ...]:
        return tuple(n for n in self.nodes if n.node_id != self.focus_id)

    def node(self, node_id: str) -> GraphNode:
        for node in self.nodes:
            if node.node_id == node_id:
                return node
        raise KeyError(node_id)


@dataclass(frozen=True)
class LayoutNode:
    """A graph node with its placement in the radial layout."""
    node: GraphNode
    x: float
    y: float
    ring_index: int  # -1 for the focus node at the origin
    sub_ring: int = 0

    @property
    def node_id(self) -> str:
        return self.node.node_id


@dataclass
class TermSnapshot:
    """Everything the Record Store holds for one term, loaded for one request."""

    term: int
    members: dict[str, Member] = field(default_factory=dict)
    bills: list[Bill] = field(default_factory=list)
    links: list[CosponsorLink] = field(default_factory=list)
    warnings: list[DataIntegrityWarning] = field(default_factory=list)

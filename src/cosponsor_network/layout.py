"""Radial layout for ego graphs.

The focus member is pinned at the origin. Every other member goes on one of a
fixed set of concentric rings chosen from its collaboration weight with the
focus: the heavier the weight, the smaller the ring. Ring distance encodes
relationship strength, not graph distance (which is always 1 in a star).

  ring table   ordered (min_degree, radius) buckets, highest degree first;
               a node takes the first bucket whose min_degree it reaches
  degree       in_weight, or out_weight when the view is "given"
  spacing      nodes on a ring sit at equal angular steps of 2*pi/count; the
               arc-length floor MIN_NODE_SIZE * 1.5 sets the ring's capacity
  sub-rings    a ring that cannot hold its nodes at the floor and holds more
               than SUBDIVIDE_THRESHOLD nodes is split into sub-rings spaced
               max(SUB_RING_GAP, OVERLAP_TOLERANCE) apart outward, each
               evenly filled; every ring further out moves out to match
  start angle  0.5 * radius / 100, so rings do not all start on the same
               axis; odd sub-rings add half their angular step

The layout is a pure function of its inputs: no randomness and no state.
"""

import math
from dataclasses import dataclass

import numpy as np

from cosponsor_network.config import (
    LAYOUT_ORIGIN,
    MIN_NODE_SIZE,
    NODE_SPACING_FACTOR,
    OVERLAP_TOLERANCE,
    RING_TABLE,
    SUB_RING_GAP,
    SUBDIVIDE_THRESHOLD,
)
from cosponsor_network.direction import validate_direction
from cosponsor_network.models import EgoGraph, GraphNode, LayoutNode


@dataclass(frozen=True)
class RingBucket:
    min_degree: int
    radius: float


DEFAULT_RING_TABLE = tuple(RingBucket(d, r) for d, r in RING_TABLE)


def validate_ring_table(table: tuple[RingBucket, ...]) -> None:
    """Check that a ring table is a monotonic step function covering degree 0.

    Raises ValueError if thresholds do not strictly decrease, radii do not
    strictly increase along the table, or the last bucket does not start at 0.
    """
    if not table:
        raise ValueError("Ring table is empty")
    for prev, cur in zip(table, table[1:]):
        if cur.min_degree >= prev.min_degree:
            raise ValueError(
                f"Ring thresholds must strictly decrease: {prev.min_degree} then {cur.min_degree}"
            )
        if cur.radius <= prev.radius:
            raise ValueError(
                f"Ring radii must strictly increase as degree falls: {prev.radius} then {cur.radius}"
            )
    if table[-1].min_degree != 0:
        raise ValueError("Last ring bucket must have min_degree 0")
    if table[0].radius <= 0:
        raise ValueError("Ring radii must be positive")


@dataclass(frozen=True)
class LayoutConfig:
    """Geometry of the radial layout. Defaults come from config.py."""

    origin: tuple[float, float] = LAYOUT_ORIGIN
    ring_table: tuple[RingBucket, ...] = DEFAULT_RING_TABLE
    min_node_size: float = MIN_NODE_SIZE
    spacing_factor: float = NODE_SPACING_FACTOR
    subdivide_threshold: int = SUBDIVIDE_THRESHOLD
    sub_ring_gap: float = SUB_RING_GAP
    overlap_tolerance: float = OVERLAP_TOLERANCE

    def __post_init__(self) -> None:
        validate_ring_table(self.ring_table)

    @property
    def min_arc(self) -> float:
        """Smallest arc length allowed between neighboring nodes on a ring."""
        return self.min_node_size * self.spacing_factor

    @property
    def sub_ring_spacing(self) -> float:
        """Radial distance actually used between consecutive sub-rings."""
        return max(self.sub_ring_gap, self.overlap_tolerance)


DEFAULT_LAYOUT = LayoutConfig()


def relevant_degree(node: GraphNode, direction: str) -> int:
    return node.out_weight if direction == "given" else node.in_weight


def ring_index_for_degree(degree: int, table: tuple[RingBucket, ...] = DEFAULT_RING_TABLE) -> int:
    for i, bucket in enumerate(table):
        if degree >= bucket.min_degree:
            return i
    # Only reachable with negative degrees; place them on the outermost ring.
    return len(table) - 1


def ring_capacity(radius: float, config: LayoutConfig = DEFAULT_LAYOUT) -> int:
    """How many nodes fit on a ring of ``radius`` at the minimum arc spacing."""
    return max(1, math.floor(2 * math.pi * radius / config.min_arc))


def ring_start_angle(radius: float) -> float:
    return 0.5 * radius / 100


def _place_on_circle(
    count: int,
    radius: float,
    start: float,
    step: float,
    origin: tuple[float, float],
) -> tuple[np.ndarray, np.ndarray]:
    angles = start + step * np.arange(count)
    xs = origin[0] + np.cos(angles) * radius
    ys = origin[1] + np.sin(angles) * radius
    return xs, ys


def place_ring(
    nodes: list[GraphNode],
    ring_index: int,
    config: LayoutConfig = DEFAULT_LAYOUT,
    radius: float | None = None,
) -> list[LayoutNode]:
    """Place the nodes of one ring, subdividing it when it is overcrowded.

    ``radius`` overrides the table radius (layout_nodes passes it when an
    inner ring has spilled outward).
    """
    count = len(nodes)
    if count == 0:
        return []
    if radius is None:
        radius = config.ring_table[ring_index].radius
    capacity = ring_capacity(radius, config)
    placed: list[LayoutNode] = []

    if count > capacity and count > config.subdivide_threshold:
        n_rings = math.ceil(count / capacity)
        per_ring = math.ceil(count / n_rings)
        for sub in range(n_rings):
            chunk = nodes[sub * per_ring : (sub + 1) * per_ring]
            if not chunk:
                break
            sub_radius = radius + sub * config.sub_ring_spacing
            step = 2 * math.pi / len(chunk)
            # Odd sub-rings sit half a step over so neighbors interleave.
            start = ring_start_angle(radius) + (sub % 2) * step / 2
            xs, ys = _place_on_circle(len(chunk), sub_radius, start, step, config.origin)
            for node, x, y in zip(chunk, xs, ys):
                placed.append(LayoutNode(node, float(x), float(y), ring_index, sub))
        return placed

    # Below the threshold an over-full ring keeps equal steps instead of
    # wrapping around at the floor step.
    step = 2 * math.pi / count
    xs, ys = _place_on_circle(count, radius, ring_start_angle(radius), step, config.origin)
    for node, x, y in zip(nodes, xs, ys):
        placed.append(LayoutNode(node, float(x), float(y), ring_index))
    return placed


def layout_nodes(
    ego: EgoGraph,
    direction: str = "all",
    config: LayoutConfig = DEFAULT_LAYOUT,
) -> list[LayoutNode]:
    """Lay out a (filtered) ego graph; the focus comes first, then rings inside out.

    When a ring splits into sub-rings, every ring outside it moves out by
    the same distance, so table gaps between rings are kept and a lower
    degree never lands closer to the focus than a higher one.
    """
    direction = validate_direction(direction)
    focus = ego.focus
    placed = [LayoutNode(focus, config.origin[0], config.origin[1], ring_index=-1)]

    rings: dict[int, list[GraphNode]] = {}
    for node in ego.neighbors:
        idx = ring_index_for_degree(relevant_degree(node, direction), config.ring_table)
        rings.setdefault(idx, []).append(node)

    shift = 0.0
    for idx in sorted(rings):
        members = sorted(rings[idx], key=lambda n: (-relevant_degree(n, direction), n.node_id))
        ring = place_ring(members, idx, config, config.ring_table[idx].radius + shift)
        shift += max(ln.sub_ring for ln in ring) * config.sub_ring_spacing
        placed.extend(ring)
    return placed


def layout(
    ego: EgoGraph,
    direction: str = "all",
    config: LayoutConfig = DEFAULT_LAYOUT,
) -> dict[str, tuple[float, float]]:
    """Map every node id of the ego graph to its (x, y) position."""
    return {ln.node_id: (ln.x, ln.y) for ln in layout_nodes(ego, direction, config)}

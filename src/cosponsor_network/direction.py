"""Directional views of an ego graph.

  all       every edge touching the focus (pass-through)
  received  support the focus received: neighbor -> focus edges
  given     support the focus gave:     focus -> neighbor edges

Displayed weights are recomputed from the retained edges only, and neighbors
left without a retained edge are pruned. The focus is always kept; an empty
view is a valid "no relationships in this direction" result. ``received`` and
``given`` split the ``all`` edge set with no overlap.
"""

from dataclasses import replace

from cosponsor_network.config import DIRECTIONS
from cosponsor_network.errors import ValidationError
from cosponsor_network.models import EgoGraph


def validate_direction(direction: str | None) -> str:
    """Normalize a direction parameter, rejecting anything unrecognized."""
    if direction is None or direction == "":
        return "all"
    if not isinstance(direction, str) or direction.strip().lower() not in DIRECTIONS:
        raise ValidationError(
            f"Unrecognized direction {direction!r}; expected one of {', '.join(DIRECTIONS)}"
        )
    return direction.strip().lower()


def filter_by_direction(ego: EgoGraph, direction: str) -> EgoGraph:
    direction = validate_direction(direction)
    if direction == "all":
        return ego

    focus_id = ego.focus_id
    if direction == "received":
        edges = tuple(e for e in ego.edges if e.dst_id == focus_id)
    else:
        edges = tuple(e for e in ego.edges if e.src_id == focus_id)

    in_weight: dict[str, int] = {}
    out_weight: dict[str, int] = {}
    for e in edges:
        out_weight[e.src_id] = out_weight.get(e.src_id, 0) + e.weight
        in_weight[e.dst_id] = in_weight.get(e.dst_id, 0) + e.weight

    nodes = []
    for node in ego.nodes:
        node_in = in_weight.get(node.node_id, 0)
        node_out = out_weight.get(node.node_id, 0)
        if node.node_id != focus_id and node_in == 0 and node_out == 0:
            continue
        nodes.append(replace(node, in_weight=node_in, out_weight=node_out))

    kept = {n.node_id for n in nodes}
    edges = tuple(e for e in edges if e.src_id in kept and e.dst_id in kept)
    return EgoGraph(focus_id=focus_id, nodes=tuple(nodes), edges=edges)

"""Focus-centered ("ego") subgraph extraction.

The ego graph answers "who supports me, and whom do I support": it keeps only
the edges that touch the focus member and the members at their far ends. It is
a strict star. Two neighbors that also support each other are not connected
here.

Counter semantics:
  focus     in_weight / out_weight are the member's full term totals
  neighbor  in_weight / out_weight count only the edge(s) to or from focus
"""

import networkx as nx

from cosponsor_network.errors import NotFoundError
from cosponsor_network.graph import node_record
from cosponsor_network.models import EgoGraph, GraphNode, SupportEdge


def extract_ego(G: nx.DiGraph, focus_id: str) -> EgoGraph:
    """Extract the star subgraph around ``focus_id``.

    The focus node is always present, even when it has no edges. Raises
    NotFoundError when the focus is not a node of the term graph.
    """
    if focus_id not in G:
        term = G.graph.get("term")
        where = f" in term {term}" if term is not None else ""
        raise NotFoundError(f"Member {focus_id!r} not found{where}")

    edges: list[SupportEdge] = []
    in_from: dict[str, int] = {}  # neighbor -> weight of neighbor -> focus
    out_to: dict[str, int] = {}  # neighbor -> weight of focus -> neighbor

    for src, _, data in G.in_edges(focus_id, data=True):
        edges.append(SupportEdge(src, focus_id, data["weight"], data.get("last_date")))
        in_from[src] = data["weight"]
    for _, dst, data in G.out_edges(focus_id, data=True):
        edges.append(SupportEdge(focus_id, dst, data["weight"], data.get("last_date")))
        out_to[dst] = data["weight"]

    focus = node_record(G, focus_id)
    nodes: list[GraphNode] = [focus]
    for neighbor_id in sorted(set(in_from) | set(out_to)):
        attrs = G.nodes[neighbor_id]
        nodes.append(
            GraphNode(
                node_id=neighbor_id,
                label=attrs.get("label", neighbor_id),
                in_weight=out_to.get(neighbor_id, 0),
                out_weight=in_from.get(neighbor_id, 0),
                party=attrs.get("party"),
            )
        )

    edges.sort(key=lambda e: (e.src_id, e.dst_id))
    return EgoGraph(focus_id=focus_id, nodes=tuple(nodes), edges=tuple(edges))

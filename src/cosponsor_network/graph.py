"""Co-sponsorship graph construction.

Support graph (directed): every co-sponsorship of bill B by member M is one
unit of support from M to B's primary sponsor. Units for the same ordered pair
within a term are summed into one edge:

  Nodes: all members of the term, with label, party, in_weight, out_weight.
  Edges: cosponsor -> sponsor; weight = number of bills; last_date = latest
         propose date among those bills.

A sponsor listed among its own bill's cosponsors is a data defect: the pair is
reported as a ``DataIntegrityWarning`` and dropped, never stored as a
self-loop. Aggregation is a sum and a max, so row order never changes the
result.

Co-supporter graph (undirected): two members who co-sponsored the same bill
are connected; weight = number of such bills.
"""

from itertools import combinations

import networkx as nx

from cosponsor_network.models import (
    DataIntegrityWarning,
    GraphNode,
    SupportEdge,
    TermSnapshot,
)


def _later(a: str | None, b: str | None) -> str | None:
    if a is None:
        return b
    if b is None:
        return a
    return max(a, b)


def build_support_graph(snapshot: TermSnapshot) -> nx.DiGraph:
    """Build the weighted directed support graph for one term.

    The returned graph carries ``G.graph["term"]`` and
    ``G.graph["warnings"]`` (self-cosponsor pairs dropped while building).
    Referential integrity is assumed; store.assemble_snapshot() enforces it.
    """
    G = nx.DiGraph(term=snapshot.term, warnings=[])
    for member_id in sorted(snapshot.members):
        member = snapshot.members[member_id]
        G.add_node(member_id, label=member.name, party=member.party, in_weight=0, out_weight=0)

    bills = {b.bill_id: b for b in snapshot.bills}
    for link in snapshot.links:
        bill = bills[link.bill_id]
        src, dst = link.member_id, bill.sponsor_id
        if src == dst:
            warning = DataIntegrityWarning(
                kind="self_cosponsor",
                message=f"bill {bill.bill_id} lists its sponsor {dst} as a cosponsor; dropped",
                bill_id=bill.bill_id,
                member_id=dst,
            )
            G.graph["warnings"].append(warning)
            print(f"  Warning: {warning.message}")
            continue

        if G.has_edge(src, dst):
            data = G.edges[src, dst]
            data["weight"] += 1
            data["last_date"] = _later(data["last_date"], bill.propose_date)
        else:
            G.add_edge(src, dst, weight=1, last_date=bill.propose_date)
        G.nodes[src]["out_weight"] += 1
        G.nodes[dst]["in_weight"] += 1

    return G


def node_record(G: nx.DiGraph, node_id: str) -> GraphNode:
    attrs = G.nodes[node_id]
    return GraphNode(
        node_id=node_id,
        label=attrs.get("label", node_id),
        in_weight=attrs.get("in_weight", 0),
        out_weight=attrs.get("out_weight", 0),
        party=attrs.get("party"),
    )


def graph_nodes(G: nx.DiGraph, include_isolated: bool = True) -> list[GraphNode]:
    """All nodes as GraphNode records, ordered by id."""
    nodes = [node_record(G, n) for n in sorted(G.nodes())]
    if include_isolated:
        return nodes
    return [n for n in nodes if n.degree > 0]


def support_edges(G: nx.DiGraph) -> list[SupportEdge]:
    """All edges as SupportEdge records, ordered by (src, dst)."""
    return [
        SupportEdge(src_id=u, dst_id=v, weight=d["weight"], last_date=d.get("last_date"))
        for u, v, d in sorted(G.edges(data=True), key=lambda e: (e[0], e[1]))
    ]


def compute_network_stats(snapshot: TermSnapshot, G: nx.DiGraph) -> dict:
    """Compute summary statistics for a term's support network.

    density = co-sponsorships / (n * (n - 1)), the share of possible ordered
    member pairs that a single co-sponsorship could fill.
    """
    n_members = len(snapshot.members)
    n_links = len(snapshot.links)
    dropped = sum(1 for w in G.graph.get("warnings", []) if w.kind == "self_cosponsor")
    active = sum(1 for n in G.nodes() if G.degree(n) > 0)
    density = n_links / (n_members * (n_members - 1)) if n_members > 1 else 0.0

    return {
        "term": snapshot.term,
        "mode": "support",
        "members": n_members,
        "active_members": active,
        "bills": len(snapshot.bills),
        "cosponsorships": n_links,
        "dropped_self_pairs": dropped,
        "edges": G.number_of_edges(),
        "total_weight": int(G.size(weight="weight")),
        "density": round(density, 6),
    }


def build_cosupport_graph(snapshot: TermSnapshot) -> nx.Graph:
    """Build the undirected co-supporter graph for one term.

    Members with no co-sponsorship partner are left out.
    """
    cosponsors: dict[str, set[str]] = {}
    for link in snapshot.links:
        cosponsors.setdefault(link.bill_id, set()).add(link.member_id)

    G = nx.Graph(term=snapshot.term)
    for bill_id in sorted(cosponsors):
        for a, b in combinations(sorted(cosponsors[bill_id]), 2):
            if G.has_edge(a, b):
                G.edges[a, b]["weight"] += 1
            else:
                G.add_edge(a, b, weight=1)

    for node_id in G.nodes():
        member = snapshot.members.get(node_id)
        G.nodes[node_id]["label"] = member.name if member else node_id
        G.nodes[node_id]["party"] = member.party if member else None
    return G


def compute_cosupport_stats(snapshot: TermSnapshot, G: nx.Graph) -> dict:
    """Compute summary statistics for a term's co-supporter network.

    density = edges / (n * (n - 1) / 2) over all members of the term, the
    share of unordered member pairs that share at least one bill.
    """
    n_members = len(snapshot.members)
    pairs = n_members * (n_members - 1) / 2
    density = G.number_of_edges() / pairs if n_members > 1 else 0.0

    return {
        "term": snapshot.term,
        "mode": "cosupport",
        "members": n_members,
        "active_members": G.number_of_nodes(),
        "bills": len(snapshot.bills),
        "cosponsorships": len(snapshot.links),
        "edges": G.number_of_edges(),
        "total_weight": int(G.size(weight="weight")),
        "density": round(density, 6),
    }

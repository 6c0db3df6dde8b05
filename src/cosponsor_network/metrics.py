"""On-demand member metrics: summaries, rankings and centrality.

Nothing here is persisted. Every call recomputes from the term graph it is
handed, so results always reflect the current snapshot.

Ranking kinds:
  top-supporters     members who co-sponsored others' bills most (out_weight)
  top-beneficiaries  members whose bills drew the most support (in_weight)
  most-central       betweenness centrality, with distance = 1 / weight
"""

import networkx as nx
import polars as pl

from cosponsor_network.config import RANKING_KINDS, RANKING_LIMIT
from cosponsor_network.errors import NotFoundError, ValidationError
from cosponsor_network.graph import node_record
from cosponsor_network.models import TermSnapshot


def _with_distance(G: nx.DiGraph) -> nx.DiGraph:
    """Copy of G with edge attr 'distance' = 1/weight for path-based centrality."""
    H = G.copy()
    for _, _, d in H.edges(data=True):
        d["distance"] = 1.0 / d["weight"]
    return H


def compute_centralities(G: nx.DiGraph) -> pl.DataFrame:
    """Compute per-member weights and centrality measures.

    Returns DataFrame with: member_id, name, party, in_weight, out_weight,
    betweenness, clustering, pagerank.
    """
    if G.number_of_nodes() == 0:
        return pl.DataFrame()

    H = _with_distance(G)
    betweenness = nx.betweenness_centrality(H, weight="distance", normalized=True)
    clustering = nx.clustering(G, weight="weight") if G.number_of_edges() > 0 else {}
    pagerank = nx.pagerank(G, weight="weight") if G.number_of_edges() > 0 else {}

    rows = []
    for n in sorted(G.nodes()):
        attrs = G.nodes[n]
        rows.append(
            {
                "member_id": n,
                "name": attrs.get("label", n),
                "party": attrs.get("party"),
                "in_weight": attrs.get("in_weight", 0),
                "out_weight": attrs.get("out_weight", 0),
                "betweenness": float(betweenness.get(n, 0.0)),
                "clustering": float(clustering.get(n, 0.0)),
                "pagerank": float(pagerank.get(n, 0.0)),
            }
        )
    return pl.DataFrame(rows, infer_schema_length=None)


def rankings(G: nx.DiGraph, kind: str, limit: int = RANKING_LIMIT) -> pl.DataFrame:
    """Rank members of a term by one measure, highest first.

    Members scoring zero are left out. Ties are broken by member id.
    Returns DataFrame with: rank, member_id, name, party, score.
    """
    if kind not in RANKING_KINDS:
        raise ValidationError(
            f"Unrecognized ranking type {kind!r}; expected one of {', '.join(RANKING_KINDS)}"
        )
    if limit < 1:
        raise ValidationError(f"Ranking limit must be positive, got {limit}")

    schema = {
        "rank": pl.Int64,
        "member_id": pl.Utf8,
        "name": pl.Utf8,
        "party": pl.Utf8,
        "score": pl.Float64,
    }
    centralities = compute_centralities(G)
    if centralities.height == 0:
        return pl.DataFrame(schema=schema)

    score_col = {
        "top-supporters": "out_weight",
        "top-beneficiaries": "in_weight",
        "most-central": "betweenness",
    }[kind]

    ranked = (
        centralities.select(
            "member_id",
            "name",
            pl.col("party").cast(pl.Utf8),
            pl.col(score_col).cast(pl.Float64).alias("score"),
        )
        .filter(pl.col("score") > 0)
        .sort(["score", "member_id"], descending=[True, False])
        .head(limit)
    )
    return ranked.with_row_index("rank", offset=1).with_columns(
        pl.col("rank").cast(pl.Int64)
    ).select(list(schema))


def _partner_list(G: nx.DiGraph, pairs: list[tuple[str, int]], limit: int) -> list[dict]:
    ordered = sorted(pairs, key=lambda p: (-p[1], p[0]))[:limit]
    return [
        {"member_id": other, "name": G.nodes[other].get("label", other), "weight": weight}
        for other, weight in ordered
    ]


def member_summary(
    snapshot: TermSnapshot,
    G: nx.DiGraph,
    member_id: str,
    limit: int = RANKING_LIMIT,
) -> dict:
    """Summarize one member's collaboration within the term.

    top_supporters lists who co-sponsored this member's bills (in-edges);
    top_beneficiaries lists whose bills this member co-sponsored (out-edges).
    recent_bills mixes sponsored and co-sponsored bills, newest first.
    """
    if member_id not in G:
        raise NotFoundError(f"Member {member_id!r} not found in term {snapshot.term}")

    node = node_record(G, member_id)
    H = _with_distance(G)
    betweenness = nx.betweenness_centrality(H, weight="distance", normalized=True)
    clustering = nx.clustering(G, member_id, weight="weight") if G.degree(member_id) > 0 else 0.0

    supporters = [(src, d["weight"]) for src, _, d in G.in_edges(member_id, data=True)]
    beneficiaries = [(dst, d["weight"]) for _, dst, d in G.out_edges(member_id, data=True)]

    cosponsored = {link.bill_id for link in snapshot.links if link.member_id == member_id}
    bills = []
    for bill in snapshot.bills:
        if bill.sponsor_id == member_id:
            role = "sponsor"
        elif bill.bill_id in cosponsored:
            role = "cosponsor"
        else:
            continue
        bills.append(
            {
                "bill_id": bill.bill_id,
                "name": bill.name,
                "propose_date": bill.propose_date,
                "role": role,
            }
        )
    # Newest first; undated bills last.
    bills.sort(key=lambda b: (b["propose_date"] or "", b["bill_id"]), reverse=True)

    return {
        "member_id": member_id,
        "name": node.label,
        "party": node.party,
        "term": snapshot.term,
        "totals": {
            "in_weight": node.in_weight,
            "out_weight": node.out_weight,
            "betweenness": float(betweenness.get(member_id, 0.0)),
            "clustering": float(clustering),
        },
        "top_supporters": _partner_list(G, supporters, limit),
        "top_beneficiaries": _partner_list(G, beneficiaries, limit),
        "recent_bills": bills[:limit],
    }

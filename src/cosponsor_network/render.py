"""Static PNG preview of a laid-out ego view."""

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
from matplotlib.patches import Patch

from cosponsor_network.config import PARTY_COLORS, UNKNOWN_PARTY_COLOR
from cosponsor_network.service import EgoView

DIRECTION_TITLES = {
    "all": "All Co-sponsorship Ties",
    "received": "Support Received",
    "given": "Support Given",
}


def party_color(party: str | None) -> str:
    return PARTY_COLORS.get(party or "", UNKNOWN_PARTY_COLOR)


def save_fig(fig: plt.Figure, path: Path, dpi: int = 150) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=dpi, bbox_inches="tight", facecolor="white")
    plt.close(fig)
    print(f"  Saved: {path.name}")


def plot_ego_view(view: EgoView, path: Path, title: str | None = None) -> None:
    """Draw nodes at their layout positions with edges scaled by weight."""
    positions = view.positions()
    fig, ax = plt.subplots(figsize=(10, 8))

    for e in view.edges:
        x0, y0 = positions[e.src_id]
        x1, y1 = positions[e.dst_id]
        ax.annotate(
            "",
            xy=(x1, y1),
            xytext=(x0, y0),
            arrowprops={
                "arrowstyle": "-|>",
                "lw": max(1.0, e.weight * 0.5),
                "alpha": 0.6,
                "color": "#6B7280",
            },
        )

    for ln in view.nodes:
        is_focus = ln.node_id == view.focus_id
        ax.scatter(
            ln.x,
            ln.y,
            s=400 if is_focus else 160,
            c=party_color(ln.node.party),
            edgecolors="black" if is_focus else "white",
            linewidths=2 if is_focus else 1,
            zorder=3,
        )
        ax.annotate(
            ln.node.label,
            (ln.x, ln.y),
            textcoords="offset points",
            xytext=(0, 10),
            ha="center",
            fontsize=9 if is_focus else 7,
            fontweight="bold" if is_focus else "normal",
        )

    parties = sorted({ln.node.party or "Unknown" for ln in view.nodes})
    handles = [Patch(color=party_color(p), label=p) for p in parties]
    ax.legend(handles=handles, loc="upper right", fontsize=8)

    # Screen coordinates: y grows downward.
    ax.invert_yaxis()
    ax.set_aspect("equal")
    ax.axis("off")
    ax.set_title(
        title or f"{DIRECTION_TITLES[view.direction]}: {view.focus_id} (term {view.term})"
        f"\n{view.node_count} members, {view.edge_count} ties"
    )
    save_fig(fig, path)

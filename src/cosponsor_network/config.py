"""Configuration constants for the co-sponsorship network builder."""

from pathlib import Path

# Assembly term served when a request does not name one.
CURRENT_TERM = 22

DATA_ROOT = Path("data")

DIRECTIONS = ("all", "received", "given")
DEFAULT_DIRECTION = "all"

# -- Radial layout -------------------------------------------------------------

LAYOUT_ORIGIN = (400.0, 300.0)

# (min_degree, radius), highest degree first. Radii strictly decrease with degree.
RING_TABLE = (
    (50, 80.0),
    (40, 130.0),
    (30, 180.0),
    (20, 230.0),
    (15, 280.0),
    (10, 330.0),
    (5, 380.0),
    (2, 430.0),
    (1, 480.0),
    (0, 530.0),
)

MIN_NODE_SIZE = 40.0  # assumed rendered node footprint
NODE_SPACING_FACTOR = 1.5  # arc length floor = MIN_NODE_SIZE * NODE_SPACING_FACTOR
SUBDIVIDE_THRESHOLD = 12  # rings with more nodes than this may split into sub-rings
SUB_RING_GAP = 25.0  # radial distance between sub-rings, raised to OVERLAP_TOLERANCE if smaller
OVERLAP_TOLERANCE = MIN_NODE_SIZE  # least distance kept between two placed nodes

# -- Metrics -------------------------------------------------------------------

RANKING_LIMIT = 50
RANKING_KINDS = ("top-supporters", "top-beneficiaries", "most-central")

# support: directed cosponsor -> sponsor; cosupport: undirected, shared bills
NETWORK_MODES = ("support", "cosupport")

PARTY_COLORS = {
    "더불어민주당": "#152484",
    "국민의힘": "#E61E2B",
    "조국혁신당": "#0073CF",
    "개혁신당": "#FF7210",
    "진보당": "#D6001C",
}
UNKNOWN_PARTY_COLOR = "#9CA3AF"

# -- Service -------------------------------------------------------------------

MAX_WORKERS = 4  # concurrent ego-graph fetches in EgoViewer

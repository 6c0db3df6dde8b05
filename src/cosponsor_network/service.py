"""Request boundary for ego-network views.

  EgoNetworkService  validates request parameters, loads a fresh term snapshot
                     from the Record Store, and runs build -> extract ->
                     filter -> layout. Nothing is cached between requests.
  EgoViewer          holds one client's current focus selection. Fetches run
                     on an executor; a fetched result is committed only if its
                     focus is still the selected one. Direction changes are
                     served from the committed ego graph without refetching.

All failures reach callers as ServiceError subclasses; error_payload() turns
one into the {"error": {"code", "message"}} shape the presentation layer reads.
"""

import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass

from cosponsor_network.config import MAX_WORKERS, NETWORK_MODES, RANKING_LIMIT
from cosponsor_network.direction import filter_by_direction, validate_direction
from cosponsor_network.ego import extract_ego
from cosponsor_network.errors import NotFoundError, ServiceError, UpstreamError, ValidationError
from cosponsor_network.graph import (
    build_cosupport_graph,
    build_support_graph,
    compute_cosupport_stats,
    compute_network_stats,
)
from cosponsor_network.layout import DEFAULT_LAYOUT, LayoutConfig, layout_nodes
from cosponsor_network.metrics import member_summary, rankings
from cosponsor_network.models import (
    DataIntegrityWarning,
    EgoGraph,
    LayoutNode,
    SupportEdge,
    TermSnapshot,
)
from cosponsor_network.term import Term


def validate_focus(focus_id: object) -> str:
    if not isinstance(focus_id, str) or not focus_id.strip():
        raise ValidationError("A focus member id is required")
    return focus_id.strip()


def validate_mode(mode: object) -> str:
    if mode not in NETWORK_MODES:
        raise ValidationError(
            f"Unrecognized network mode {mode!r}; expected one of {', '.join(NETWORK_MODES)}"
        )
    return mode


@dataclass(frozen=True)
class EgoResult:
    """One fetched ego graph, scoped to the request that produced it."""

    term: int
    focus_id: str
    ego: EgoGraph
    warnings: tuple[DataIntegrityWarning, ...] = ()


@dataclass(frozen=True)
class EgoView:
    """A laid-out directional view, ready for the presentation layer."""

    term: int
    focus_id: str
    direction: str
    nodes: tuple[LayoutNode, ...]
    edges: tuple[SupportEdge, ...]

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def positions(self) -> dict[str, tuple[float, float]]:
        return {ln.node_id: (ln.x, ln.y) for ln in self.nodes}

    def to_dict(self) -> dict:
        return {
            "term": self.term,
            "focus_id": self.focus_id,
            "direction": self.direction,
            "nodes": [
                {
                    "id": ln.node_id,
                    "label": ln.node.label,
                    "party": ln.node.party,
                    "x": ln.x,
                    "y": ln.y,
                    "in_weight": ln.node.in_weight,
                    "out_weight": ln.node.out_weight,
                    "ring": ln.ring_index,
                }
                for ln in self.nodes
            ],
            "edges": [
                {
                    "source": e.src_id,
                    "target": e.dst_id,
                    "weight": e.weight,
                    "last_date": e.last_date,
                }
                for e in self.edges
            ],
            "stats": {"node_count": self.node_count, "edge_count": self.edge_count},
        }


def build_view(
    result: EgoResult,
    direction: str = "all",
    config: LayoutConfig = DEFAULT_LAYOUT,
) -> EgoView:
    """Filter and lay out an already-fetched ego graph. Pure; no store access."""
    direction = validate_direction(direction)
    filtered = filter_by_direction(result.ego, direction)
    return EgoView(
        term=result.term,
        focus_id=result.focus_id,
        direction=direction,
        nodes=tuple(layout_nodes(filtered, direction, config)),
        edges=filtered.edges,
    )


def error_payload(exc: ServiceError) -> dict:
    return {"error": exc.to_dict()}


class EgoNetworkService:
    """Serves ego views and member metrics from a Record Store."""

    def __init__(self, store, layout_config: LayoutConfig = DEFAULT_LAYOUT):
        self.store = store
        self.layout_config = layout_config

    # -- Record Store access ---------------------------------------------------

    def resolve_term(self, term: object = None) -> Term:
        """Parse a term parameter and check that the store knows it."""
        t = Term.parse(term)
        if t.number not in self._call_store(self.store.terms):
            raise ValidationError(f"Unrecognized term: {t.number}")
        return t

    def _call_store(self, fn, *args):
        try:
            return fn(*args)
        except ServiceError:
            raise
        except (OSError, ValueError, KeyError) as e:
            raise UpstreamError(f"Record Store failure: {e}") from e

    def load_snapshot(self, term: Term) -> TermSnapshot:
        return self._call_store(self.store.load, term.number)

    # -- Ego views -------------------------------------------------------------

    def fetch_ego(self, term: object, focus_id: str) -> EgoResult:
        focus_id = validate_focus(focus_id)
        t = self.resolve_term(term)
        snapshot = self.load_snapshot(t)
        if focus_id not in snapshot.members:
            raise NotFoundError(f"Member {focus_id!r} not found in {t.label}")
        G = build_support_graph(snapshot)
        return EgoResult(
            term=t.number,
            focus_id=focus_id,
            ego=extract_ego(G, focus_id),
            warnings=tuple(snapshot.warnings) + tuple(G.graph["warnings"]),
        )

    def get_ego_view(
        self,
        term: object = None,
        focus_id: str | None = None,
        direction: str | None = "all",
    ) -> EgoView:
        # Reject bad parameters before touching the store.
        focus_id = validate_focus(focus_id)
        direction = validate_direction(direction)
        Term.parse(term)
        result = self.fetch_ego(term, focus_id)
        return build_view(result, direction, self.layout_config)

    # -- Metrics ---------------------------------------------------------------

    def member_summary(self, term: object, member_id: str, limit: int = RANKING_LIMIT) -> dict:
        member_id = validate_focus(member_id)
        t = self.resolve_term(term)
        snapshot = self.load_snapshot(t)
        return member_summary(snapshot, build_support_graph(snapshot), member_id, limit)

    def rankings(self, term: object, kind: str, limit: int = RANKING_LIMIT):
        t = self.resolve_term(term)
        snapshot = self.load_snapshot(t)
        return rankings(build_support_graph(snapshot), kind, limit)

    def network_stats(self, term: object = None, mode: str = "support") -> dict:
        """Summary statistics for the support (directed) or cosupport graph."""
        mode = validate_mode(mode)
        t = self.resolve_term(term)
        snapshot = self.load_snapshot(t)
        if mode == "cosupport":
            return compute_cosupport_stats(snapshot, build_cosupport_graph(snapshot))
        return compute_network_stats(snapshot, build_support_graph(snapshot))


class EgoViewer:
    """Tracks one client's selected focus and the ego graph fetched for it.

    select() starts a fetch in the background. When a fetch completes, its
    result is committed only if its focus is still the selected focus; a
    result for a focus the client has moved away from is discarded. view()
    re-derives a directional view from the committed result in memory.
    Use it as a context manager, or call close(), to release its executor.
    """

    def __init__(
        self,
        service: EgoNetworkService,
        term: object = None,
        executor: Executor | None = None,
    ):
        self.service = service
        self.term = Term.parse(term).number
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=MAX_WORKERS)
        self._lock = threading.Lock()
        self._focus_id: str | None = None
        self._result: EgoResult | None = None
        self._error: BaseException | None = None
        self.discarded = 0

    @property
    def focus_id(self) -> str | None:
        return self._focus_id

    @property
    def result(self) -> EgoResult | None:
        return self._result

    def select(self, focus_id: str) -> Future:
        """Select a new focus and fetch its ego graph."""
        focus_id = validate_focus(focus_id)
        with self._lock:
            self._focus_id = focus_id
            self._result = None
            self._error = None
        future = self._executor.submit(self.service.fetch_ego, self.term, focus_id)
        future.add_done_callback(lambda f: self._on_fetched(focus_id, f))
        return future

    def _on_fetched(self, focus_id: str, future: Future) -> None:
        exc = future.exception()
        if exc is not None:
            with self._lock:
                if focus_id == self._focus_id:
                    self._error = exc
                else:
                    self.discarded += 1
            return
        self.commit(future.result())

    def commit(self, result: EgoResult) -> bool:
        """Store a fetched result if it belongs to the selected focus."""
        with self._lock:
            if result.focus_id != self._focus_id or result.term != self.term:
                self.discarded += 1
                return False
            self._result = result
            self._error = None
            return True

    def view(self, direction: str = "all") -> EgoView | None:
        """Directional view of the committed ego graph, or None while loading."""
        with self._lock:
            result, error = self._result, self._error
        if error is not None:
            raise error
        if result is None:
            return None
        return build_view(result, direction, self.service.layout_config)

    def close(self) -> None:
        """Wait for outstanding fetches and release the viewer's own executor.

        An executor passed in by the caller is left running for the caller.
        """
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    def __enter__(self) -> "EgoViewer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

"""
Tests for the request boundary in service.py.

Covers parameter validation ahead of any store access, error codes and
payloads, fresh loads per request, the EgoView shape, and the EgoViewer's
handling of out-of-order fetches and direction toggles. Viewer tests drive
a manual executor so completion order is chosen by the test.

Run: uv run pytest tests/test_service.py -v
"""

from concurrent.futures import Future

import pytest

from cosponsor_network.errors import NotFoundError, UpstreamError, ValidationError
from cosponsor_network.models import Bill, CosponsorLink, Member
from cosponsor_network.service import (
    EgoNetworkService,
    EgoViewer,
    build_view,
    error_payload,
)
from cosponsor_network.store import MemoryRecordStore

# ── Fixtures ─────────────────────────────────────────────────────────────────


def _store() -> MemoryRecordStore:
    """Term 22: F receives from A (3) and B (1), gives to B (2) and C (4).

    Term 21 holds a single older pair so multi-term lookups can be checked.
    """
    members = [
        Member(m, f"Name {m}", 22, "Party A" if m in ("F", "A") else "Party B")
        for m in ("F", "A", "B", "C", "D")
    ]
    members += [Member("F", "Name F", 21, "Party A"), Member("Z", "Name Z", 21, None)]

    bills, links = [], []

    def add(bill_id, sponsor, cosponsor, date="2024-06-01", term=22):
        bills.append(Bill(bill_id, f"Bill {bill_id}", term, sponsor, date))
        links.append(CosponsorLink(bill_id, cosponsor))

    for i in range(3):
        add(f"FA{i}", "F", "A", f"2024-06-0{i + 1}")
    add("FB0", "F", "B")
    for i in range(2):
        add(f"BF{i}", "B", "F")
    for i in range(4):
        add(f"CF{i}", "C", "F")
    add("OLD", "Z", "F", "2020-07-01", term=21)
    return MemoryRecordStore(members, bills, links)


class FailingStore:
    """A store whose every load fails the way a broken backend would."""

    def terms(self):
        return [22]

    def load(self, term):
        raise OSError("connection reset")


class ManualExecutor:
    """Executor whose tasks run only when the test calls run()."""

    def __init__(self):
        self.pending: list[tuple[Future, object, tuple]] = []

    def submit(self, fn, *args):
        future = Future()
        self.pending.append((future, fn, args))
        return future

    def run(self, index: int = 0) -> None:
        future, fn, args = self.pending.pop(index)
        try:
            future.set_result(fn(*args))
        except Exception as e:
            future.set_exception(e)

    def shutdown(self, wait=True):
        self.pending.clear()


@pytest.fixture
def store():
    return _store()


@pytest.fixture
def service(store):
    return EgoNetworkService(store)


# ── Parameter validation ─────────────────────────────────────────────────────


class TestValidation:
    """Bad parameters are rejected before the store is touched."""

    def test_bad_direction(self, service, store):
        with pytest.raises(ValidationError) as exc:
            service.get_ego_view(22, "F", "sideways")
        assert exc.value.code == "bad_request"
        assert store.load_count == 0

    def test_missing_focus(self, service, store):
        for focus in (None, "", "   "):
            with pytest.raises(ValidationError):
                service.get_ego_view(22, focus, "all")
        assert store.load_count == 0

    def test_malformed_term(self, service, store):
        with pytest.raises(ValidationError):
            service.get_ego_view("twenty-two", "F", "all")
        assert store.load_count == 0

    @pytest.mark.parametrize("term", ["²", "2²", "0", "-1"])
    def test_non_decimal_term_is_bad_request(self, service, store, term):
        with pytest.raises(ValidationError) as exc:
            service.get_ego_view(term, "F", "all")
        assert error_payload(exc.value)["error"]["code"] == "bad_request"
        assert store.load_count == 0

    def test_unknown_term(self, service, store):
        with pytest.raises(ValidationError, match="Unrecognized term"):
            service.get_ego_view(30, "F", "all")
        assert store.load_count == 0

    def test_direction_case_insensitive(self, service):
        assert service.get_ego_view(22, "F", "Received").direction == "received"

    def test_defaults(self, service):
        view = service.get_ego_view(focus_id="F")
        assert view.term == 22
        assert view.direction == "all"


# ── Error codes ──────────────────────────────────────────────────────────────


class TestErrors:
    def test_unknown_focus(self, service):
        with pytest.raises(NotFoundError) as exc:
            service.get_ego_view(22, "NOBODY", "all")
        assert exc.value.code == "not_found"

    def test_member_of_other_term_not_found(self, service):
        with pytest.raises(NotFoundError):
            service.get_ego_view(22, "Z", "all")

    def test_store_failure_is_upstream(self):
        service = EgoNetworkService(FailingStore())
        with pytest.raises(UpstreamError) as exc:
            service.get_ego_view(22, "F", "all")
        assert exc.value.code == "upstream_failure"
        assert "connection reset" in exc.value.message

    def test_error_payload(self):
        payload = error_payload(NotFoundError("Member 'X' not found"))
        assert payload == {"error": {"code": "not_found", "message": "Member 'X' not found"}}


# ── Ego views ────────────────────────────────────────────────────────────────


class TestGetEgoView:
    def test_all_view(self, service):
        view = service.get_ego_view(22, "F", "all")
        assert {ln.node_id for ln in view.nodes} == {"F", "A", "B", "C"}
        assert view.edge_count == 4

    def test_received_view(self, service):
        view = service.get_ego_view(22, "F", "received")
        assert {ln.node_id for ln in view.nodes} == {"F", "A", "B"}
        assert all(e.dst_id == "F" for e in view.edges)

    def test_given_view(self, service):
        view = service.get_ego_view(22, "F", "given")
        assert {ln.node_id for ln in view.nodes} == {"F", "B", "C"}
        assert all(e.src_id == "F" for e in view.edges)

    def test_focus_at_origin(self, service):
        view = service.get_ego_view(22, "F", "all")
        assert view.positions()["F"] == service.layout_config.origin

    def test_isolated_focus(self, service):
        view = service.get_ego_view(22, "D", "all")
        assert view.node_count == 1
        assert view.edge_count == 0

    def test_older_term(self, service):
        view = service.get_ego_view(21, "F", "all")
        assert view.term == 21
        assert {ln.node_id for ln in view.nodes} == {"F", "Z"}

    def test_to_dict_shape(self, service):
        d = service.get_ego_view(22, "F", "given").to_dict()
        assert set(d) == {"term", "focus_id", "direction", "nodes", "edges", "stats"}
        assert d["stats"] == {"node_count": 3, "edge_count": 2}
        node = d["nodes"][0]
        assert node["id"] == "F"
        assert node["ring"] == -1
        assert set(node) == {"id", "label", "party", "x", "y", "in_weight", "out_weight", "ring"}
        edge = next(e for e in d["edges"] if e["target"] == "C")
        assert edge == {"source": "F", "target": "C", "weight": 4, "last_date": "2024-06-01"}

    def test_fresh_load_per_request(self, service, store):
        service.get_ego_view(22, "F", "all")
        service.get_ego_view(22, "F", "received")
        assert store.load_count == 2

    def test_reflects_new_records(self, service, store):
        before = service.get_ego_view(22, "D", "all")
        store.bills.append(Bill("NEW", "Bill NEW", 22, "D", "2024-09-01"))
        store.links.append(CosponsorLink("NEW", "A"))
        after = service.get_ego_view(22, "D", "all")
        assert before.node_count == 1
        assert after.node_count == 2

    def test_fetch_ego_carries_warnings(self, store):
        store.bills.append(Bill("SELF", "Bill SELF", 22, "A", "2024-06-01"))
        store.links.append(CosponsorLink("SELF", "A"))
        result = EgoNetworkService(store).fetch_ego(22, "A")
        assert [w.kind for w in result.warnings] == ["self_cosponsor"]


# ── Metrics through the service ──────────────────────────────────────────────


class TestServiceMetrics:
    def test_member_summary(self, service):
        s = service.member_summary(22, "F")
        assert s["top_supporters"][0]["member_id"] == "A"
        assert s["top_beneficiaries"][0]["member_id"] == "C"

    def test_member_summary_unknown(self, service):
        with pytest.raises(NotFoundError):
            service.member_summary(22, "NOBODY")

    def test_rankings(self, service):
        df = service.rankings(22, "top-supporters")
        assert df["member_id"].to_list()[0] == "F"

    def test_network_stats(self, service):
        stats = service.network_stats(22)
        assert stats["members"] == 5
        assert stats["cosponsorships"] == 10
        assert stats["edges"] == 4

    def test_network_stats_cosupport(self, service, store):
        store.bills.append(Bill("PAIR", "Bill PAIR", 22, "D", "2024-06-01"))
        store.links.extend([CosponsorLink("PAIR", "A"), CosponsorLink("PAIR", "C")])
        stats = service.network_stats(22, mode="cosupport")
        assert stats["mode"] == "cosupport"
        assert stats["edges"] == 1
        assert stats["active_members"] == 2

    def test_network_stats_bad_mode(self, service, store):
        with pytest.raises(ValidationError):
            service.network_stats(22, mode="proposer")
        assert store.load_count == 0


# ── EgoViewer ────────────────────────────────────────────────────────────────


class TestEgoViewer:
    """Only the latest selection's fetch may be committed."""

    @pytest.fixture
    def executor(self):
        return ManualExecutor()

    @pytest.fixture
    def viewer(self, service, executor):
        return EgoViewer(service, term=22, executor=executor)

    def test_loading_returns_none(self, viewer):
        viewer.select("F")
        assert viewer.view() is None

    def test_select_then_view(self, viewer, executor):
        viewer.select("F")
        executor.run()
        view = viewer.view("all")
        assert view.focus_id == "F"
        assert view.node_count == 4

    def test_stale_result_discarded(self, viewer, executor):
        """X selected, then Y; X's fetch finishes last and must not win."""
        viewer.select("A")
        viewer.select("C")
        executor.run(1)  # C completes first
        executor.run(0)  # A completes after
        assert viewer.focus_id == "C"
        assert viewer.result.focus_id == "C"
        assert viewer.view().focus_id == "C"
        assert viewer.discarded == 1

    def test_stale_result_before_current(self, viewer, executor):
        viewer.select("A")
        viewer.select("C")
        executor.run(0)  # A completes while C is still loading
        assert viewer.view() is None
        executor.run(0)
        assert viewer.view().focus_id == "C"

    def test_direction_toggle_does_not_refetch(self, viewer, executor, store):
        viewer.select("F")
        executor.run()
        loads = store.load_count
        received = viewer.view("received")
        given = viewer.view("given")
        assert store.load_count == loads
        assert executor.pending == []
        assert {ln.node_id for ln in received.nodes} == {"F", "A", "B"}
        assert {ln.node_id for ln in given.nodes} == {"F", "B", "C"}

    def test_fetch_error_surfaces(self, viewer, executor):
        viewer.select("NOBODY")
        executor.run()
        with pytest.raises(NotFoundError):
            viewer.view()

    def test_stale_error_discarded(self, viewer, executor):
        viewer.select("NOBODY")
        viewer.select("F")
        executor.run(0)
        executor.run(0)
        assert viewer.view().focus_id == "F"
        assert viewer.discarded == 1

    def test_commit_rejects_other_focus(self, viewer, service):
        viewer.select("F")
        assert viewer.commit(service.fetch_ego(22, "A")) is False
        assert viewer.commit(service.fetch_ego(22, "F")) is True

    def test_commit_rejects_other_term(self, viewer, service):
        viewer.select("F")
        assert viewer.commit(service.fetch_ego(21, "F")) is False

    def test_select_validates_focus(self, viewer, executor):
        with pytest.raises(ValidationError):
            viewer.select("")
        assert executor.pending == []

    def test_build_view_is_pure(self, service, store):
        result = service.fetch_ego(22, "F")
        loads = store.load_count
        a = build_view(result, "given")
        b = build_view(result, "given")
        assert a == b
        assert store.load_count == loads

    def test_close_leaves_caller_executor_alone(self, viewer, executor):
        viewer.select("F")
        viewer.close()
        assert len(executor.pending) == 1
        executor.run()
        assert viewer.view().focus_id == "F"


class TestEgoViewerLifecycle:
    """A viewer that creates its own thread pool shuts it down on exit."""

    def test_context_manager_waits_for_fetch(self, service):
        with EgoViewer(service, term=22) as viewer:
            viewer.select("F")
        # Exiting joined the worker, so the fetch has been committed.
        assert viewer.view().focus_id == "F"

    def test_owned_executor_shut_down(self, service):
        with EgoViewer(service, term=22) as viewer:
            pass
        with pytest.raises(RuntimeError):
            viewer.select("F")

    def test_close_is_idempotent(self, service):
        viewer = EgoViewer(service, term=22)
        viewer.close()
        viewer.close()

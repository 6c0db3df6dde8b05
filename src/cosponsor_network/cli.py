"""Command-line interface for the co-sponsorship network."""

import argparse
import json
from pathlib import Path

from tqdm import tqdm

from cosponsor_network.config import (
    CURRENT_TERM,
    DATA_ROOT,
    DEFAULT_DIRECTION,
    DIRECTIONS,
    NETWORK_MODES,
    RANKING_KINDS,
    RANKING_LIMIT,
)
from cosponsor_network.ego import extract_ego
from cosponsor_network.errors import ServiceError
from cosponsor_network.graph import build_support_graph
from cosponsor_network.service import EgoNetworkService, EgoResult, build_view
from cosponsor_network.store import CsvRecordStore
from cosponsor_network.term import Term


def _print_json(payload: object) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--term",
        type=int,
        default=CURRENT_TERM,
        help=f"Assembly term (default: {CURRENT_TERM})",
    )
    common.add_argument(
        "--data-dir",
        type=Path,
        default=DATA_ROOT,
        help=f"Record Store root holding one directory per term (default: {DATA_ROOT}/)",
    )

    parser = argparse.ArgumentParser(
        prog="cosponsor-network",
        description="Build and lay out co-sponsorship collaboration networks.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    ego = sub.add_parser("ego", parents=[common], help="Laid-out ego network for one member")
    ego.add_argument("focus", help="Member id at the center of the network")
    ego.add_argument(
        "--direction",
        choices=DIRECTIONS,
        default=DEFAULT_DIRECTION,
        help=f"Which relationships to show (default: {DEFAULT_DIRECTION})",
    )
    ego.add_argument("--plot", type=Path, default=None, help="Also write a PNG preview here")

    summary = sub.add_parser("summary", parents=[common], help="Collaboration summary for a member")
    summary.add_argument("member", help="Member id")
    summary.add_argument("--limit", type=int, default=RANKING_LIMIT)

    rank = sub.add_parser("rankings", parents=[common], help="Rank members of a term")
    rank.add_argument("--type", dest="kind", choices=RANKING_KINDS, default=RANKING_KINDS[0])
    rank.add_argument("--limit", type=int, default=RANKING_LIMIT)

    stats = sub.add_parser("stats", parents=[common], help="Network statistics for a term")
    stats.add_argument(
        "--mode",
        choices=NETWORK_MODES,
        default=NETWORK_MODES[0],
        help="support: cosponsor -> sponsor ties; cosupport: members sharing a bill "
        f"(default: {NETWORK_MODES[0]})",
    )
    sub.add_parser("terms", parents=[common], help="List terms present in the Record Store")

    export = sub.add_parser(
        "export", parents=[common], help="Write every member's ego view as JSON"
    )
    export.add_argument("--output", "-o", type=Path, default=None)
    export.add_argument("--direction", choices=DIRECTIONS, default=DEFAULT_DIRECTION)

    return parser


def _export_all(service: EgoNetworkService, term: int, output: Path, direction: str) -> None:
    """Write one ego view per member, reusing a single snapshot for the term."""
    t = service.resolve_term(term)
    snapshot = service.load_snapshot(t)
    G = build_support_graph(snapshot)
    output.mkdir(parents=True, exist_ok=True)

    for member_id in tqdm(sorted(snapshot.members), desc="Exporting", unit="member"):
        result = EgoResult(term=t.number, focus_id=member_id, ego=extract_ego(G, member_id))
        view = build_view(result, direction, service.layout_config)
        path = output / f"{member_id}_{direction}.json"
        path.write_text(json.dumps(view.to_dict(), ensure_ascii=False), encoding="utf-8")
    print(f"  Wrote {len(snapshot.members)} views to {output}")


def main(argv: list[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    service = EgoNetworkService(CsvRecordStore(args.data_dir))

    try:
        if args.command == "ego":
            view = service.get_ego_view(args.term, args.focus, args.direction)
            _print_json(view.to_dict())
            if args.plot is not None:
                from cosponsor_network.render import plot_ego_view

                plot_ego_view(view, args.plot)
        elif args.command == "summary":
            _print_json(service.member_summary(args.term, args.member, args.limit))
        elif args.command == "rankings":
            _print_json(service.rankings(args.term, args.kind, args.limit).to_dicts())
        elif args.command == "stats":
            _print_json(service.network_stats(args.term, args.mode))
        elif args.command == "terms":
            print("Terms in the Record Store:")
            for number in service.store.terms():
                t = Term(number)
                marker = "  (current)" if t.is_current else ""
                print(f"  {t.label:28s}  {t.data_dir(args.data_dir)}{marker}")
        elif args.command == "export":
            output = args.output or Path("results") / Term(args.term).output_name / "ego"
            _export_all(service, args.term, output, args.direction)
    except ServiceError as e:
        raise SystemExit(f"Error [{e.code}]: {e.message}") from e

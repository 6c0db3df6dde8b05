"""Record Store access: members, bills and co-sponsorship links per term.

Two stores share one interface (``terms()`` and ``load(term)``):

  CsvRecordStore     reads the per-term CSV files written by output.save_csvs()
  MemoryRecordStore  holds records in memory (tests, embedding callers)

Both return a fresh ``TermSnapshot`` on every load, so no graph state is ever
shared between requests. Malformed rows are skipped with a
``DataIntegrityWarning`` instead of aborting the load; an unreadable or
structurally broken store raises ``UpstreamError``.
"""

import re
from collections.abc import Iterable
from pathlib import Path

import polars as pl

from cosponsor_network.config import DATA_ROOT
from cosponsor_network.errors import UpstreamError
from cosponsor_network.models import (
    Bill,
    CosponsorLink,
    DataIntegrityWarning,
    Member,
    TermSnapshot,
)
from cosponsor_network.term import Term, parse_term_number

MEMBER_COLUMNS = ("member_id", "name", "term", "party")
BILL_COLUMNS = ("bill_id", "name", "term", "propose_date", "sponsor_id")
LINK_COLUMNS = ("bill_id", "member_id")

_TERM_DIR_RE = re.compile(r"^(\d+)(?:st|nd|rd|th)_assembly$")


def _warn(warnings: list[DataIntegrityWarning], warning: DataIntegrityWarning) -> None:
    warnings.append(warning)
    print(f"  Warning: {warning.message}")


def assemble_snapshot(
    term: int,
    members: Iterable[Member],
    bills: Iterable[Bill],
    links: Iterable[CosponsorLink],
    warnings: Iterable[DataIntegrityWarning] = (),
) -> TermSnapshot:
    """Build a referentially consistent snapshot for one term.

    Rows from other terms are ignored. Rows with missing keys, links that
    reference an unknown bill or member, bills whose sponsor is unknown, and
    repeated (bill, member) links are skipped and reported. Everything else is
    kept, so one bad row never aborts the rest of the term. ``warnings`` seeds
    the snapshot with defects the caller already found while reading rows.
    """
    snapshot = TermSnapshot(term=term, warnings=list(warnings))
    warnings = snapshot.warnings

    for m in members:
        if m.term != term:
            continue
        if not m.member_id or not m.name:
            _warn(
                warnings,
                DataIntegrityWarning(
                    kind="missing_field",
                    message=f"member row without id or name skipped ({m.member_id!r})",
                    member_id=m.member_id or None,
                ),
            )
            continue
        snapshot.members[m.member_id] = m

    bill_ids: set[str] = set()
    for b in bills:
        if b.term != term:
            continue
        if not b.bill_id or not b.sponsor_id:
            _warn(
                warnings,
                DataIntegrityWarning(
                    kind="missing_field",
                    message=f"bill row without id or sponsor skipped ({b.bill_id!r})",
                    bill_id=b.bill_id or None,
                ),
            )
            continue
        if b.sponsor_id not in snapshot.members:
            _warn(
                warnings,
                DataIntegrityWarning(
                    kind="dangling_link",
                    message=f"bill {b.bill_id} names unknown sponsor {b.sponsor_id}",
                    bill_id=b.bill_id,
                    member_id=b.sponsor_id,
                ),
            )
            continue
        if b.bill_id in bill_ids:
            _warn(
                warnings,
                DataIntegrityWarning(
                    kind="duplicate_row",
                    message=f"bill {b.bill_id} listed twice; first row kept",
                    bill_id=b.bill_id,
                ),
            )
            continue
        bill_ids.add(b.bill_id)
        snapshot.bills.append(b)

    seen: set[tuple[str, str]] = set()
    for link in links:
        if not link.bill_id or not link.member_id:
            _warn(
                warnings,
                DataIntegrityWarning(
                    kind="missing_field",
                    message="co-sponsorship row without bill or member skipped",
                    bill_id=link.bill_id or None,
                    member_id=link.member_id or None,
                ),
            )
            continue
        if link.bill_id not in bill_ids:
            # Links are not term-tagged; a link to another term's bill is not a defect.
            continue
        if link.member_id not in snapshot.members:
            _warn(
                warnings,
                DataIntegrityWarning(
                    kind="dangling_link",
                    message=f"bill {link.bill_id} cosponsor {link.member_id} is not a member",
                    bill_id=link.bill_id,
                    member_id=link.member_id,
                ),
            )
            continue
        key = (link.bill_id, link.member_id)
        if key in seen:
            _warn(
                warnings,
                DataIntegrityWarning(
                    kind="duplicate_link",
                    message=f"duplicate co-sponsorship {link.member_id} on {link.bill_id}",
                    bill_id=link.bill_id,
                    member_id=link.member_id,
                ),
            )
            continue
        seen.add(key)
        snapshot.links.append(link)

    return snapshot


class MemoryRecordStore:
    """Record Store backed by in-memory record lists."""

    def __init__(
        self,
        members: Iterable[Member] = (),
        bills: Iterable[Bill] = (),
        links: Iterable[CosponsorLink] = (),
    ):
        self.members = list(members)
        self.bills = list(bills)
        self.links = list(links)
        self.load_count = 0

    def terms(self) -> list[int]:
        return sorted({m.term for m in self.members} | {b.term for b in self.bills})

    def load(self, term: int) -> TermSnapshot:
        self.load_count += 1
        return assemble_snapshot(term, self.members, self.bills, self.links)


def _read_table(path: Path, columns: tuple[str, ...]) -> pl.DataFrame:
    """Read one store CSV as all-string columns, checking the header."""
    try:
        df = pl.read_csv(path, infer_schema=False)
    except (OSError, pl.exceptions.PolarsError) as e:
        raise UpstreamError(f"Cannot read {path}: {e}") from e
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise UpstreamError(f"{path.name} is missing column(s): {', '.join(missing)}")
    return df.select(columns)


def _row_term(
    row: dict,
    what: str,
    warnings: list[DataIntegrityWarning],
    bill_id: str | None = None,
    member_id: str | None = None,
) -> int | None:
    """Term number of one CSV row, or None (with a warning) if it is unusable."""
    raw = row["term"]
    number = parse_term_number(raw)
    if number is None:
        if raw is None or not raw.strip():
            kind, problem = "missing_field", "no term"
        else:
            kind, problem = "bad_value", f"unusable term {raw!r}"
        _warn(
            warnings,
            DataIntegrityWarning(
                kind=kind,
                message=f"{what} {bill_id or member_id or '?'} has {problem}; skipped",
                bill_id=bill_id,
                member_id=member_id,
            ),
        )
    return number


class CsvRecordStore:
    """Record Store backed by the per-term CSV directory layout (see term.py)."""

    def __init__(self, root: Path | None = None):
        self.root = root or DATA_ROOT

    def terms(self) -> list[int]:
        """Terms that have a data directory under the root."""
        if not self.root.is_dir():
            raise UpstreamError(f"Record Store directory not found: {self.root}")
        found = []
        for child in self.root.iterdir():
            match = _TERM_DIR_RE.match(child.name)
            if match and child.is_dir():
                found.append(int(match.group(1)))
        return sorted(found)

    def load(self, term: int) -> TermSnapshot:
        t = Term(term)
        term_dir = t.data_dir(self.root)
        if not term_dir.is_dir():
            raise UpstreamError(f"No data for {t.label} in {self.root}")
        prefix = t.output_name

        members_df = _read_table(term_dir / f"{prefix}_members.csv", MEMBER_COLUMNS)
        bills_df = _read_table(term_dir / f"{prefix}_bills.csv", BILL_COLUMNS)
        links_df = _read_table(term_dir / f"{prefix}_cosponsors.csv", LINK_COLUMNS)

        warnings: list[DataIntegrityWarning] = []
        members = []
        for row in members_df.iter_rows(named=True):
            member_id = row["member_id"] or ""
            row_term = _row_term(row, "member", warnings, member_id=member_id or None)
            if row_term is None:
                continue
            members.append(
                Member(
                    member_id=member_id,
                    name=row["name"] or "",
                    term=row_term,
                    party=row["party"],
                )
            )

        bills = []
        for row in bills_df.iter_rows(named=True):
            bill_id = row["bill_id"] or ""
            row_term = _row_term(row, "bill", warnings, bill_id=bill_id or None)
            if row_term is None:
                continue
            bills.append(
                Bill(
                    bill_id=bill_id,
                    name=row["name"] or "",
                    term=row_term,
                    sponsor_id=row["sponsor_id"] or "",
                    propose_date=row["propose_date"],
                )
            )

        links = [
            CosponsorLink(bill_id=row["bill_id"] or "", member_id=row["member_id"] or "")
            for row in links_df.iter_rows(named=True)
        ]
        return assemble_snapshot(term, members, bills, links, warnings)

"""CSV output in the Record Store's per-term file layout."""

import csv
from dataclasses import asdict
from pathlib import Path

from cosponsor_network.models import Bill, CosponsorLink, Member
from cosponsor_network.store import BILL_COLUMNS, LINK_COLUMNS, MEMBER_COLUMNS


def save_csvs(
    output_dir: Path,
    output_name: str,
    members: list[Member],
    bills: list[Bill],
    links: list[CosponsorLink],
) -> None:
    """Save members, bills and co-sponsorship links to CSV files."""
    print("\n" + "=" * 60)
    print("Saving CSV files...")
    print("=" * 60)
    output_dir.mkdir(parents=True, exist_ok=True)

    for suffix, columns, rows in (
        ("members", MEMBER_COLUMNS, members),
        ("bills", BILL_COLUMNS, bills),
        ("cosponsors", LINK_COLUMNS, links),
    ):
        path = output_dir / f"{output_name}_{suffix}.csv"
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=list(columns))
            writer.writeheader()
            for row in rows:
                writer.writerow(asdict(row))
        print(f"  {path} ({len(rows)} rows)")

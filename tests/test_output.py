"""
Tests for CSV export in output.py.

Verifies that save_csvs() writes three correctly structured CSV files with
the right filenames, headers, row counts, and field ordering.

Run: uv run pytest tests/test_output.py -v
"""

import csv

from cosponsor_network.models import Bill, CosponsorLink, Member
from cosponsor_network.output import save_csvs

# ── Fixtures ─────────────────────────────────────────────────────────────────


def _make_member(member_id: str = "M1", party: str | None = "Party A") -> Member:
    return Member(member_id=member_id, name=f"Name {member_id}", term=22, party=party)


def _make_bill(bill_id: str = "B1", date: str | None = "2024-06-01") -> Bill:
    return Bill(bill_id=bill_id, name="Act on Taxation", term=22, sponsor_id="M1", propose_date=date)


# ── save_csvs() ─────────────────────────────────────────────────────────────


class TestSaveCsvs:
    """CSV export creates correct files with expected structure."""

    def test_creates_three_files(self, tmp_path):
        save_csvs(tmp_path, "22nd_assembly", [_make_member()], [_make_bill()], [])
        assert (tmp_path / "22nd_assembly_members.csv").exists()
        assert (tmp_path / "22nd_assembly_bills.csv").exists()
        assert (tmp_path / "22nd_assembly_cosponsors.csv").exists()

    def test_creates_output_dir(self, tmp_path):
        out = tmp_path / "nested" / "22nd_assembly"
        save_csvs(out, "22nd_assembly", [], [], [])
        assert out.is_dir()

    def test_members_csv_headers(self, tmp_path):
        save_csvs(tmp_path, "test", [_make_member()], [], [])
        with open(tmp_path / "test_members.csv") as f:
            reader = csv.DictReader(f)
            assert reader.fieldnames == ["member_id", "name", "term", "party"]

    def test_bills_csv_headers(self, tmp_path):
        save_csvs(tmp_path, "test", [], [_make_bill()], [])
        with open(tmp_path / "test_bills.csv") as f:
            reader = csv.DictReader(f)
            assert reader.fieldnames == ["bill_id", "name", "term", "propose_date", "sponsor_id"]

    def test_cosponsors_csv_headers(self, tmp_path):
        save_csvs(tmp_path, "test", [], [], [CosponsorLink("B1", "M2")])
        with open(tmp_path / "test_cosponsors.csv") as f:
            reader = csv.DictReader(f)
            assert reader.fieldnames == ["bill_id", "member_id"]

    def test_row_counts(self, tmp_path):
        save_csvs(
            tmp_path,
            "test",
            [_make_member("M1"), _make_member("M2")],
            [_make_bill("B1"), _make_bill("B2"), _make_bill("B3")],
            [CosponsorLink("B1", "M2")],
        )
        with open(tmp_path / "test_members.csv") as f:
            assert len(list(csv.DictReader(f))) == 2
        with open(tmp_path / "test_bills.csv") as f:
            assert len(list(csv.DictReader(f))) == 3
        with open(tmp_path / "test_cosponsors.csv") as f:
            assert len(list(csv.DictReader(f))) == 1

    def test_empty_data(self, tmp_path):
        """Empty inputs still produce CSVs with headers only."""
        save_csvs(tmp_path, "test", [], [], [])
        with open(tmp_path / "test_members.csv") as f:
            reader = csv.DictReader(f)
            assert list(reader) == []
            assert reader.fieldnames == ["member_id", "name", "term", "party"]

    def test_none_written_empty(self, tmp_path):
        save_csvs(tmp_path, "test", [_make_member(party=None)], [_make_bill(date=None)], [])
        with open(tmp_path / "test_members.csv") as f:
            assert next(csv.DictReader(f))["party"] == ""
        with open(tmp_path / "test_bills.csv") as f:
            assert next(csv.DictReader(f))["propose_date"] == ""

    def test_non_ascii_names(self, tmp_path):
        member = Member("M1", "김철수", 22, "더불어민주당")
        save_csvs(tmp_path, "test", [member], [], [])
        with open(tmp_path / "test_members.csv", encoding="utf-8") as f:
            row = next(csv.DictReader(f))
            assert row["name"] == "김철수"
            assert row["party"] == "더불어민주당"

    def test_prints_paths(self, tmp_path, capsys):
        save_csvs(tmp_path, "test", [_make_member()], [], [])
        out = capsys.readouterr().out
        assert "test_members.csv (1 rows)" in out

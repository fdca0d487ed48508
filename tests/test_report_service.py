"""
Tests for CSV/JSON report output.
"""
import csv
import io
import json

import pytest

from contentkey.core.inventory import build_inventory
from contentkey.core.models import RenameSummary
from contentkey.core.pseudonymizer import Pseudonymizer
from contentkey.core.renamer import RenamerImpl
from contentkey.core.resolver import resolve
from contentkey.services.report_service import ReportService


class TestInventoryReport:

    def test_csv(self, csv_scenario):
        inventory = build_inventory([csv_scenario["a"], csv_scenario["b"], csv_scenario["c"]])
        out = io.StringIO()
        ReportService.write_inventory(inventory, out)

        rows = list(csv.DictReader(io.StringIO(out.getvalue())))
        assert [r["path"] for r in rows] == [str(csv_scenario[k]) for k in ("a", "b", "c")]
        assert rows[0]["digest"] == rows[1]["digest"] != rows[2]["digest"]
        assert rows[0]["algorithm"] == "sha1"
        assert rows[0]["size"] == "8"

    def test_json_includes_unreadable(self, csv_scenario, tmp_path):
        missing = tmp_path / "missing.csv"
        inventory = build_inventory([csv_scenario["a"], missing])
        out = tmp_path / "inventory.json"
        ReportService.write_inventory(inventory, str(out), fmt="json")

        payload = json.loads(out.read_text(encoding="utf-8"))
        assert payload["algorithm"] == "sha1"
        assert list(payload["unreadable"]) == [str(missing)]
        assert len(payload["rows"]) == 1

    def test_unknown_format(self, csv_scenario):
        inventory = build_inventory([csv_scenario["a"]])
        with pytest.raises(ValueError, match="Unsupported report format"):
            ReportService.write_inventory(inventory, io.StringIO(), fmt="xml")


class TestOtherReports:

    def test_duplicate_rows(self, csv_scenario):
        resolution = resolve(build_inventory([csv_scenario["a"], csv_scenario["b"], csv_scenario["c"]]))
        rows = ReportService.duplicate_rows(resolution)
        assert rows == [{
            "digest": resolution.duplicate_sets[0].digest.hex,
            "canonical": str(csv_scenario["a"]),
            "extra": str(csv_scenario["b"]),
        }]

    def test_rename_summary_json(self, csv_scenario):
        summary = RenamerImpl().rename_all([csv_scenario["a"], csv_scenario["b"]])
        out = io.StringIO()
        ReportService.write_rename_summary(summary, out, fmt="json")

        payload = json.loads(out.getvalue())
        assert payload["renamed"] == 1
        assert payload["failed"] == 1
        assert [r["outcome"] for r in payload["rows"]] == ["renamed", "failed"]

    def test_empty_rename_summary(self):
        assert ReportService.rename_rows(RenameSummary()) == []

    def test_token_table_has_no_raw_values(self, tmp_path):
        p = Pseudonymizer()
        p.pseudonymize_many(["P-001", "P-002"])
        out = tmp_path / "tokens.csv"
        ReportService.write_tokens(p, str(out))

        text = out.read_text(encoding="utf-8")
        assert text.splitlines()[0] == "token"
        assert "P-00" not in text
        assert len(text.splitlines()) == 3


class TestReadCsv:

    def test_read(self, tmp_path):
        f = tmp_path / "in.csv"
        f.write_text("id,name\n1,a\n2,b\n", encoding="utf-8")
        fieldnames, rows = ReportService.read_csv(f)
        assert fieldnames == ["id", "name"]
        assert rows == [{"id": "1", "name": "a"}, {"id": "2", "name": "b"}]

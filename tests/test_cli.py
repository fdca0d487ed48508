"""
Critical CLI tests — focus on correct file selection, safe removal and exit codes.
"""
import csv
import io
import sys
from pathlib import Path
from unittest import mock

import pytest

from contentkey.cli import CLIApplication, main
from contentkey.core.hasher import digest_file
from contentkey.services.file_service import FileService


def _run(argv):
    return CLIApplication().run(argv)


class TestInventoryCommand:

    def test_prints_csv_table(self, csv_scenario, temp_dir, capsys):
        code = _run(["inventory", "-i", str(temp_dir)])
        out = capsys.readouterr().out

        assert code == 0
        rows = list(csv.DictReader(io.StringIO(out)))
        assert [Path(r["path"]).name for r in rows] == ["a.csv", "b.csv", "c.csv"]
        assert rows[0]["digest"] == digest_file(csv_scenario["a"]).hex

    def test_algorithm_option(self, csv_scenario, temp_dir, capsys):
        _run(["inventory", "-i", str(temp_dir), "--algorithm", "SHA-256"])
        rows = list(csv.DictReader(io.StringIO(capsys.readouterr().out)))
        assert {r["algorithm"] for r in rows} == {"sha256"}

    def test_algorithm_from_environment(self, csv_scenario, temp_dir, capsys, monkeypatch):
        monkeypatch.setenv("CONTENTKEY_ALGORITHM", "md5")
        _run(["inventory", "-i", str(temp_dir)])
        rows = list(csv.DictReader(io.StringIO(capsys.readouterr().out)))
        assert len(rows[0]["digest"]) == 32

    def test_json_report_file(self, csv_scenario, temp_dir, tmp_path, capsys):
        report = tmp_path / "inventory.json"
        code = _run(["inventory", "-i", str(temp_dir), "--format", "json", "--output", str(report)])
        assert code == 0
        assert report.exists()
        assert "written to" in capsys.readouterr().out


class TestConfigurationErrors:
    """Configuration errors must stop the run before any file is read."""

    def test_unsupported_algorithm(self, csv_scenario, temp_dir, capsys):
        with mock.patch("contentkey.commands.InventoryCommand.execute") as mock_execute:
            with pytest.raises(SystemExit) as exc_info:
                _run(["inventory", "-i", str(temp_dir), "--algorithm", "crc-9000"])
        assert exc_info.value.code == 1
        assert "Unsupported hash algorithm" in capsys.readouterr().err
        mock_execute.assert_not_called()

    def test_prefix_length_too_long(self, csv_scenario, temp_dir, capsys):
        with pytest.raises(SystemExit) as exc_info:
            _run(["rename", "-i", str(temp_dir), "--prefix-length", "41"])
        assert exc_info.value.code == 1
        assert csv_scenario["a"].exists()

    def test_missing_directory(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            _run(["inventory", "-i", str(tmp_path / "missing")])
        assert exc_info.value.code == 1
        assert "Directory not found" in capsys.readouterr().err

    def test_missing_subcommand_is_usage_error(self):
        with pytest.raises(SystemExit) as exc_info:
            _run([])
        assert exc_info.value.code == 2


class TestDedupCommand:

    def test_lists_sets_with_canonical_first(self, csv_scenario, temp_dir, capsys):
        code = _run(["dedup", "-i", str(temp_dir)])
        out = capsys.readouterr().out

        assert code == 0
        assert f"[KEEP] {csv_scenario['a']}" in out
        assert f"[DUP]  {csv_scenario['b']}" in out
        assert str(csv_scenario["c"]) not in out

    def test_no_duplicates(self, csv_scenario, temp_dir, capsys):
        csv_scenario["b"].unlink()
        _run(["dedup", "-i", str(temp_dir)])
        assert "No duplicates found" in capsys.readouterr().out

    def test_keep_one_trashes_only_extras(self, csv_scenario, temp_dir, capsys):
        """CRITICAL: the first-found file must never be trashed."""
        with mock.patch.object(FileService, "move_to_trash") as mock_trash:
            code = _run(["dedup", "-i", str(temp_dir), "--keep-one", "--force"])

        trashed = [str(call.args[0]) for call in mock_trash.call_args_list]
        assert code == 0
        assert trashed == [str(csv_scenario["b"])]
        assert "Successfully processed 1 files" in capsys.readouterr().out

    def test_move_to_directory(self, csv_scenario, temp_dir, tmp_path, capsys):
        dest = tmp_path / "extras"
        code = _run(["dedup", "-i", str(temp_dir), "--move-to", str(dest), "--force"])
        out = capsys.readouterr().out

        assert "space saved" not in out
        assert f"Moved 8.00B to {dest}" in out

        assert code == 0
        assert (dest / "b.csv").exists()
        assert csv_scenario["a"].exists()
        assert not csv_scenario["b"].exists()

    def test_trash_failure_exit_code(self, csv_scenario, temp_dir, capsys):
        with mock.patch.object(FileService, "move_to_trash", side_effect=RuntimeError("Failed to move to trash: x")):
            code = _run(["dedup", "-i", str(temp_dir), "--keep-one", "--force"])
        assert code == 1
        assert "Partial success" in capsys.readouterr().out

    def test_force_requires_action(self, csv_scenario, temp_dir, capsys):
        with pytest.raises(SystemExit) as exc_info:
            _run(["dedup", "-i", str(temp_dir), "--force"])
        assert exc_info.value.code == 1
        assert "--force can only be used" in capsys.readouterr().err

    def test_keep_one_refuses_without_terminal(self, csv_scenario, temp_dir, capsys):
        # stdout is captured by pytest, so the session is never interactive
        with pytest.raises(SystemExit) as exc_info:
            _run(["dedup", "-i", str(temp_dir), "--keep-one"])
        assert exc_info.value.code == 1
        assert csv_scenario["b"].exists()

    def test_duplicate_report_file(self, csv_scenario, temp_dir, tmp_path):
        report = tmp_path / "dups.csv"
        _run(["dedup", "-i", str(temp_dir), "--output", str(report)])
        rows = list(csv.DictReader(io.StringIO(report.read_text(encoding="utf-8"))))
        assert rows == [{
            "digest": digest_file(csv_scenario["a"]).hex,
            "canonical": str(csv_scenario["a"]),
            "extra": str(csv_scenario["b"]),
        }]


class TestRenameCommand:

    def test_collision_reported_with_exit_code(self, csv_scenario, temp_dir, capsys):
        a_digest = digest_file(csv_scenario["a"])
        code = _run(["rename", "-i", str(temp_dir)])
        captured = capsys.readouterr()

        assert code == 1
        assert (temp_dir / f"{a_digest.hex[:7]}.csv").exists()
        assert csv_scenario["b"].exists(), "colliding file must stay in place"
        assert "2 renamed, 0 unchanged, 1 failed" in captured.out
        assert "Rename failed" in captured.err

    def test_rerun_is_clean(self, tmp_path, capsys):
        (tmp_path / "one.txt").write_bytes(b"1")
        (tmp_path / "two.txt").write_bytes(b"2")

        assert _run(["rename", "-i", str(tmp_path)]) == 0
        assert _run(["rename", "-i", str(tmp_path)]) == 0
        assert "0 renamed, 2 unchanged, 0 failed" in capsys.readouterr().out

    def test_dry_run(self, csv_scenario, temp_dir, capsys):
        code = _run(["rename", "-i", str(temp_dir), "--dry-run"])
        assert code == 0
        assert "Would rename" in capsys.readouterr().out
        assert csv_scenario["a"].exists()


class TestPseudonymizeCommand:

    @pytest.fixture
    def visits_csv(self, tmp_path):
        f = tmp_path / "visits.csv"
        f.write_text("patient_id,visit\nP-001,2024-01-01\nP-002,2024-01-02\nP-001,2024-01-03\n",
                     encoding="utf-8")
        return f

    def test_replaces_column(self, visits_csv, tmp_path):
        out = tmp_path / "shared.csv"
        tokens = tmp_path / "tokens.csv"
        code = _run(["pseudonymize", "--input-csv", str(visits_csv), "--column", "patient_id",
                     "--output", str(out), "--tokens-output", str(tokens)])

        assert code == 0
        text = out.read_text(encoding="utf-8")
        assert "P-00" not in text
        rows = list(csv.DictReader(io.StringIO(text)))
        assert rows[0]["patient_id"] == rows[2]["patient_id"]
        assert rows[1]["visit"] == "2024-01-02"
        assert tokens.read_text(encoding="utf-8").splitlines()[0] == "token"
        assert len(tokens.read_text(encoding="utf-8").splitlines()) == 3

    def test_token_length(self, visits_csv, capsys):
        _run(["pseudonymize", "--input-csv", str(visits_csv), "--column", "patient_id",
              "--token-length", "10"])
        rows = list(csv.DictReader(io.StringIO(capsys.readouterr().out)))
        assert all(len(r["patient_id"]) == 10 for r in rows)

    def test_unknown_column(self, visits_csv, capsys):
        with pytest.raises(SystemExit) as exc_info:
            _run(["pseudonymize", "--input-csv", str(visits_csv), "--column", "ssn"])
        assert exc_info.value.code == 1
        assert "ssn" in capsys.readouterr().err


class TestMain:

    def test_keyboard_interrupt_exit_code(self):
        with mock.patch.object(CLIApplication, "run", side_effect=KeyboardInterrupt):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 130

    def test_success_exit_code(self, csv_scenario, temp_dir, capsys):
        with mock.patch.object(sys, "argv", ["contentkey", "inventory", "-i", str(temp_dir), "-q"]):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 0

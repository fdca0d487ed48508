"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/report_service.py
Per-run output artifacts as CSV or JSON:
- inventory table: path, size, algorithm, digest
- duplicate report: digest, canonical, extra
- rename summary: path, target, outcome, reason (+ counts in JSON)
- token table: token only; raw values have no column in it
"""
import csv
import json
import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, TextIO, Tuple, Union

from contentkey.core.models import Inventory, RenameSummary, Resolution
from contentkey.core.pseudonymizer import TOKEN_FIELD, Pseudonymizer

logger = logging.getLogger(__name__)

FORMATS = ("csv", "json")

INVENTORY_FIELDS = ["path", "size", "algorithm", "digest"]
DUPLICATE_FIELDS = ["digest", "canonical", "extra"]
RENAME_FIELDS = ["path", "target", "outcome", "reason"]
TOKEN_FIELDS = [TOKEN_FIELD]

Output = Union[str, Path, TextIO, None]


class ReportService:

    @staticmethod
    def inventory_rows(inventory: Inventory) -> List[Dict[str, Any]]:
        return [
            {"path": e.path, "size": e.size, "algorithm": e.digest.algorithm, "digest": e.digest.hex}
            for e in inventory.entries()
        ]

    @staticmethod
    def duplicate_rows(resolution: Resolution) -> List[Dict[str, Any]]:
        """One row per extra, next to its canonical representative."""
        return [
            {"digest": dup.digest.hex, "canonical": dup.canonical, "extra": extra}
            for dup in resolution.duplicate_sets
            for extra in dup.extras
        ]

    @staticmethod
    def rename_rows(summary: RenameSummary) -> List[Dict[str, Any]]:
        rows = []
        for plan in summary.renamed:
            rows.append({"path": plan.original_path, "target": plan.target_path,
                         "outcome": "renamed", "reason": ""})
        for plan in summary.unchanged:
            rows.append({"path": plan.original_path, "target": plan.target_path,
                         "outcome": "unchanged", "reason": ""})
        for failure in summary.failures:
            rows.append({"path": failure.path, "target": "", "outcome": "failed",
                         "reason": failure.reason})
        return rows

    @staticmethod
    def token_rows(pseudonymizer: Pseudonymizer) -> List[Dict[str, str]]:
        return list(pseudonymizer.export_rows())

    @staticmethod
    def write(rows: Iterable[Dict[str, Any]], fieldnames: Sequence[str],
              output: Output = None, fmt: str = "csv",
              extra: Optional[Dict[str, Any]] = None) -> None:
        """
        Write rows to a path, an open text stream or stdout (output=None).
        Keys outside `fieldnames` are dropped. `extra` adds top-level keys to JSON output.
        """
        if fmt not in FORMATS:
            raise ValueError(f"Unsupported report format: '{fmt}' (use {', '.join(FORMATS)})")

        rows = [{name: row.get(name, "") for name in fieldnames} for row in rows]
        with _open_output(output) as stream:
            if fmt == "csv":
                writer = csv.DictWriter(stream, fieldnames=list(fieldnames), lineterminator="\n")
                writer.writeheader()
                writer.writerows(rows)
            else:
                payload = dict(extra or {})
                payload["rows"] = rows
                json.dump(payload, stream, indent=2, ensure_ascii=False)
                stream.write("\n")
        logger.debug(f"Wrote {len(rows)} rows as {fmt} to {output or 'stdout'}")

    @classmethod
    def write_inventory(cls, inventory: Inventory, output: Output = None, fmt: str = "csv") -> None:
        cls.write(cls.inventory_rows(inventory), INVENTORY_FIELDS, output, fmt, extra={
            "algorithm": inventory.algorithm,
            "unreadable": {path: str(err) for path, err in inventory.unreadable.items()},
        })

    @classmethod
    def write_duplicates(cls, resolution: Resolution, output: Output = None, fmt: str = "csv") -> None:
        cls.write(cls.duplicate_rows(resolution), DUPLICATE_FIELDS, output, fmt, extra={
            "duplicate_sets": len(resolution.duplicate_sets),
            "unique_files": len(resolution.uniques),
            "reclaimable_bytes": resolution.reclaimable_bytes,
        })

    @classmethod
    def write_rename_summary(cls, summary: RenameSummary, output: Output = None, fmt: str = "csv") -> None:
        cls.write(cls.rename_rows(summary), RENAME_FIELDS, output, fmt, extra={
            "renamed": summary.renamed_count,
            "unchanged": summary.unchanged_count,
            "failed": summary.failed_count,
        })

    @classmethod
    def write_tokens(cls, pseudonymizer: Pseudonymizer, output: Output = None, fmt: str = "csv") -> None:
        cls.write(cls.token_rows(pseudonymizer), TOKEN_FIELDS, output, fmt)

    @staticmethod
    def read_csv(path: Union[str, Path]) -> Tuple[List[str], List[Dict[str, str]]]:
        """Returns (fieldnames, rows) of a CSV file with a header line."""
        with open(path, newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            rows = list(reader)
            return list(reader.fieldnames or []), rows


@contextmanager
def _open_output(output: Output) -> Iterator[TextIO]:
    if output is None:
        yield sys.stdout
    elif hasattr(output, "write"):
        yield output
    else:
        with open(output, "w", newline="", encoding="utf-8") as f:
            yield f

"""
Command orchestrators for inventory, deduplication, renaming and pseudonymization.
This is the single source of truth for workflow logic; the CLI and library callers share it.
Each command owns the state of one run and discards it on the next execute().
"""
import time
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from contentkey.core.hasher import HasherImpl
from contentkey.core.inventory import InventoryBuilderImpl
from contentkey.core.models import Inventory, Phase, RenameSummary, Resolution, RunStats
from contentkey.core.params import ContentParams
from contentkey.core.pseudonymizer import Pseudonymizer
from contentkey.core.renamer import RenamerImpl
from contentkey.core.resolver import DuplicateResolverImpl
from contentkey.core.scanner import FileScannerImpl

ProgressCallback = Optional[Callable[[str, int, Optional[int]], None]]


def _scan(params: ContentParams) -> List[str]:
    scanner = FileScannerImpl(
        root_dir=params.root_dir,
        recursive=params.recursive,
        extensions=params.extensions,
        excluded_dirs=params.excluded_dirs,
    )
    return scanner.scan()


class InventoryCommand:
    """
    Scan → inventory.

    Usage:
        params = ContentParams(root_dir="data", algorithm="sha256")
        inventory, stats = InventoryCommand().execute(params)
    """

    def __init__(self):
        self._candidates: List[str] = []

    def execute(
            self,
            params: ContentParams,
            progress_callback: ProgressCallback = None,
            candidates: Optional[List[str]] = None
    ) -> Tuple[Inventory, RunStats]:
        """
        Execute an inventory pass.

        Args:
            params: Validated parameters
            progress_callback: (stage: str, current: int, total: Optional[int]) -> None
            candidates: Explicit ordered paths; when None the root directory is scanned

        Raises:
            RuntimeError: If the root directory cannot be scanned
        """
        stats = RunStats()
        self._candidates = list(candidates) if candidates is not None else _scan(params)

        builder = InventoryBuilderImpl(
            HasherImpl(params.algorithm, chunk_size=params.chunk_size),
            workers=params.workers,
        )
        start_time = time.time()
        inventory = builder.build(self._candidates, progress_callback=progress_callback)
        stats.update_phase(Phase.INVENTORY.value, len(inventory.groups),
                           len(self._candidates), time.time() - start_time)
        return inventory, stats

    def get_candidates(self) -> List[str]:
        """Candidate paths of the last run."""
        return self._candidates.copy()


class DeduplicationCommand:
    """
    Scan → inventory → duplicate resolution. Non-destructive; actions live in DuplicateService.
    """

    def __init__(self):
        self._inventory_command = InventoryCommand()
        self.inventory: Optional[Inventory] = None

    def execute(
            self,
            params: ContentParams,
            progress_callback: ProgressCallback = None,
            candidates: Optional[List[str]] = None
    ) -> Tuple[Resolution, RunStats]:
        inventory, stats = self._inventory_command.execute(params, progress_callback, candidates)
        self.inventory = inventory

        start_time = time.time()
        resolution = DuplicateResolverImpl().resolve(inventory)
        stats.update_phase(Phase.RESOLVE.value, len(resolution.duplicate_sets),
                           inventory.entry_count, time.time() - start_time)
        return resolution, stats


class RenameCommand:
    """
    Scan → rename every candidate to <digest prefix><extension>.
    Safe to re-run: files already carrying their content name are left unchanged.
    """

    def execute(
            self,
            params: ContentParams,
            dry_run: bool = False,
            progress_callback: ProgressCallback = None,
            candidates: Optional[List[str]] = None
    ) -> Tuple[RenameSummary, RunStats]:
        stats = RunStats()
        paths = list(candidates) if candidates is not None else _scan(params)

        renamer = RenamerImpl(
            HasherImpl(params.algorithm, chunk_size=params.chunk_size),
            prefix_length=params.prefix_length,
        )
        start_time = time.time()
        summary = renamer.rename_all(paths, dry_run=dry_run, progress_callback=progress_callback)
        stats.update_phase(Phase.RENAME.value, summary.renamed_count, len(paths),
                           time.time() - start_time)
        return summary, stats


class PseudonymizeCommand:
    """
    Rows → rows with sensitive columns replaced by tokens.
    The pseudonymizer keeps the raw -> token table; only the returned rows are meant for sharing.
    """

    def __init__(self, pseudonymizer: Optional[Pseudonymizer] = None):
        self.pseudonymizer = pseudonymizer or Pseudonymizer()

    def execute(
            self,
            rows: Sequence[Mapping[str, Any]],
            columns: Sequence[str]
    ) -> Tuple[List[Dict[str, Any]], RunStats]:
        stats = RunStats()
        start_time = time.time()
        anonymized = self.pseudonymizer.pseudonymize_table(rows, columns)
        stats.update_phase(Phase.PSEUDONYMIZE.value, len(self.pseudonymizer.tokens()),
                           len(rows), time.time() - start_time)
        return anonymized, stats

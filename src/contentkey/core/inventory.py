"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/inventory.py
Single-pass inventory: digest every candidate path and group paths by digest.

PASS CONTRACT
-------------
  • Every candidate gets a discovery sequence number before any digesting starts
  • A candidate that cannot be read is captured in Inventory.unreadable; the pass continues
  • A path supplied twice is inventoried once
  • With workers > 1 digests are computed on a thread pool, but results are merged
    in sequence order, so the output is identical to a sequential run
  • Entries live only for the duration of build(); nothing is kept between passes
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

from contentkey.core.errors import EntryUnreadable
from contentkey.core.grouper import FileGrouperImpl
from contentkey.core.hasher import HasherImpl
from contentkey.core.interfaces import InventoryBuilder
from contentkey.core.models import CandidateEntry, Inventory

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class InventoryBuilderImpl(InventoryBuilder):
    """
    Builds an Inventory from an ordered sequence of candidate paths.
    Uses an injected HasherImpl (default SHA-1) and FileGrouperImpl.
    """

    def __init__(self, hasher: Optional[HasherImpl] = None,
                 grouper: Optional[FileGrouperImpl] = None,
                 workers: int = 1):
        if workers < 1:
            raise ValueError("Number of workers must be at least 1")
        self.hasher = hasher or HasherImpl()
        self.grouper = grouper or FileGrouperImpl()
        self.workers = workers

    def build(
        self,
        candidates: Sequence[PathLike],
        progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None
    ) -> Inventory:
        """
        Digest every candidate and group paths sharing a digest.

        Args:
            candidates: Ordered paths; order defines "first discovered"
            progress_callback: (stage, current, total) called after each entry

        Returns:
            Inventory with ordered groups and the unreadable-entries map
        """
        entries = self._enumerate(candidates)
        inventory = Inventory(algorithm=self.hasher.algorithm_name)
        total = len(entries)

        logger.debug(f"Inventory pass: {total} candidates, algorithm={inventory.algorithm}, "
                     f"workers={self.workers}")

        for processed, (entry, error) in enumerate(self._digest_all(entries), 1):
            if error is not None:
                inventory.unreadable[entry.path] = error
                logger.warning(f"Skipping unreadable entry {entry.path}: {error.reason}")
            if progress_callback:
                progress_callback("Inventory", processed, total)

        readable = [e for e in entries if e.digest is not None]
        inventory.groups = self.grouper.group_by_digest(readable)

        logger.info(f"Inventory complete: {len(readable)} files in {len(inventory.groups)} groups, "
                    f"{len(inventory.unreadable)} unreadable")
        return inventory

    @staticmethod
    def _enumerate(candidates: Sequence[PathLike]) -> List[CandidateEntry]:
        """Assigns discovery sequence numbers and drops repeated paths."""
        entries = []
        seen = set()
        for path in candidates:
            path_str = str(path)
            key = os.path.normcase(os.path.abspath(path_str))
            if key in seen:
                logger.debug(f"Ignoring repeated candidate: {path_str}")
                continue
            seen.add(key)
            entries.append(CandidateEntry(path=path_str, sequence=len(entries)))
        return entries

    def _digest_all(self, entries: List[CandidateEntry]):
        if self.workers == 1 or len(entries) < 2:
            return map(self._digest_entry, entries)
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            # map() yields in submission order, not completion order
            return list(executor.map(self._digest_entry, entries))

    def _digest_entry(self, entry: CandidateEntry) -> Tuple[CandidateEntry, Optional[EntryUnreadable]]:
        try:
            entry.size = os.stat(entry.path).st_size
            self.hasher.compute_entry_digest(entry)
            return entry, None
        except EntryUnreadable as e:
            return entry, e
        except OSError as e:
            return entry, EntryUnreadable(entry.path, e)


def build_inventory(candidates: Sequence[PathLike], algorithm: str = "sha1",
                    workers: int = 1) -> Inventory:
    """Convenience wrapper: build an inventory with a fresh hasher."""
    return InventoryBuilderImpl(HasherImpl(algorithm), workers=workers).build(candidates)

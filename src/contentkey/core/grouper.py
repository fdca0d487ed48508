"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/grouper.py
Groups candidate entries by content digest, preserving discovery order.
"""

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List

from contentkey.core.models import CandidateEntry, Digest, InventoryGroup

logger = logging.getLogger(__name__)


class FileGrouperImpl:
    """
    Groups entries by digest.
    Unlike a duplicate-only filter, single-member groups are kept: they are the unique files.
    """

    def group_by_digest(self, entries: List[CandidateEntry]) -> Dict[Digest, InventoryGroup]:
        """
        Groups entries by their cached digest.
        Entries without a digest are ignored; group and member order follow `sequence`.
        """
        grouped = self._group_by(entries, lambda e: e.digest)
        return {
            digest: InventoryGroup(digest=digest, entries=members)
            for digest, members in grouped.items()
        }

    @staticmethod
    def _group_by(entries: List[CandidateEntry],
                  key_func: Callable[[CandidateEntry], Any]) -> Dict[Any, List[CandidateEntry]]:
        """
        Helper method to group entries by any computed key.
        Args:
            entries: Entries to group
            key_func: Function that computes a hashable key from an entry
        Returns:
            Dict[key, List[CandidateEntry]] ordered by the first member's sequence
        """
        groups = defaultdict(list)
        for entry in sorted(entries, key=lambda e: e.sequence):
            key = key_func(entry)
            if key is None:
                logger.debug(f"No grouping key for {entry.path}, skipped")
                continue
            groups[key].append(entry)
        return dict(groups)

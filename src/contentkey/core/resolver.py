"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/resolver.py
Classifies inventory groups into unique files and duplicate sets.

The canonical representative of a duplicate group is the member with the lowest
discovery sequence number. Digest equality is authoritative: two files with equal
digests are duplicates whatever their names or extensions. A collision of the hash
primitive would therefore be reported as a duplicate; with the supported cryptographic
algorithms this is an accepted risk, with xxHash it is noticeably more likely.
The resolver never touches the filesystem.
"""

import logging
from typing import Iterable, List, Mapping, Union

from contentkey.core.interfaces import DuplicateResolver
from contentkey.core.models import Digest, DuplicateSet, Inventory, InventoryGroup, Resolution

logger = logging.getLogger(__name__)


class DuplicateResolverImpl(DuplicateResolver):

    def resolve(
        self,
        groups: Union[Inventory, Mapping[Digest, InventoryGroup], Iterable[InventoryGroup]]
    ) -> Resolution:
        """
        Returns unique paths and duplicate sets ordered by their canonical's sequence.
        """
        resolution = Resolution()
        ordered = []

        for group in self._iter_groups(groups):
            if not group.entries:
                continue

            members = sorted(group.entries, key=lambda e: e.sequence)
            if len(members) == 1:
                resolution.uniques.add(members[0].path)
                continue

            canonical, extras = members[0], members[1:]
            ordered.append((canonical.sequence, DuplicateSet(
                digest=group.digest,
                canonical=canonical.path,
                extras=[e.path for e in extras],
                size=canonical.size,
            )))
            self._check_extensions(group.digest, members)

        ordered.sort(key=lambda item: item[0])
        resolution.duplicate_sets = [dup for _, dup in ordered]
        logger.info(f"Resolved {len(resolution.uniques)} unique files and "
                    f"{len(resolution.duplicate_sets)} duplicate sets")
        return resolution

    @staticmethod
    def _iter_groups(groups) -> List[InventoryGroup]:
        if isinstance(groups, Inventory):
            return list(groups.groups.values())
        if isinstance(groups, Mapping):
            return list(groups.values())
        return list(groups)

    @staticmethod
    def _check_extensions(digest: Digest, members) -> None:
        extensions = {(m.extension or "").lower() for m in members}
        if len(extensions) > 1:
            logger.debug(f"Duplicate set {digest.hex[:12]} mixes extensions {sorted(extensions)}; "
                         f"content digest decides")


def resolve(groups) -> Resolution:
    return DuplicateResolverImpl().resolve(groups)

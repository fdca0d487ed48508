"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/renamer.py
Deterministic, content-derived file names.

NAMING
------
  target = <first prefix_length hex chars of the digest><original extension>,
  in the same directory as the source.

SAFETY RULES
------------
  • Idempotent: a file already at its target name is reported UNCHANGED, never renamed again
  • No overwrite: an occupied target raises TargetNameCollision and the source stays put
  • Atomic no-clobber move: hard link to the target (fails if it exists), then unlink the
    source; where hard links are unavailable, check the target is absent and os.rename
  • Renames to the same target path are serialized by a per-target lock
"""

import errno
import logging
import os
import threading
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Union

from contentkey.core.errors import ContentKeyError, EntryUnreadable, TargetNameCollision
from contentkey.core.hasher import HasherImpl
from contentkey.core.models import Digest, RenameOutcome, RenamePlan, RenameSummary

logger = logging.getLogger(__name__)

DEFAULT_PREFIX_LENGTH = 7

# errno values meaning "this filesystem cannot hard link here"
_LINK_UNSUPPORTED = {errno.EPERM, errno.EXDEV, errno.EMLINK, errno.ENOTSUP, errno.EOPNOTSUPP}


class RenamerImpl:
    """
    Plans and applies digest-derived renames.

    Attributes:
        hasher: Digest Engine used by rename_all()
        prefix_length: Number of hex characters kept from the digest
    """

    def __init__(self, hasher: Optional[HasherImpl] = None,
                 prefix_length: int = DEFAULT_PREFIX_LENGTH):
        self.hasher = hasher or HasherImpl()
        max_length = self.hasher.algorithm.digest_size * 2
        if prefix_length < 1 or prefix_length > max_length:
            raise ValueError(
                f"Prefix length must be between 1 and {max_length} for {self.hasher.algorithm_name}"
            )
        self.prefix_length = prefix_length
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def plan_rename(self, path: Union[str, Path], digest: Digest,
                    extension: Optional[str] = None) -> RenamePlan:
        """
        Compute where `path` should live.

        Args:
            path: Current file path
            digest: Content digest of the file
            extension: Extension to keep; defaults to the file's last suffix (case preserved)
        """
        source = Path(path)
        if extension is None:
            extension = source.suffix
        elif extension and not extension.startswith("."):
            extension = f".{extension}"

        prefix = digest.prefix(self.prefix_length)
        target = source.with_name(f"{prefix}{extension}")
        return RenamePlan(original_path=str(source), target_path=str(target), digest_prefix=prefix)

    def apply(self, plan: RenamePlan) -> RenameOutcome:
        """
        Execute a plan.

        Returns:
            RenameOutcome.RENAMED or RenameOutcome.UNCHANGED

        Raises:
            TargetNameCollision: target exists and is a different file
            FileNotFoundError: source no longer exists
            OSError: any other filesystem failure
        """
        if plan.is_noop:
            logger.debug(f"Already named by content: {plan.original_path}")
            return RenameOutcome.UNCHANGED

        with self._lock_for(plan.target_path):
            source, target = plan.original_path, plan.target_path

            if os.path.lexists(target):
                if self._same_file(source, target):
                    # e.g. case-only difference on a case-insensitive filesystem
                    logger.debug(f"Target is the source itself: {target}")
                    return RenameOutcome.UNCHANGED
                raise TargetNameCollision(source, target, self._collision_detail(source, target))

            if not os.path.exists(source):
                raise FileNotFoundError(errno.ENOENT, "Source file not found", source)

            self._move_no_clobber(source, target)

        logger.debug(f"Renamed {source} -> {target}")
        return RenameOutcome.RENAMED

    def rename_all(
        self,
        paths: Iterable[Union[str, Path]],
        dry_run: bool = False,
        progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None
    ) -> RenameSummary:
        """
        Rename every path to its content-derived name.
        Failures (unreadable files, collisions, vanished files) are collected, never raised.
        With dry_run, plans are classified without touching the filesystem.
        """
        summary = RenameSummary()
        paths = list(paths)
        total = len(paths)

        for processed, path in enumerate(paths, 1):
            try:
                digest = self.hasher.compute_file_digest(path)
                plan = self.plan_rename(path, digest)
                if dry_run:
                    summary.record(plan, self._classify(plan))
                else:
                    summary.record(plan, self.apply(plan))
            except (ContentKeyError, OSError) as e:
                reason = e.reason if isinstance(e, EntryUnreadable) else str(e)
                logger.warning(f"Rename failed for {path}: {reason}")
                summary.add_failure(str(path), e)

            if progress_callback:
                progress_callback("Rename", processed, total)

        logger.info(f"Rename pass: {summary.renamed_count} renamed, {summary.unchanged_count} unchanged, "
                    f"{summary.failed_count} failed")
        return summary

    def _classify(self, plan: RenamePlan) -> RenameOutcome:
        """Dry-run counterpart of apply(): same checks, no move."""
        if plan.is_noop:
            return RenameOutcome.UNCHANGED
        if os.path.lexists(plan.target_path):
            if self._same_file(plan.original_path, plan.target_path):
                return RenameOutcome.UNCHANGED
            raise TargetNameCollision(plan.original_path, plan.target_path,
                                      self._collision_detail(plan.original_path, plan.target_path))
        return RenameOutcome.RENAMED

    def _lock_for(self, target: str) -> threading.Lock:
        key = os.path.normcase(os.path.abspath(target))
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @staticmethod
    def _same_file(source: str, target: str) -> bool:
        try:
            return os.path.samefile(source, target)
        except OSError:
            return False

    def _collision_detail(self, source: str, target: str) -> str:
        try:
            same_content = self.hasher.compute_file_digest(source) == self.hasher.compute_file_digest(target)
        except EntryUnreadable:
            return "occupied by an unreadable file"
        if same_content:
            return "occupied by a byte-identical copy"
        return "occupied by different content"

    @staticmethod
    def _move_no_clobber(source: str, target: str) -> None:
        try:
            os.link(source, target)
        except FileExistsError as e:
            raise TargetNameCollision(source, target, "created concurrently") from e
        except (OSError, NotImplementedError) as e:
            if isinstance(e, OSError) and e.errno not in _LINK_UNSUPPORTED:
                raise
            logger.debug(f"Hard links unavailable for {target} ({e}); using checked rename")
            if os.path.lexists(target):
                raise TargetNameCollision(source, target, "created concurrently")
            os.rename(source, target)
            return

        try:
            os.unlink(source)
        except OSError:
            # Leave the filesystem as it was: drop the new link, keep the source
            try:
                os.unlink(target)
            except OSError as rollback_error:
                logger.error(f"Could not remove {target} after failed rename of {source}: {rollback_error}")
            raise


def plan_rename(path, digest: Digest, extension: Optional[str] = None,
                prefix_length: int = DEFAULT_PREFIX_LENGTH) -> RenamePlan:
    return RenamerImpl(HasherImpl(digest.algorithm), prefix_length=prefix_length).plan_rename(
        path, digest, extension)

"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/duplicate_service.py
Actions on a Resolution: pick the files to remove and update the resolution afterwards.
The canonical member of every duplicate set is always preserved.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from contentkey.core.models import DuplicateSet, Resolution
from contentkey.services.file_service import FileService


@dataclass
class RemovalReport:
    """
    Outcome of removing or relocating extras.
    Trashed files count as freed space; relocated files only as moved bytes.
    """
    removed: List[str] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)
    bytes_freed: int = 0
    bytes_moved: int = 0
    destination_dir: Optional[str] = None

    def is_clean(self) -> bool:
        return not self.failed


class DuplicateService:
    @staticmethod
    def remove_paths_from_resolution(resolution: Resolution, file_paths: List[str]) -> Resolution:
        """
        Returns a new Resolution without the given extras.

        Duplicate sets left with only their canonical member move to uniques.
        Canonical paths are never removed by this method.
        """
        to_remove = set(file_paths)
        updated = Resolution(uniques=set(resolution.uniques))
        for dup in resolution.duplicate_sets:
            extras = [p for p in dup.extras if p not in to_remove]
            if extras:
                updated.duplicate_sets.append(
                    DuplicateSet(digest=dup.digest, canonical=dup.canonical, extras=extras, size=dup.size))
            else:
                updated.uniques.add(dup.canonical)
        return updated

    @staticmethod
    def keep_only_one_file_per_set(resolution: Resolution) -> Tuple[List[str], Resolution]:
        """
        Keeps the canonical file of each duplicate set and marks the rest for deletion.
        Returns:
            - List of file paths to be deleted
            - Updated resolution
        """
        files_to_delete = list(resolution.extras)
        updated = DuplicateService.remove_paths_from_resolution(resolution, files_to_delete)
        return files_to_delete, updated

    @staticmethod
    def remove_extras(resolution: Resolution, destination_dir: Optional[str] = None) -> RemovalReport:
        """
        Moves every extra to the system trash, or into `destination_dir` when given.
        Individual failures are collected in the report.
        """
        files_to_remove, _ = DuplicateService.keep_only_one_file_per_set(resolution)
        sizes = {path: dup.size or 0 for dup in resolution.duplicate_sets for path in dup.extras}

        if destination_dir:
            _, errors = FileService.move_multiple_to_directory(files_to_remove, destination_dir)
            failed_paths = {path for path, _ in errors}
            removed = [p for p in files_to_remove if p not in failed_paths]
        else:
            removed, errors = FileService.move_multiple_to_trash(files_to_remove)

        handled_bytes = sum(sizes.get(path, 0) for path in removed)
        if destination_dir:
            return RemovalReport(removed=removed, failed=errors, bytes_moved=handled_bytes,
                                 destination_dir=destination_dir)
        return RemovalReport(removed=removed, failed=errors, bytes_freed=handled_bytes)

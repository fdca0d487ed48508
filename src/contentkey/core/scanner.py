"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/scanner.py
Enumerates candidate files for an inventory pass.
Features:
- Recursive or single-level traversal
- Deterministic order: entries are sorted by name at every directory level
- Skips symlinks, system trash and excluded directories
- Optional extension filter
"""

import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from contentkey.core.interfaces import FileScanner

logger = logging.getLogger(__name__)


class FileScannerImpl(FileScanner):
    """
    Lists files under a root directory and returns their paths in a stable order.
    Directory listing order differs between platforms and filesystems, so the
    scanner sorts names itself; the resulting order is the discovery order used
    for canonical-representative selection.

    Attributes:
        root_dir: Root directory to scan
        recursive: Descend into subdirectories
        extensions: List of allowed file extensions (e.g., [".csv", ".jpg"])
        excluded_dirs: Directories that are never entered
    """

    def __init__(
        self,
        root_dir: str,
        recursive: bool = True,
        extensions: Optional[List[str]] = None,
        excluded_dirs: Optional[List[str]] = None
    ):
        self.root_dir = root_dir
        self.recursive = recursive
        self.extensions = [ext.lower() for ext in extensions] if extensions else []
        self.excluded_dirs = [str(Path(d).resolve()) for d in excluded_dirs] if excluded_dirs else []

    def scan(self) -> List[str]:
        """
        Returns candidate file paths in deterministic discovery order.

        Raises:
            RuntimeError: if the root directory does not exist or is not a directory.
        """
        logger.debug(f"Scanning {self.root_dir} (recursive={self.recursive}, extensions={self.extensions})")

        root_path = Path(self.root_dir)
        if not root_path.exists():
            error_msg = f"Directory does not exist: {self.root_dir}"
            logger.error(error_msg)
            raise RuntimeError(error_msg)
        if not root_path.is_dir():
            error_msg = f"Not a directory: {self.root_dir}"
            logger.error(error_msg)
            raise RuntimeError(error_msg)

        found_files = []

        def on_walk_error(error: OSError):
            logger.warning(f"Cannot list directory {error.filename}: {error.strerror}")

        for root, dirs, files in os.walk(str(root_path), onerror=on_walk_error):
            if self.recursive:
                # Filter and sort in place so os.walk visits subdirectories in a stable order
                dirs[:] = sorted(d for d in dirs if self._prefilter_dirs(Path(root) / d))
            else:
                dirs[:] = []

            for filename in sorted(files):
                path = Path(root) / filename
                if self._accept_file(path):
                    found_files.append(str(path))

        logger.debug(f"Scan completed. Found {len(found_files)} candidate files.")
        return found_files

    @staticmethod
    def _is_system_trash(path: Path) -> bool:
        """
        Check if path belongs to OS trash/recycle bin (cross-platform).
        Returns False on any error.
        """
        try:
            path_str = str(path.resolve(strict=False))

            if sys.platform == "win32":
                if "$Recycle.Bin" in path_str or "\\Recycler\\" in path_str:
                    return True
            elif sys.platform == "darwin":
                if "/.Trash/" in path_str or path_str.endswith("/.Trash"):
                    return True
            else:
                if ".local/share/Trash" in path_str or "/.trash/" in path_str:
                    return True

            return False
        except (OSError, ValueError):
            return False

    @staticmethod
    def _is_excluded_directory(path: Path, excluded_dirs: List[str]) -> bool:
        """Check if path is within an excluded directory."""
        try:
            path_str = str(path.resolve(strict=False))
            for excluded_dir in excluded_dirs:
                normalized_excluded = os.path.normpath(excluded_dir)
                if path_str.startswith(normalized_excluded + os.sep) or \
                        path_str == normalized_excluded:
                    return True
            return False
        except (OSError, ValueError):
            return False

    def _prefilter_dirs(self, path: Path) -> bool:
        """Skip system trash, excluded, symlinked and inaccessible directories."""
        if FileScannerImpl._is_system_trash(path):
            logger.debug(f"Skipping system trash directory: {path}")
            return False

        if self.excluded_dirs and self._is_excluded_directory(path, self.excluded_dirs):
            logger.debug(f"Skipping excluded directory: {path}")
            return False

        try:
            if path.is_symlink():
                logger.debug(f"Skipping symlinked directory: {path}")
                return False
            return path.is_dir() and os.access(path, os.R_OK | os.X_OK)
        except OSError:
            logger.debug(f"Skipping inaccessible directory: {path}")
            return False

    def _accept_file(self, path: Path) -> bool:
        try:
            if path.is_symlink():
                logger.debug(f"Skipping symbolic link: {path}")
                return False
            if not path.is_file():
                return False
        except OSError as e:
            logger.debug(f"Could not check {path}: {e}")
            return False

        if not self._extension_passes(path):
            logger.debug(f"Skipping {path} (extension not allowed)")
            return False
        return True

    def _extension_passes(self, path: Path) -> bool:
        """
        Check if file matches any of the allowed extensions.
        Args:
            path: Path object pointing to the file
        Returns:
            True if file has one of the allowed extensions
        """
        if not self.extensions:
            return True
        ext = path.suffix.lower()
        return any(ext == allowed_ext for allowed_ext in self.extensions)

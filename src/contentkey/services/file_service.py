"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/file_service.py
Filesystem actions on detected duplicates: move to the system trash or relocate.
Neither action ever overwrites an existing file.
"""
import logging
import os
import shutil
from pathlib import Path
from typing import List, Tuple

from send2trash import send2trash

logger = logging.getLogger(__name__)


class FileService:
    """
    Safe file actions used after duplicate resolution.
    """

    @staticmethod
    def move_to_trash(file_path: str):
        """Moves a file to the system trash."""
        path = Path(file_path).resolve()

        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        try:
            send2trash(str(path))
        except Exception as e:
            raise RuntimeError(f"Failed to move to trash: {e}") from e
        logger.debug(f"Moved to trash: {path}")

    @staticmethod
    def move_to_directory(file_path: str, destination_dir: str) -> str:
        """
        Moves a file into `destination_dir`, keeping its name.
        If the name is taken, a numeric suffix is added ("name (1).ext").
        Returns the new path.
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        destination = Path(destination_dir)
        destination.mkdir(parents=True, exist_ok=True)

        stem, suffix = path.stem, path.suffix
        candidate = destination / path.name
        counter = 1
        while True:
            try:
                # O_EXCL reserves the name atomically; the move then replaces the placeholder
                fd = os.open(candidate, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
                os.close(fd)
                break
            except FileExistsError:
                candidate = destination / f"{stem} ({counter}){suffix}"
                counter += 1

        try:
            os.replace(path, candidate)
        except OSError:
            candidate.unlink()
            # Cross-device: copy content into the reserved name, then drop the source
            try:
                shutil.move(str(path), str(candidate))
            except OSError as e:
                raise RuntimeError(f"Failed to move {path} to {destination}: {e}") from e
        logger.debug(f"Relocated {path} -> {candidate}")
        return str(candidate)

    @classmethod
    def move_multiple_to_trash(cls, file_paths: List[str]) -> Tuple[List[str], List[Tuple[str, str]]]:
        """
        Moves multiple files to trash, continuing past individual failures.
        Returns (moved paths, [(path, error message)]).
        """
        moved, errors = [], []
        for path in file_paths:
            try:
                cls.move_to_trash(path)
                moved.append(path)
            except (OSError, RuntimeError) as e:
                logger.warning(f"Failed to trash {path}: {e}")
                errors.append((path, str(e)))
        return moved, errors

    @classmethod
    def move_multiple_to_directory(cls, file_paths: List[str],
                                   destination_dir: str) -> Tuple[List[str], List[Tuple[str, str]]]:
        """Relocates multiple files; returns (new paths, [(path, error message)])."""
        moved, errors = [], []
        for path in file_paths:
            try:
                moved.append(cls.move_to_directory(path, destination_dir))
            except (OSError, RuntimeError) as e:
                logger.warning(f"Failed to relocate {path}: {e}")
                errors.append((path, str(e)))
        return moved, errors

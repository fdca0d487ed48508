"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/params.py
DTO for run parameters with built-in validation.
Interface-agnostic — used by commands, the CLI and library callers.
"""

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from contentkey.core.hasher import DEFAULT_ALGORITHM, DEFAULT_CHUNK_SIZE, get_algorithm, normalize_algorithm_name
from contentkey.core.renamer import DEFAULT_PREFIX_LENGTH

ENV_ALGORITHM = "CONTENTKEY_ALGORITHM"
ENV_PREFIX_LENGTH = "CONTENTKEY_PREFIX_LENGTH"
ENV_WORKERS = "CONTENTKEY_WORKERS"


@dataclass
class ContentParams:
    """Parameters for inventory, dedup and rename runs, validated on creation."""
    root_dir: str
    recursive: bool = True
    algorithm: str = DEFAULT_ALGORITHM
    prefix_length: int = DEFAULT_PREFIX_LENGTH
    extensions: List[str] = field(default_factory=list)
    excluded_dirs: List[str] = field(default_factory=list)
    workers: int = 1
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        if not self.root_dir:
            raise ValueError("Root directory cannot be empty")

        # Raises UnsupportedAlgorithm before any file is touched
        self.algorithm = normalize_algorithm_name(self.algorithm)

        max_prefix = get_algorithm(self.algorithm).digest_size * 2
        if not 1 <= self.prefix_length <= max_prefix:
            raise ValueError(f"Prefix length must be between 1 and {max_prefix} for {self.algorithm}")

        if self.workers < 1:
            raise ValueError("Number of workers must be at least 1")

        if self.chunk_size <= 0:
            raise ValueError("Chunk size must be positive")

        # Normalize extensions: ensure they start with dot and are lowercase
        normalized = []
        for ext in self.extensions:
            ext = ext.strip().lower()
            if ext and not ext.startswith('.'):
                ext = f".{ext}"
            if ext:
                normalized.append(ext)
        self.extensions = normalized

    @staticmethod
    def from_env(
            root_dir: str,
            algorithm: Optional[str] = None,
            prefix_length: Optional[int] = None,
            workers: Optional[int] = None,
            environ: Optional[Mapping[str, str]] = None,
            **kwargs
    ) -> 'ContentParams':
        """
        Factory that fills unset options from CONTENTKEY_* environment variables.
        Explicit arguments win over the environment.
        """
        env = os.environ if environ is None else environ

        if algorithm is None:
            algorithm = env.get(ENV_ALGORITHM) or DEFAULT_ALGORITHM
        if prefix_length is None:
            prefix_length = _int_from_env(env, ENV_PREFIX_LENGTH, DEFAULT_PREFIX_LENGTH)
        if workers is None:
            workers = _int_from_env(env, ENV_WORKERS, 1)

        return ContentParams(
            root_dir=root_dir,
            algorithm=algorithm,
            prefix_length=prefix_length,
            workers=workers,
            **kwargs
        )


def _int_from_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{raw}'")

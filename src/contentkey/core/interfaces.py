"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines core interfaces (Protocols) used throughout contentkey.
These protocols enforce structural typing using Python's `typing.Protocol` so that
hash primitives, the inventory pass and the resolver can be swapped in tests.

Key Components:
---------------
- HashState: Incremental hashing object (update / digest).
- HashAlgorithm: Named factory of HashState objects (SHA-1, SHA-256, xxHash, ...).
- Hasher: Digest Engine interface for files, byte strings and values.
- FileScanner: Enumeration collaborator returning candidate paths.
- InventoryBuilder: Single-pass digest grouping of candidate paths.
- DuplicateResolver: Classification of inventory groups.
"""

from pathlib import Path
from typing import Any, BinaryIO, Iterable, Mapping, Protocol, Sequence, Union

from contentkey.core.models import Digest, Inventory, InventoryGroup, Resolution, CandidateEntry

PathLike = Union[str, Path]


class HashState(Protocol):
    def update(self, data: bytes) -> None: ...
    def digest(self) -> bytes: ...


class HashAlgorithm(Protocol):
    """
    Interface for pluggable hash primitives.

    Allows plugging in hashlib or xxHash functions without affecting the
    inventory, renaming or pseudonymization logic.
    """

    name: str
    digest_size: int

    def new(self) -> HashState:
        """Returns a fresh incremental hashing state."""
        ...


class Hasher(Protocol):
    """Interface for computing digests of files, byte strings and values."""
    algorithm: HashAlgorithm

    def compute_file_digest(self, source: Union[PathLike, BinaryIO]) -> Digest: ...
    def compute_entry_digest(self, entry: CandidateEntry) -> Digest: ...
    def compute_bytes_digest(self, data: bytes) -> Digest: ...
    def compute_value_digest(self, value: Any) -> Digest: ...


class FileScanner(Protocol):
    """
    Interface for enumerating candidate files.

    Methods:
        scan: Returns candidate paths in a deterministic order.
    """
    def scan(self) -> list:
        ...


class InventoryBuilder(Protocol):
    def build(self, candidates: Sequence[PathLike]) -> Inventory:
        """
        Digest every candidate once and group paths by digest.

        Returns:
            Inventory with ordered groups and the unreadable-entries map.
        """
        ...


class DuplicateResolver(Protocol):
    def resolve(
        self,
        groups: Union[Inventory, Mapping[Digest, InventoryGroup], Iterable[InventoryGroup]]
    ) -> Resolution:
        """Split groups into unique paths and duplicate sets with a canonical member."""
        ...

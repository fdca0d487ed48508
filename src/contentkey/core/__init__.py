"""
Core content-addressing engine — digest engine, inventory, resolver, renamer and pseudonymizer.

This package contains the foundation of contentkey:
- HasherImpl + HashlibAlgorithmImpl / XXHashAlgorithmImpl: streaming file and value digests
- canonical_bytes: deterministic serialization of in-memory values
- InventoryBuilderImpl: single-pass digest grouping with per-entry error capture
- DuplicateResolverImpl: unique / duplicate classification with first-discovered canonical
- RenamerImpl: idempotent, collision-safe digest-derived renaming
- Pseudonymizer: one-way tokens for sensitive values
- FileScannerImpl: deterministic enumeration of candidate files

All components are pure Python with no UI dependencies.
"""

from .errors import (
    ContentKeyError, UnsupportedAlgorithm, EntryUnreadable, TargetNameCollision, SerializationError)
from .models import (
    Digest, CandidateEntry, InventoryGroup, Inventory, DuplicateSet, Resolution,
    RenamePlan, RenameOutcome, RenameSummary, RenameFailure, PseudonymRecord, RunStats, Phase)
from .serializer import canonical_bytes
from .hasher import (
    HasherImpl, HashlibAlgorithmImpl, XXHashAlgorithmImpl, DEFAULT_ALGORITHM,
    digest, digest_file, digest_value, get_algorithm, supported_algorithms)
from .scanner import FileScannerImpl
from .grouper import FileGrouperImpl
from .inventory import InventoryBuilderImpl, build_inventory
from .resolver import DuplicateResolverImpl, resolve
from .renamer import RenamerImpl, DEFAULT_PREFIX_LENGTH, plan_rename
from .pseudonymizer import Pseudonymizer, pseudonymize
from .params import ContentParams

__all__ = [
    "ContentKeyError",
    "UnsupportedAlgorithm",
    "EntryUnreadable",
    "TargetNameCollision",
    "SerializationError",
    "Digest",
    "CandidateEntry",
    "InventoryGroup",
    "Inventory",
    "DuplicateSet",
    "Resolution",
    "RenamePlan",
    "RenameOutcome",
    "RenameSummary",
    "RenameFailure",
    "PseudonymRecord",
    "RunStats",
    "Phase",
    "canonical_bytes",
    "HasherImpl",
    "HashlibAlgorithmImpl",
    "XXHashAlgorithmImpl",
    "DEFAULT_ALGORITHM",
    "digest",
    "digest_file",
    "digest_value",
    "get_algorithm",
    "supported_algorithms",
    "FileScannerImpl",
    "FileGrouperImpl",
    "InventoryBuilderImpl",
    "build_inventory",
    "DuplicateResolverImpl",
    "resolve",
    "RenamerImpl",
    "DEFAULT_PREFIX_LENGTH",
    "plan_rename",
    "Pseudonymizer",
    "pseudonymize",
    "ContentParams",
]

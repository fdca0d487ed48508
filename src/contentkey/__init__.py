"""
contentkey — content digests, duplicate detection, content-derived names and pseudonyms.

Core features:
- Streaming file digests and canonical value digests (SHA-1 by default, any hashlib or xxHash algorithm)
- Single-pass inventory with first-discovered canonical representatives
- Idempotent, collision-safe renaming to <digest prefix><extension>
- One-way pseudonymous tokens for sensitive identifiers
- Safe removal of duplicate copies to the system trash (via send2trash)
- CLI interface for headless/server usage
"""

from pathlib import Path

# Get version
try:
    from importlib.metadata import version as _version
    __version__ = _version("contentkey")
except Exception:
    try:
        import tomllib  # Python 3.11+
    except ImportError:
        import tomli as tomllib  # Python < 3.11: pip install tomli

    with open(Path(__file__).resolve().parents[2] / "pyproject.toml", "rb") as f:
        __version__ = tomllib.load(f)["project"]["version"]

# Public API: only what users should import directly
from contentkey.commands import InventoryCommand, DeduplicationCommand, RenameCommand, PseudonymizeCommand
from contentkey.core import (
    ContentParams, Digest, Inventory, Resolution, RenameSummary,
    HasherImpl, Pseudonymizer, ContentKeyError, UnsupportedAlgorithm, EntryUnreadable,
    TargetNameCollision, SerializationError,
    digest, digest_file, digest_value, build_inventory, resolve, plan_rename, pseudonymize)
from contentkey.utils.convert_utils import ConvertUtils
from contentkey.services import DuplicateService, ReportService
from contentkey.services.file_service import FileService

__all__ = [
    "InventoryCommand",
    "DeduplicationCommand",
    "RenameCommand",
    "PseudonymizeCommand",
    "ContentParams",
    "Digest",
    "Inventory",
    "Resolution",
    "RenameSummary",
    "HasherImpl",
    "Pseudonymizer",
    "ContentKeyError",
    "UnsupportedAlgorithm",
    "EntryUnreadable",
    "TargetNameCollision",
    "SerializationError",
    "digest",
    "digest_file",
    "digest_value",
    "build_inventory",
    "resolve",
    "plan_rename",
    "pseudonymize",
    "ConvertUtils",
    "DuplicateService",
    "ReportService",
    "FileService",
    "__version__",
]

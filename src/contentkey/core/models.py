"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models for digesting, inventory, duplicate resolution, renaming and pseudonymization.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional, Set, Union


# =============================
# Enums
# =============================

class RenameOutcome(Enum):
    """Result of applying a single RenamePlan."""
    RENAMED = "renamed"
    UNCHANGED = "unchanged"

    def __repr__(self) -> str:
        return self.value


class Phase(str, Enum):
    INVENTORY = "inventory"
    RESOLVE = "resolve"
    RENAME = "rename"
    PSEUDONYMIZE = "pseudonymize"


# ======================
#  Core Data Models
# ======================

@dataclass(frozen=True)
class Digest:
    """
    Fixed-length, immutable content identity.
    Two digests are equal only when both the bytes and the algorithm match.
    """
    value: bytes
    algorithm: str

    def __post_init__(self):
        if not isinstance(self.value, bytes):
            raise ValueError("Digest value must be bytes")
        if not self.value:
            raise ValueError("Digest value cannot be empty")

    @property
    def hex(self) -> str:
        """Canonical lowercase hexadecimal encoding."""
        return self.value.hex()

    @property
    def size(self) -> int:
        """Digest length in bytes."""
        return len(self.value)

    def prefix(self, length: int) -> str:
        """First `length` hex characters of the digest."""
        hex_value = self.hex
        if length < 1 or length > len(hex_value):
            raise ValueError(
                f"Prefix length must be between 1 and {len(hex_value)} for {self.algorithm}"
            )
        return hex_value[:length]

    def __str__(self) -> str:
        return self.hex

    def __repr__(self):
        return f"<Digest {self.algorithm}:{self.hex}>"


@dataclass
class CandidateEntry:
    """
    One file under consideration during a single inventory pass.
    `sequence` is the discovery order assigned before any digesting starts;
    `digest` is filled lazily and cached for the lifetime of the pass.
    """
    path: str
    sequence: int
    size: Optional[int] = None
    digest: Optional[Digest] = None
    name: Optional[str] = None
    extension: Optional[str] = None

    def __post_init__(self):
        """Extract basename and extension from path if not provided."""
        if self.name is None:
            self.name = os.path.basename(self.path)

        if self.extension is None:
            _, ext = os.path.splitext(self.name)
            self.extension = ext  # original case is preserved for renaming

    def __repr__(self):
        return f"<CandidateEntry #{self.sequence} path={self.path}, size={self.size}>"


@dataclass
class InventoryGroup:
    """
    All entries sharing one digest, in discovery order.
    One member means unique content, more than one means duplicates.
    """
    digest: Digest
    entries: List[CandidateEntry] = field(default_factory=list)

    @property
    def paths(self) -> List[str]:
        return [entry.path for entry in self.entries]

    @property
    def member_count(self) -> int:
        return len(self.entries)

    def add_entry(self, entry: CandidateEntry) -> None:
        if entry.digest is not None and entry.digest != self.digest:
            raise ValueError("Cannot add entry with a different digest to a group.")
        self.entries.append(entry)

    def is_duplicate(self) -> bool:
        """True if this group contains at least two files."""
        return self.member_count >= 2

    def __repr__(self):
        return f"<InventoryGroup digest={self.digest.hex[:12]}, count={len(self.entries)}>"


@dataclass
class Inventory:
    """
    Output of one inventory pass: digest groups plus entries that could not be read.
    Groups are ordered by the sequence number of their first member.
    """
    groups: Dict[Digest, InventoryGroup] = field(default_factory=dict)
    unreadable: Dict[str, Exception] = field(default_factory=dict)
    algorithm: str = "sha1"

    @property
    def entry_count(self) -> int:
        return sum(group.member_count for group in self.groups.values())

    def entries(self) -> Iterator[CandidateEntry]:
        """All readable entries in discovery order."""
        all_entries = [e for group in self.groups.values() for e in group.entries]
        return iter(sorted(all_entries, key=lambda e: e.sequence))

    def digest_of(self, path: str) -> Optional[Digest]:
        for entry in self.entries():
            if entry.path == path:
                return entry.digest
        return None

    def __len__(self):
        return len(self.groups)

    def __iter__(self):
        return iter(self.groups.values())

    def __repr__(self):
        return (f"<Inventory groups={len(self.groups)}, entries={self.entry_count}, "
                f"unreadable={len(self.unreadable)}>")


@dataclass
class DuplicateSet:
    """Canonical representative of a duplicate group and the extra copies."""
    digest: Digest
    canonical: str
    extras: List[str] = field(default_factory=list)
    size: Optional[int] = None

    @property
    def paths(self) -> List[str]:
        return [self.canonical] + list(self.extras)

    @property
    def reclaimable_bytes(self) -> int:
        """Bytes freed if every extra were removed."""
        return (self.size or 0) * len(self.extras)

    def __repr__(self):
        return f"<DuplicateSet canonical={self.canonical}, extras={len(self.extras)}>"


@dataclass
class Resolution:
    """Classification of an inventory into unique files and duplicate sets."""
    uniques: Set[str] = field(default_factory=set)
    duplicate_sets: List[DuplicateSet] = field(default_factory=list)

    @property
    def extras(self) -> List[str]:
        """All non-canonical duplicates, in report order."""
        return [path for dup in self.duplicate_sets for path in dup.extras]

    @property
    def reclaimable_bytes(self) -> int:
        return sum(dup.reclaimable_bytes for dup in self.duplicate_sets)

    def has_duplicates(self) -> bool:
        return bool(self.duplicate_sets)


@dataclass(frozen=True)
class RenamePlan:
    """A single renaming decision: move original_path to target_path."""
    original_path: str
    target_path: str
    digest_prefix: str

    @property
    def is_noop(self) -> bool:
        return os.path.normpath(self.original_path) == os.path.normpath(self.target_path)


@dataclass
class RenameFailure:
    path: str
    reason: str
    error: Optional[Exception] = field(default=None, repr=False)


@dataclass
class RenameSummary:
    """Result of a rename pass: what moved, what was already correct, what failed."""
    renamed: List[RenamePlan] = field(default_factory=list)
    unchanged: List[RenamePlan] = field(default_factory=list)
    failures: List[RenameFailure] = field(default_factory=list)

    @property
    def renamed_count(self) -> int:
        return len(self.renamed)

    @property
    def unchanged_count(self) -> int:
        return len(self.unchanged)

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    def record(self, plan: RenamePlan, outcome: RenameOutcome) -> None:
        if outcome == RenameOutcome.RENAMED:
            self.renamed.append(plan)
        else:
            self.unchanged.append(plan)

    def add_failure(self, path: str, error: Exception) -> None:
        self.failures.append(RenameFailure(path=str(path), reason=str(error), error=error))

    def is_clean(self) -> bool:
        return not self.failures


@dataclass
class PseudonymRecord:
    """
    Owner-held mapping entry. raw_value stays in process memory only;
    it is excluded from repr so it cannot leak through logging.
    """
    raw_value: Any = field(repr=False)
    token: str
    digest: Digest


class RunStats:
    """
    Statistics collected during one run, per phase.
    """
    def __init__(self):
        self.total_time: float = 0.0
        self.phase_stats: Dict[str, Dict[str, Union[int, float]]] = {}
        self._listeners: List[Callable[[str, Dict], None]] = []

    def add_listener(self, listener: Callable[[str, Dict], None]):
        """Adds a listener to receive updates when stats are updated."""
        self._listeners.append(listener)

    def update_phase(
            self,
            phase_name: str,
            groups_found: int,
            files_processed: int,
            duration: float
    ) -> None:
        if phase_name not in self.phase_stats:
            self.phase_stats[phase_name] = {
                "groups": 0,
                "files": 0,
                "time": 0.0
            }
        self.phase_stats[phase_name]["groups"] += groups_found
        self.phase_stats[phase_name]["files"] += files_processed
        self.phase_stats[phase_name]["time"] += duration
        self.total_time += duration

        for listener in self._listeners:
            listener(phase_name, self.phase_stats[phase_name])

    def print_summary(self) -> str:
        labels = {
            Phase.INVENTORY.value: "📁 Inventory",
            Phase.RESOLVE.value: "🔍 Duplicate Resolution",
            Phase.RENAME.value: "✏️ Rename",
            Phase.PSEUDONYMIZE.value: "🔒 Pseudonymization",
        }

        lines = [
            "📊 Run Statistics:",
            f"Total Execution Time: {self.total_time:.3f}s\n",
            "Phase: GROUPS / FILES / TIME"
        ]

        for phase, data in self.phase_stats.items():
            label = labels.get(phase, phase.title())
            lines.append(f"{label}: {data['groups']} / {data['files']} / {data['time']:.3f}s")

        return "\n".join(lines)

"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/errors.py
Error taxonomy for digesting, inventory, renaming and pseudonymization.

Configuration errors (UnsupportedAlgorithm) are raised before any work starts.
Per-entry errors (EntryUnreadable, TargetNameCollision) are captured by the passes
and reported next to partial results.
"""


class ContentKeyError(Exception):
    """Base class for all contentkey errors."""


class UnsupportedAlgorithm(ContentKeyError, ValueError):
    """Raised when an algorithm name does not map to a known hash function."""

    def __init__(self, name: str, supported=None):
        self.name = name
        self.supported = sorted(supported) if supported else []
        message = f"Unsupported hash algorithm: '{name}'"
        if self.supported:
            message += f" (supported: {', '.join(self.supported)})"
        super().__init__(message)


class EntryUnreadable(ContentKeyError, OSError):
    """Raised when a file cannot be read while computing its digest."""

    def __init__(self, path: str, cause: BaseException):
        self.path = str(path)
        self.cause = cause
        super().__init__(f"Cannot read {self.path}: {cause}")

    def __str__(self) -> str:
        return self.args[0]

    @property
    def reason(self) -> str:
        """Short human-readable reason, without the path."""
        if isinstance(self.cause, OSError) and self.cause.strerror:
            return self.cause.strerror
        return str(self.cause) or type(self.cause).__name__


class TargetNameCollision(ContentKeyError, FileExistsError):
    """Raised when a rename target is already occupied by a different file."""

    def __init__(self, source: str, target: str, detail: str = ""):
        self.source = str(source)
        self.target = str(target)
        self.detail = detail
        message = f"Target name already taken: {self.target}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)

    def __str__(self) -> str:
        return self.args[0]


class SerializationError(ContentKeyError, TypeError):
    """Raised when a value has no canonical byte representation."""

"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

hasher.py
Digest Engine: computes digests of files, byte strings and values using pluggable hash algorithms.

Files are always read in bounded chunks, so memory use does not depend on file size.
Values go through canonical serialization (core/serializer.py) before hashing.
Computed file digests are cached in the CandidateEntry for the lifetime of an inventory pass.
"""

import hashlib
import logging
from pathlib import Path, PurePath
from typing import Any, BinaryIO, Dict, Optional, Union

import xxhash

from contentkey.core.errors import EntryUnreadable, UnsupportedAlgorithm
from contentkey.core.interfaces import HashAlgorithm, HashState, Hasher
from contentkey.core.models import CandidateEntry, Digest
from contentkey.core.serializer import canonical_bytes

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = "sha1"  # 160-bit
DEFAULT_CHUNK_SIZE = 1024 * 1024

# Fixed-size hashlib algorithms available on every platform (shake_* need a length)
HASHLIB_ALGORITHMS = (
    "md5", "sha1", "sha224", "sha256", "sha384", "sha512",
    "sha3_224", "sha3_256", "sha3_384", "sha3_512",
    "blake2b", "blake2s",
)

XXHASH_ALGORITHMS = ("xxh32", "xxh64", "xxh3_64", "xxh3_128", "xxh128")


class HashlibAlgorithmImpl(HashAlgorithm):
    """Cryptographic hash functions from hashlib."""

    def __init__(self, name: str):
        self.name = name
        self.digest_size = hashlib.new(name).digest_size

    def new(self) -> HashState:
        return hashlib.new(self.name)

    def __repr__(self):
        return f"<HashlibAlgorithm {self.name}>"


# Use the same way to implement and use any other hashing algorithm
class XXHashAlgorithmImpl(HashAlgorithm):
    """Fast non-cryptographic xxHash functions. Not suitable for pseudonymization."""

    def __init__(self, name: str = "xxh64"):
        self.name = name
        self._factory = getattr(xxhash, name)
        self.digest_size = self._factory().digest_size

    def new(self) -> HashState:
        return self._factory()

    def __repr__(self):
        return f"<XXHashAlgorithm {self.name}>"


def _compact(name: str) -> str:
    return name.strip().lower().replace("-", "").replace("_", "")


_REGISTRY: Dict[str, str] = {_compact(n): n for n in HASHLIB_ALGORITHMS + XXHASH_ALGORITHMS}


def supported_algorithms() -> list:
    """Canonical names of all supported algorithms."""
    return sorted(set(_REGISTRY.values()))


def normalize_algorithm_name(name: str) -> str:
    """
    Map a user-supplied name to its canonical form ("SHA-256" -> "sha256").

    Raises:
        UnsupportedAlgorithm: if the name is not known.
    """
    if not isinstance(name, str) or not name.strip():
        raise UnsupportedAlgorithm(str(name), supported_algorithms())
    canonical = _REGISTRY.get(_compact(name))
    if canonical is None:
        raise UnsupportedAlgorithm(name, supported_algorithms())
    return canonical


def get_algorithm(name: str = DEFAULT_ALGORITHM) -> HashAlgorithm:
    """Build the HashAlgorithm for a name. Fails fast on unknown names."""
    canonical = normalize_algorithm_name(name)
    if canonical in XXHASH_ALGORITHMS:
        return XXHashAlgorithmImpl(canonical)
    return HashlibAlgorithmImpl(canonical)


class HasherImpl(Hasher):
    """
    A hasher implementation that supports any algorithm via the HashAlgorithm interface.
    Streams file content in chunks of `chunk_size` bytes.
    """

    def __init__(self, algorithm: Union[HashAlgorithm, str, None] = None,
                 chunk_size: int = DEFAULT_CHUNK_SIZE):
        if algorithm is None or isinstance(algorithm, str):
            algorithm = get_algorithm(algorithm or DEFAULT_ALGORITHM)
        if chunk_size <= 0:
            raise ValueError("Chunk size must be positive")
        self.algorithm = algorithm
        self.chunk_size = chunk_size

    @property
    def algorithm_name(self) -> str:
        return self.algorithm.name

    def compute_file_digest(self, source: Union[str, PurePath, BinaryIO]) -> Digest:
        """
        Digest the full content of a file path or an open binary stream.

        Raises:
            EntryUnreadable: if the file cannot be opened or read.
        """
        value, _ = self._stream_digest(source)
        return Digest(value=value, algorithm=self.algorithm.name)

    def compute_entry_digest(self, entry: CandidateEntry) -> Digest:
        """Computes and caches the digest of an inventory entry."""
        if entry.digest is not None:
            return entry.digest
        value, bytes_read = self._stream_digest(entry.path)
        entry.digest = Digest(value=value, algorithm=self.algorithm.name)
        if entry.size is None:
            entry.size = bytes_read
        return entry.digest

    def compute_bytes_digest(self, data: Union[bytes, bytearray, memoryview]) -> Digest:
        """Digest of an exact byte sequence."""
        state = self.algorithm.new()
        state.update(bytes(data))
        return Digest(value=state.digest(), algorithm=self.algorithm.name)

    def compute_value_digest(self, value: Any) -> Digest:
        """
        Digest of an in-memory value after canonical serialization.

        Raises:
            SerializationError: if the value has no canonical form.
        """
        return self.compute_bytes_digest(canonical_bytes(value))

    def _stream_digest(self, source: Union[str, PurePath, BinaryIO]):
        state = self.algorithm.new()
        bytes_read = 0
        path = getattr(source, "name", "<stream>") if hasattr(source, "read") else str(source)
        try:
            if hasattr(source, "read"):
                bytes_read = self._consume(source, state)
            else:
                with open(source, "rb") as f:
                    bytes_read = self._consume(f, state)
        except OSError as e:
            logger.debug(f"Failed to read {path}: {e}")
            raise EntryUnreadable(str(path), e) from e
        return state.digest(), bytes_read

    def _consume(self, stream: BinaryIO, state: HashState) -> int:
        total = 0
        while True:
            chunk = stream.read(self.chunk_size)
            if not chunk:
                break
            state.update(chunk)
            total += len(chunk)
        return total


# =============================
# Module-level helpers
# =============================

def digest(source: Any, algorithm: str = DEFAULT_ALGORITHM,
           chunk_size: int = DEFAULT_CHUNK_SIZE) -> Digest:
    """
    Compute the digest of `source`.

    Dispatch:
        - pathlib paths and binary streams: file content (streamed)
        - bytes / bytearray / memoryview: the exact byte sequence
        - anything else (including str): canonical serialization of the value

    Plain `str` is always a value; use digest_file() for string paths.
    """
    hasher = HasherImpl(algorithm, chunk_size=chunk_size)
    if isinstance(source, PurePath) or hasattr(source, "read"):
        return hasher.compute_file_digest(source)
    if isinstance(source, (bytes, bytearray, memoryview)):
        return hasher.compute_bytes_digest(source)
    return hasher.compute_value_digest(source)


def digest_file(path: Union[str, Path], algorithm: str = DEFAULT_ALGORITHM,
                chunk_size: int = DEFAULT_CHUNK_SIZE) -> Digest:
    return HasherImpl(algorithm, chunk_size=chunk_size).compute_file_digest(path)


def digest_value(value: Any, algorithm: str = DEFAULT_ALGORITHM) -> Digest:
    return HasherImpl(algorithm).compute_value_digest(value)


def hex_length(algorithm: Optional[str] = None) -> int:
    """Length of the hexadecimal encoding for an algorithm."""
    return get_algorithm(algorithm or DEFAULT_ALGORITHM).digest_size * 2

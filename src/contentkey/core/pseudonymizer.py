"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/pseudonymizer.py
One-way pseudonymous tokens for sensitive identifier values.

token = hex digest of the value's canonical serialization (optionally truncated).
The raw -> token table is kept in process memory for consistency checks only;
the output interface (tokens(), export_rows(), pseudonymize_table()) never carries
raw values, and neither does repr().
"""

import logging
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence

from contentkey.core.errors import SerializationError
from contentkey.core.hasher import HasherImpl, XXHASH_ALGORITHMS
from contentkey.core.models import PseudonymRecord
from contentkey.core.serializer import canonical_bytes

logger = logging.getLogger(__name__)

TOKEN_FIELD = "token"


class Pseudonymizer:
    """
    Deterministic value -> token mapping for one anonymization run.

    Attributes:
        hasher: Digest Engine (default SHA-1)
        token_length: Optional number of hex characters to keep; None keeps the full digest
    """

    def __init__(self, hasher: Optional[HasherImpl] = None, token_length: Optional[int] = None):
        self.hasher = hasher or HasherImpl()
        max_length = self.hasher.algorithm.digest_size * 2
        if token_length is not None and not 1 <= token_length <= max_length:
            raise ValueError(f"Token length must be between 1 and {max_length}")
        if self.hasher.algorithm_name in XXHASH_ALGORITHMS:
            logger.warning(f"{self.hasher.algorithm_name} is not a cryptographic hash; "
                           f"tokens may be reversible by brute force")
        self.token_length = token_length
        # keyed by canonical bytes so that equal values share one record
        self._records: Dict[bytes, PseudonymRecord] = {}
        # token -> canonical key of the first value that produced it
        self._token_owners: Dict[str, bytes] = {}

    def pseudonymize(self, raw_value: Any) -> str:
        """
        Returns the token for `raw_value`. Same value, same token.

        Raises:
            SerializationError: if the value has no canonical form.
        """
        key = canonical_bytes(raw_value)
        record = self._records.get(key)
        if record is not None:
            return record.token

        digest, token = self._token_for(key)
        owner = self._token_owners.setdefault(token, key)
        if owner != key:
            logger.warning(f"Token {token} is shared by distinct values; "
                           f"increase the token length to keep them apart")
        self._records[key] = PseudonymRecord(raw_value=raw_value, token=token, digest=digest)
        return token

    def _token_for(self, key: bytes):
        digest = self.hasher.compute_bytes_digest(key)
        token = digest.hex if self.token_length is None else digest.hex[:self.token_length]
        return digest, token

    def pseudonymize_many(self, values: Iterable[Any]) -> List[str]:
        return [self.pseudonymize(value) for value in values]

    def pseudonymize_table(self, rows: Iterable[Mapping[str, Any]],
                           columns: Sequence[str]) -> List[Dict[str, Any]]:
        """
        Replace the values of sensitive `columns` with tokens.
        Returns new row dicts; input rows are not modified.

        Raises:
            KeyError: if a row lacks one of the columns.
        """
        result = []
        for row in rows:
            missing = [c for c in columns if c not in row]
            if missing:
                raise KeyError(f"Row is missing sensitive column(s): {', '.join(missing)}")
            new_row = dict(row)
            for column in columns:
                new_row[column] = self.pseudonymize(row[column])
            result.append(new_row)
        return result

    def tokens(self) -> List[str]:
        """Distinct tokens in first-seen order."""
        return list(self._token_owners)

    def export_rows(self) -> Iterator[Dict[str, str]]:
        """Token table rows for shared output: a single 'token' field per row."""
        for token in self.tokens():
            yield {TOKEN_FIELD: token}

    def verify(self, prior: Mapping[Any, str]) -> List[Any]:
        """
        Reproducibility check against a previous run's raw -> token mapping.
        Returns the raw values whose token differs now. For the owner only.
        """
        mismatches = []
        for raw_value, token in prior.items():
            # compared without recording, so prior-only values never reach the token table
            _, current = self._token_for(canonical_bytes(raw_value))
            if current != token:
                mismatches.append(raw_value)
        if mismatches:
            logger.warning(f"{len(mismatches)} value(s) no longer map to their prior token")
        return mismatches

    def __len__(self):
        return len(self._records)

    def __contains__(self, raw_value: Any) -> bool:
        try:
            return canonical_bytes(raw_value) in self._records
        except SerializationError:
            return False

    def __repr__(self):
        return (f"<Pseudonymizer algorithm={self.hasher.algorithm_name}, "
                f"token_length={self.token_length}, records={len(self._records)}>")


def pseudonymize(raw_value: Any, algorithm: str = "sha1") -> str:
    """Stateless convenience: token for a single value."""
    return Pseudonymizer(HasherImpl(algorithm)).pseudonymize(raw_value)

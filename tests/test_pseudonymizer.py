"""
Tests for pseudonymous tokens.
Tokens must be stable across runs and must never expose the raw value.
"""
import hashlib
import logging

import pytest

from contentkey.core.errors import SerializationError
from contentkey.core.hasher import HasherImpl
from contentkey.core.pseudonymizer import Pseudonymizer, pseudonymize


class TestTokens:

    def test_same_value_same_token(self):
        assert pseudonymize("P-001") == pseudonymize("P-001")

    def test_stable_across_instances(self):
        assert Pseudonymizer().pseudonymize("P-001") == Pseudonymizer().pseudonymize("P-001")

    def test_different_values_different_tokens(self):
        p = Pseudonymizer()
        assert p.pseudonymize("P-001") != p.pseudonymize("P-002")

    def test_token_is_digest_of_canonical_form(self):
        assert pseudonymize("P-001") == hashlib.sha1(b'"P-001"').hexdigest()

    def test_token_does_not_contain_raw_value(self):
        token = pseudonymize("alice@example.org")
        assert "alice" not in token
        assert len(token) == 40

    def test_truncated_tokens(self):
        p = Pseudonymizer(token_length=12)
        token = p.pseudonymize("P-001")
        assert len(token) == 12
        assert pseudonymize("P-001").startswith(token)

    @pytest.mark.parametrize("length", [0, 41])
    def test_invalid_token_length(self, length):
        with pytest.raises(ValueError):
            Pseudonymizer(token_length=length)

    def test_algorithm_choice(self):
        token = Pseudonymizer(HasherImpl("sha256")).pseudonymize("P-001")
        assert token == hashlib.sha256(b'"P-001"').hexdigest()

    def test_non_serializable_value(self):
        with pytest.raises(SerializationError):
            Pseudonymizer().pseudonymize(object())

    def test_xxhash_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="contentkey.core.pseudonymizer"):
            Pseudonymizer(HasherImpl("xxh64"))
        assert "not a cryptographic hash" in caplog.text


class TestMappingTable:

    def test_distinct_tokens_in_first_seen_order(self):
        p = Pseudonymizer()
        tokens = p.pseudonymize_many(["b", "a", "b"])
        assert tokens[0] == tokens[2]
        assert p.tokens() == [tokens[0], tokens[1]]
        assert len(p) == 2

    def test_contains(self):
        p = Pseudonymizer()
        p.pseudonymize("P-001")
        assert "P-001" in p
        assert "P-002" not in p

    def test_export_rows_have_only_tokens(self):
        p = Pseudonymizer()
        p.pseudonymize_many(["P-001", "P-002"])
        rows = list(p.export_rows())
        assert len(rows) == 2
        assert all(list(row.keys()) == ["token"] for row in rows)
        assert "P-001" not in str(rows)

    def test_repr_does_not_leak_raw_values(self):
        p = Pseudonymizer()
        p.pseudonymize("secret-id-42")
        assert "secret-id-42" not in repr(p)
        record = next(iter(p._records.values()))
        assert "secret-id-42" not in repr(record)

    def test_verify_against_prior_run(self):
        prior = Pseudonymizer()
        mapping = {value: prior.pseudonymize(value) for value in ["P-001", "P-002"]}
        mapping["P-003"] = "0" * 40

        mismatches = Pseudonymizer().verify(mapping)
        assert mismatches == ["P-003"]


class TestTable:

    def test_replaces_only_sensitive_columns(self):
        rows = [
            {"patient_id": "P-001", "visit": "2024-01-01"},
            {"patient_id": "P-002", "visit": "2024-01-02"},
            {"patient_id": "P-001", "visit": "2024-01-03"},
        ]
        p = Pseudonymizer()
        result = p.pseudonymize_table(rows, ["patient_id"])

        assert [r["visit"] for r in result] == ["2024-01-01", "2024-01-02", "2024-01-03"]
        assert result[0]["patient_id"] == result[2]["patient_id"]
        assert result[0]["patient_id"] != result[1]["patient_id"]
        assert rows[0]["patient_id"] == "P-001", "input rows must not be modified"

    def test_missing_column(self):
        with pytest.raises(KeyError, match="patient_id"):
            Pseudonymizer().pseudonymize_table([{"visit": "x"}], ["patient_id"])


class TestTokenTableIntegrity:
    """The shared token table lists each token of this run's values exactly once."""

    def test_verify_does_not_add_prior_values_to_token_table(self):
        p = Pseudonymizer()
        token = p.pseudonymize_table([{"id": "P-001"}], ["id"])[0]["id"]

        mismatches = p.verify({"P-001": token, "P-999": "0" * 40})

        assert mismatches == ["P-999"]
        assert len(list(p.export_rows())) == 1
        assert "P-999" not in p
        assert len(p) == 1

    def test_short_tokens_listed_once_and_sharing_warned(self, caplog):
        p = Pseudonymizer(token_length=1)
        values = [f"ID-{i:03d}" for i in range(40)]
        with caplog.at_level(logging.WARNING, logger="contentkey.core.pseudonymizer"):
            tokens = p.pseudonymize_many(values)

        # 40 values cannot fit into 16 one-character hex tokens
        assert len(p.tokens()) == len(set(p.tokens()))
        assert set(p.tokens()) == set(tokens)
        assert "shared by distinct values" in caplog.text
        assert len(p) == 40

    def test_repeated_value_does_not_warn(self, caplog):
        p = Pseudonymizer(token_length=4)
        with caplog.at_level(logging.WARNING, logger="contentkey.core.pseudonymizer"):
            p.pseudonymize_many(["P-001", "P-001"])
        assert "shared by distinct values" not in caplog.text
        assert len(p.tokens()) == 1

    def test_contains_unserializable_value_is_false(self):
        p = Pseudonymizer()
        p.pseudonymize("P-001")
        assert object() not in p
        assert float("nan") not in p

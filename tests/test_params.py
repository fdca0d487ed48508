"""
Tests for ContentParams validation and environment overrides.
Configuration errors must surface before any file is read.
"""
import pytest

from contentkey.core.errors import UnsupportedAlgorithm
from contentkey.core.params import ContentParams


class TestValidation:

    def test_defaults(self):
        params = ContentParams(root_dir="/data")
        assert params.algorithm == "sha1"
        assert params.prefix_length == 7
        assert params.workers == 1
        assert params.recursive

    def test_algorithm_normalized(self):
        assert ContentParams(root_dir="/data", algorithm="SHA-256").algorithm == "sha256"

    def test_unknown_algorithm(self):
        with pytest.raises(UnsupportedAlgorithm):
            ContentParams(root_dir="/data", algorithm="rot13")

    def test_empty_root(self):
        with pytest.raises(ValueError, match="Root directory"):
            ContentParams(root_dir="")

    @pytest.mark.parametrize("length", [0, 41])
    def test_prefix_length_bounds_for_sha1(self, length):
        with pytest.raises(ValueError, match="Prefix length"):
            ContentParams(root_dir="/data", prefix_length=length)

    def test_prefix_length_depends_on_algorithm(self):
        assert ContentParams(root_dir="/data", algorithm="sha256", prefix_length=64).prefix_length == 64
        with pytest.raises(ValueError):
            ContentParams(root_dir="/data", algorithm="xxh32", prefix_length=9)

    def test_workers_and_chunk_size(self):
        with pytest.raises(ValueError, match="workers"):
            ContentParams(root_dir="/data", workers=0)
        with pytest.raises(ValueError, match="Chunk size"):
            ContentParams(root_dir="/data", chunk_size=0)

    def test_extensions_normalized(self):
        params = ContentParams(root_dir="/data", extensions=["CSV", ".Jpg", " "])
        assert params.extensions == [".csv", ".jpg"]


class TestFromEnv:

    def test_env_values_used(self):
        env = {
            "CONTENTKEY_ALGORITHM": "sha256",
            "CONTENTKEY_PREFIX_LENGTH": "10",
            "CONTENTKEY_WORKERS": "3",
        }
        params = ContentParams.from_env("/data", environ=env)
        assert params.algorithm == "sha256"
        assert params.prefix_length == 10
        assert params.workers == 3

    def test_explicit_arguments_win(self):
        env = {"CONTENTKEY_ALGORITHM": "sha256", "CONTENTKEY_WORKERS": "3"}
        params = ContentParams.from_env("/data", algorithm="md5", workers=2, environ=env)
        assert params.algorithm == "md5"
        assert params.workers == 2

    def test_empty_environment_gives_defaults(self):
        params = ContentParams.from_env("/data", environ={})
        assert params.algorithm == "sha1"
        assert params.prefix_length == 7

    def test_invalid_integer(self):
        with pytest.raises(ValueError, match="CONTENTKEY_WORKERS"):
            ContentParams.from_env("/data", environ={"CONTENTKEY_WORKERS": "many"})

    def test_kwargs_passed_through(self):
        params = ContentParams.from_env("/data", environ={}, recursive=False, extensions=["csv"])
        assert not params.recursive
        assert params.extensions == [".csv"]

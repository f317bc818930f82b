"""Tests for scope, name and version predicates."""

import pytest

from esmregistry.validation import (
    is_valid_identity,
    is_valid_name,
    is_valid_scope,
    is_valid_version,
    version_key,
)


class TestScope:
    """Tests for is_valid_scope."""

    @pytest.mark.parametrize("scope", ["@foo", "@a", "@cloud"])
    def test_valid(self, scope):
        assert is_valid_scope(scope) is True

    @pytest.mark.parametrize("scope", ["", "foo", "@", "@Foo", "Foo", "@foo-bar", "@foo1", "@foo\n", None, 12])
    def test_invalid(self, scope):
        assert is_valid_scope(scope) is False


class TestName:
    """Tests for is_valid_name."""

    @pytest.mark.parametrize("name", ["bar", "left-pad", "-"])
    def test_valid(self, name):
        assert is_valid_name(name) is True

    @pytest.mark.parametrize("name", ["", "bar_one", "Bar", "bar1", "bar.js", "../x", None])
    def test_invalid(self, name):
        assert is_valid_name(name) is False


class TestVersion:
    """Tests for is_valid_version and version_key."""

    @pytest.mark.parametrize("version", ["0.0.0", "1.2.3", "10.20.30"])
    def test_valid(self, version):
        assert is_valid_version(version) is True

    @pytest.mark.parametrize("version", ["", "1.2", "1.2.3.4", "v1.2.3", "1.2.3-beta", "1.2.3\n", "١.٢.٣", None])
    def test_invalid(self, version):
        assert is_valid_version(version) is False

    def test_version_key_is_numeric(self):
        """Versions order numerically, not lexically."""
        versions = ["2.0.0", "10.0.0", "1.10.0", "1.9.0"]
        assert sorted(versions, key=version_key) == ["1.9.0", "1.10.0", "2.0.0", "10.0.0"]


def test_identity_requires_all_parts():
    """Identity validation checks every present component."""
    assert is_valid_identity("@foo", "bar") is True
    assert is_valid_identity("@foo", "bar", "1.0.0") is True
    assert is_valid_identity("@foo", "bar", "1.0") is False
    assert is_valid_identity(None, "bar") is False
    assert is_valid_identity("@foo", None) is False

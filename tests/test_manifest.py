"""Tests for manifest synthesis."""

import asyncio
import os
import re

import pytest

from esmregistry.errors import ParseError
from esmregistry.manifest import ManifestBuilder, format_timestamp, tarball_url

BASE_URL = "https://registry.example.com"


class TestManifestBuilder:
    """Tests for ManifestBuilder.build."""

    def _build(self, config, scope="@foo", name="bar"):
        return asyncio.run(ManifestBuilder(config).build(scope, name, BASE_URL))

    def test_missing_package_returns_none(self, config):
        """A package without a directory has no manifest."""
        assert self._build(config) is None

    def test_empty_package_returns_none(self, config):
        """A directory with no valid versions has no manifest."""
        (config.data_dir / "@foo" / "bar").mkdir(parents=True)
        (config.data_dir / "@foo" / "bar" / "README.md").write_text("hi")
        assert self._build(config) is None

    def test_latest_uses_numeric_order(self, config, add_module):
        """dist-tags.latest is the numerically highest version."""
        for version in ["1.0.0", "1.1.0", "0.1.0"]:
            add_module("@foo", "bar", version)

        manifest = self._build(config)

        assert manifest["dist-tags"]["latest"] == "1.1.0"
        assert list(manifest["versions"]) == ["0.1.0", "1.0.0", "1.1.0"]

    def test_double_digit_versions(self, config, add_module):
        """10.0.0 sorts after 2.0.0."""
        add_module("@foo", "bar", "10.0.0")
        add_module("@foo", "bar", "2.0.0")

        manifest = self._build(config)

        assert manifest["dist-tags"]["latest"] == "10.0.0"
        assert list(manifest["versions"]) == ["2.0.0", "10.0.0"]

    def test_version_record(self, config, add_module):
        """Each version carries name, tarball URL and dependencies."""
        add_module("@foo", "bar", "1.0.0", 'import h from "@cloud/http@1.2.3";\nimport "lib";\n')

        record = self._build(config)["versions"]["1.0.0"]

        assert record == {
            "name": "@foo/bar",
            "version": "1.0.0",
            "description": "",
            "dist": {"tarball": "https://registry.example.com/@foo/bar/1.0.0.tgz"},
            "dependencies": {"@cloud/http": "1.2.3", "lib": "latest"},
        }

    def test_ignores_non_module_entries(self, config, add_module):
        """Only regular ``x.y.z.mjs`` files are versions."""
        add_module("@foo", "bar", "1.0.0")
        folder = config.data_dir / "@foo" / "bar"
        (folder / "2.0.0.txt").write_text("not a module")
        (folder / "3.0.0").mkdir()
        (folder / "1.2.mjs").write_text("export default 1;")
        (folder / "beta.mjs").write_text("export default 1;")

        manifest = self._build(config)

        assert list(manifest["versions"]) == ["1.0.0"]

    def test_time_entries(self, config, add_module):
        """time has created/modified plus one entry per version."""
        first = add_module("@foo", "bar", "0.1.0")
        latest = add_module("@foo", "bar", "0.2.0")

        manifest = self._build(config)
        times = manifest["time"]

        assert set(times) == {"created", "modified", "0.1.0", "0.2.0"}
        assert times["created"] == format_timestamp(os.stat(first).st_ctime)
        assert times["modified"] == format_timestamp(os.stat(latest).st_ctime)
        for value in times.values():
            assert re.fullmatch(r"\d{4}-\d\d-\d\dT\d\d:\d\d:\d\d\.\d{3}Z", value)

    def test_manifest_top_level(self, config, add_module):
        add_module("@foo", "bar", "1.0.0")
        manifest = self._build(config)
        assert manifest["name"] == "@foo/bar"
        assert manifest["description"] == ""

    def test_parse_error_propagates(self, config, add_module):
        """A version that does not parse fails the whole manifest."""
        add_module("@foo", "bar", "1.0.0")
        add_module("@foo", "bar", "1.1.0", "import {{{ from")

        with pytest.raises(ParseError):
            self._build(config)

    def test_invalid_identity_returns_none(self, config, add_module):
        """Malformed identities never touch the store."""
        add_module("@Foo", "bar", "1.0.0")
        assert self._build(config, scope="@Foo") is None

    def test_reflects_store_changes(self, config, add_module):
        """Manifests are rebuilt on every call."""
        add_module("@foo", "bar", "1.0.0")
        assert self._build(config)["dist-tags"]["latest"] == "1.0.0"

        add_module("@foo", "bar", "1.0.1")
        assert self._build(config)["dist-tags"]["latest"] == "1.0.1"


def test_format_timestamp():
    assert format_timestamp(0) == "1970-01-01T00:00:00.000Z"
    assert format_timestamp(1.5) == "1970-01-01T00:00:01.500Z"


def test_tarball_url_strips_trailing_slash():
    assert tarball_url("http://h:1/", "@a", "b", "1.0.0") == "http://h:1/@a/b/1.0.0.tgz"


def test_modern_syntax_version_is_listed(config, add_module):
    """A version using optional chaining still appears in the manifest."""
    add_module("@foo", "bar", "1.0.0", 'import h from "lib";\nexport const v = h?.value ?? 0;\n')

    manifest = asyncio.run(ManifestBuilder(config).build("@foo", "bar", BASE_URL))

    assert manifest["dist-tags"]["latest"] == "1.0.0"
    assert manifest["versions"]["1.0.0"]["dependencies"] == {"lib": "latest"}

"""Shared fixtures: a throwaway module store and cache store."""

from pathlib import Path

import pytest

from esmregistry.config import RegistryConfig


@pytest.fixture
def config(tmp_path: Path) -> RegistryConfig:
    data = tmp_path / "data"
    cache = tmp_path / "cache"
    data.mkdir()
    cache.mkdir()
    return RegistryConfig(data_path=str(data), cache_path=str(cache))


@pytest.fixture
def add_module(config: RegistryConfig):
    """Write ``{data}/{scope}/{name}/{version}.mjs`` and return its path."""

    def _add(scope: str, name: str, version: str, source: str = "export default 1;\n") -> Path:
        folder = config.data_dir / scope / name
        folder.mkdir(parents=True, exist_ok=True)
        path = folder / f"{version}.mjs"
        path.write_text(source, encoding="utf-8")
        return path

    return _add

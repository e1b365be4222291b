"""Shared fixtures."""

from collections.abc import Callable
from pathlib import Path

import pytest
from fakes import FakeFetcher, write_tables


@pytest.fixture
def gtfs_dir(tmp_path: Path) -> Path:
    """Directory holding the sample GTFS tables."""
    return write_tables(tmp_path / "dataset")


@pytest.fixture
def make_gtfs_dir(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing the sample tables with some tables replaced (``trips="..."``)."""

    def factory(**overrides: str) -> Path:
        return write_tables(
            tmp_path / "custom", {f"{name}.txt": content for name, content in overrides.items()}
        )

    return factory


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()

"""Test helper utilities for gamewatch tests."""

from .fakes import (
    FakeCatalogStore,
    FakeDownloadClient,
    FakeMetadataClient,
    FixtureFeedClient,
    load_fixture_releases,
    make_entry,
    make_release,
)

__all__ = [
    "FakeCatalogStore",
    "FakeDownloadClient",
    "FakeMetadataClient",
    "FixtureFeedClient",
    "load_fixture_releases",
    "make_entry",
    "make_release",
]

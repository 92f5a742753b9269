"""Deduplication of the release event stream."""

from .store import DedupStore

__all__ = ["DedupStore"]

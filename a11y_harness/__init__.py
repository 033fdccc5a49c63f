"""Accessibility scan harness: axe-core collection and result consolidation."""

from .consolidate import Consolidator  # re-export for convenience
from .dedupe import dedupe_records
from .pipeline import CollectionPipeline

__all__ = ["CollectionPipeline", "Consolidator", "dedupe_records"]

"""
Structured Log Event Types
==========================

Bounded Context: Observability Event Taxonomy

This module defines typed event names for structured logging.

Design:
- Enum-based (prevents typos, enables autocomplete)
- Hierarchical naming (namespace.category.action)
- Searchable in log aggregators (Elasticsearch, CloudWatch Insights)

Event Naming Convention:
    <component>.<category>.<action>

    component: catalog, lookup, dataset
    category: load, feature, fallback
    action: started, success, failed, skipped

Example Log Query (CloudWatch Insights):
    fields @timestamp, event, message, metadata.region_count
    | filter event = "catalog.load.success"
    | stats avg(metadata.duration_ms) by bin(1h)
"""

from enum import Enum


class LogEvent(str, Enum):
    """
    Typed log event names for structured logging.

    Categories:
    - catalog.*: Catalog construction and publication
    - lookup.*: Query fallbacks and rejections
    - dataset.*: Dataset byte sources
    """

    # ========== Catalog Events ==========
    CATALOG_LOAD_STARTED = "catalog.load.started"
    """A load acquired exclusive access and started building."""

    CATALOG_LOAD_SUCCESS = "catalog.load.success"
    """A new catalog was built and published."""

    CATALOG_LOAD_FAILED = "catalog.load.failed"
    """Dataset could not be decoded; nothing was built."""

    CATALOG_RESET = "catalog.reset"
    """The empty catalog was published after a failed load."""

    FEATURE_SKIPPED = "catalog.feature.skipped"
    """Feature without zone id or supported geometry was ignored."""

    # ========== Lookup Events ==========
    LOOKUP_FALLBACK_NEAREST = "lookup.fallback.nearest"
    """No region contained the point; nearest centroid used."""

    LOOKUP_FALLBACK_NAUTICAL = "lookup.fallback.nautical"
    """No centroid within radius; nautical zone used."""

    LOOKUP_OUT_OF_RANGE = "lookup.out_of_range"
    """Query coordinate outside valid degree bounds."""

    # ========== Dataset Events ==========
    DATASET_READ = "dataset.read"
    """Dataset bytes read from package data or filesystem."""

"""
Structured Logging for localzone
================================

Bounded Context: Observability

JSON-structured logging with typed event names.

Public API
----------
    LogEvent: Typed event names (enum)
    StructuredLogger: JSON logger implementation
    create_logger: Factory function

Example:
    >>> from localzone_logging import StructuredLogger, LogEvent
    >>> logger = StructuredLogger(component="engine")
    >>> logger.info(
    ...     event=LogEvent.CATALOG_LOAD_SUCCESS,
    ...     message="Catalog published",
    ...     metadata={'region_count': 418}
    ... )
"""

from .events import LogEvent
from .structured import StructuredLogger, create_logger

__all__ = [
    'LogEvent',
    'StructuredLogger',
    'create_logger',
]

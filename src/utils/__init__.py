"""
Herald - Utils Package
======================

Stateless helpers shared by services and commands.

Available Utilities:
    async_utils: Background tasks that log their failures
    error_handler: Categorized exception logging
    metrics: Counters and timing samples for !b stats
"""

from .async_utils import create_safe_task
from .error_handler import ErrorHandler
from .metrics import MetricsCollector, MetricSample, MetricStats


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "create_safe_task",
    "ErrorHandler",
    "MetricsCollector",
    "MetricSample",
    "MetricStats",
]

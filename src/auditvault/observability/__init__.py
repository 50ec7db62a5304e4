"""Observability: Prometheus metrics for retention and reporting."""

from .metrics import (
    get_metrics,
    observe_policy_execution,
    observe_report_generation,
    record_index_cleanup_failure,
    record_report_job,
    record_retained_records,
    set_report_queue_depth,
)

__all__ = [
    "get_metrics",
    "observe_policy_execution",
    "observe_report_generation",
    "record_index_cleanup_failure",
    "record_report_job",
    "record_retained_records",
    "set_report_queue_depth",
]

"""Prometheus metrics for auditvault.

This module provides Prometheus metrics for monitoring:
- Retention policy executions (outcome, duration, records archived/deleted)
- Search index cleanup failures
- Report jobs (status, generation duration, queue depth)
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, Histogram, generate_latest

if TYPE_CHECKING:
    from collections.abc import Generator

__all__ = [
    "RETENTION_POLICY_RUNS",
    "RETENTION_POLICY_DURATION",
    "RETENTION_RECORDS",
    "INDEX_CLEANUP_FAILURES",
    "REPORT_JOBS",
    "REPORT_GENERATION_DURATION",
    "REPORT_QUEUE_DEPTH",
    "observe_policy_execution",
    "observe_report_generation",
    "record_retained_records",
    "record_index_cleanup_failure",
    "record_report_job",
    "set_report_queue_depth",
    "get_metrics",
]

PREFIX = "auditvault"

# ============================================================================
# Retention Metrics
# ============================================================================

RETENTION_POLICY_RUNS = Counter(
    f"{PREFIX}_retention_policy_runs_total",
    "Retention policy executions",
    ["status"],
)

RETENTION_POLICY_DURATION = Histogram(
    f"{PREFIX}_retention_policy_duration_seconds",
    "Time to execute one retention policy",
    ["status"],
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 300.0),
)

RETENTION_RECORDS = Counter(
    f"{PREFIX}_retention_records_total",
    "Audit records processed by retention",
    ["operation"],
)

INDEX_CLEANUP_FAILURES = Counter(
    f"{PREFIX}_index_cleanup_failures_total",
    "Search index cleanups that failed after a successful delete",
)

# ============================================================================
# Report Metrics
# ============================================================================

REPORT_JOBS = Counter(
    f"{PREFIX}_report_jobs_total",
    "Report jobs by type and final status",
    ["report_type", "status"],
)

REPORT_GENERATION_DURATION = Histogram(
    f"{PREFIX}_report_generation_duration_seconds",
    "Time from PROCESSING to a terminal status",
    ["report_type", "status"],
    buckets=(0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 300.0, 900.0),
)

REPORT_QUEUE_DEPTH = Gauge(
    f"{PREFIX}_report_queue_depth",
    "Report jobs waiting for a worker",
)


def get_metrics(registry: CollectorRegistry | None = None) -> bytes:
    """Current metrics in Prometheus exposition format."""
    return generate_latest(registry or REGISTRY)


# ============================================================================
# Convenience Functions for Recording Metrics
# ============================================================================


@contextmanager
def observe_policy_execution() -> Generator[dict[str, Any], None, None]:
    """Time a policy execution.

    Yields:
        Context dict; set ``status`` to ``"failed"`` when the policy fails.
    """
    context: dict[str, Any] = {"status": "success"}
    start_time = time.perf_counter()
    try:
        yield context
    except Exception:
        context["status"] = "failed"
        raise
    finally:
        status = context.get("status", "success")
        RETENTION_POLICY_DURATION.labels(status=status).observe(time.perf_counter() - start_time)
        RETENTION_POLICY_RUNS.labels(status=status).inc()


@contextmanager
def observe_report_generation(report_type: str) -> Generator[dict[str, Any], None, None]:
    """Time a report generation and count its terminal status.

    Args:
        report_type: Report type value.

    Yields:
        Context dict; set ``status`` to the job's terminal status.
    """
    context: dict[str, Any] = {"status": "COMPLETED"}
    start_time = time.perf_counter()
    try:
        yield context
    except Exception:
        context["status"] = "FAILED"
        raise
    finally:
        status = context.get("status", "COMPLETED")
        REPORT_GENERATION_DURATION.labels(report_type=report_type, status=status).observe(
            time.perf_counter() - start_time
        )
        REPORT_JOBS.labels(report_type=report_type, status=status).inc()


def record_retained_records(archived: int, deleted: int, index_cleaned: int) -> None:
    if archived:
        RETENTION_RECORDS.labels(operation="archived").inc(archived)
    if deleted:
        RETENTION_RECORDS.labels(operation="deleted").inc(deleted)
    if index_cleaned:
        RETENTION_RECORDS.labels(operation="index_cleaned").inc(index_cleaned)


def record_index_cleanup_failure() -> None:
    INDEX_CLEANUP_FAILURES.inc()


def record_report_job(report_type: str, status: str) -> None:
    """Count a report job status change outside of generation (e.g. PENDING)."""
    REPORT_JOBS.labels(report_type=report_type, status=status).inc()


def set_report_queue_depth(depth: int) -> None:
    REPORT_QUEUE_DEPTH.set(depth)

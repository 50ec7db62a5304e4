"""Core services and utilities for auditvault."""

from .exceptions import (
    DuplicateGeneratorError,
    DuplicatePolicyNameError,
    GenerationFailureError,
    InvalidReportTypeError,
    InvalidStatusTransitionError,
    NotFoundError,
    PolicyNotFoundError,
    ReportNotFoundError,
    ReportNotReadyError,
)
from .logging import LogContext, get_logger, setup_logging

__all__ = [
    # Exceptions
    "DuplicateGeneratorError",
    "DuplicatePolicyNameError",
    "GenerationFailureError",
    "InvalidReportTypeError",
    "InvalidStatusTransitionError",
    "NotFoundError",
    "PolicyNotFoundError",
    "ReportNotFoundError",
    "ReportNotReadyError",
    # Logging
    "LogContext",
    "get_logger",
    "setup_logging",
]

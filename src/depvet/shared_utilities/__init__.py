"""
Common utilities shared across depvet components
"""

from .logging_config import configure_logging, get_logger, get_logging_manager
from .telemetry import get_telemetry_manager, trace_function, trace_operation

__all__ = [
    "configure_logging",
    "get_logger",
    "get_logging_manager",
    "get_telemetry_manager",
    "trace_function",
    "trace_operation",
]

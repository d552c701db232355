"""Utility helpers for lifeflow."""

from lifeflow.utils.logging import LogContext, get_logger, log_context, set_level, setup_logging

__all__ = ["LogContext", "get_logger", "log_context", "set_level", "setup_logging"]

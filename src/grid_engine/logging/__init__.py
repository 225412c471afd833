"""Structured logging for the grid engine."""

from grid_engine.logging.logger import get_logger, setup_logging, log_context

__all__ = ["get_logger", "setup_logging", "log_context"]

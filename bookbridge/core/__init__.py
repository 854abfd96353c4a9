"""
Core utilities and configuration for BookBridge.

This package provides core functionality including logging configuration,
database setup, row-level policies, and domain errors.
"""

from bookbridge.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]

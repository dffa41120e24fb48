"""
Common utilities package for the TaskFlow application.

Authentication helpers live in ``app.utils.auth`` and are imported from there
directly, since they depend on ``app.config`` which itself needs the logger.
"""

from app.utils.logger import setup_logger

__all__ = ["setup_logger"]

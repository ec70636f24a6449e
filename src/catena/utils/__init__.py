"""
Catena utilities.
"""

from catena.utils.logging import configure_logging, get_logger, set_level

__all__ = [
    "get_logger",
    "configure_logging",
    "set_level",
]

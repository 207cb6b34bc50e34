"""Resource handles for pyenlighten.

This module provides object-oriented access to the systems visible to an
authenticated cloud client.
"""

from .system import System

__all__ = [
    "System",
]

"""
Insight Bridge Storage

Backend contract consumed by the bridge, plus an in-memory reference backend.
"""

from .backend import MemoryBackend, InMemoryBackend

__all__ = [
    "MemoryBackend",
    "InMemoryBackend",
]

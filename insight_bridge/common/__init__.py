"""
Insight Bridge Common Module

Shared infrastructure for the bridge and storage layers.
"""

from .config import BridgeConfig, LearningConfig, load_config
from .events import BridgeEvent, EventEmitter
from .hash_embedding import EMBEDDING_DIM, hash_embedding

__all__ = [
    "BridgeConfig",
    "LearningConfig",
    "load_config",
    "BridgeEvent",
    "EventEmitter",
    "EMBEDDING_DIM",
    "hash_embedding",
]

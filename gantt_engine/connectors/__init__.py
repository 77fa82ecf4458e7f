"""Connections to the external task store."""

from .base_connector import BaseTaskStore, BatchUpdateResult
from .api_connector import APITaskStore
from .memory_store import InMemoryTaskStore

__all__ = [
    'BaseTaskStore',
    'BatchUpdateResult',
    'APITaskStore',
    'InMemoryTaskStore',
]

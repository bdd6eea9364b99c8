"""
Core module for the map editor
Contains the map document, configuration, undo history and persistence
"""
from .config import MapConfig, clone_json, make_key
from .document import MapDocument, DocumentError, geometry_family
from .history import HistoryManager, HistoryEntry
from .persistence import PersistenceGateway
from .bridge import EditorBridge, MemoryEditorBridge
from .state_store import StateStore

__all__ = [
    'MapConfig',
    'clone_json',
    'make_key',
    'MapDocument',
    'DocumentError',
    'geometry_family',
    'HistoryManager',
    'HistoryEntry',
    'PersistenceGateway',
    'EditorBridge',
    'MemoryEditorBridge',
    'StateStore'
]

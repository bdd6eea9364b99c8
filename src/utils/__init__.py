"""
Utilities module for the map editor
Contains settings and local storage; import/export live in utils.export and utils.importer
"""
from .settings import Settings
from .storage import LocalStorage, StorageError

__all__ = ['Settings', 'LocalStorage', 'StorageError']

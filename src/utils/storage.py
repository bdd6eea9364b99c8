"""
Local Storage
Durable string key-value store backed by a single JSON file
"""
import json
import logging
import os
import tempfile
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class StorageError(OSError):
    """Raised when the storage file cannot be written"""


class LocalStorage:
    """Key-value store persisted to a JSON file"""

    def __init__(self, storage_file: str):
        self.storage_file = storage_file

    def load(self) -> Dict[str, str]:
        """Load all items, treating a missing or corrupt file as empty"""
        if not os.path.exists(self.storage_file):
            return {}
        try:
            with open(self.storage_file, 'r', encoding='utf-8') as f:
                items = json.load(f)
        except (OSError, ValueError, RecursionError) as e:
            logger.error("Error loading storage file %s: %s", self.storage_file, e)
            return {}

        if not isinstance(items, dict):
            logger.error("Ignoring storage file %s: expected an object", self.storage_file)
            return {}
        return {str(k): v for k, v in items.items() if isinstance(v, str)}

    def _write(self, items: Dict[str, str]):
        directory = os.path.dirname(os.path.abspath(self.storage_file))
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.storage-', suffix='.json')
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(items, f, indent=4, ensure_ascii=False)
                os.replace(tmp_path, self.storage_file)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except (OSError, ValueError) as e:
            raise StorageError(f"Could not write {self.storage_file}: {e}") from e

    def get_item(self, key: str) -> Optional[str]:
        return self.load().get(key)

    def set_item(self, key: str, value: str):
        """Store value under key, replacing any previous value"""
        items = self.load()
        items[key] = value
        self._write(items)

    def remove_item(self, key: str):
        items = self.load()
        if items.pop(key, None) is not None:
            self._write(items)

    def clear(self):
        self._write({})

"""
Document Persistence
Writes the live document to local storage and restores it at startup
"""
import logging

from utils.storage import LocalStorage, StorageError

from .document import MapDocument

logger = logging.getLogger(__name__)

STATE_KEY = "appState"


class PersistenceGateway:
    """Saves and restores the map document under a single storage key"""

    def __init__(self, storage: LocalStorage, key: str = STATE_KEY):
        self.storage = storage
        self.key = key

    def load(self) -> MapDocument:
        """Restore the saved document, or an empty one if nothing usable is stored"""
        try:
            saved = self.storage.get_item(self.key)
        except OSError as e:
            logger.error("Error reading saved map: %s", e)
            return MapDocument()

        if saved is None:
            return MapDocument()
        return MapDocument.from_geojson(saved)

    def save(self, document: MapDocument) -> bool:
        """
        Write the document, replacing the previous copy.
        Failures are logged and reported through the return value only;
        the in-memory document stays authoritative.
        """
        try:
            self.storage.set_item(self.key, document.to_json())
        except StorageError as e:
            logger.warning("Map not saved: %s", e)
            return False
        return True


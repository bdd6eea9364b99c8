"""
Map Import
Reads GeoJSON files into the state store; other formats are handed to the
map editor's own importer
"""
import json
import logging
import os
from enum import Enum
from typing import Optional

from PyQt6.QtCore import QObject, QThread, pyqtSignal

from core.document import FEATURE_COLLECTION, DocumentError, MapDocument
from core.state_store import StateStore

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = ("json", "geojson", "kml", "gpx")
NATIVE_EXTENSIONS = ("json", "geojson")


class MapImportError(Exception):
    """Raised when an import file cannot be read"""


class UnsupportedFormatError(MapImportError):
    """Raised for files with an extension the editor does not accept"""


class ImportMode(Enum):
    """How an imported file was handled"""
    NATIVE = "native"
    DELEGATED = "delegated"


def file_extension(file_path: str) -> str:
    return os.path.splitext(file_path)[1].lstrip('.').lower()


def check_extension(file_path: str) -> str:
    extension = file_extension(file_path)
    if extension not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFormatError(
            "Unsupported file type. Please upload a .json, .geojson, .kml, or .gpx file."
        )
    return extension


def read_text(file_path: str) -> str:
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise MapImportError(f"Could not read {file_path}: {e}") from e


class FileReadThread(QThread):
    """Thread for reading an import file in background"""
    file_read = pyqtSignal(str, str, str)  # path, extension, contents
    read_failed = pyqtSignal(str, str)  # path, error

    def __init__(self, file_path: str, extension: str, parent=None):
        super().__init__(parent)
        self.file_path = file_path
        self.extension = extension

    def run(self):
        """Read the file"""
        try:
            contents = read_text(self.file_path)
        except MapImportError as e:
            self.read_failed.emit(self.file_path, str(e))
            return
        self.file_read.emit(self.file_path, self.extension, contents)


class MapImporter(QObject):
    """Imports files into a state store"""

    import_finished = pyqtSignal(str, object)  # path, ImportMode
    import_failed = pyqtSignal(str, str)  # path, error

    def __init__(self, store: StateStore, parent=None):
        super().__init__(parent)
        self.store = store
        self._threads = []

    def import_contents(self, contents: str, extension: str) -> ImportMode:
        """Load file contents, replacing the document when they are a FeatureCollection"""
        if extension in NATIVE_EXTENSIONS:
            document = self._parse_native(contents)
            if document is not None:
                self.store.load_document(document, "Import")
                return ImportMode.NATIVE

        if self.store.bridge is None:
            raise MapImportError(f"No map editor available to import .{extension} files")

        # The editor commits its result back through the store
        self.store.bridge.load_file_contents(contents, extension)
        return ImportMode.DELEGATED

    @staticmethod
    def _parse_native(contents: str) -> Optional[MapDocument]:
        try:
            data = json.loads(contents)
        except (ValueError, RecursionError) as e:
            logger.warning("Error parsing GeoJSON: %s", e)
            return None

        if not isinstance(data, dict) or data.get('type') != FEATURE_COLLECTION:
            return None

        try:
            return MapDocument.parse(data)
        except DocumentError as e:
            logger.warning("Error processing GeoJSON configuration: %s", e)
            return None

    def import_file(self, file_path: str) -> ImportMode:
        extension = check_extension(file_path)
        return self.import_contents(read_text(file_path), extension)

    def import_file_async(self, file_path: str) -> FileReadThread:
        """
        Read file_path on a worker thread and import it once the read completes.
        The document is unchanged until import_finished is emitted.
        """
        extension = check_extension(file_path)

        thread = FileReadThread(file_path, extension, self)
        thread.file_read.connect(self._on_file_read)
        thread.read_failed.connect(self.import_failed)
        thread.finished.connect(lambda: self._forget(thread))
        self._threads.append(thread)
        thread.start()
        return thread

    def _forget(self, thread: FileReadThread):
        if thread in self._threads:
            self._threads.remove(thread)
        thread.deleteLater()

    def _on_file_read(self, file_path: str, extension: str, contents: str):
        try:
            mode = self.import_contents(contents, extension)
        except MapImportError as e:
            logger.error("Import of %s failed: %s", file_path, e)
            self.import_failed.emit(file_path, str(e))
            return
        self.import_finished.emit(file_path, mode)

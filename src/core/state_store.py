"""
State Store
Single owner of the live map document. Documents are never edited in place:
every change builds a new MapDocument and swaps it in, which drives the
undo history, local storage and the map editor.
"""
import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Optional, Union

from PyQt6.QtCore import QObject, pyqtSignal

from .bridge import EditorBridge
from .config import MapConfig, clone_json
from .document import MapDocument
from .history import DEFAULT_MAX_HISTORY, HistoryEntry, HistoryManager
from .persistence import PersistenceGateway

logger = logging.getLogger(__name__)

Mutator = Callable[[MapDocument], Any]


class StateStore(QObject):
    """Holds the live document and its undo/redo history"""

    document_changed = pyqtSignal(object, object)  # new document, previous document
    history_changed = pyqtSignal()

    def __init__(self, persistence: PersistenceGateway, bridge: Optional[EditorBridge] = None,
                 max_history: int = DEFAULT_MAX_HISTORY, parent=None):
        super().__init__(parent)
        self.persistence = persistence
        self.history = HistoryManager(max_history)
        self.bridge: Optional[EditorBridge] = None

        self._document = persistence.load()
        self._recording = True
        self._description = ""

        self.document_changed.connect(self._on_document_changed)

        if bridge is not None:
            self.attach_bridge(bridge)

    @property
    def document(self) -> MapDocument:
        return self._document

    def attach_bridge(self, bridge: EditorBridge):
        """Initialise the editor from the live document and listen for its edits"""
        self.bridge = bridge
        bridge.init(self._document.get_config())
        bridge.set_commit_handler(self.commit_edited_features)
        if self._document.has_features():
            bridge.load({'type': self._document.kind,
                         'features': clone_json(self._document.get_features())})

    def replace(self, document: MapDocument, description: str = "Edit"):
        """Swap in a new document; observers see the old or the new one, never a mix"""
        if not isinstance(document, MapDocument):
            raise TypeError(f"Expected a MapDocument, got {type(document).__name__}")

        previous = self._document
        self._document = document
        self._description = description
        self.document_changed.emit(document, previous)

    def _on_document_changed(self, document: MapDocument, previous: Optional[MapDocument]):
        new_json = document.to_json()
        old_json = previous.to_json() if previous is not None else None
        if new_json == old_json:
            return

        if self._recording and old_json is not None:
            self.history.record(HistoryEntry(old_json, self._description))
            logger.debug("Recorded '%s' (%d undo steps)", self._description,
                         len(self.history.undo_stack))

        self.persistence.save(document)
        self.history_changed.emit()

    @contextmanager
    def _history_suppressed(self):
        self._recording = False
        try:
            yield
        finally:
            self._recording = True

    def redraw(self):
        if self.bridge is not None:
            self.bridge.redraw(self._document)

    # Undo / redo

    def can_undo(self) -> bool:
        return self.history.can_undo()

    def can_redo(self) -> bool:
        return self.history.can_redo()

    def undo(self) -> bool:
        """Restore the previous document"""
        entry = self.history.pop_undo()
        if entry is None:
            return False

        self.history.push_redo(HistoryEntry(self._document.to_json(), entry.description))
        self._restore(entry)
        return True

    def redo(self) -> bool:
        """Restore the document that was last undone"""
        entry = self.history.pop_redo()
        if entry is None:
            return False

        self.history.push_undo(HistoryEntry(self._document.to_json(), entry.description))
        self._restore(entry)
        return True

    def _restore(self, entry: HistoryEntry):
        with self._history_suppressed():
            self.replace(MapDocument.from_geojson(entry.snapshot), entry.description)
        self.history_changed.emit()
        self.redraw()

    # Whole-document changes

    def commit_edited_features(self, features: List[Dict[str, Any]]):
        """Entry point for the map editor once an edit gesture finishes"""
        self.replace(MapDocument(features=clone_json(features or []),
                                 config=self._document.get_config().clone()),
                     "Edit features")

    def load_document(self, document: MapDocument, description: str = "Import"):
        """Replace the document from outside the editor and redraw the map"""
        self.replace(document, description)
        self.redraw()

    def clear(self) -> bool:
        """Remove all features, keeping the configuration"""
        if not self._document.has_features():
            logger.warning("Nothing to clear")
            return False

        self.load_document(MapDocument(features=[], config=self._document.get_config().clone()),
                           "Clear")
        return True

    def update_config(self, config: Union[MapConfig, Dict[str, Any]]):
        if isinstance(config, MapConfig):
            config = config.clone()
        elif isinstance(config, dict):
            config = MapConfig(config)
        else:
            raise TypeError(f"Invalid configuration: {type(config).__name__}")

        self.load_document(MapDocument(features=clone_json(self._document.get_features()),
                                       config=config),
                           "Update config")

    def reset_config(self):
        self.load_document(MapDocument(features=clone_json(self._document.get_features()),
                                       config=MapConfig.defaults()),
                           "Reset config")

    # Single-feature changes

    def apply(self, mutator: Mutator, description: str = "Edit", redraw: bool = True) -> bool:
        """
        Run a MapDocument operation on a copy of the live document and swap
        the copy in. Operations that return False leave the store untouched.
        """
        document = self._document.clone()
        if mutator(document) is False:
            return False

        if redraw:
            self.load_document(document, description)
        else:
            self.replace(document, description)
        return True

    def add_feature(self, feature: Dict[str, Any]) -> bool:
        return self.apply(lambda d: d.add_feature(feature), "Add feature")

    def update_feature(self, feature_id: Any, feature: Dict[str, Any]) -> bool:
        return self.apply(lambda d: d.update_feature(feature_id, feature), "Update feature")

    def update_feature_properties(self, feature_id: Any, properties: Dict[str, Any]) -> bool:
        return self.apply(lambda d: d.update_feature_properties(feature_id, properties),
                          "Update properties")

    def remove_feature(self, feature_id: Any) -> bool:
        return self.apply(lambda d: d.remove_feature(feature_id), "Remove feature")

    def set_marker_types(self, marker_types: List[Dict[str, Any]]) -> bool:
        return self.apply(lambda d: d.set_marker_types(marker_types), "Update marker types")

    def set_line_types(self, line_types: List[Dict[str, Any]]) -> bool:
        return self.apply(lambda d: d.set_line_types(line_types), "Update line types")

    def set_shape_types(self, shape_types: List[Dict[str, Any]]) -> bool:
        return self.apply(lambda d: d.set_shape_types(shape_types), "Update shape types")

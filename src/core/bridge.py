"""
Editor Bridge
Contract between the state store and the map editing library
"""
import json
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from .config import MapConfig, clone_json
from .document import FEATURE_COLLECTION, MapDocument

logger = logging.getLogger(__name__)

Bounds = Tuple[Tuple[float, float], Tuple[float, float]]
CommitHandler = Callable[[List[Dict[str, Any]]], Any]

GEOMETRY_TYPES = (
    'Point', 'MultiPoint', 'LineString', 'MultiLineString',
    'Polygon', 'MultiPolygon', 'GeometryCollection',
)


def feature_collection(features: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        'type': FEATURE_COLLECTION,
        'features': clone_json(features or []),
    }


class EditorBridge:
    """
    Base class for map editors.
    Subclasses own the rendered geometry; the store only talks to them
    through these methods, and they report finished edits through the
    commit handler.
    """

    def __init__(self):
        self.map_options: Dict[str, Any] = {}
        self._commit_handler: Optional[CommitHandler] = None

    def set_commit_handler(self, handler: Optional[CommitHandler]):
        """Called with the edited features whenever an edit gesture finishes"""
        self._commit_handler = handler

    def commit_edits(self, features: List[Dict[str, Any]]):
        if self._commit_handler is None:
            logger.debug("Edit finished with no commit handler attached")
            return
        self._commit_handler(clone_json(features))

    def init(self, config: MapConfig):
        raise NotImplementedError

    def load(self, collection: Dict[str, Any]):
        raise NotImplementedError

    def clear(self):
        raise NotImplementedError

    def fit_bounds(self, bounds: Bounds):
        raise NotImplementedError

    def get_bounds(self) -> Bounds:
        raise NotImplementedError

    def get_zoom(self) -> float:
        raise NotImplementedError

    def set_zoom(self, zoom: float):
        raise NotImplementedError

    def load_file_contents(self, contents: str, extension: str):
        """Import a file the store could not read natively"""
        raise NotImplementedError

    def redraw(self, document: MapDocument):
        """
        Reload the editor from document without moving the viewport:
        keep bounds and zoom, copy every config option, clear, restore
        the viewport, then load the features.
        """
        bounds = self.get_bounds()
        zoom = self.get_zoom()

        config = document.get_config()
        for key in config.option_keys():
            self.map_options[key] = config.get_option(key)

        self.clear()
        self.fit_bounds(bounds)
        self.set_zoom(zoom)
        self.load(feature_collection(document.get_features()))


class MemoryEditorBridge(EditorBridge):
    """Headless editor that keeps the features in memory"""

    WORLD_BOUNDS: Bounds = ((-90.0, -180.0), (90.0, 180.0))

    def __init__(self):
        super().__init__()
        self.features: List[Dict[str, Any]] = []
        self.bounds: Bounds = self.WORLD_BOUNDS
        self.zoom = 2.0

    def init(self, config: MapConfig):
        self.map_options = config.to_dict()

    def load(self, collection: Dict[str, Any]):
        self.features = self.features + clone_json(collection.get('features') or [])

    def clear(self):
        self.features = []

    def fit_bounds(self, bounds: Bounds):
        self.bounds = bounds

    def get_bounds(self) -> Bounds:
        return self.bounds

    def get_zoom(self) -> float:
        return self.zoom

    def set_zoom(self, zoom: float):
        self.zoom = zoom

    def load_file_contents(self, contents: str, extension: str):
        if extension not in ('json', 'geojson'):
            logger.warning("Cannot read .%s files without a map library", extension)
            return

        try:
            data = json.loads(contents)
        except (ValueError, RecursionError) as e:
            logger.warning("Ignoring unreadable .%s file: %s", extension, e)
            return

        features = self._extract_features(data)
        if features is None:
            logger.warning("No features found in imported .%s file", extension)
            return

        try:
            self.load(feature_collection(features))
        except RecursionError:
            logger.warning("Ignoring .%s file: features are nested too deeply", extension)
            return
        self.commit_edits(self.features)

    @staticmethod
    def _extract_features(data: Any) -> Optional[List[Dict[str, Any]]]:
        if not isinstance(data, dict):
            return None

        kind = data.get('type')
        if kind == 'Feature':
            return [data]
        if kind in GEOMETRY_TYPES:
            return [{'type': 'Feature', 'geometry': data, 'properties': {}}]

        features = data.get('features')
        if isinstance(features, list):
            return [f for f in features if isinstance(f, dict) and f.get('type') == 'Feature']
        return None

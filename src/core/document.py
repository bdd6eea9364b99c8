"""
Map Document
The editable state of the map: a GeoJSON FeatureCollection plus its configuration.
Every feature mutation assigns a freshly built feature list, so reference
checks between document versions are reliable change signals.
"""
import json
import logging
from typing import Any, Dict, List, Optional, Union

from .config import (
    LINE_TYPES,
    MARKER_TYPES,
    SHAPE_TYPES,
    MapConfig,
    clone_json,
)

logger = logging.getLogger(__name__)

FEATURE_COLLECTION = "FeatureCollection"
CONFIG_PROPERTY = "waymark_config"

# GeoJSON geometry type -> type catalog family
GEOMETRY_FAMILIES = {
    'Point': 'marker',
    'MultiPoint': 'marker',
    'LineString': 'line',
    'MultiLineString': 'line',
    'Polygon': 'shape',
    'MultiPolygon': 'shape',
}


class DocumentError(ValueError):
    """Raised when a value cannot be turned into a MapDocument"""


def feature_matches(feature: Dict[str, Any], feature_id: Any) -> bool:
    """True if the feature's id or properties.id equals feature_id"""
    if not isinstance(feature, dict):
        return False
    if 'id' in feature and same_id(feature['id'], feature_id):
        return True
    properties = feature.get('properties')
    return isinstance(properties, dict) and 'id' in properties and same_id(properties['id'], feature_id)


def same_id(left: Any, right: Any) -> bool:
    # True == 1 in Python, but a boolean id never names a numeric one
    return isinstance(left, bool) == isinstance(right, bool) and left == right


def geometry_family(feature: Dict[str, Any]) -> Optional[str]:
    """'marker', 'line' or 'shape' depending on the geometry, None otherwise"""
    geometry = feature.get('geometry') if isinstance(feature, dict) else None
    if not isinstance(geometry, dict):
        return None
    return GEOMETRY_FAMILIES.get(geometry.get('type'))


class MapDocument:
    """Feature collection plus the configuration it owns"""

    kind = FEATURE_COLLECTION

    def __init__(self, features: Optional[List[Dict[str, Any]]] = None,
                 config: Union[MapConfig, Dict[str, Any], None] = None):
        self.features: List[Dict[str, Any]] = list(features or [])
        self.config = self._normalize_config(config)

    @staticmethod
    def _normalize_config(config: Union[MapConfig, Dict[str, Any], None]) -> MapConfig:
        if isinstance(config, MapConfig):
            return config
        if config is None:
            return MapConfig()
        if not isinstance(config, dict):
            raise DocumentError(f"Configuration must be an object, got {type(config).__name__}")
        return MapConfig(config)

    # Features

    def get_features(self) -> List[Dict[str, Any]]:
        return self.features

    def set_features(self, features: Optional[List[Dict[str, Any]]]):
        self.features = list(features or [])

    def _index_of(self, feature_id: Any) -> int:
        for index, feature in enumerate(self.features):
            if feature_matches(feature, feature_id):
                return index
        return -1

    def get_feature_by_id(self, feature_id: Any) -> Optional[Dict[str, Any]]:
        index = self._index_of(feature_id)
        return self.features[index] if index != -1 else None

    def update_feature(self, feature_id: Any, feature: Dict[str, Any]) -> bool:
        """Replace the matching feature with a copy of feature"""
        index = self._index_of(feature_id)
        if index == -1:
            return False

        features = list(self.features)
        features[index] = clone_json(feature)
        self.features = features
        return True

    def update_feature_properties(self, feature_id: Any, properties: Dict[str, Any]) -> bool:
        """Merge properties into the matching feature (top level keys only)"""
        index = self._index_of(feature_id)
        if index == -1:
            return False

        current = self.features[index]
        existing = current.get('properties')
        merged = dict(existing) if isinstance(existing, dict) else {}
        merged.update(clone_json(properties or {}))

        updated = dict(current)
        updated['properties'] = merged

        features = list(self.features)
        features[index] = updated
        self.features = features
        return True

    def add_feature(self, feature: Dict[str, Any]) -> 'MapDocument':
        self.features = self.features + [clone_json(feature)]
        return self

    def remove_feature(self, feature_id: Any) -> bool:
        before = len(self.features)
        self.features = [f for f in self.features if not feature_matches(f, feature_id)]
        return len(self.features) != before

    def has_features(self) -> bool:
        return len(self.features) > 0

    # Configuration

    def get_config(self) -> MapConfig:
        return self.config

    def set_config(self, config: Union[MapConfig, Dict[str, Any], None]):
        self.config = self._normalize_config(config)

    def get_config_option(self, key: str) -> Any:
        return self.config.get_option(key)

    def set_config_option(self, key: str, value: Any) -> 'MapDocument':
        self.config.set_option(key, value)
        return self

    def get_marker_types(self) -> List[Dict[str, Any]]:
        return self.config.get_type_catalog(MARKER_TYPES)

    def get_line_types(self) -> List[Dict[str, Any]]:
        return self.config.get_type_catalog(LINE_TYPES)

    def get_shape_types(self) -> List[Dict[str, Any]]:
        return self.config.get_type_catalog(SHAPE_TYPES)

    def set_marker_types(self, marker_types: List[Dict[str, Any]]) -> 'MapDocument':
        return self.set_config_option(MARKER_TYPES, clone_json(marker_types))

    def set_line_types(self, line_types: List[Dict[str, Any]]) -> 'MapDocument':
        return self.set_config_option(LINE_TYPES, clone_json(line_types))

    def set_shape_types(self, shape_types: List[Dict[str, Any]]) -> 'MapDocument':
        return self.set_config_option(SHAPE_TYPES, clone_json(shape_types))

    # Serialization

    def to_geojson(self) -> Dict[str, Any]:
        """Plain JSON-encodable representation"""
        return {
            'type': self.kind,
            'features': clone_json(self.features),
            'properties': {
                CONFIG_PROPERTY: self.config.to_dict(),
            },
        }

    def to_json(self, indent: Optional[int] = None) -> str:
        separators = None if indent else (',', ':')
        return json.dumps(self.to_geojson(), indent=indent, separators=separators,
                          ensure_ascii=False)

    def clone(self) -> 'MapDocument':
        """Fully independent copy"""
        return MapDocument(features=clone_json(self.features), config=self.config.clone())

    def __repr__(self) -> str:
        return f"MapDocument(features={len(self.features)}, config={self.config!r})"

    @classmethod
    def parse(cls, value: Union[str, bytes, Dict[str, Any]]) -> 'MapDocument':
        """Build a document from GeoJSON, raising DocumentError on bad input"""
        if value is None:
            raise DocumentError("No GeoJSON given")

        if isinstance(value, (str, bytes)):
            try:
                value = json.loads(value)
            except (ValueError, RecursionError) as e:
                raise DocumentError(f"Invalid GeoJSON string: {e}") from e

        if not isinstance(value, dict):
            raise DocumentError(f"GeoJSON must be an object, got {type(value).__name__}")

        if value.get('type') != FEATURE_COLLECTION:
            raise DocumentError(f"Invalid GeoJSON: not a {FEATURE_COLLECTION} ({value.get('type')!r})")

        features = value.get('features') or []
        if not isinstance(features, list) or not all(isinstance(f, dict) for f in features):
            raise DocumentError("Invalid GeoJSON: features must be a list of objects")

        properties = value.get('properties') or {}
        if not isinstance(properties, dict):
            raise DocumentError("Invalid GeoJSON: properties must be an object")

        config = properties.get(CONFIG_PROPERTY) or {}
        if not isinstance(config, dict):
            raise DocumentError(f"Invalid {CONFIG_PROPERTY}: must be an object")

        try:
            return cls(features=clone_json(features), config=MapConfig(config))
        except RecursionError as e:
            raise DocumentError("Invalid GeoJSON: nested too deeply") from e
        except (TypeError, ValueError) as e:
            raise DocumentError(f"Could not read {CONFIG_PROPERTY}: {e}") from e

    @classmethod
    def from_geojson(cls, value: Union[str, bytes, Dict[str, Any], None]) -> 'MapDocument':
        """Build a document from GeoJSON, falling back to an empty document"""
        if value is None:
            return cls()
        try:
            return cls.parse(value)
        except DocumentError as e:
            logger.warning("Using an empty document: %s", e)
            return cls()

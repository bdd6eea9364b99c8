"""
Map Configuration
Named option bag carried by every map document (type catalogs plus map options)
"""
import json
import logging
import math
import re
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

MARKER_TYPES = "marker_types"
LINE_TYPES = "line_types"
SHAPE_TYPES = "shape_types"

# Catalog option key -> prefix used by the entries of that catalog
TYPE_CATALOGS = {
    MARKER_TYPES: "marker",
    LINE_TYPES: "line",
    SHAPE_TYPES: "shape",
}

_KEY_PATTERN = re.compile(r"[^a-z0-9]+")


def clone_json(value: Any) -> Any:
    """
    Structural deep copy restricted to JSON values.

    Mirrors what a serialize round trip would keep: scalar dict keys become
    their JSON text (1 -> "1", None -> "null", True -> "true"), tuples become
    lists, non-finite floats become None, and anything that is not
    JSON-representable (callables, arbitrary objects, tuple keys) is dropped
    from mappings and replaced by None inside sequences.
    """
    if value is None or isinstance(value, (bool, str, int)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, dict):
        copied = {}
        for key, item in value.items():
            json_key = _json_key(key)
            if json_key is None or not _is_json_value(item):
                continue
            copied[json_key] = clone_json(item)
        return copied
    if isinstance(value, (list, tuple)):
        return [clone_json(item) if _is_json_value(item) else None for item in value]
    return None


def _is_json_value(value: Any) -> bool:
    return value is None or isinstance(value, (bool, str, int, float, dict, list, tuple))


def _json_key(key: Any) -> Optional[str]:
    if isinstance(key, str):
        return key
    if key is None or isinstance(key, (bool, int, float)):
        return json.dumps(key)
    return None


def make_key(title: Any) -> Optional[str]:
    """Slug used to match a catalog entry title against a feature's properties.type"""
    if title is None:
        return None
    key = _KEY_PATTERN.sub("_", str(title).lower()).strip("_")
    return key or None


def catalog_title(entry: Dict[str, Any], prefix: str) -> Optional[str]:
    """Title field of a catalog entry, e.g. marker_title for marker types"""
    if not isinstance(entry, dict):
        return None
    title = entry.get(f"{prefix}_title")
    if title is None or title == "":
        return None
    return str(title)


class MapConfig:
    """Configuration value owned by a single MapDocument"""

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        self._options: Dict[str, Any] = {}
        for key, value in (options or {}).items():
            self.set_option(key, value)

    @classmethod
    def defaults(cls) -> 'MapConfig':
        """Configuration with one default entry per type catalog"""
        return cls({
            MARKER_TYPES: [
                {
                    'marker_title': 'Marker',
                    'marker_shape': 'marker',
                    'marker_size': 'large',
                    'icon_type': 'icon',
                    'marker_icon': 'ion-location',
                    'marker_colour': '#4d9de0',
                    'icon_colour': '#ffffff',
                },
            ],
            LINE_TYPES: [
                {
                    'line_title': 'Line',
                    'line_colour': '#e15554',
                    'line_weight': '3',
                    'line_opacity': '0.7',
                },
            ],
            SHAPE_TYPES: [
                {
                    'shape_title': 'Shape',
                    'shape_colour': '#3bb273',
                    'fill_opacity': '0.5',
                },
            ],
        })

    def get_option(self, key: str, default: Any = None) -> Any:
        """Get an independent copy of an option value"""
        if key not in self._options:
            return default
        return clone_json(self._options[key])

    def set_option(self, key: str, value: Any):
        """Store an independent copy of an option value"""
        if not isinstance(key, str):
            raise TypeError(f"Option keys must be strings, got {type(key).__name__}")
        self._options[key] = clone_json(value)

    def has_option(self, key: str) -> bool:
        return key in self._options

    def remove_option(self, key: str) -> bool:
        """Remove an option, returns False if it was not set"""
        if key not in self._options:
            return False
        del self._options[key]
        return True

    def option_keys(self) -> List[str]:
        return list(self._options.keys())

    def get_type_catalog(self, catalog: str) -> List[Dict[str, Any]]:
        value = self.get_option(catalog)
        if not isinstance(value, list):
            return []
        return value

    def to_dict(self) -> Dict[str, Any]:
        """Plain JSON-encodable copy of all options"""
        return clone_json(self._options)

    def clone(self) -> 'MapConfig':
        cloned = MapConfig()
        for key in self._options:
            cloned.set_option(key, self._options[key])
        return cloned

    def __eq__(self, other) -> bool:
        if not isinstance(other, MapConfig):
            return NotImplemented
        return self._options == other._options

    def __repr__(self) -> str:
        return f"MapConfig(keys={self.option_keys()!r})"

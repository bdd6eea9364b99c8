"""
Map Export
Writes the map document as a GeoJSON file whose type catalogs only keep
the types the features actually use
"""
import logging
import os
from datetime import datetime
from typing import Dict, List, Optional, Set

from core.config import TYPE_CATALOGS, catalog_title, make_key
from core.document import MapDocument, geometry_family

logger = logging.getLogger(__name__)

EXPORT_EXTENSION = "geojson"
EXPORT_PREFIX = "ogis-map"


class ExportError(Exception):
    """Raised when the document cannot be exported"""


def used_types(document: MapDocument) -> Dict[str, Set[str]]:
    """Distinct properties.type values per family ('marker', 'line', 'shape')"""
    used: Dict[str, Set[str]] = {family: set() for family in TYPE_CATALOGS.values()}

    for feature in document.get_features():
        family = geometry_family(feature)
        if family is None:
            continue
        properties = feature.get('properties') or {}
        type_key = properties.get('type') if isinstance(properties, dict) else None
        if type_key is not None and type_key != "":
            used[family].add(str(type_key))

    return used


def filter_catalog(entries: List[dict], prefix: str, keys: Set[str]) -> List[dict]:
    """Keep catalog entries whose title slug is in keys; untitled entries are dropped"""
    kept = []
    for entry in entries:
        title = catalog_title(entry, prefix)
        if title is None:
            continue
        if make_key(title) in keys:
            kept.append(entry)
    return kept


class MapExporter:
    """Handles GeoJSON export of a map document"""

    def __init__(self, document: MapDocument):
        self.document = document

    def build_export_document(self) -> MapDocument:
        """Copy of the document with unused types removed from each catalog"""
        if not self.document.has_features():
            raise ExportError("Nothing to export")

        exported = self.document.clone()
        used = used_types(exported)
        config = exported.get_config()

        for catalog, prefix in TYPE_CATALOGS.items():
            if not config.has_option(catalog):
                continue
            entries = config.get_type_catalog(catalog)
            config.set_option(catalog, filter_catalog(entries, prefix, used[prefix]))

        return exported

    def to_json(self) -> str:
        return self.build_export_document().to_json(indent=2)

    @staticmethod
    def export_filename(now: Optional[datetime] = None) -> str:
        """ogis-map-YYYY-MM-DD-HH-mm.geojson"""
        now = now or datetime.now()
        return f"{EXPORT_PREFIX}-{now:%Y-%m-%d-%H-%M}.{EXPORT_EXTENSION}"

    def export_to(self, output_path: str) -> str:
        """Write the export file, returns its path"""
        try:
            content = self.to_json().encode('utf-8')
        except UnicodeEncodeError as e:
            raise ExportError(f"Map contains text that cannot be saved as UTF-8: {e}") from e

        try:
            with open(output_path, 'wb') as f:
                f.write(content)
        except OSError as e:
            raise ExportError(f"Could not write {output_path}: {e}") from e

        logger.info("Exported %d features to %s", len(self.document.get_features()), output_path)
        return output_path

    def export_to_directory(self, directory: str, now: Optional[datetime] = None) -> str:
        return self.export_to(os.path.join(directory, self.export_filename(now)))

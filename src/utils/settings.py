"""
Settings Management
Handles user preferences for the map editor
"""
import json
import logging
import os
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

APP_DIR_NAME = ".ogis_editor"
MAX_RECENT_FILES = 10


def default_app_dir() -> str:
    return os.path.join(os.path.expanduser("~"), APP_DIR_NAME)


class Settings:
    """Manages application settings"""

    def __init__(self, config_file: Optional[str] = None):
        if config_file is None:
            config_file = os.path.join(default_app_dir(), "settings.json")

        self.config_file = config_file
        self.settings = self.load()

    def load(self) -> Dict[str, Any]:
        """Load settings from file, filling in any missing defaults"""
        settings = self.get_defaults()
        if not os.path.exists(self.config_file):
            return settings

        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                saved = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Error loading settings: %s", e)
            return settings

        if isinstance(saved, dict):
            _merge(settings, saved)
        return settings

    def save(self):
        """Save settings to file"""
        try:
            os.makedirs(os.path.dirname(os.path.abspath(self.config_file)), exist_ok=True)
            with open(self.config_file, 'w', encoding='utf-8') as f:
                json.dump(self.settings, f, indent=4)
        except OSError as e:
            logger.error("Error saving settings: %s", e)

    def get_defaults(self) -> Dict[str, Any]:
        """Get default settings"""
        app_dir = os.path.dirname(os.path.abspath(self.config_file))
        return {
            'history': {
                'max_depth': 10
            },
            'storage': {
                'file': os.path.join(app_dir, "storage.json")
            },
            'export': {
                'directory': os.path.expanduser("~")
            },
            'recent_files': [],
            'window': {
                'width': 1200,
                'height': 800
            }
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Get a setting value using a dotted key, e.g. 'history.max_depth'"""
        value = self.settings

        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any):
        """Set a setting value using a dotted key"""
        keys = key.split('.')
        current = self.settings

        for k in keys[:-1]:
            if not isinstance(current.get(k), dict):
                current[k] = {}
            current = current[k]

        current[keys[-1]] = value
        self.save()

    def add_recent_file(self, file_path: str):
        """Move file_path to the top of the recent imports"""
        recent = [f for f in self.get_recent_files() if f != file_path]
        recent.insert(0, file_path)
        self.set('recent_files', recent[:MAX_RECENT_FILES])

    def get_recent_files(self) -> List[str]:
        return list(self.get('recent_files', []))


def _merge(target: Dict[str, Any], source: Dict[str, Any]):
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge(target[key], value)
        else:
            target[key] = value

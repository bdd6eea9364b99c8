"""
UI module for the map editor
Contains the application main window
"""
from .main_window import MainWindow

__all__ = [
    'MainWindow'
]

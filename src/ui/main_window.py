"""
Main Window
Application main window with menus, the feature list and a status bar
"""
import os

from PyQt6.QtWidgets import (QMainWindow, QStatusBar, QFileDialog, QMessageBox,
                             QListWidget, QListWidgetItem, QToolBar)
from PyQt6.QtCore import Qt, QSize
from PyQt6.QtGui import QAction, QKeySequence

from core import StateStore, MapDocument
from core.document import geometry_family
from utils.settings import Settings
from utils.export import MapExporter, ExportError
from utils.importer import MapImporter, MapImportError, ImportMode

IMPORT_FILTER = "Map Files (*.geojson *.json *.kml *.gpx);;All Files (*)"
EXPORT_FILTER = "GeoJSON Files (*.geojson)"


def describe_feature(index: int, feature: dict) -> str:
    """One line summary shown in the feature list"""
    properties = feature.get('properties') or {}
    title = properties.get('title') or f"Feature {index + 1}"
    geometry = (feature.get('geometry') or {}).get('type', "No geometry")
    type_key = properties.get('type')
    if type_key:
        return f"{title} ({type_key}) - {geometry}"
    return f"{title} - {geometry}"


class MainWindow(QMainWindow):
    """Main application window"""

    def __init__(self, store: StateStore, settings: Settings, importer: MapImporter = None):
        super().__init__()

        self.store = store
        self.settings = settings
        self.importer = importer or MapImporter(store, self)

        self.setup_ui()
        self.connect_signals()
        self.refresh()

        self.setWindowTitle("OGIS Map Editor")
        self.resize(self.settings.get('window.width', 1200), self.settings.get('window.height', 800))

    def setup_ui(self):
        """Setup UI components"""
        self.feature_list = QListWidget()
        self.feature_list.setAlternatingRowColors(True)
        self.setCentralWidget(self.feature_list)

        self.create_menus()
        self.create_main_toolbar()
        self.create_status_bar()

    def create_menus(self):
        """Create menu bar"""
        menubar = self.menuBar()

        # File menu
        file_menu = menubar.addMenu("&File")

        self.import_action = QAction("&Import...", self)
        self.import_action.setShortcut(QKeySequence.StandardKey.Open)
        self.import_action.triggered.connect(self.import_file)
        file_menu.addAction(self.import_action)

        self.export_action = QAction("&Export...", self)
        self.export_action.setShortcut(QKeySequence.StandardKey.SaveAs)
        self.export_action.triggered.connect(self.export_file)
        file_menu.addAction(self.export_action)

        file_menu.addSeparator()

        exit_action = QAction("E&xit", self)
        exit_action.setShortcut(QKeySequence.StandardKey.Quit)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        # Edit menu
        edit_menu = menubar.addMenu("&Edit")

        self.undo_action = QAction("&Undo", self)
        self.undo_action.setShortcut(QKeySequence.StandardKey.Undo)
        self.undo_action.triggered.connect(self.undo)
        self.undo_action.setEnabled(False)
        edit_menu.addAction(self.undo_action)

        self.redo_action = QAction("&Redo", self)
        self.redo_action.setShortcut(QKeySequence.StandardKey.Redo)
        self.redo_action.triggered.connect(self.redo)
        self.redo_action.setEnabled(False)
        edit_menu.addAction(self.redo_action)

        edit_menu.addSeparator()

        self.clear_action = QAction("&Clear", self)
        self.clear_action.triggered.connect(self.clear_map)
        edit_menu.addAction(self.clear_action)

        self.reset_config_action = QAction("Reset &Config", self)
        self.reset_config_action.triggered.connect(self.reset_config)
        edit_menu.addAction(self.reset_config_action)

    def create_main_toolbar(self):
        """Create main toolbar"""
        toolbar = QToolBar("Main Toolbar")
        toolbar.setIconSize(QSize(24, 24))
        toolbar.setToolButtonStyle(Qt.ToolButtonStyle.ToolButtonTextOnly)
        self.addToolBar(toolbar)

        toolbar.addAction(self.undo_action)
        toolbar.addAction(self.redo_action)
        toolbar.addAction(self.clear_action)
        toolbar.addAction(self.reset_config_action)
        toolbar.addSeparator()
        toolbar.addAction(self.import_action)
        toolbar.addAction(self.export_action)

    def create_status_bar(self):
        """Create status bar"""
        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)
        self.status_bar.showMessage("Ready")

    def connect_signals(self):
        self.store.document_changed.connect(self.on_document_changed)
        self.store.history_changed.connect(self.update_undo_redo_actions)
        self.importer.import_finished.connect(self.on_import_finished)
        self.importer.import_failed.connect(self.on_import_failed)

    def on_document_changed(self, document: MapDocument, previous: MapDocument):
        self.refresh()

    def refresh(self):
        """Re-render the feature list from the live document"""
        document = self.store.document

        self.feature_list.clear()
        for index, feature in enumerate(document.get_features()):
            item = QListWidgetItem(describe_feature(index, feature))
            item.setData(Qt.ItemDataRole.UserRole, geometry_family(feature))
            self.feature_list.addItem(item)

        has_features = document.has_features()
        self.clear_action.setEnabled(has_features)
        self.export_action.setEnabled(has_features)
        self.update_undo_redo_actions()

    def update_undo_redo_actions(self):
        """Update undo/redo action states"""
        history = self.store.history
        self.undo_action.setEnabled(history.can_undo())
        self.redo_action.setEnabled(history.can_redo())

        if history.can_undo():
            self.undo_action.setText(f"Undo {history.get_undo_description()}")
        else:
            self.undo_action.setText("Undo")

        if history.can_redo():
            self.redo_action.setText(f"Redo {history.get_redo_description()}")
        else:
            self.redo_action.setText("Redo")

    def undo(self):
        """Undo last change"""
        if self.store.undo():
            self.status_bar.showMessage("Undone")

    def redo(self):
        """Redo last undone change"""
        if self.store.redo():
            self.status_bar.showMessage("Redone")

    def clear_map(self):
        if not self.store.clear():
            self.status_bar.showMessage("Nothing to clear")
            return
        self.status_bar.showMessage("Map cleared")

    def reset_config(self):
        self.store.reset_config()
        self.status_bar.showMessage("Configuration reset")

    def import_file(self):
        """Pick a file and import it in the background"""
        recent = self.settings.get_recent_files()
        start_dir = os.path.dirname(recent[0]) if recent else ""
        file_name, _ = QFileDialog.getOpenFileName(self, "Import Map", start_dir, IMPORT_FILTER)
        if file_name:
            self.start_import(file_name)

    def start_import(self, file_name: str):
        try:
            self.importer.import_file_async(file_name)
        except MapImportError as e:
            QMessageBox.warning(self, "Import", str(e))
            return
        self.status_bar.showMessage(f"Importing {os.path.basename(file_name)}...")

    def on_import_finished(self, file_name: str, mode: ImportMode):
        self.settings.add_recent_file(file_name)
        if mode is ImportMode.DELEGATED:
            self.status_bar.showMessage(f"Sent to map editor: {file_name}")
        else:
            self.status_bar.showMessage(f"Imported: {file_name}")

    def on_import_failed(self, file_name: str, error: str):
        QMessageBox.critical(self, "Import Error", error)

    def export_file(self):
        """Export the map as GeoJSON"""
        exporter = MapExporter(self.store.document)
        if not self.store.document.has_features():
            QMessageBox.warning(self, "Export", "Nothing to export")
            return

        directory = self.settings.get('export.directory', "")
        default_path = os.path.join(directory, exporter.export_filename())
        file_name, _ = QFileDialog.getSaveFileName(self, "Export Map", default_path, EXPORT_FILTER)
        if not file_name:
            return

        try:
            exporter.export_to(file_name)
        except ExportError as e:
            QMessageBox.warning(self, "Export", str(e))
            return

        self.settings.set('export.directory', os.path.dirname(file_name))
        self.status_bar.showMessage(f"Exported: {file_name}")

#!/usr/bin/env python3
"""
OGIS Map Editor
Main entry point
"""
import logging
import sys
from PyQt6.QtWidgets import QApplication
from core import StateStore, PersistenceGateway, MemoryEditorBridge
from ui import MainWindow
from utils import Settings, LocalStorage


def create_store(settings: Settings) -> StateStore:
    """Build the state store from the saved settings"""
    storage = LocalStorage(settings.get('storage.file'))
    return StateStore(
        PersistenceGateway(storage),
        bridge=MemoryEditorBridge(),
        max_history=settings.get('history.max_depth', 10),
    )


def main():
    """Main entry point"""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Create application
    app = QApplication(sys.argv)
    app.setApplicationName("OGIS Map Editor")
    app.setOrganizationName("OGIS")

    # Apply style
    app.setStyle("Fusion")

    settings = Settings()
    store = create_store(settings)

    # Create and show main window
    window = MainWindow(store, settings)
    window.show()

    # Run application
    sys.exit(app.exec())


if __name__ == "__main__":
    main()

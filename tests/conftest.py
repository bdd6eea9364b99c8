import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt6.QtWidgets import QApplication

from core import MapDocument, MemoryEditorBridge, PersistenceGateway, StateStore
from utils.storage import LocalStorage

from factories import line, point, polygon


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


class RecordingBridge(MemoryEditorBridge):
    """In-memory bridge that remembers which editor calls were made"""

    def __init__(self):
        super().__init__()
        self.calls = []

    def init(self, config):
        self.calls.append('init')
        super().init(config)

    def load(self, collection):
        self.calls.append('load')
        super().load(collection)

    def clear(self):
        self.calls.append('clear')
        super().clear()

    def fit_bounds(self, bounds):
        self.calls.append('fit_bounds')
        super().fit_bounds(bounds)

    def set_zoom(self, zoom):
        self.calls.append('set_zoom')
        super().set_zoom(zoom)

    def load_file_contents(self, contents, extension):
        self.calls.append(('load_file_contents', extension))
        super().load_file_contents(contents, extension)


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / "storage.json"))


@pytest.fixture
def gateway(storage):
    return PersistenceGateway(storage)


@pytest.fixture
def bridge():
    return RecordingBridge()


@pytest.fixture
def store(gateway, bridge):
    return StateStore(gateway, bridge=bridge)


@pytest.fixture
def save_calls(gateway, monkeypatch):
    """Documents written through the persistence gateway"""
    calls = []
    original = gateway.save

    def spy(document):
        calls.append(document)
        return original(document)

    monkeypatch.setattr(gateway, "save", spy)
    return calls


@pytest.fixture
def sample_document():
    document = MapDocument(
        features=[point("cafe-1", "cafe", "Corner Cafe"), line("trail-1"), polygon("park-1")],
        config={
            'marker_types': [
                {'marker_title': 'Cafe', 'marker_colour': '#ff0000'},
                {'marker_title': 'Unused', 'marker_colour': '#00ff00'},
            ],
            'line_types': [{'line_title': 'Trail', 'line_colour': '#0000ff'}],
            'shape_types': [{'shape_title': 'Park', 'shape_colour': '#00aa00'}],
            'map_height': 600,
        },
    )
    return document

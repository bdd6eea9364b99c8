import json
import time

import pytest

from core import MapDocument, StateStore
from utils.importer import (
    ImportMode,
    MapImporter,
    MapImportError,
    UnsupportedFormatError,
    check_extension,
    file_extension,
)

from factories import point


@pytest.fixture
def importer(store):
    return MapImporter(store)


def collection(*features, config=None):
    data = {'type': 'FeatureCollection', 'features': list(features)}
    if config is not None:
        data['properties'] = {'waymark_config': config}
    return data


def wait_for(app, condition, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        app.processEvents()
        if condition():
            return True
        time.sleep(0.01)
    return False


def test_file_extension():
    assert file_extension("/maps/Trip.GeoJSON") == "geojson"
    assert file_extension("route.gpx") == "gpx"
    assert file_extension("README") == ""


def test_unsupported_extension_is_rejected_before_reading(importer, tmp_path, save_calls):
    with pytest.raises(UnsupportedFormatError):
        importer.import_file(str(tmp_path / "does-not-exist.shp"))
    with pytest.raises(UnsupportedFormatError):
        check_extension("map")
    assert save_calls == []


def test_native_import_replaces_the_document(importer, store, bridge, save_calls):
    store.commit_edited_features([point("old")])
    previous = store.document
    undo_count = len(store.history.undo_stack)
    save_calls.clear()
    bridge.calls.clear()

    contents = json.dumps(collection(point("new", "pub"), config={'marker_types': [{'marker_title': 'Pub'}]}))
    mode = importer.import_contents(contents, "geojson")

    assert mode is ImportMode.NATIVE
    assert [f['id'] for f in store.document.get_features()] == ["new"]
    assert store.document.get_marker_types() == [{'marker_title': 'Pub'}]
    assert len(store.history.undo_stack) == undo_count + 1
    assert store.history.undo_stack[-1].snapshot == previous.to_json()
    assert store.history.get_undo_description() == "Import"
    assert len(save_calls) == 1
    assert bridge.calls == ['clear', 'fit_bounds', 'set_zoom', 'load']


def test_import_file_reads_from_disk(importer, store, tmp_path):
    path = tmp_path / "map.json"
    path.write_text(json.dumps(collection(point("a"))), encoding="utf-8")

    assert importer.import_file(str(path)) is ImportMode.NATIVE
    assert store.document.get_feature_by_id("a") is not None


def test_missing_file_raises_import_error(importer, tmp_path):
    with pytest.raises(MapImportError):
        importer.import_file(str(tmp_path / "missing.geojson"))


def test_other_geojson_types_are_delegated(importer, store, bridge):
    before = store.document

    mode = importer.import_contents('{"type": "NotAFeatureCollection"}', "json")

    assert mode is ImportMode.DELEGATED
    assert ('load_file_contents', "json") in bridge.calls
    assert store.document is before


def test_unparsable_json_is_delegated(importer, store, bridge):
    mode = importer.import_contents("{broken", "geojson")

    assert mode is ImportMode.DELEGATED
    assert ('load_file_contents', "geojson") in bridge.calls
    assert store.document.get_features() == []


def test_bad_embedded_config_is_delegated(importer, store, bridge):
    contents = json.dumps({
        'type': 'FeatureCollection',
        'features': [point("a")],
        'properties': {'waymark_config': "not an object"},
    })

    mode = importer.import_contents(contents, "geojson")

    assert mode is ImportMode.DELEGATED
    # the in-memory editor loads the features and commits them back
    assert store.document.get_feature_by_id("a") is not None
    assert store.history.get_undo_description() == "Edit features"


def test_deeply_nested_json_is_delegated_without_raising(importer, store, bridge):
    mode = importer.import_contents("[" * 100000, "geojson")

    assert mode is ImportMode.DELEGATED
    assert ('load_file_contents', "geojson") in bridge.calls
    assert store.document.get_features() == []


def test_single_feature_files_reach_the_store_through_the_editor(importer, store):
    importer.import_contents(json.dumps(point("lonely")), "geojson")

    assert store.document.get_feature_by_id("lonely") is not None


def test_kml_and_gpx_are_delegated(importer, store, bridge):
    assert importer.import_contents("<kml></kml>", "kml") is ImportMode.DELEGATED
    assert importer.import_contents("<gpx></gpx>", "gpx") is ImportMode.DELEGATED

    assert ('load_file_contents', "kml") in bridge.calls
    assert ('load_file_contents', "gpx") in bridge.calls
    assert store.document.get_features() == []


def test_delegation_needs_an_editor(gateway):
    importer = MapImporter(StateStore(gateway))

    with pytest.raises(MapImportError):
        importer.import_contents("<kml></kml>", "kml")


def test_async_import_commits_after_the_read(importer, store, tmp_path, qapp):
    path = tmp_path / "map.geojson"
    path.write_text(json.dumps(collection(point("async"))), encoding="utf-8")
    finished = []
    importer.import_finished.connect(lambda p, mode: finished.append((p, mode)))

    thread = importer.import_file_async(str(path))

    assert thread.wait(5000)
    assert wait_for(qapp, lambda: finished)
    assert finished == [(str(path), ImportMode.NATIVE)]
    assert store.document.get_feature_by_id("async") is not None


def test_async_import_reports_read_failures(importer, store, tmp_path, qapp):
    failures = []
    importer.import_failed.connect(lambda p, error: failures.append(p))
    path = str(tmp_path / "missing.geojson")

    thread = importer.import_file_async(path)

    assert thread.wait(5000)
    assert wait_for(qapp, lambda: failures)
    assert failures == [path]
    assert store.document.get_features() == []


def test_async_import_rejects_unsupported_files_immediately(importer):
    with pytest.raises(UnsupportedFormatError):
        importer.import_file_async("notes.txt")


def test_imported_document_round_trips(importer, store, sample_document):
    importer.import_contents(sample_document.to_json(indent=2), "geojson")

    assert store.document.to_json() == sample_document.to_json()
    assert isinstance(store.document, MapDocument)

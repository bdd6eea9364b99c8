import math

import pytest

from core.config import MapConfig, catalog_title, clone_json, make_key


def test_clone_json_copies_nested_structures():
    original = {'a': [1, {'b': 2}], 'c': "x"}
    copied = clone_json(original)

    assert copied == original
    copied['a'][1]['b'] = 99
    assert original['a'][1]['b'] == 2


def test_clone_json_drops_values_json_cannot_represent():
    value = {
        'callback': lambda: None,
        'nan': float('nan'),
        'inf': math.inf,
        'tuple': (1, 2),
        1: "int key",
        'list': [1, print, object()],
    }

    assert clone_json(value) == {
        'nan': None,
        'inf': None,
        'tuple': [1, 2],
        '1': "int key",
        'list': [1, None, None],
    }


def test_clone_json_writes_keys_as_json_text():
    value = {None: 1, True: 2, 2.5: 3, (1, 2): 4}

    assert clone_json(value) == {'null': 1, 'true': 2, '2.5': 3}


def test_clone_json_keeps_booleans():
    assert clone_json([True, False, None]) == [True, False, None]


@pytest.mark.parametrize("title,key", [
    ("Cafe", "cafe"),
    ("Beer Garden", "beer_garden"),
    ("  Bus / Train stop ", "bus_train_stop"),
    ("Trail-2", "trail_2"),
    ("", None),
    (None, None),
    ("!!!", None),
])
def test_make_key(title, key):
    assert make_key(title) == key


def test_catalog_title_uses_family_prefix():
    assert catalog_title({'marker_title': 'Cafe'}, 'marker') == 'Cafe'
    assert catalog_title({'line_title': 'Cafe'}, 'marker') is None
    assert catalog_title({'marker_title': ''}, 'marker') is None
    assert catalog_title("not an entry", 'marker') is None


def test_options_are_isolated_from_callers():
    marker_types = [{'marker_title': 'Cafe'}]
    config = MapConfig({'marker_types': marker_types})

    marker_types[0]['marker_title'] = 'Changed'
    assert config.get_option('marker_types') == [{'marker_title': 'Cafe'}]

    returned = config.get_option('marker_types')
    returned.append({'marker_title': 'Extra'})
    assert len(config.get_option('marker_types')) == 1


def test_option_crud():
    config = MapConfig()
    assert config.option_keys() == []
    assert config.get_option('zoom', 5) == 5

    config.set_option('zoom', 12)
    assert config.has_option('zoom')
    assert config.get_option('zoom') == 12

    assert config.remove_option('zoom') is True
    assert config.remove_option('zoom') is False
    assert not config.has_option('zoom')


def test_option_keys_must_be_strings():
    with pytest.raises(TypeError):
        MapConfig().set_option(3, "x")


def test_type_catalog_ignores_non_list_values():
    config = MapConfig({'marker_types': "broken"})
    assert config.get_type_catalog('marker_types') == []
    assert config.get_type_catalog('line_types') == []


def test_clone_is_independent():
    config = MapConfig({'line_types': [{'line_title': 'Trail'}]})
    cloned = config.clone()

    assert cloned == config
    cloned.set_option('line_types', [])
    cloned.set_option('extra', True)
    assert config.get_option('line_types') == [{'line_title': 'Trail'}]
    assert not config.has_option('extra')


def test_defaults_provide_one_entry_per_catalog():
    config = MapConfig.defaults()

    assert catalog_title(config.get_type_catalog('marker_types')[0], 'marker') == 'Marker'
    assert catalog_title(config.get_type_catalog('line_types')[0], 'line') == 'Line'
    assert catalog_title(config.get_type_catalog('shape_types')[0], 'shape') == 'Shape'
    assert MapConfig.defaults() is not config

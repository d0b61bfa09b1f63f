import pytest

from dungeon_config import EdgePreference, GenerationSettings, StartingPointCriteria
from dungeon_geometry import MapEdge
from dungeon_presets import PRESETS, build_preset


def test_generation_settings_defaults():
    settings = GenerationSettings()

    assert (settings.width, settings.height) == (100, 100)
    assert settings.seed == 12345
    assert settings.max_bsp_depth == 6
    assert settings.max_connection_attempts == 10
    assert settings.max_doors_per_room == 4


@pytest.mark.parametrize(
    "kwargs",
    [
        {"width": 0},
        {"height": -5},
        {"min_room_size": 0},
        {"min_room_size": 10, "max_room_size": 8},
        {"corridor_width": 0},
        {"max_bsp_depth": -1},
        {"max_connection_attempts": -1},
        {"max_corridor_segment_length": 0},
        {"treasure_room_chance": 1.5},
        {"treasure_room_chance": 0.5, "guard_room_chance": 0.4, "laboratory_chance": 0.2},
    ],
)
def test_generation_settings_rejects_invalid_values(kwargs):
    with pytest.raises(ValueError):
        GenerationSettings(**kwargs)


def test_zero_connection_attempts_is_allowed():
    assert GenerationSettings(max_connection_attempts=0).max_connection_attempts == 0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"min_room_area": -1},
        {"min_connections": 3, "max_connections": 2},
        {"min_accessibility_ratio": 1.2},
        {"corner_avoidance_radius": -1},
        {"preferred_edge": "north"},
    ],
)
def test_starting_point_criteria_rejects_invalid_values(kwargs):
    with pytest.raises(ValueError):
        StartingPointCriteria(**kwargs)


def test_edge_preference_matches():
    assert not EdgePreference.ANY.matches(MapEdge.NORTH)
    assert EdgePreference.NORTH_SOUTH.matches(MapEdge.SOUTH)
    assert not EdgePreference.EAST_WEST.matches(MapEdge.NORTH)


@pytest.mark.parametrize("name", sorted(PRESETS))
def test_presets_build_valid_settings(name):
    settings = build_preset(name, seed=7)

    assert settings.seed == 7
    assert settings.max_room_size >= settings.min_room_size
    assert settings is not PRESETS[name]


def test_build_preset_applies_and_validates_overrides():
    settings = build_preset("metroidvania", width=64)

    assert settings.width == 64
    assert settings.corridor_width == 2
    with pytest.raises(ValueError):
        build_preset("metroidvania", width=0)
    with pytest.raises(ValueError):
        build_preset("roguelike")

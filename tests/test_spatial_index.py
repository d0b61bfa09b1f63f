from dungeon_geometry import GridPosition, Rect
from spatial_index import SpatialIndex


def test_add_room_indexes_every_tile():
    index = SpatialIndex()
    index.add_room(3, Rect(1, 1, 2, 3))

    assert len(index) == 6
    assert index.get_room_at(GridPosition(2, 3)) == 3
    assert index.get_room_at(GridPosition(3, 3)) is None


def test_clear_drops_every_tile():
    index = SpatialIndex()
    index.add_room(0, Rect(0, 0, 4, 4))

    index.clear()

    assert len(index) == 0
    assert index.get_room_at(GridPosition(1, 1)) is None

"""
Unit tests for surface_core/selection.py pointer hit-testing.
"""

import pytest
from conftest import rect_segment

from surface_core.models import OccupancyMask
from surface_core.regions import RegionIndex, build_region_index
from surface_core.selection import resolve_selection, to_mask_coords


@pytest.fixture
def room(room_segments):
    """RegionIndex for the 20x10 room: 0 left wall, 1 right wall, 2 floor, 3 ceiling."""
    return build_region_index(room_segments)


class TestToMaskCoords:
    """Test display -> mask coordinate mapping."""

    def test_scaling(self):
        mask = OccupancyMask(20, 10, [0] * 200)
        assert to_mask_coords(25, 55, 200, 100, mask) == (2, 5)

    def test_clamped_to_mask(self):
        mask = OccupancyMask(20, 10, [0] * 200)
        assert to_mask_coords(200, 100, 200, 100, mask) == (19, 9)
        assert to_mask_coords(-3, -1, 200, 100, mask) == (0, 0)

    @pytest.mark.parametrize("size", [(0, 100), (200, 0), (-1, -1)])
    def test_bad_display_size(self, size):
        mask = OccupancyMask(2, 2, [0] * 4)
        with pytest.raises(ValueError):
            to_mask_coords(1, 1, size[0], size[1], mask)


class TestResolveSelection:
    """Test region lookup under the pointer."""

    def test_room_layout(self, room):
        assert room.ids == [0, 1, 2, 3]
        assert [r.category.value for r in room] == ["wall", "wall", "floor", "ceiling"]

    @pytest.mark.parametrize("point, expected", [
        ((25, 50), 0),     # left wall
        ((175, 50), 1),    # right wall
        ((100, 95), 2),    # floor
        ((100, 5), 3),     # ceiling
        ((100, 50), None),  # middle of the room, nothing detected
    ])
    def test_hits(self, room, point, expected):
        assert resolve_selection(room, point[0], point[1], 200, 100) == expected

    def test_display_size_independent(self, room):
        """The same relative point resolves identically at any rendered size."""
        assert resolve_selection(room, 12.5, 25, 100, 50) == 0
        assert resolve_selection(room, 50, 100, 400, 200) == 0

    def test_overlap_resolves_to_lowest_id(self):
        regions = build_region_index([
            rect_segment("wall", 10, 10, 0, 0, 6, 10),
            rect_segment("wall", 10, 10, 4, 0, 10, 10),
        ])
        # Column 5 belongs to both masks
        assert resolve_selection(regions, 5, 5, 10, 10) == 0
        assert resolve_selection(list(reversed(list(regions))), 5, 5, 10, 10) == 0
        assert resolve_selection(regions, 8, 5, 10, 10) == 1

    def test_no_regions(self):
        assert resolve_selection(RegionIndex(), 1, 1, 10, 10) is None

    def test_mixed_mask_sizes(self):
        """Each region maps the pointer through its own mask dimensions."""
        regions = build_region_index([
            rect_segment("wall", 4, 4, 0, 0, 1, 4),
            rect_segment("floor", 40, 40, 30, 0, 40, 40),
        ])
        assert resolve_selection(regions, 10, 50, 100, 100) == 0
        assert resolve_selection(regions, 90, 50, 100, 100) == 1


class TestRegionIndex:
    """Test id-keyed region storage."""

    def test_duplicate_ids_rejected(self, room):
        region = room.require(0)
        with pytest.raises(ValueError, match="Duplicate"):
            RegionIndex([region, region])

    def test_require_unknown(self, room):
        with pytest.raises(KeyError):
            room.require(99)
        assert room.get(99) is None
        assert 99 not in room

"""
Unit tests for surface_core/ingest.py label classification and filtering.
"""

import pytest
from conftest import rect_segment

from surface_core.errors import MalformedMask
from surface_core.ingest import classify_label, ingest_segments
from surface_core.models import Category, OccupancyMask, RawSegment
from surface_core.regions import build_region_index


class TestClassifyLabel:
    """Test keyword classification of segmentation labels."""

    def test_basic_categories(self):
        assert classify_label("floor, flooring") is Category.FLOOR
        assert classify_label("ceiling") is Category.CEILING
        assert classify_label("wall") is Category.WALL

    def test_unrelated_label_excluded(self):
        assert classify_label("sky") is None
        assert classify_label("sofa") is None

    def test_case_insensitive_substring(self):
        assert classify_label("Brick WALL") is Category.WALL
        assert classify_label("FLOORING") is Category.FLOOR

    def test_floor_has_priority(self):
        """A label naming several surfaces resolves floor, then ceiling, then wall."""
        assert classify_label("wall and floor") is Category.FLOOR
        assert classify_label("ceiling wall") is Category.CEILING


class TestIngestSegments:
    """Test ingest_segments filtering and ordering."""

    def test_preserves_order_and_drops_unmatched(self, room_segments):
        accepted = ingest_segments(room_segments)

        labels = [seg.label for seg, _ in accepted]
        assert labels == ["wall", "wall", "floor, flooring", "wall", "ceiling"]
        assert [cat for _, cat in accepted] == [
            Category.WALL, Category.WALL, Category.FLOOR, Category.WALL, Category.CEILING
        ]
        assert all(isinstance(seg, RawSegment) for seg, _ in accepted)

    def test_accepts_raw_segment_instances(self):
        seg = RawSegment.from_dict(rect_segment("ceiling", 4, 4, 0, 0, 4, 1))
        accepted = ingest_segments([seg])
        assert accepted == [(seg, Category.CEILING)]

    def test_malformed_segment_isolated(self):
        good = rect_segment("wall", 4, 4, 0, 0, 2, 2)
        bad_length = {"label": "wall", "mask": {"width": 4, "height": 4, "data": [1, 0, 1]}}
        no_mask = {"label": "floor"}
        not_a_mapping = 42

        accepted = ingest_segments([bad_length, good, no_mask, not_a_mapping])

        assert len(accepted) == 1
        assert accepted[0][1] is Category.WALL

    def test_empty_input(self):
        assert ingest_segments([]) == []

    @pytest.mark.parametrize("mask", [
        {"width": "abc", "height": 2, "data": [1] * 8},
        {"width": float("inf"), "height": 2, "data": [1] * 8},
        {"width": 2, "height": 2, "data": ["x", 1, 1, 1]},
        {"width": 2, "height": 2, "data": None},
    ])
    def test_bad_mask_values_isolated(self, mask):
        """Unparseable dimensions or data only drop their own segment."""
        accepted = ingest_segments([{"label": "floor", "mask": mask}, rect_segment("wall", 4, 4, 0, 0, 2, 2)])

        assert [cat for _, cat in accepted] == [Category.WALL]

    def test_non_string_label_isolated(self):
        class Stray:
            label = 7
            mask = None

        accepted = ingest_segments([Stray(), rect_segment("ceiling", 4, 4, 0, 0, 4, 1)])
        assert [cat for _, cat in accepted] == [Category.CEILING]


class TestRawSegment:
    """Test RawSegment validation."""

    def test_from_dict_wraps_conversion_errors(self):
        with pytest.raises(MalformedMask, match="invalid"):
            RawSegment.from_dict({"label": "wall", "mask": {"width": "abc", "height": 2, "data": [1] * 8}})

    def test_from_dict_keeps_length_message(self):
        with pytest.raises(MalformedMask, match="doesn't match"):
            RawSegment.from_dict({"label": "wall", "mask": {"width": 2, "height": 2, "data": [1]}})

    def test_constructor_validates_fields(self):
        with pytest.raises(MalformedMask, match="label"):
            RawSegment(7, OccupancyMask(1, 1, [1]))
        with pytest.raises(MalformedMask, match="OccupancyMask"):
            RawSegment("wall", {"width": 1, "height": 1, "data": [1]})

    def test_region_index_survives_bad_sibling(self):
        regions = build_region_index([
            {"label": "floor", "mask": {"width": "abc", "height": 2, "data": [1] * 8}},
            rect_segment("wall", 4, 4, 0, 0, 2, 4),
        ])
        assert regions.ids == [0]
        assert regions.require(0).category is Category.WALL

"""
Pytest configuration and shared fixtures for the Interior Surface Visualizer tests.

This module provides shared fixtures and configuration for all test modules.
"""

import pytest
import numpy as np

from surface_core.progress import ProgressEvent


def grid_segment(label, grid):
    """Build a `{label, mask}` payload from a 2D array of occupancy scores."""
    grid = np.asarray(grid, dtype=np.float32)
    h, w = grid.shape
    return {"label": label, "mask": {"width": w, "height": h, "data": grid.reshape(-1).tolist()}}


def rect_segment(label, width, height, x0, y0, x1, y1):
    """Segment whose mask is occupied on the half-open rectangle [x0, x1) x [y0, y1)."""
    grid = np.zeros((height, width), dtype=np.float32)
    grid[y0:y1, x0:x1] = 1.0
    return grid_segment(label, grid)


class FakeInference:
    """
    Stand-in for the segmentation collaborator.

    Returns `segments` (or raises `error`) after emitting the usual
    progress sequence.
    """

    def __init__(self, segments=None, error=None):
        self.segments = segments or []
        self.error = error
        self.calls = []

    async def segment(self, image, on_progress=None):
        self.calls.append(image)
        if on_progress:
            on_progress(ProgressEvent.loading())
            on_progress(ProgressEvent.downloading(50))
            on_progress(ProgressEvent.ready())
            on_progress(ProgressEvent.segmenting())
        if self.error is not None:
            raise self.error
        return list(self.segments)


@pytest.fixture
def room_segments():
    """
    A 20x10 room: left wall, right wall, floor, ceiling, plus a sky and an
    empty wall mask that must both be dropped.

    Returns:
        list: Raw segment payloads in detection order
    """
    return [
        rect_segment("wall", 20, 10, 0, 2, 6, 8),            # left wall
        grid_segment("sky", np.ones((10, 20))),
        rect_segment("wall", 20, 10, 14, 2, 20, 8),          # right wall
        rect_segment("floor, flooring", 20, 10, 0, 8, 20, 10),
        grid_segment("wall", np.zeros((10, 20))),            # empty
        rect_segment("ceiling", 20, 10, 0, 0, 20, 2),
    ]


@pytest.fixture
def sample_image():
    """
    Simple 10x20 RGB test image (mid gray).

    Returns:
        np.ndarray: (10, 20, 3) uint8
    """
    return np.full((10, 20, 3), 128, dtype=np.uint8)


@pytest.fixture
def sample_texture():
    """4x4 checkerboard texture (black/white), RGB."""
    tex = np.zeros((4, 4, 3), dtype=np.uint8)
    tex[::2, ::2] = 255
    tex[1::2, 1::2] = 255
    return tex


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )

"""
UI Components Package for the Interior Surface Visualizer.

- canvas.py: Canvas wrapper with cached background encoding and point readout
"""

from .canvas import st_canvas, last_point

__all__ = [
    'st_canvas',
    'last_point'
]

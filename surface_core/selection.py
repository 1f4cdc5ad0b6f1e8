"""
Pointer hit-testing against Region occupancy.
"""

import math
from typing import Iterable, Optional, Tuple

from surface_core.models import OccupancyMask, Region


def to_mask_coords(px: float, py: float, disp_width: float, disp_height: float,
                   mask: OccupancyMask) -> Tuple[int, int]:
    """
    Map an element-local pointer position to a mask pixel.

    Results are clamped to the mask, so points on or past the element edge
    resolve to the nearest border pixel.

    Raises:
        ValueError: If the rendered size is not positive
    """
    if disp_width <= 0 or disp_height <= 0:
        raise ValueError(f"rendered size must be positive, got {disp_width}x{disp_height}")

    mask_x = math.floor(px / disp_width * mask.width)
    mask_y = math.floor(py / disp_height * mask.height)
    mask_x = min(max(mask_x, 0), mask.width - 1)
    mask_y = min(max(mask_y, 0), mask.height - 1)
    return mask_x, mask_y


def resolve_selection(regions: Iterable[Region], px: float, py: float,
                      disp_width: float, disp_height: float) -> Optional[int]:
    """
    Return the id of the region under the pointer, or None.

    Regions are scanned in ascending id (detection) order and the first
    occupied hit wins, so overlaps resolve to the earliest-detected region.

    Args:
        regions: Regions of the active image
        px, py: Pointer position in the rendered element's pixel space
        disp_width, disp_height: Rendered size of the element
    """
    for region in sorted(regions, key=lambda r: r.id):
        mask_x, mask_y = to_mask_coords(px, py, disp_width, disp_height, region.occupancy)
        if region.occupancy.is_occupied(mask_x, mask_y):
            return region.id
    return None

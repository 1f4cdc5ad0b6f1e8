"""
Mask encoding: occupancy mask -> bounding box + smoothed, portable stencil.

Each accepted segment is processed independently so one bad mask cannot
abort its siblings.
"""

import base64
import logging
from io import BytesIO
from typing import Callable, List, Sequence, Tuple

import cv2
import numpy as np
from PIL import Image

from app_config.constants import MaskConfig
from surface_core.errors import EmptyRegion, MalformedMask
from surface_core.models import BoundingBox, Category, OccupancyMask, RawSegment, Region, Stencil, TransformSpec
from surface_core.orientation import default_orientation

logger = logging.getLogger("surface_visualizer")

OrientationPolicy = Callable[[Category, float, int], TransformSpec]


def occupancy_footprint(mask: OccupancyMask) -> Tuple[BoundingBox, np.ndarray]:
    """
    Compute the occupied column extent and the binary stencil of a mask.

    Args:
        mask: Occupancy mask (only values > 0 count as occupied)

    Returns:
        tuple: (BoundingBox, uint8 (H, W) array with 255 where occupied, 0 elsewhere)

    Raises:
        EmptyRegion: If no pixel is occupied
    """
    occupied = mask.grid() > 0
    columns = np.flatnonzero(occupied.any(axis=0))
    if columns.size == 0:
        raise EmptyRegion("mask has no occupied pixel")

    binary = np.where(occupied, MaskConfig.STENCIL_OPAQUE, 0).astype(np.uint8)
    return BoundingBox(int(columns[0]), int(columns[-1])), binary


def smooth_stencil(binary: np.ndarray, sigma: float = MaskConfig.STENCIL_BLUR_SIGMA) -> np.ndarray:
    """Soften hard stencil edges with a small Gaussian blur."""
    if sigma <= 0:
        return binary.copy()
    return cv2.GaussianBlur(binary, (0, 0), sigmaX=sigma, sigmaY=sigma, borderType=cv2.BORDER_REPLICATE)


def stencil_to_data_url(alpha: np.ndarray) -> str:
    """Encode an alpha stencil as a black RGBA PNG data URL usable as a CSS mask image."""
    h, w = alpha.shape
    rgba = np.zeros((h, w, 4), dtype=np.uint8)
    rgba[:, :, 3] = alpha

    buf = BytesIO()
    Image.fromarray(rgba).save(buf, format=MaskConfig.STENCIL_FORMAT)
    return f"data:image/png;base64,{base64.b64encode(buf.getvalue()).decode()}"


def encode_region(segment: RawSegment, category: Category, region_id: int,
                  orientation_policy: OrientationPolicy = default_orientation) -> Region:
    """
    Turn one classified segment into a Region.

    Raises:
        EmptyRegion: If the mask has no occupied pixel
    """
    bbox, binary = occupancy_footprint(segment.mask)
    alpha = smooth_stencil(binary)
    stencil = Stencil(alpha=alpha, data_url=stencil_to_data_url(alpha))
    orientation = orientation_policy(category, bbox.center_x, segment.mask.width)

    return Region(
        id=region_id,
        category=category,
        label=segment.label,
        occupancy=segment.mask,
        bounding_box=bbox,
        stencil=stencil,
        orientation=orientation,
    )


def encode_regions(classified: Sequence[Tuple[RawSegment, Category]],
                   orientation_policy: OrientationPolicy = default_orientation) -> List[Region]:
    """
    Encode every classified segment, dropping empty or broken masks.

    Ids are dense and follow the order of the surviving segments, starting at 0.
    """
    regions = []
    for segment, category in classified:
        try:
            region = encode_region(segment, category, len(regions), orientation_policy)
        except EmptyRegion:
            logger.debug(f"Dropping empty mask for '{segment.label}'")
            continue
        except (MalformedMask, ValueError, cv2.error) as e:
            logger.warning(f"Failed to encode mask for '{segment.label}': {e}")
            continue
        regions.append(region)

    logger.info(f"Encoded {len(regions)} regions from {len(classified)} segments")
    return regions

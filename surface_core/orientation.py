"""
Default perspective heuristic for texture fills.

This is a coarse 2D proxy for surface angle, not a camera-geometry solution.
Any callable with the same signature as `default_orientation` can replace it.
"""

from surface_core.models import Category, TransformKind, TransformSpec
from app_config.constants import OrientationConfig


def default_orientation(category: Category, center_x: float, mask_width: int) -> TransformSpec:
    """
    Derive a default transform from a region's category and horizontal position.

    Args:
        category: Surface category of the region
        center_x: Centre of the region's occupied columns (mask pixels)
        mask_width: Width of the mask the centre was measured in

    Returns:
        TransformSpec: Floors tilt down, ceilings tilt up, walls turn toward
        the nearer vanishing point or stay front-facing.

    Raises:
        ValueError: If mask_width is not positive
    """
    if mask_width <= 0:
        raise ValueError(f"mask_width must be positive, got {mask_width}")

    d = OrientationConfig.PERSPECTIVE_PX

    if category is Category.FLOOR:
        return TransformSpec(TransformKind.TILT_DOWN, OrientationConfig.FLOOR_CEILING_SCALE,
                             rotate_x=OrientationConfig.FLOOR_TILT_DEG, perspective=d)
    if category is Category.CEILING:
        return TransformSpec(TransformKind.TILT_UP, OrientationConfig.FLOOR_CEILING_SCALE,
                             rotate_x=OrientationConfig.CEILING_TILT_DEG, perspective=d)

    ratio = center_x / mask_width
    if ratio < OrientationConfig.WALL_LEFT_THRESHOLD:
        return TransformSpec(TransformKind.ROTATE_LEFT, OrientationConfig.WALL_SIDE_SCALE,
                             rotate_y=OrientationConfig.WALL_SIDE_ROTATION_DEG, perspective=d)
    if ratio > OrientationConfig.WALL_RIGHT_THRESHOLD:
        return TransformSpec(TransformKind.ROTATE_RIGHT, OrientationConfig.WALL_SIDE_SCALE,
                             rotate_y=-OrientationConfig.WALL_SIDE_ROTATION_DEG, perspective=d)
    return TransformSpec(TransformKind.FRONT, OrientationConfig.WALL_FRONT_SCALE)

"""
Classification of raw inference output into editable surface categories.
"""

import logging
from typing import Any, Iterable, List, Optional, Tuple, Union

from app_config.constants import IngestConfig
from surface_core.errors import MalformedMask
from surface_core.models import Category, RawSegment

logger = logging.getLogger("surface_visualizer")

# Priority order: floor before ceiling before wall
CATEGORY_KEYWORDS = (
    (Category.FLOOR, IngestConfig.FLOOR_KEYWORDS),
    (Category.CEILING, IngestConfig.CEILING_KEYWORDS),
    (Category.WALL, IngestConfig.WALL_KEYWORDS),
)


def classify_label(label: str) -> Optional[Category]:
    """
    Map a free-text segmentation label to a Category.

    Matching is a case-insensitive substring test, in priority order.

    Args:
        label: Label reported by the segmentation model (e.g. 'floor, flooring')

    Returns:
        Category or None if the label names no editable surface

    Example:
        >>> classify_label("floor, flooring")
        <Category.FLOOR: 'floor'>
        >>> classify_label("sky") is None
        True
    """
    text = label.lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return category
    return None


def ingest_segments(raw_segments: Iterable[Union[RawSegment, Any]]) -> List[Tuple[RawSegment, Category]]:
    """
    Keep the wall/floor/ceiling segments, preserving input order.

    Items may be RawSegment instances or `{label, mask}` mappings. A malformed
    item is logged and skipped without affecting its siblings.
    """
    accepted = []
    for position, item in enumerate(raw_segments):
        try:
            segment = item if isinstance(item, RawSegment) else RawSegment.from_dict(item)
            category = classify_label(segment.label)
        except (MalformedMask, AttributeError) as e:
            logger.warning(f"Skipping malformed segment #{position}: {e}")
            continue

        if category is None:
            logger.debug(f"Ignoring segment '{segment.label}' (not a wall, floor or ceiling)")
            continue
        accepted.append((segment, category))

    logger.info(f"Ingested {len(accepted)} surface segments")
    return accepted

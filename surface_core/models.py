"""
Data model for the interior surface pipeline.

Raw segments come from the inference collaborator, Regions are the stable,
addressable records derived from them, and Materials are what a user binds
to a Region.
"""

import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

import numpy as np

from surface_core.errors import MalformedMask

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


class Category(Enum):
    """Surface types this system edits."""
    WALL = "wall"
    FLOOR = "floor"
    CEILING = "ceiling"


@dataclass(frozen=True, eq=False)
class OccupancyMask:
    """
    Row-major per-pixel occupancy scores.

    Only positivity is meaningful: a pixel is occupied when its score is > 0.

    Attributes:
        width (int): Mask width in pixels
        height (int): Mask height in pixels
        data (np.ndarray): Flat float32 array of length width * height
    """

    width: int
    height: int
    data: np.ndarray = field(repr=False)

    def __post_init__(self):
        if not isinstance(self.width, (int, np.integer)) or not isinstance(self.height, (int, np.integer)):
            raise MalformedMask(f"mask dimensions must be integers, got {self.width!r}x{self.height!r}")
        if self.width <= 0 or self.height <= 0:
            raise MalformedMask(f"mask dimensions must be positive, got {self.width}x{self.height}")

        try:
            data = np.array(self.data, dtype=np.float32).reshape(-1)
        except (TypeError, ValueError) as e:
            raise MalformedMask(f"mask data is not numeric: {e}")

        if data.size != self.width * self.height:
            raise MalformedMask(
                f"mask data length {data.size} doesn't match {self.width}x{self.height}"
            )
        data.setflags(write=False)
        object.__setattr__(self, "data", data)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "OccupancyMask":
        """Build a mask from the `{width, height, data}` contract."""
        try:
            return cls(int(payload["width"]), int(payload["height"]), payload["data"])
        except MalformedMask:
            raise
        except (KeyError, TypeError, ValueError, OverflowError) as e:
            raise MalformedMask(f"mask payload is missing or invalid: {e}")

    def grid(self) -> np.ndarray:
        """Return the occupancy as an (H, W) view."""
        return self.data.reshape(self.height, self.width)

    def is_occupied(self, x: int, y: int) -> bool:
        return bool(self.data[y * self.width + x] > 0)


@dataclass(frozen=True)
class RawSegment:
    """One labelled mask as produced by the inference collaborator."""

    label: str
    mask: OccupancyMask

    def __post_init__(self):
        if not isinstance(self.label, str):
            raise MalformedMask(f"segment label must be a string, got {type(self.label)}")
        if not isinstance(self.mask, OccupancyMask):
            raise MalformedMask(f"segment mask must be an OccupancyMask, got {type(self.mask)}")

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "RawSegment":
        """Build a segment from `{label, mask: {width, height, data}}`. Extra keys are ignored."""
        label = payload.get("label")
        if not isinstance(label, str):
            raise MalformedMask(f"segment label must be a string, got {type(label)}")
        mask = payload.get("mask")
        if isinstance(mask, OccupancyMask):
            return cls(label, mask)
        if not isinstance(mask, Mapping):
            raise MalformedMask(f"segment mask must be a mapping, got {type(mask)}")
        return cls(label, OccupancyMask.from_dict(mask))


@dataclass(frozen=True)
class BoundingBox:
    """Horizontal extent of the occupied columns of a mask."""

    min_x: int
    max_x: int

    @property
    def center_x(self) -> float:
        return (self.min_x + self.max_x) / 2

    def to_dict(self) -> Dict[str, int]:
        return {"minX": self.min_x, "maxX": self.max_x}


class TransformKind(Enum):
    """Named outcomes of the orientation heuristic."""
    TILT_DOWN = "tilt_down"
    TILT_UP = "tilt_up"
    ROTATE_LEFT = "rotate_left"
    ROTATE_RIGHT = "rotate_right"
    FRONT = "front"


@dataclass(frozen=True)
class TransformSpec:
    """
    A perspective-like 2D transform applied to a texture fill.

    Rotations follow the browser convention: rotate_x tilts around the
    horizontal axis (positive brings the bottom edge toward the viewer),
    rotate_y turns around the vertical axis. A perspective of 0 means none.
    """

    kind: TransformKind
    scale: float
    rotate_x: float = 0.0
    rotate_y: float = 0.0
    perspective: float = 0.0

    def to_css(self) -> str:
        parts = []
        if self.perspective:
            parts.append(f"perspective({self.perspective:g}px)")
        if self.rotate_x:
            parts.append(f"rotateX({self.rotate_x:g}deg)")
        if self.rotate_y:
            parts.append(f"rotateY({self.rotate_y:g}deg)")
        parts.append(f"scale({self.scale:g})")
        return " ".join(parts)

    def homography(self, center_x: float, center_y: float) -> np.ndarray:
        """
        3x3 projective matrix equivalent to the transform applied about a centre point.

        Args:
            center_x, center_y: Transform origin in destination pixel coordinates

        Returns:
            np.ndarray: float64 matrix mapping source (x, y, 1) to destination
        """
        s = self.scale
        ax = math.radians(self.rotate_x)
        ay = math.radians(self.rotate_y)
        inv_d = 1.0 / self.perspective if self.perspective else 0.0

        # Scale, then rotate about x and y, then project onto z = 0
        local = np.array([
            [s * math.cos(ay), 0.0, 0.0],
            [0.0, s * math.cos(ax), 0.0],
            [s * math.sin(ay) * inv_d, -s * math.sin(ax) * inv_d, 1.0],
        ])
        to_origin = np.array([[1.0, 0.0, -center_x], [0.0, 1.0, -center_y], [0.0, 0.0, 1.0]])
        back = np.array([[1.0, 0.0, center_x], [0.0, 1.0, center_y], [0.0, 0.0, 1.0]])
        return back @ local @ to_origin

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "scale": self.scale,
            "rotateX": self.rotate_x,
            "rotateY": self.rotate_y,
            "perspective": self.perspective,
            "css": self.to_css(),
        }


class MaterialKind(Enum):
    COLOR = "color"
    TEXTURE = "texture"


@dataclass(frozen=True)
class Material:
    """
    A selectable fill offered for a Category.

    Attributes:
        id (str): Catalog-unique identifier
        name (str): Display name
        kind (MaterialKind): Flat color or tiled texture
        color (str): '#RRGGBB' value for color materials
        image_ref (str): Path or URL of the texture image for texture materials
    """

    id: str
    name: str
    kind: MaterialKind
    color: Optional[str] = None
    image_ref: Optional[str] = None

    def __post_init__(self):
        if self.kind is MaterialKind.COLOR:
            if not isinstance(self.color, str) or not _HEX_COLOR.match(self.color):
                raise ValueError(f"Color material '{self.id}' needs a #RRGGBB color, got {self.color!r}")
        elif not self.image_ref:
            raise ValueError(f"Texture material '{self.id}' needs an image_ref")

    def to_dict(self) -> Dict[str, str]:
        payload = {"id": self.id, "name": self.name, "kind": self.kind.value}
        if self.kind is MaterialKind.COLOR:
            payload["color"] = self.color
        else:
            payload["imageRef"] = self.image_ref
        return payload


@dataclass(frozen=True, eq=False)
class Stencil:
    """Edge-softened alpha image clipping a fill to a Region's footprint."""

    alpha: np.ndarray = field(repr=False)
    data_url: str = field(repr=False)

    @property
    def width(self) -> int:
        return self.alpha.shape[1]

    @property
    def height(self) -> int:
        return self.alpha.shape[0]

    def is_empty(self) -> bool:
        return not bool(self.alpha.any())


@dataclass(frozen=True, eq=False)
class Region:
    """
    An immutable record derived from one segmentation mask.

    The id is assigned once when the batch is built and never derived from
    list position afterwards.
    """

    id: int
    category: Category
    label: str
    occupancy: OccupancyMask = field(repr=False)
    bounding_box: BoundingBox
    stencil: Stencil = field(repr=False)
    orientation: TransformSpec

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category.value,
            "label": self.label,
            "boundingBox": self.bounding_box.to_dict(),
            "stencilImage": self.stencil.data_url,
            "orientationTransform": self.orientation.to_dict(),
        }

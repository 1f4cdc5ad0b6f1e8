"""
Render-layer derivation from Regions, bindings and the current selection.

The output is a presentation-neutral, ordered list of layers. Each layer
clips one fill to a region's stencil; `z_order` is authoritative for
stacking.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from app_config.constants import RenderConfig
from surface_core.binding import BindingTable
from surface_core.models import Material, MaterialKind, Region, Stencil, TransformSpec


class FillKind(Enum):
    COLOR = "color"
    TEXTURE = "texture"
    HIGHLIGHT = "highlight"
    PLACEHOLDER = "placeholder"


class BlendMode(Enum):
    NORMAL = "normal"
    MULTIPLY = "multiply"


@dataclass(frozen=True)
class Fill:
    """What is painted inside a layer's stencil."""

    kind: FillKind
    opacity: float
    color: Optional[str] = None
    image_ref: Optional[str] = None
    transform: Optional[TransformSpec] = None
    plane_scale: float = 1.0

    def to_dict(self) -> Dict[str, Any]:
        payload = {"kind": self.kind.value, "opacity": self.opacity, "planeScale": self.plane_scale}
        if self.color is not None:
            payload["color"] = self.color
        if self.image_ref is not None:
            payload["imageRef"] = self.image_ref
        if self.transform is not None:
            payload["transform"] = self.transform.to_dict()
        return payload


@dataclass(frozen=True, eq=False)
class RenderLayer:
    region_id: int
    stencil: Stencil
    z_order: int
    blend_mode: BlendMode
    fill: Fill

    def to_dict(self) -> Dict[str, Any]:
        return {
            "regionId": self.region_id,
            "stencil": self.stencil.data_url,
            "zOrder": self.z_order,
            "blendMode": self.blend_mode.value,
            "fill": self.fill.to_dict(),
        }


def highlight_hex() -> str:
    r, g, b = RenderConfig.HIGHLIGHT_COLOR
    return f"#{r:02X}{g:02X}{b:02X}"


def material_fill(material: Material, region: Region, assets=None) -> Fill:
    """
    Fill for a bound material.

    Args:
        material: The bound material
        region: Region the material is bound to (supplies the orientation)
        assets: Optional asset cache with `lookup(ref)`; a missing texture
            degrades to the neutral placeholder fill

    Returns:
        Fill: flat color at color opacity, or an oriented tiled texture
    """
    if material.kind is MaterialKind.COLOR:
        return Fill(FillKind.COLOR, RenderConfig.COLOR_OPACITY, color=material.color)

    if assets is not None and assets.lookup(material.image_ref) is None:
        return Fill(FillKind.PLACEHOLDER, RenderConfig.TEXTURE_OPACITY, color=RenderConfig.PLACEHOLDER_COLOR)

    return Fill(
        FillKind.TEXTURE,
        RenderConfig.TEXTURE_OPACITY,
        image_ref=material.image_ref,
        transform=region.orientation,
        plane_scale=RenderConfig.TEXTURE_PLANE_SCALE,
    )


def build_render_layers(regions: Iterable[Region],
                        bindings: Union[BindingTable, Mapping[int, Material]],
                        selected_region_id: Optional[int],
                        assets=None) -> List[RenderLayer]:
    """
    Emit one layer per region that is selected or bound.

    Layers come back sorted for drawing: ascending z-order, then region id.
    Regions that are neither selected nor bound produce nothing.
    """
    layers = []
    for region in regions:
        material = bindings.get(region.id)
        is_selected = region.id == selected_region_id
        if not is_selected and material is None:
            continue

        if material is not None:
            fill = material_fill(material, region, assets)
            blend = BlendMode.MULTIPLY
        else:
            fill = Fill(FillKind.HIGHLIGHT, RenderConfig.HIGHLIGHT_OPACITY, color=highlight_hex())
            blend = BlendMode.NORMAL

        z_order = RenderConfig.SELECTED_Z_ORDER if is_selected else RenderConfig.BOUND_Z_ORDER
        layers.append(RenderLayer(region.id, region.stencil, z_order, blend, fill))

    layers.sort(key=lambda layer: (layer.z_order, layer.region_id))
    return layers

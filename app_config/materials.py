"""
Static material catalog: the finishes offered for each surface category.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from surface_core.models import Category, Material, MaterialKind


def _color(material_id, name, color):
    return Material(material_id, name, MaterialKind.COLOR, color=color)


def _texture(material_id, name, image_ref):
    return Material(material_id, name, MaterialKind.TEXTURE, image_ref=image_ref)


# Texture refs are resolved relative to the working directory (or are URLs)
DEFAULT_MATERIALS = {
    Category.WALL: (
        _color("wall-paint", "White Paint", "#FAFAFA"),
        _texture("wall-plaster", "Plasterboard", "textures/plasterboard.png"),
        _texture("wall-brick", "Red Brick", "textures/brick.png"),
        _texture("wall-panel", "Wood Panel", "textures/panel.png"),
        _texture("wall-concrete", "Concrete", "textures/concrete.png"),
    ),
    Category.FLOOR: (
        _texture("floor-oak", "Oak Wood", "textures/wood.png"),
        _texture("floor-concrete", "Concrete", "textures/concrete.png"),
        _color("tile-gray", "Gray Tile", "#B0B5B9"),
    ),
    Category.CEILING: (
        _color("ceiling-white", "White Ceiling Paper", "#FFFFFF"),
        _texture("ceiling-concrete", "Concrete", "textures/concrete.png"),
        _texture("ceiling-wood", "Wood Panel", "textures/panel.png"),
    ),
}


class MaterialCatalog:
    """
    Read-only mapping of Category -> ordered Materials.

    Material ids must be unique across the whole catalog.
    """

    def __init__(self, materials: Dict[Category, Sequence[Material]]):
        self._materials: Dict[Category, Tuple[Material, ...]] = {
            category: tuple(materials.get(category, ())) for category in Category
        }
        self._by_id: Dict[str, Tuple[Category, Material]] = {}
        for category, items in self._materials.items():
            for material in items:
                if material.id in self._by_id:
                    raise ValueError(f"Duplicate material id '{material.id}'")
                self._by_id[material.id] = (category, material)

    def materials_for(self, category: Category) -> Tuple[Material, ...]:
        return self._materials[category]

    def find(self, material_id: str) -> Optional[Material]:
        entry = self._by_id.get(material_id)
        return entry[1] if entry else None

    def category_of(self, material_id: str) -> Optional[Category]:
        entry = self._by_id.get(material_id)
        return entry[0] if entry else None

    def contains(self, category: Category, material: Material) -> bool:
        """True if this exact material is offered for the category."""
        return material in self._materials[category]

    def texture_refs(self) -> List[str]:
        """Unique texture references in catalog order (input for asset preloading)."""
        refs = []
        for items in self._materials.values():
            for material in items:
                if material.kind is MaterialKind.TEXTURE and material.image_ref not in refs:
                    refs.append(material.image_ref)
        return refs

    def all_materials(self) -> Iterable[Material]:
        for items in self._materials.values():
            yield from items

    def to_dict(self) -> Dict[str, List[Dict[str, str]]]:
        return {
            category.value: [m.to_dict() for m in items]
            for category, items in self._materials.items()
        }


DEFAULT_CATALOG = MaterialCatalog(DEFAULT_MATERIALS)

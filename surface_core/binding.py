"""
Material bindings: Region id -> applied Material.
"""

from typing import Dict, ItemsView, Optional

from app_config.materials import MaterialCatalog
from surface_core.errors import InvalidSelection
from surface_core.models import Material, Region


class BindingTable:
    """
    Mapping of region ids to the Material applied to them.

    Absence means the region is unbound. Every write is validated against
    the region's category catalog before anything changes.
    """

    def __init__(self, catalog: MaterialCatalog):
        self.catalog = catalog
        self._bindings: Dict[int, Material] = {}

    def bind(self, region: Region, material: Material) -> None:
        """
        Bind a material to a region, replacing any previous binding.

        Raises:
            InvalidSelection: If the material is not offered for the region's category
        """
        if not self.catalog.contains(region.category, material):
            raise InvalidSelection(
                f"Material '{material.id}' is not available for {region.category.value} region {region.id}"
            )
        self._bindings[region.id] = material

    def unbind(self, region_id: int) -> bool:
        """Remove a binding. Returns False (and does nothing) if there was none."""
        return self._bindings.pop(region_id, None) is not None

    def get(self, region_id: int) -> Optional[Material]:
        return self._bindings.get(region_id)

    def clear(self) -> None:
        self._bindings.clear()

    def items(self) -> ItemsView[int, Material]:
        return self._bindings.items()

    def __contains__(self, region_id: object) -> bool:
        return region_id in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    def to_dict(self) -> Dict[int, Dict[str, str]]:
        return {region_id: material.to_dict() for region_id, material in sorted(self._bindings.items())}

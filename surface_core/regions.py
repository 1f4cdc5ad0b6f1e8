"""
RegionIndex: the ordered, id-stable Region list for the active image.
"""

from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence

from surface_core.ingest import ingest_segments
from surface_core.mask_encoder import OrientationPolicy, encode_regions
from surface_core.models import Region
from surface_core.orientation import default_orientation


class RegionIndex:
    """
    Immutable collection of Regions, iterated in ascending id order.

    Lookups go through ids, never through list positions.
    """

    def __init__(self, regions: Iterable[Region] = ()):
        ordered = sorted(regions, key=lambda r: r.id)
        self._by_id: Dict[int, Region] = {}
        for region in ordered:
            if region.id in self._by_id:
                raise ValueError(f"Duplicate region id {region.id}")
            self._by_id[region.id] = region
        self._regions = tuple(ordered)

    def __iter__(self) -> Iterator[Region]:
        return iter(self._regions)

    def __len__(self) -> int:
        return len(self._regions)

    def __contains__(self, region_id: object) -> bool:
        return region_id in self._by_id

    def get(self, region_id: int) -> Optional[Region]:
        return self._by_id.get(region_id)

    def require(self, region_id: int) -> Region:
        try:
            return self._by_id[region_id]
        except KeyError:
            raise KeyError(f"Unknown region id {region_id}") from None

    @property
    def ids(self) -> List[int]:
        return [r.id for r in self._regions]

    def to_list(self) -> List[Dict[str, Any]]:
        return [r.to_dict() for r in self._regions]


def build_region_index(raw_segments: Sequence[Any],
                       orientation_policy: OrientationPolicy = default_orientation) -> RegionIndex:
    """Run ingest and encoding over one inference result and index the Regions."""
    return RegionIndex(encode_regions(ingest_segments(raw_segments), orientation_policy))

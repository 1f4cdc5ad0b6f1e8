"""
Session controller: the single owner of the editable state for one image.

State machine:
    Idle -> Uploading -> Inferring -> Ready
    Ready -> Ready            (selection / binding changes)
    Inferring -> Idle         (inference failure, error status, no regions)
    any -> Idle -> Uploading  (new upload)

Every launch of inference is tagged with a generation token; a result whose
token no longer matches the session is discarded. At most one inference call
is in flight: starting a new upload or resetting cancels the previous one.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from app_config.constants import InferenceConfig
from app_config.materials import DEFAULT_CATALOG, MaterialCatalog
from surface_core.binding import BindingTable
from surface_core.errors import InferenceUnavailable, InvalidSelection
from surface_core.mask_encoder import OrientationPolicy
from surface_core.models import Material
from surface_core.orientation import default_orientation
from surface_core.progress import ProgressEvent
from surface_core.regions import RegionIndex, build_region_index
from surface_core.renderer import RenderLayer, build_render_layers
from surface_core.selection import resolve_selection
from surface_utils.logger import log_performance, logger


class SessionPhase(Enum):
    IDLE = "idle"
    UPLOADING = "uploading"
    INFERRING = "inferring"
    READY = "ready"


@dataclass
class SessionState:
    image_ref: Any = None
    regions: RegionIndex = field(default_factory=RegionIndex)
    selected_region_id: Optional[int] = None
    bindings: Optional[BindingTable] = None
    status: str = ""
    phase: SessionPhase = SessionPhase.IDLE


ProgressObserver = Callable[[ProgressEvent], None]


class SurfaceSession:
    """
    Owns one SessionState and serializes all mutations on it.

    Args:
        inference: Collaborator exposing `async segment(image, on_progress)`
            that returns raw segments (RawSegment or `{label, mask}` dicts)
        catalog: Material catalog used to validate bindings
        orientation_policy: Default-transform policy for new regions
    """

    def __init__(self, inference, catalog: MaterialCatalog = DEFAULT_CATALOG,
                 orientation_policy: OrientationPolicy = default_orientation):
        self.inference = inference
        self.catalog = catalog
        self.orientation_policy = orientation_policy
        self.generation = 0
        self._observers: List[ProgressObserver] = []
        self._inflight: Optional[asyncio.Future] = None
        self.state = self._fresh_state()

    def _fresh_state(self, image_ref=None) -> SessionState:
        return SessionState(image_ref=image_ref, bindings=BindingTable(self.catalog))

    # --- Observers ---

    def subscribe(self, observer: ProgressObserver) -> Callable[[], None]:
        """Register a progress observer. Returns a function that unsubscribes it."""
        self._observers.append(observer)

        def unsubscribe():
            if observer in self._observers:
                self._observers.remove(observer)
        return unsubscribe

    def _on_progress(self, generation: int, event: ProgressEvent) -> None:
        if generation != self.generation:
            return
        self.state.status = event.status_text()
        for observer in list(self._observers):
            observer(event)

    # --- Lifecycle ---

    @property
    def phase(self) -> SessionPhase:
        return self.state.phase

    def reset(self) -> None:
        """Discard the session and cancel any in-flight inference."""
        self.generation += 1
        self._cancel_inflight()
        self.state = self._fresh_state()
        logger.info(f"Session reset (generation {self.generation})")

    def _cancel_inflight(self) -> None:
        if self._inflight is not None and not self._inflight.done():
            logger.info("Cancelling in-flight inference")
            self._inflight.cancel()
        self._inflight = None

    def begin_upload(self, image_ref) -> int:
        """Atomically clear regions, bindings, selection and status, then enter Uploading."""
        self.reset()
        self.state.image_ref = image_ref
        self.state.phase = SessionPhase.UPLOADING
        return self.generation

    async def upload(self, image_ref) -> bool:
        """
        Start a new session for an image and run inference on it.

        Returns:
            bool: True if this upload's regions were published (Ready)
        """
        generation = self.begin_upload(image_ref)
        return await self._infer(generation)

    async def _infer(self, generation: int) -> bool:
        self.state.phase = SessionPhase.INFERRING
        image_ref = self.state.image_ref
        inflight = asyncio.ensure_future(self.inference.segment(
            image_ref, on_progress=lambda event: self._on_progress(generation, event)
        ))
        self._inflight = inflight
        try:
            raw_segments = await inflight
        except asyncio.CancelledError:
            if generation == self.generation:
                raise
            logger.info(f"Inference for generation {generation} was cancelled")
            return False
        except InferenceUnavailable as e:
            return self._fail(generation, e)
        except Exception as e:
            return self._fail(generation, InferenceUnavailable(str(e)))
        finally:
            if self._inflight is inflight:
                self._inflight = None

        if generation != self.generation:
            logger.info(f"Discarding stale inference result (generation {generation} != {self.generation})")
            return False

        # Any failure while building regions returns the session to Idle
        try:
            regions = self._build_regions(raw_segments)
        except Exception as e:
            return self._fail(generation, e)

        self.state.regions = regions
        self.state.selected_region_id = None
        self.state.status = ""
        self.state.phase = SessionPhase.READY
        logger.info(f"Session ready with {len(regions)} regions")
        return True

    @log_performance
    def _build_regions(self, raw_segments) -> RegionIndex:
        return build_region_index(raw_segments, self.orientation_policy)

    def _fail(self, generation: int, error: Exception) -> bool:
        if generation != self.generation:
            logger.info(f"Ignoring failure of stale inference: {error}")
            return False
        logger.error(f"Image processing failed: {error}", exc_info=error)
        self.state = self._fresh_state()
        self.state.status = InferenceConfig.STATUS_ERROR
        return False

    # --- Selection ---

    def _require_ready(self, action: str) -> None:
        if self.state.phase is not SessionPhase.READY:
            raise InvalidSelection(f"Cannot {action} while session is {self.state.phase.value}")

    def click(self, px: float, py: float, disp_width: float, disp_height: float) -> Optional[int]:
        """Select the region under the pointer; clears the selection when nothing is hit."""
        self._require_ready("select")
        region_id = resolve_selection(self.state.regions, px, py, disp_width, disp_height)
        self.state.selected_region_id = region_id
        return region_id

    def select(self, region_id: Optional[int]) -> None:
        self._require_ready("select")
        if region_id is not None and region_id not in self.state.regions:
            raise InvalidSelection(f"Unknown region id {region_id}")
        self.state.selected_region_id = region_id

    @property
    def selected_region(self):
        if self.state.selected_region_id is None:
            return None
        return self.state.regions.get(self.state.selected_region_id)

    # --- Bindings ---

    def available_materials(self):
        """Materials offered for the selected region (empty without a selection)."""
        region = self.selected_region
        return self.catalog.materials_for(region.category) if region else ()

    def apply_material(self, material: Union[Material, str]) -> None:
        """
        Bind a material to the currently selected region.

        Args:
            material: Material instance or catalog material id

        Raises:
            InvalidSelection: No selection, unknown material id, or a material
                outside the selected region's category
        """
        self._require_ready("apply a material")
        region = self.selected_region
        if region is None:
            raise InvalidSelection("No region is selected")

        if isinstance(material, str):
            found = self.catalog.find(material)
            if found is None:
                raise InvalidSelection(f"Unknown material id '{material}'")
            material = found

        self.state.bindings.bind(region, material)
        logger.info(f"Applied '{material.id}' to region {region.id}")

    def clear_material(self, region_id: Optional[int] = None) -> bool:
        """
        Remove the binding of a region (the selected one by default).

        Clearing an unbound region is a no-op.

        Returns:
            bool: True if a binding was removed
        """
        self._require_ready("clear a material")
        if region_id is None:
            region_id = self.state.selected_region_id
            if region_id is None:
                raise InvalidSelection("No region is selected")
        elif region_id not in self.state.regions:
            raise InvalidSelection(f"Unknown region id {region_id}")
        return self.state.bindings.unbind(region_id)

    # --- Outputs ---

    def render_layers(self, assets=None) -> List[RenderLayer]:
        return build_render_layers(self.state.regions, self.state.bindings,
                                   self.state.selected_region_id, assets)

    def snapshot(self) -> Dict[str, Any]:
        """Presentation-facing view of the session."""
        return {
            "phase": self.state.phase.value,
            "status": self.state.status,
            "regions": self.state.regions.to_list(),
            "selectedRegionId": self.state.selected_region_id,
            "bindings": self.state.bindings.to_dict(),
        }

"""
Process-wide texture asset cache.

Assets are loaded once per reference and shared read-only by every Region
and Material. A failed load is recorded per key and the Material renders
with a placeholder fill instead.
"""

import threading
from io import BytesIO
from typing import Callable, Dict, Iterable, Optional

import numpy as np
import requests
from PIL import Image, UnidentifiedImageError

from app_config.constants import PerformanceConfig
from surface_core.errors import AssetLoadFailure
from surface_utils.logger import logger


def load_texture(ref: str) -> np.ndarray:
    """
    Load a texture reference (local path or http(s) URL) as an RGB array.

    Raises:
        AssetLoadFailure: If the asset cannot be fetched or decoded
    """
    try:
        if ref.startswith(("http://", "https://")):
            response = requests.get(ref, timeout=PerformanceConfig.ASSET_FETCH_TIMEOUT)
            response.raise_for_status()
            source = BytesIO(response.content)
        else:
            source = ref
        with Image.open(source) as img:
            rgb = np.array(img.convert("RGB"))
    except (OSError, UnidentifiedImageError, requests.RequestException) as e:
        raise AssetLoadFailure(f"Could not load texture '{ref}': {e}") from e

    rgb.setflags(write=False)
    return rgb


class AssetCache:
    """Reference -> decoded image, loaded at most once per key."""

    def __init__(self, loader: Callable[[str], np.ndarray] = load_texture):
        self._loader = loader
        self._images: Dict[str, Optional[np.ndarray]] = {}
        self._lock = threading.Lock()

    def preload(self, refs: Iterable[str]) -> int:
        """
        Load every reference not yet attempted.

        Returns:
            int: Number of references that are available after preloading
        """
        unique = list(dict.fromkeys(refs))
        for ref in unique:
            self._ensure(ref)
        available = sum(1 for ref in unique if self._images.get(ref) is not None)
        logger.info(f"Texture preload: {available}/{len(unique)} assets available")
        return available

    def _ensure(self, ref: str) -> None:
        with self._lock:
            if ref in self._images:
                return
            try:
                self._images[ref] = self._loader(ref)
            except AssetLoadFailure as e:
                logger.warning(f"{e} - rendering with placeholder")
                self._images[ref] = None

    def lookup(self, ref: str) -> Optional[np.ndarray]:
        """Return the loaded image, or None if missing or never preloaded."""
        return self._images.get(ref)

    def is_missing(self, ref: str) -> bool:
        return self._images.get(ref) is None

    @property
    def failed_refs(self):
        return [ref for ref, img in self._images.items() if img is None]


_default_cache = None
_default_lock = threading.Lock()


def get_asset_cache() -> AssetCache:
    """Return the process-wide asset cache."""
    global _default_cache
    with _default_lock:
        if _default_cache is None:
            _default_cache = AssetCache()
        return _default_cache

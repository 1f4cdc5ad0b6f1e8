"""
Image loading and resizing helpers shared by the inference adapter and the UI.
"""

import os
from typing import Union

import cv2
import numpy as np
from PIL import Image

from app_config.constants import MAX_IMAGE_DIMENSION


def load_image_rgb(image: Union[str, os.PathLike, Image.Image, np.ndarray]) -> np.ndarray:
    """
    Normalize an image reference to an (H, W, 3) uint8 RGB array.

    Args:
        image: File path, file-like object, PIL Image or NumPy array

    Raises:
        ValueError: If the array has an unsupported shape
    """
    if isinstance(image, np.ndarray):
        if image.ndim == 2:
            return cv2.cvtColor(image.astype(np.uint8), cv2.COLOR_GRAY2RGB)
        if image.ndim == 3 and image.shape[2] == 4:
            return cv2.cvtColor(image.astype(np.uint8), cv2.COLOR_RGBA2RGB)
        if image.ndim != 3 or image.shape[2] != 3:
            raise ValueError(f"image must be (H, W, 3), got {image.shape}")
        return image.astype(np.uint8)

    if not isinstance(image, Image.Image):
        image = Image.open(image)
    return np.array(image.convert("RGB"))


def resize_image_smart(image: np.ndarray, max_dim: int = MAX_IMAGE_DIMENSION) -> np.ndarray:
    """
    Intelligently resize image with aspect ratio preservation.

    Only resizes if image exceeds max dimension.

    Args:
        image: Input image array (RGB)
        max_dim: Maximum dimension (width or height) in pixels

    Returns:
        np.ndarray: Resized image maintaining aspect ratio

    Example:
        >>> large_img = np.zeros((2000, 1500, 3), dtype=np.uint8)
        >>> resized = resize_image_smart(large_img, max_dim=800)
        >>> max(resized.shape[:2])
        800
    """
    h, w = image.shape[:2]

    # No resize needed
    if max(h, w) <= max_dim:
        return image

    if h > w:
        new_h = max_dim
        new_w = max(1, int(w * (max_dim / h)))
    else:
        new_w = max_dim
        new_h = max(1, int(h * (max_dim / w)))

    return cv2.resize(image, (new_w, new_h), interpolation=cv2.INTER_AREA)

"""
Raster compositing of render layers onto the original photo.

Produces the preview image directly with NumPy/OpenCV, so the presentation
layer only has to display an RGB array.
"""

import cv2
import numpy as np

from app_config.constants import RenderConfig
from surface_core.renderer import BlendMode, FillKind


class LayerCompositor:
    @staticmethod
    def hex_to_rgb(hex_color):
        """Convert HEX string to RGB tuple.

        Args:
            hex_color: Hex color string (e.g., '#FF0000')

        Returns:
            Tuple[int, int, int]: RGB values (0-255)

        Raises:
            TypeError: If hex_color is not a string
            ValueError: If hex_color is invalid
        """
        if not isinstance(hex_color, str):
            raise TypeError(f"hex_color must be a string, got {type(hex_color)}")

        if len(hex_color) != 7:
            raise ValueError(f"hex_color must be 7 characters (got {len(hex_color)}): {hex_color}")

        if not hex_color.startswith("#"):
            raise ValueError(f"Invalid hex color '{hex_color}': missing '#'")

        try:
            return tuple(int(hex_color[i:i + 2], 16) for i in (1, 3, 5))
        except ValueError as e:
            raise ValueError(f"Invalid hex color '{hex_color}': {e}")

    @staticmethod
    def tile_texture(texture_rgb, height, width, tile_width=RenderConfig.TEXTURE_TILE_WIDTH):
        """
        Repeat a texture to cover a (height, width) plane.

        The texture is first resized so one tile is `tile_width` pixels wide.
        """
        th, tw = texture_rgb.shape[:2]
        if tile_width and tw != tile_width:
            scale = tile_width / float(tw)
            texture_rgb = cv2.resize(
                texture_rgb, (max(1, int(round(tw * scale))), max(1, int(round(th * scale)))),
                interpolation=cv2.INTER_AREA if scale < 1 else cv2.INTER_LINEAR,
            )
            th, tw = texture_rgb.shape[:2]

        rep_y = height // th + 1
        rep_x = width // tw + 1
        return np.tile(texture_rgb, (rep_y, rep_x, 1))[:height, :width, :]

    @staticmethod
    def warp_texture_plane(texture_rgb, fill, height, width):
        """
        Build the oriented texture for a (height, width) layer.

        The tiled plane is `fill.plane_scale` times the layer bounds, centred on
        the layer, then warped with the fill's orientation about the layer centre.

        Returns:
            tuple: (float32 RGB texture in [0, 1], float32 coverage in [0, 1])
        """
        plane_h = max(1, int(round(height * fill.plane_scale)))
        plane_w = max(1, int(round(width * fill.plane_scale)))
        plane = LayerCompositor.tile_texture(texture_rgb, plane_h, plane_w).astype(np.float32) / 255.0

        offset = np.array([
            [1.0, 0.0, -(plane_w - width) / 2.0],
            [0.0, 1.0, -(plane_h - height) / 2.0],
            [0.0, 0.0, 1.0],
        ])
        if fill.transform is not None:
            matrix = fill.transform.homography(width / 2.0, height / 2.0) @ offset
        else:
            matrix = offset

        size = (width, height)
        warped = cv2.warpPerspective(plane, matrix, size, flags=cv2.INTER_LINEAR,
                                     borderMode=cv2.BORDER_CONSTANT, borderValue=0)
        coverage = cv2.warpPerspective(np.ones((plane_h, plane_w), np.float32), matrix, size,
                                       flags=cv2.INTER_LINEAR, borderMode=cv2.BORDER_CONSTANT, borderValue=0)

        # Destination pixels that map from behind the viewer get no texture
        inverse = np.linalg.inv(matrix)
        xs = np.arange(width, dtype=np.float64)[None, :]
        ys = np.arange(height, dtype=np.float64)[:, None]
        in_front = (inverse[2, 0] * xs + inverse[2, 1] * ys + inverse[2, 2]) > 0
        coverage = coverage * in_front

        return warped, coverage.astype(np.float32)

    @staticmethod
    def composite_layers(image_rgb, layers, assets=None):
        """
        Flatten render layers onto an RGB photo.

        Args:
            image_rgb: NumPy array (H, W, 3) uint8
            layers: RenderLayers (drawn in ascending z-order, then region id)
            assets: Optional asset cache with `lookup(ref)`; textures that are
                missing render with the neutral placeholder color

        Returns:
            NumPy array: Composited uint8 image

        Raises:
            ValueError: If image_rgb is not an (H, W, 3) array
        """
        if not isinstance(image_rgb, np.ndarray) or image_rgb.ndim != 3 or image_rgb.shape[2] != 3:
            raise ValueError(f"image_rgb must be (H, W, 3), got {getattr(image_rgb, 'shape', type(image_rgb))}")

        if not layers:
            return image_rgb.copy()

        h, w = image_rgb.shape[:2]
        result = image_rgb.astype(np.float32) / 255.0

        for layer in sorted(layers, key=lambda l: (l.z_order, l.region_id)):
            alpha = layer.stencil.alpha
            if alpha.shape[:2] != (h, w):
                alpha = cv2.resize(alpha, (w, h), interpolation=cv2.INTER_LINEAR)
            alpha = alpha.astype(np.float32) / 255.0

            fill = layer.fill
            texture = None
            if fill.kind is FillKind.TEXTURE and assets is not None:
                texture = assets.lookup(fill.image_ref)

            if texture is not None:
                fill_rgb, coverage = LayerCompositor.warp_texture_plane(texture, fill, h, w)
                alpha = alpha * coverage
            else:
                color = fill.color if fill.color is not None else RenderConfig.PLACEHOLDER_COLOR
                fill_rgb = np.empty_like(result)
                fill_rgb[:] = np.array(LayerCompositor.hex_to_rgb(color), dtype=np.float32) / 255.0

            if layer.blend_mode is BlendMode.MULTIPLY:
                blended = result * fill_rgb
            else:
                blended = fill_rgb

            a = (alpha * fill.opacity)[:, :, None]
            result = blended * a + result * (1.0 - a)

        return np.clip(np.rint(result * 255.0), 0, 255).astype(np.uint8)

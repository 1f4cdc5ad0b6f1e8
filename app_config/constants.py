"""
Configuration constants for the Interior Surface Visualizer.
All tunable parameters and magic numbers are defined here with explanations.
"""


class IngestConfig:
    """Configuration for classifying raw segmentation labels."""

    # --- Label Keywords ---
    # Checked in this order; the first category whose keywords appear in the
    # (lower-cased) label wins. "floor, flooring" must never become a wall.
    FLOOR_KEYWORDS = ("floor", "flooring")
    CEILING_KEYWORDS = ("ceiling",)
    WALL_KEYWORDS = ("wall",)


class MaskConfig:
    """Configuration for turning occupancy masks into stencils."""

    # Gaussian sigma (pixels) used to soften stencil edges
    STENCIL_BLUR_SIGMA = 2.0

    # Fully opaque alpha value for occupied pixels
    STENCIL_OPAQUE = 255

    # Portable format for encoded stencils (needs an alpha channel)
    STENCIL_FORMAT = "PNG"


class OrientationConfig:
    """Configuration for the coarse perspective heuristic."""

    # Perspective distance (pixels) used by every tilted/rotated transform
    PERSPECTIVE_PX = 1200

    # --- Floor / Ceiling ---
    # Tilt around the horizontal axis (degrees). Positive brings the bottom
    # edge toward the viewer.
    FLOOR_TILT_DEG = 60.0
    CEILING_TILT_DEG = -60.0
    FLOOR_CEILING_SCALE = 2.5

    # --- Walls ---
    # Horizontal position ratio (bbox centre / mask width) thresholds
    WALL_LEFT_THRESHOLD = 0.4
    WALL_RIGHT_THRESHOLD = 0.6

    # Rotation around the vertical axis for side walls (degrees)
    WALL_SIDE_ROTATION_DEG = 55.0
    WALL_SIDE_SCALE = 2.0

    # Front-facing walls are only slightly enlarged
    WALL_FRONT_SCALE = 1.2


class RenderConfig:
    """Configuration for render-layer derivation and compositing."""

    # --- Stacking ---
    SELECTED_Z_ORDER = 10
    BOUND_Z_ORDER = 5

    # --- Fills ---
    COLOR_OPACITY = 0.9
    TEXTURE_OPACITY = 0.85

    # Texture plane size relative to the layer bounds (centred)
    TEXTURE_PLANE_SCALE = 2.0

    # Width (pixels) of one texture tile before the orientation transform
    TEXTURE_TILE_WIDTH = 200

    # Selection highlight (RGB) and its opacity
    HIGHLIGHT_COLOR = (0, 120, 255)
    HIGHLIGHT_OPACITY = 0.4

    # Neutral fill used when a texture asset is missing
    PLACEHOLDER_COLOR = "#CCCCCC"


class InferenceConfig:
    """Configuration for the semantic segmentation collaborator."""

    # ADE20K SegFormer checkpoint
    MODEL_NAME = "nvidia/segformer-b2-finetuned-ade-512-512"

    # --- Status Messages ---
    STATUS_LOADING = "Loading segmentation model... (first run only)"
    STATUS_DOWNLOADING = "Downloading model: {pct}%"
    STATUS_READY = "Model ready! Analyzing image..."
    STATUS_SEGMENTING = "Separating walls, floor and ceiling..."
    STATUS_ERROR = "Image processing failed. Please try another image."


class UIConfig:
    """Configuration for the Streamlit presentation shell."""

    # Default display width for the canvas (pixels)
    DEFAULT_CANVAS_WIDTH = 800

    # Radius of the click marker drawn by the canvas in point mode
    POINT_DISPLAY_RADIUS = 3

    # Swatch size (pixels) for material previews in the sidebar
    SWATCH_SIZE = 48


class LoggingConfig:
    """Configuration for the application logger."""

    LOGGER_NAME = "surface_visualizer"
    DEFAULT_LEVEL = "INFO"

    # Pipeline timings above this many seconds are logged as warnings
    SLOW_OPERATION_SECONDS = 2.0

    FORMAT = "%(asctime)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
    DATE_FORMAT = "%H:%M:%S"

class PerformanceConfig:
    """Configuration for performance optimization."""

    # Maximum image dimension for processing (larger images are resized)
    MAX_IMAGE_DIMENSION = 800

    # One worker keeps heavy inference strictly sequential
    INFERENCE_WORKERS = 1

    # JPEG quality for background image encoding (1-100)
    BACKGROUND_IMAGE_QUALITY = 70

    # Maximum cache entries for image encoding
    IMAGE_ENCODING_CACHE_SIZE = 10

    # Timeout (seconds) for fetching remote texture assets
    ASSET_FETCH_TIMEOUT = 10


# --- Export Convenience Constants ---
# These can be used directly without accessing the class

PERSPECTIVE_PX = OrientationConfig.PERSPECTIVE_PX
MAX_IMAGE_DIMENSION = PerformanceConfig.MAX_IMAGE_DIMENSION
JPEG_QUALITY = PerformanceConfig.BACKGROUND_IMAGE_QUALITY
CANVAS_WIDTH = UIConfig.DEFAULT_CANVAS_WIDTH

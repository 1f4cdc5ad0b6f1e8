import asyncio
import numpy as np
import torch
import logging
from huggingface_hub import snapshot_download
from huggingface_hub.utils import LocalEntryNotFoundError
from tqdm.auto import tqdm
from transformers import SegformerImageProcessor, SegformerForSemanticSegmentation
from PIL import Image

from app_config.constants import InferenceConfig
from surface_core.errors import InferenceUnavailable
from surface_core.models import OccupancyMask, RawSegment
from surface_core.progress import ProgressEvent
from surface_utils.async_processor import run_blocking
from surface_utils.image_processing import load_image_rgb

logger = logging.getLogger("surface_visualizer")

WEIGHT_PATTERNS = ["*.json", "*.bin", "*.safetensors"]


def _progress_bar_class(report):
    """Build a tqdm class that forwards the completed percentage to `report`."""
    class DownloadProgress(tqdm):
        def update(self, n=1):
            displayed = super().update(n)
            if self.total:
                report(100.0 * self.n / self.total)
            return displayed

    return DownloadProgress


class SegformerSegmenter:
    """
    Semantic segmentation collaborator backed by SegFormer (ADE20K).

    Produces one labelled binary mask per class present in the image, ordered
    by class id, which is the input contract of the region pipeline. The
    model is loaded lazily on first use and kept for the process lifetime.
    """

    def __init__(self, model_name=InferenceConfig.MODEL_NAME, device=None):
        self.device = device if device else ("cuda" if torch.cuda.is_available() else "cpu")
        self.model_name = model_name
        self.processor = None
        self.model = None

    @property
    def is_loaded(self):
        return self.model is not None

    def fetch_weights(self, on_download=None):
        """
        Make sure the model files are in the local Hugging Face cache.

        Args:
            on_download: Optional callable receiving the download percentage.
                Only called when files actually have to be fetched.

        Returns:
            str: Local snapshot directory
        """
        try:
            return snapshot_download(self.model_name, allow_patterns=WEIGHT_PATTERNS,
                                     local_files_only=True)
        except LocalEntryNotFoundError:
            logger.info(f"Downloading model weights for {self.model_name}")

        tqdm_class = _progress_bar_class(on_download) if on_download else None
        return snapshot_download(self.model_name, allow_patterns=WEIGHT_PATTERNS,
                                 tqdm_class=tqdm_class)

    def load_model(self, on_download=None):
        if self.model is not None:
            return

        try:
            self.fetch_weights(on_download)
            logger.info(f"Loading semantic segmentation model: {self.model_name}")
            self.processor = SegformerImageProcessor.from_pretrained(self.model_name)
            model = SegformerForSemanticSegmentation.from_pretrained(self.model_name)
            model.to(self.device)
            model.eval()

            # Optimization: Half precision on CUDA
            if self.device == "cuda":
                model.half()

            self.model = model
            logger.info("Semantic model loaded successfully.")
        except Exception as e:
            logger.error(f"Failed to load semantic model: {e}")
            self.processor = None
            self.model = None
            raise InferenceUnavailable(f"Could not load {self.model_name}: {e}") from e

    def predict_class_map(self, image_rgb):
        """
        Run inference and return the per-pixel class map.

        Args:
            image_rgb: Numpy array (H, W, 3)

        Returns:
            np.ndarray: (H, W) int class ids at the input resolution
        """
        inputs = self.processor(images=Image.fromarray(image_rgb), return_tensors="pt")
        inputs = {k: v.to(self.device) for k, v in inputs.items()}

        if self.device == "cuda":
            inputs["pixel_values"] = inputs["pixel_values"].half()

        with torch.no_grad():
            logits = self.model(**inputs).logits  # shape (1, num_labels, H/4, W/4)

        # Upsample logits to original image size
        upsampled = torch.nn.functional.interpolate(
            logits.float(),
            size=image_rgb.shape[:2],
            mode="bilinear",
            align_corners=False,
        )
        return upsampled.argmax(dim=1)[0].cpu().numpy().astype(np.int32)

    def class_map_to_segments(self, class_map):
        """Split a class map into one `RawSegment` per present class, in class-id order."""
        h, w = class_map.shape
        id2label = self.model.config.id2label if self.model is not None else {}
        segments = []
        for class_id in np.unique(class_map):
            label = id2label.get(int(class_id), str(int(class_id)))
            data = (class_map == class_id).astype(np.float32).reshape(-1)
            segments.append(RawSegment(label, OccupancyMask(w, h, data)))
        return segments

    async def segment(self, image, on_progress=None):
        """
        Segment an image into labelled masks.

        Args:
            image: Path, PIL Image or RGB array
            on_progress: Optional callable receiving ProgressEvents

        Returns:
            List[RawSegment]

        Raises:
            InferenceUnavailable: If the model cannot be loaded or run
        """
        notify = on_progress or (lambda event: None)
        loop = asyncio.get_running_loop()

        def on_download(percent):
            # Called from the executor thread
            loop.call_soon_threadsafe(notify, ProgressEvent.downloading(percent))

        try:
            if not self.is_loaded:
                notify(ProgressEvent.loading())
                await run_blocking(self.load_model, on_download)
            notify(ProgressEvent.ready())

            image_rgb = await run_blocking(load_image_rgb, image)
            notify(ProgressEvent.segmenting())
            class_map = await run_blocking(self.predict_class_map, image_rgb)
        except InferenceUnavailable:
            raise
        except Exception as e:
            logger.error(f"Error in semantic segmentation inference: {e}", exc_info=True)
            raise InferenceUnavailable(str(e)) from e

        segments = self.class_map_to_segments(class_map)
        logger.info(f"Segmentation produced {len(segments)} labelled masks")
        return segments

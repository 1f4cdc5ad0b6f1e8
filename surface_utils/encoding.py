import streamlit as st
from io import BytesIO
import base64
from PIL import Image
import numpy as np
from app_config.constants import PerformanceConfig

@st.cache_data(show_spinner=False, max_entries=PerformanceConfig.IMAGE_ENCODING_CACHE_SIZE)
def _cached_image_to_url(_image, width, image_id):
    """Internal cached encoder that avoids hashing the heavy image data."""
    img = Image.fromarray(_image) if isinstance(_image, np.ndarray) else _image
    if img.mode != "RGB":
        img = img.convert("RGB")

    # PERFORMANCE: Resize if width is provided to reduce payload
    if width:
        h_size = max(1, int(img.size[1] * (width / float(img.size[0]))))
        img = img.resize((width, h_size), Image.BILINEAR)

    buf = BytesIO()
    img.save(buf, format="JPEG", quality=PerformanceConfig.BACKGROUND_IMAGE_QUALITY)
    return f"data:image/jpeg;base64,{base64.b64encode(buf.getvalue()).decode()}"

def image_to_url(image, width=0, image_id=""):
    """
    Encode a preview image as a JPEG data URL.

    `image_id` must change whenever the pixels do; it is the cache key.
    """
    return _cached_image_to_url(image, width, image_id)

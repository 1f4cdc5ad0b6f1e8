"""
Canvas wrapper module - Handles background image conversion for streamlit-drawable-canvas.

The canvas is used in point mode only: each click adds a point object whose
position is the pointer location in canvas pixels.
"""

import streamlit as st
from streamlit_drawable_canvas import st_canvas as raw_st_canvas
from ..encoding import image_to_url


def st_canvas(*args, **kwargs):
    """
    Wrapper for streamlit_drawable_canvas with cached background image handling.

    Args:
        *args: Positional arguments passed to st_canvas
        **kwargs: Keyword arguments, including:
            - background_image: RGB array or PIL Image shown behind the canvas
            - width: Canvas width in pixels
            - height: Canvas height in pixels
            - Other st_canvas parameters

    Returns:
        Canvas result object with json_data and image_data

    Note:
        - Background data URLs are cached per `render_id`, so the preview is
          only re-encoded after the composite changes
    """
    kwargs["background_color"] = "rgba(0,0,0,0)"
    bg_img = kwargs.pop("background_image", None)

    if bg_img is not None:
        width, height = kwargs.get("width"), kwargs.get("height")

        r_hash = str(st.session_state.get("render_id", 0))
        cache_key = f"bg_url_cache_{r_hash}"
        if cache_key in st.session_state:
            url = st.session_state[cache_key]
        else:
            url = image_to_url(bg_img, width, r_hash)
            st.session_state[cache_key] = url

        if not kwargs.get("initial_drawing"):
            kwargs["initial_drawing"] = {"version": "4.4.0", "objects": []}

        kwargs["initial_drawing"]["background"] = "rgba(0,0,0,0)"
        kwargs["initial_drawing"]["backgroundImage"] = {
            "type": "image",
            "version": "4.4.0",
            "originX": "left",
            "originY": "top",
            "left": 0,
            "top": 0,
            "width": width,
            "height": height,
            "scaleX": 1,
            "scaleY": 1,
            "visible": True,
            "src": url
        }

    return raw_st_canvas(*args, **kwargs)


def last_point(canvas_result):
    """Return the (x, y) of the most recent point drawn on the canvas, or None."""
    if canvas_result is None or not canvas_result.json_data:
        return None
    objects = canvas_result.json_data.get("objects") or []
    if not objects:
        return None
    for obj in reversed(objects):
        if obj.get("type") in ("circle", "path"):
            return obj["left"], obj["top"]
    return None

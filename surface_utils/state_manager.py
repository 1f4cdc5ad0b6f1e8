import asyncio

import streamlit as st

from surface_core.errors import InvalidSelection
from surface_utils.logger import log_exceptions, logger
from surface_utils.session import SurfaceSession


def initialize_session_state(inference_factory):
    """Initialize all Streamlit session state variables used by the app."""
    defaults = {
        "image": None,          # Processed RGB preview image
        "file_key": None,       # Identity of the last uploaded file
        "render_id": 0,
        "canvas_id": 0,
        "uploader_id": 0,
        "last_click": None,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value

    if "surface_session" not in st.session_state:
        st.session_state["surface_session"] = SurfaceSession(inference_factory())


def get_session() -> SurfaceSession:
    return st.session_state["surface_session"]


def _bump_render():
    st.session_state["render_id"] += 1
    st.session_state["canvas_id"] += 1


def start_upload(image_rgb, file_key, on_progress=None):
    """Run a fresh session for a newly uploaded image (blocks until inference ends)."""
    session = get_session()
    st.session_state["image"] = image_rgb
    st.session_state["file_key"] = file_key
    st.session_state["last_click"] = None

    unsubscribe = session.subscribe(on_progress) if on_progress else None
    try:
        published = asyncio.run(session.upload(image_rgb))
    finally:
        if unsubscribe:
            unsubscribe()

    _bump_render()
    return published


@log_exceptions
def handle_click(x, y, disp_width, disp_height):
    session = get_session()
    click_key = f"{x}_{y}"
    if click_key == st.session_state.get("last_click"):
        return
    st.session_state["last_click"] = click_key
    region_id = session.click(x, y, disp_width, disp_height)
    logger.info(f"Click at ({x:.0f}, {y:.0f}) -> region {region_id}")
    _bump_render()


def cb_apply_material(material_id):
    try:
        get_session().apply_material(material_id)
    except InvalidSelection as e:
        st.toast(f"⚠️ {e}")
        return
    _bump_render()


def cb_clear_material():
    try:
        get_session().clear_material()
    except InvalidSelection as e:
        st.toast(f"⚠️ {e}")
        return
    _bump_render()


def cb_new_image():
    get_session().reset()
    st.session_state["image"] = None
    st.session_state["file_key"] = None
    st.session_state["last_click"] = None
    st.session_state["uploader_id"] += 1
    _bump_render()

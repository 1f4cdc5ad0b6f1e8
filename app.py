import streamlit as st
import numpy as np

# 🎯 CRITICAL: Must be the VERY FIRST Streamlit command
st.set_page_config(
    page_title="Interior Surface Visualizer",
    page_icon="🏠",
    layout="wide",
    initial_sidebar_state="expanded"
)

from app_config import DEFAULT_CATALOG, UIConfig
from surface_core.compositor import LayerCompositor
from surface_core.models import MaterialKind
from surface_core.semantic_segmenter import SegformerSegmenter
from surface_utils.asset_cache import get_asset_cache
from surface_utils.image_processing import load_image_rgb, resize_image_smart
from surface_utils.session import SessionPhase
from surface_utils.state_manager import (
    initialize_session_state, get_session, start_upload, handle_click,
    cb_apply_material, cb_clear_material, cb_new_image
)
from surface_utils.ui import st_canvas, last_point

CATEGORY_NAMES = {"wall": "Wall", "floor": "Floor", "ceiling": "Ceiling"}


@st.cache_resource
def get_segmenter():
    """One model instance per process; sessions share it."""
    return SegformerSegmenter()


@st.cache_resource
def get_assets():
    """Preload every catalog texture once per process."""
    cache = get_asset_cache()
    cache.preload(DEFAULT_CATALOG.texture_refs())
    return cache


def render_upload():
    uploaded = st.file_uploader(
        "Drop an interior photo or perspective rendering (JPG, PNG)",
        type=["jpg", "jpeg", "png"],
        key=f"uploader_{st.session_state['uploader_id']}",
    )
    if uploaded is None:
        return

    file_key = f"{uploaded.name}_{uploaded.size}"
    if file_key == st.session_state.get("file_key"):
        return

    image = resize_image_smart(load_image_rgb(uploaded))
    with st.status("Analyzing image...", expanded=True) as status:
        progress_line = st.empty()
        published = start_upload(image, file_key, on_progress=lambda e: progress_line.write(e.status_text()))
        if published:
            status.update(label="✅ Walls, floor and ceiling detected!", state="complete")
        else:
            status.update(label=get_session().state.status or "Upload superseded", state="error")
    st.rerun()


def render_canvas(assets):
    session = get_session()
    image = st.session_state["image"]
    h, w = image.shape[:2]
    disp_w = min(UIConfig.DEFAULT_CANVAS_WIDTH, w)
    disp_h = int(h * disp_w / w)

    preview = LayerCompositor.composite_layers(image, session.render_layers(assets), assets)
    canvas_result = st_canvas(
        background_image=preview,
        width=disp_w,
        height=disp_h,
        drawing_mode="point",
        point_display_radius=UIConfig.POINT_DISPLAY_RADIUS,
        stroke_width=1,
        update_streamlit=True,
        key=f"canvas_{st.session_state['canvas_id']}",
    )

    point = last_point(canvas_result)
    if point is not None and session.phase is SessionPhase.READY:
        before = st.session_state.get("last_click")
        handle_click(point[0], point[1], disp_w, disp_h)
        if st.session_state.get("last_click") != before:
            st.rerun()


def render_sidebar(assets):
    session = get_session()
    with st.sidebar:
        st.header("Finish Materials")
        if session.state.status:
            st.warning(session.state.status)

        if session.phase is not SessionPhase.READY:
            st.markdown("1. Upload an image\n2. AI detects walls, floor and ceiling\n"
                        "3. Click a surface\n4. Pick a material")
            if st.session_state["image"] is not None:
                st.button("Upload a new image", on_click=cb_new_image)
            return

        region = session.selected_region
        if region is None:
            st.info("Click a wall, floor or ceiling in the image to edit it.")
        else:
            st.markdown(f"Selected: **{CATEGORY_NAMES[region.category.value]}**")
            bound = session.state.bindings.get(region.id)
            for material in session.available_materials():
                if material.kind is MaterialKind.TEXTURE:
                    texture = assets.lookup(material.image_ref)
                    if texture is not None:
                        st.image(texture, width=UIConfig.SWATCH_SIZE)
                else:
                    swatch = np.zeros((UIConfig.SWATCH_SIZE, UIConfig.SWATCH_SIZE, 3), dtype=np.uint8)
                    swatch[:] = LayerCompositor.hex_to_rgb(material.color)
                    st.image(swatch, width=UIConfig.SWATCH_SIZE)
                label = f"✔ {material.name}" if bound is not None and bound.id == material.id else material.name
                st.button(label, key=f"mat_{material.id}", on_click=cb_apply_material, args=(material.id,))
            st.button("Reset surface", on_click=cb_clear_material)

        st.divider()
        st.button("Upload a new image", on_click=cb_new_image)


def main():
    initialize_session_state(get_segmenter)
    assets = get_assets()

    st.title("Interior Surface Visualizer")
    st.caption("Swap the wall, floor and ceiling finishes of a photo or perspective rendering.")

    render_sidebar(assets)
    if st.session_state["image"] is None:
        render_upload()
    else:
        render_canvas(assets)


if __name__ == "__main__":
    main()

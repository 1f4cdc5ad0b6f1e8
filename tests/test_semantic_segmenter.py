"""
Unit tests for surface_core/semantic_segmenter.py.

The SegFormer weights are never downloaded: the model is replaced by mocks.
"""

import asyncio
import io
from unittest.mock import Mock, patch

import numpy as np
import pytest

pytest.importorskip("torch")
pytest.importorskip("transformers")

from surface_core.errors import InferenceUnavailable
from surface_core.ingest import ingest_segments
from surface_core.progress import ProgressKind
from huggingface_hub.utils import LocalEntryNotFoundError

from surface_core.semantic_segmenter import SegformerSegmenter, _progress_bar_class


@pytest.fixture
def segmenter():
    seg = SegformerSegmenter(device="cpu")
    seg.processor = Mock()
    seg.model = Mock()
    seg.model.config.id2label = {0: "wall", 2: "sky", 3: "floor, flooring", 5: "ceiling"}
    return seg


@pytest.fixture
def class_map():
    cmap = np.zeros((6, 8), dtype=np.int32)
    cmap[:2] = 5
    cmap[4:] = 3
    cmap[2:4, 6:] = 2
    return cmap


class TestClassMapToSegments:
    """Test splitting a class map into labelled masks."""

    def test_one_segment_per_class(self, segmenter, class_map):
        segments = segmenter.class_map_to_segments(class_map)

        assert [s.label for s in segments] == ["wall", "sky", "floor, flooring", "ceiling"]
        for seg in segments:
            assert (seg.mask.width, seg.mask.height) == (8, 6)
        assert segments[3].mask.grid()[:2].all()
        assert not segments[3].mask.grid()[2:].any()

    def test_unknown_class_id_uses_number(self, segmenter):
        segments = segmenter.class_map_to_segments(np.full((2, 2), 99, dtype=np.int32))
        assert segments[0].label == "99"

    def test_output_feeds_ingest(self, segmenter, class_map):
        accepted = ingest_segments(segmenter.class_map_to_segments(class_map))
        assert [cat.value for _, cat in accepted] == ["wall", "floor", "ceiling"]


@pytest.mark.slow
class TestSegment:
    """Test the async segment() contract."""

    def test_progress_and_result(self, segmenter, class_map, sample_image):
        segmenter.predict_class_map = Mock(return_value=class_map)
        events = []

        segments = asyncio.run(segmenter.segment(sample_image, on_progress=events.append))

        assert [e.kind for e in events] == [ProgressKind.READY, ProgressKind.SEGMENTING]
        assert len(segments) == 4
        segmenter.predict_class_map.assert_called_once()

    def test_loading_event_when_model_missing(self, class_map, sample_image):
        seg = SegformerSegmenter(device="cpu")

        def fake_load(on_download=None):
            seg.model = Mock()
            seg.model.config.id2label = {}

        seg.load_model = fake_load
        seg.predict_class_map = Mock(return_value=class_map)
        events = []

        asyncio.run(seg.segment(sample_image, on_progress=events.append))

        assert events[0].kind is ProgressKind.LOADING
        assert seg.is_loaded

    def test_inference_error_wrapped(self, segmenter, sample_image):
        segmenter.predict_class_map = Mock(side_effect=RuntimeError("CUDA out of memory"))
        with pytest.raises(InferenceUnavailable, match="out of memory"):
            asyncio.run(segmenter.segment(sample_image))

    @patch("surface_core.semantic_segmenter.snapshot_download")
    @patch("surface_core.semantic_segmenter.SegformerImageProcessor.from_pretrained")
    def test_load_failure(self, mock_from_pretrained, mock_snapshot):
        mock_from_pretrained.side_effect = OSError("offline")
        seg = SegformerSegmenter(device="cpu")

        with pytest.raises(InferenceUnavailable, match="offline"):
            seg.load_model()
        assert not seg.is_loaded

    def test_download_progress_reaches_observer(self, class_map, sample_image):
        seg = SegformerSegmenter(device="cpu")

        def fake_load(on_download=None):
            on_download(40.0)
            on_download(100.0)
            seg.model = Mock()
            seg.model.config.id2label = {}

        seg.load_model = fake_load
        seg.predict_class_map = Mock(return_value=class_map)
        events = []

        asyncio.run(seg.segment(sample_image, on_progress=events.append))

        assert [e.kind for e in events] == [
            ProgressKind.LOADING, ProgressKind.DOWNLOADING, ProgressKind.DOWNLOADING,
            ProgressKind.READY, ProgressKind.SEGMENTING,
        ]
        assert [e.percent for e in events[1:3]] == [40.0, 100.0]

    def test_image_decoded_off_the_event_loop(self, segmenter, class_map, sample_image):
        segmenter.predict_class_map = Mock(return_value=class_map)
        calls = []

        async def fake_run_blocking(func, *args, **kwargs):
            calls.append(func)
            return func(*args, **kwargs)

        with patch("surface_core.semantic_segmenter.run_blocking", fake_run_blocking):
            asyncio.run(segmenter.segment(sample_image))

        assert calls[0].__name__ == "load_image_rgb"


class TestFetchWeights:
    """Test the model cache check and download progress reporting."""

    @patch("surface_core.semantic_segmenter.snapshot_download")
    def test_cached_weights_skip_download(self, mock_snapshot):
        mock_snapshot.return_value = "/cache/segformer"
        reports = []

        assert SegformerSegmenter(device="cpu").fetch_weights(reports.append) == "/cache/segformer"
        mock_snapshot.assert_called_once()
        assert mock_snapshot.call_args.kwargs["local_files_only"] is True
        assert reports == []

    @patch("surface_core.semantic_segmenter.snapshot_download")
    def test_missing_weights_downloaded_with_progress(self, mock_snapshot):
        mock_snapshot.side_effect = [LocalEntryNotFoundError("not cached"), "/cache/segformer"]

        SegformerSegmenter(device="cpu").fetch_weights(Mock())

        download_kwargs = mock_snapshot.call_args_list[1].kwargs
        assert "local_files_only" not in download_kwargs
        assert download_kwargs["tqdm_class"] is not None

    def test_progress_bar_reports_percent(self):
        reports = []
        bar_class = _progress_bar_class(reports.append)

        with bar_class(total=4, file=io.StringIO()) as bar:
            bar.update(1)
            bar.update(3)

        assert reports == [25.0, 100.0]

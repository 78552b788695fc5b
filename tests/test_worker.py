"""Tests for background palette extraction."""
import threading
import time

import pytest

from palettegen.palette import PaletteState
from palettegen.pipeline import PaletteExtractor
from palettegen.types import ClusteringCancelled, DecodeError, PaletteConfig
from palettegen.worker import PaletteWorker


class BlockingExtractor:
    """Extractor that waits until it is asked to stop."""

    def __init__(self):
        self.started = threading.Event()

    def extract(self, image, should_stop):
        self.started.set()
        for _ in range(500):
            if should_stop():
                raise ClusteringCancelled("stopped")
            time.sleep(0.01)
        return []


class TestPaletteWorker:
    """Test cases for PaletteWorker."""

    def test_submit_delivers_result(self, four_color_image):
        """Test that on_result receives the palette."""
        results = []
        extractor = PaletteExtractor(PaletteConfig(n_colors=2, seed=0))

        with PaletteWorker(extractor) as worker:
            future = worker.submit(four_color_image, results.append)
            colors = future.result(timeout=30)

        assert results == [colors]
        assert len(colors) == 2

    def test_dispatch_marshals_callbacks(self, four_color_image):
        """Test that callbacks go through dispatch instead of running directly."""
        queued = []
        results = []

        with PaletteWorker(dispatch=lambda cb, value: queued.append((cb, value))) as worker:
            worker.submit(four_color_image, results.append)

        assert results == []
        assert len(queued) == 1

        callback, value = queued[0]
        callback(value)
        assert len(results[0]) == 5

    def test_load_into_updates_state(self, four_color_image):
        """Test that load_into applies the palette and clears loading."""
        state = PaletteState()
        extractor = PaletteExtractor(PaletteConfig(n_colors=3, seed=2))

        with PaletteWorker(extractor) as worker:
            worker.load_into(state, four_color_image)

        assert not state.is_loading
        assert len(state.entries) == 3

    def test_load_into_keeps_palette_on_error(self):
        """Test that a decode failure keeps the previous palette."""
        state = PaletteState()
        state.apply([(1.0, 0.0, 0.0)])
        errors = []

        with PaletteWorker() as worker:
            worker.load_into(state, b"not an image", on_error=errors.append)

        assert not state.is_loading
        assert state.hex_codes() == ["#FF0000"]
        assert len(errors) == 1
        assert isinstance(errors[0], DecodeError)

    def test_error_without_handler(self):
        """Test that failures surface on the future."""
        with PaletteWorker() as worker:
            future = worker.submit(b"not an image", lambda colors: None)
            with pytest.raises(DecodeError):
                future.result(timeout=30)

    def test_cancel_stops_running_extraction(self):
        """Test that cancel reaches a running extraction."""
        extractor = BlockingExtractor()
        errors = []

        with PaletteWorker(extractor) as worker:
            worker.submit(None, lambda colors: None, errors.append)
            assert extractor.started.wait(5)
            worker.cancel()

        assert len(errors) == 1
        assert isinstance(errors[0], ClusteringCancelled)

    def test_cancelled_queued_load_clears_loading(self, four_color_image):
        """Test that cancelling a queued load_into keeps the palette and ends loading."""
        extractor = BlockingExtractor()
        state = PaletteState()
        state.apply([(0.0, 0.0, 1.0)])
        errors = []

        with PaletteWorker(extractor) as worker:
            worker.submit(None, lambda colors: None)
            assert extractor.started.wait(5)
            future = worker.load_into(state, four_color_image, on_error=errors.append)
            assert future.cancel()
            worker.cancel()

        assert not state.is_loading
        assert state.hex_codes() == ["#0000FF"]
        assert len(errors) == 1
        assert isinstance(errors[0], ClusteringCancelled)

    def test_submit_after_shutdown_leaves_nothing_active(self, four_color_image):
        """Test that a rejected submit does not leave a stop flag registered."""
        worker = PaletteWorker()
        worker.shutdown()

        with pytest.raises(RuntimeError):
            worker.submit(four_color_image, lambda colors: None)

        assert not worker._active

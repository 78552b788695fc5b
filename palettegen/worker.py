"""Background palette extraction with results delivered to the caller's thread."""
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, List, Optional, Set

from palettegen.palette import PaletteState
from palettegen.pipeline import PaletteExtractor
from palettegen.sampler import ImageSource
from palettegen.types import ClusteringCancelled, ColorSample

logger = logging.getLogger(__name__)

Dispatch = Callable[[Callable[[Any], None], Any], None]


def call_inline(callback: Callable[[Any], None], value: Any) -> None:
    callback(value)


class PaletteWorker:
    """
    Runs palette extraction off the foreground thread.

    Work is submitted to a thread pool. When it finishes, the result or
    error is handed to ``dispatch(callback, value)``, which is where a UI
    toolkit marshals the call back to its main thread (for example by
    posting to its event loop). The default dispatch calls the callback
    directly on the worker thread.
    """

    def __init__(
        self,
        extractor: Optional[PaletteExtractor] = None,
        dispatch: Optional[Dispatch] = None,
        max_workers: int = 1,
    ):
        self.extractor = extractor or PaletteExtractor()
        self.dispatch = dispatch or call_inline
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="palettegen"
        )
        self._lock = threading.Lock()
        self._active: Set[threading.Event] = set()

    def submit(
        self,
        image: ImageSource,
        on_result: Callable[[List[ColorSample]], None],
        on_error: Optional[Callable[[BaseException], None]] = None,
    ) -> Future:
        """
        Extract a palette in the background.

        Args:
            image: Any resource accepted by sampler.sample
            on_result: Receives the palette colors via dispatch
            on_error: Receives the raised exception via dispatch

        Returns:
            Future for the extraction
        """
        stop = threading.Event()
        future = self._executor.submit(self.extractor.extract, image, stop.is_set)
        with self._lock:
            if not future.done():
                self._active.add(stop)

        def _done(f: Future) -> None:
            with self._lock:
                self._active.discard(stop)
            if f.cancelled():
                logger.info("Palette extraction cancelled before it started")
                if on_error is not None:
                    self.dispatch(on_error, ClusteringCancelled("Extraction cancelled before it started"))
                return
            error = f.exception()
            if error is None:
                self.dispatch(on_result, f.result())
            else:
                if isinstance(error, ClusteringCancelled):
                    logger.info(f"Palette extraction cancelled: {error}")
                else:
                    logger.warning(f"Palette extraction failed: {error}")
                if on_error is not None:
                    self.dispatch(on_error, error)

        future.add_done_callback(_done)
        return future

    def load_into(
        self,
        state: PaletteState,
        image: ImageSource,
        on_error: Optional[Callable[[BaseException], None]] = None,
    ) -> Future:
        """
        Extract a palette into state.

        Sets state.is_loading until the work completes. On failure the
        previous entries stay in place.
        """
        state.is_loading = True

        def _failed(error: BaseException) -> None:
            state.is_loading = False
            if on_error is not None:
                on_error(error)

        return self.submit(image, state.apply, _failed)

    def cancel(self) -> None:
        """Ask every running extraction to stop at its next iteration."""
        with self._lock:
            for stop in self._active:
                stop.set()

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "PaletteWorker":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(wait=True)

"""Turn a PDF source into a page count and per-page rasters.

Two strategies share one contract:

``lazy``
    Pages are rendered on request. :meth:`DocumentDecoder.get_page` returns
    :data:`PENDING` while a page is being rendered and schedules the work
    at most once per page.

``eager``
    :meth:`DocumentDecoder.rasterize_all` renders every page in order
    before the document is considered ready, reporting progress as it goes.

Rendering uses PyMuPDF. Pages are rasterised at a fixed zoom chosen so the
raster is ``oversample`` times the largest page width the layout can ask
for, which keeps surfaces sharp without re-rendering on resize.
"""
from __future__ import annotations

import threading
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional, Set, Union
from urllib.parse import urlparse
from urllib.request import url2pathname

import fitz

from flipbook.core.errors import DecodeCorrupt, PageDecodeFailed, SourceUnavailable
from flipbook.core.subscriptions import Signal
from flipbook.utils.logger import logger
from flipbook.utils.lru_cache import ThreadSafeLRUCache
from flipbook.version import __version__

LAZY = "lazy"
EAGER = "eager"
STRATEGIES = (LAZY, EAGER)

MIN_EAGER_OVERSAMPLE = 2.0

RAW = "raw"
PNG = "png"

_USER_AGENT = f"flipbook/{__version__}"


@dataclass(frozen=True)
class DecoderConfig:
    strategy: str = LAZY
    oversample: float = 2.0
    # Widest page the layout may request, in pixels.
    target_width: int = 600
    prefetch: int = 2
    page_cache_size: int = 64
    decode_timeout_s: float = 60.0
    fetch_timeout_s: float = 30.0

    def __post_init__(self) -> None:
        if self.strategy not in STRATEGIES:
            raise ValueError(
                f"Unknown decode strategy {self.strategy!r}; expected one of {STRATEGIES}"
            )
        if self.strategy == EAGER and self.oversample < MIN_EAGER_OVERSAMPLE:
            object.__setattr__(self, "oversample", MIN_EAGER_OVERSAMPLE)

    @classmethod
    def from_config(
        cls, section: Optional[dict], target_width: Optional[int] = None
    ) -> "DecoderConfig":
        section = dict(section or {})
        kwargs = {}
        for name in cls.__dataclass_fields__:
            if section.get(name) is not None:
                kwargs[name] = type(getattr(cls, name))(section[name])
        if target_width is not None:
            kwargs["target_width"] = int(target_width)
        return cls(**kwargs)


@dataclass(frozen=True)
class PageSurfaceData:
    """A raster of one decoded page.

    ``samples`` holds either raw RGB(A) rows (``encoding="raw"``, ``stride``
    bytes per row) or a PNG file (``encoding="png"``). The decoder stores
    PNG so a fully rasterized book stays small in memory.
    """

    index: int
    width: int
    height: int
    stride: int
    alpha: bool
    samples: bytes
    # Raster pixels per PDF point.
    zoom: float
    source_width: float
    source_height: float
    encoding: str = RAW

    @property
    def aspect(self) -> float:
        return self.width / self.height if self.height else 0.0


@dataclass(frozen=True)
class PageFailure:
    index: int
    reason: str

    @property
    def page_number(self) -> int:
        return self.index + 1


class _Pending:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "PENDING"

    def __bool__(self) -> bool:
        return False


PENDING = _Pending()

PageResult = Union[PageSurfaceData, PageFailure, _Pending]

# scheduler(job, done): run ``job`` somewhere, then call ``done(result)`` on
# the thread that owns the viewer state.
Scheduler = Callable[[Callable[[], object], Callable[[object], None]], None]


def run_inline(job: Callable[[], object], done: Callable[[object], None]) -> None:
    done(job())


class DocumentHandle:
    """An opened document plus its page store and cancellation token."""

    def __init__(
        self,
        source_location: str,
        document: "fitz.Document",
        strategy: str,
        cache_size: Optional[int],
    ) -> None:
        self.source_location = source_location
        self.document = document
        self.page_count = int(document.page_count)
        self.strategy = strategy
        self.lock = threading.RLock()
        self.pages = ThreadSafeLRUCache(max_size=cache_size)
        self.failures: Dict[int, PageFailure] = {}
        self.in_flight: Set[int] = set()
        self.page_decoded = Signal()
        self._cancelled = threading.Event()
        self._closed = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def closed(self) -> bool:
        return self._closed

    def cancel(self) -> None:
        self._cancelled.set()

    def close(self) -> None:
        self.cancel()
        with self.lock:
            if self._closed:
                return
            self._closed = True
            try:
                self.document.close()
            except Exception as exc:
                logger.debug("Closing %s failed: %s", self.source_location, exc)

    def refresh_page_count(self) -> int:
        """Re-read the page count (documents repaired or extended after open)."""
        with self.lock:
            if not self._closed:
                self.page_count = int(self.document.page_count)
            return self.page_count

    def claim(self, index: int) -> bool:
        """Reserve ``index`` for rendering; False if done or in progress."""
        with self.lock:
            if (
                index in self.in_flight
                or index in self.failures
                or self.pages.contains(index)
            ):
                return False
            self.in_flight.add(index)
            return True

    def lookup(self, index: int) -> PageResult:
        surface = self.pages.get(index)
        if surface is not None:
            return surface
        with self.lock:
            failure = self.failures.get(index)
        return failure if failure is not None else PENDING


def read_source(source_location: str, timeout_s: float = 30.0) -> bytes:
    """Fetch the raw bytes of a local path, ``file://`` URI or HTTP(S) URL."""
    location = str(source_location or "").strip()
    if not location:
        raise SourceUnavailable("No document location given.")
    parsed = urlparse(location)
    scheme = parsed.scheme.lower()
    if scheme in ("http", "https"):
        req = urllib.request.Request(location, headers={"User-Agent": _USER_AGENT})
        try:
            with urllib.request.urlopen(
                req, timeout=max(0.5, float(timeout_s))
            ) as response:
                return response.read()
        except (urllib.error.URLError, OSError, ValueError) as exc:
            raise SourceUnavailable(f"Could not download {location}: {exc}") from exc
    if scheme == "file":
        path = Path(url2pathname(parsed.path))
    elif scheme and len(scheme) > 1:
        raise SourceUnavailable(f"Unsupported document location: {location}")
    else:
        # Plain paths, including Windows drive letters.
        path = Path(location).expanduser()
    if not path.is_file():
        raise SourceUnavailable(f"File not found: {path}")
    try:
        return path.read_bytes()
    except OSError as exc:
        raise SourceUnavailable(f"Could not read {path}: {exc}") from exc


class DocumentDecoder:
    """Opens PDF documents and hands out page rasters.

    Each decoder carries its own :class:`DecoderConfig` and scheduler, so
    several viewers (or tests) can use independent settings.
    """

    def __init__(
        self,
        config: Optional[DecoderConfig] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self.config = config or DecoderConfig()
        self._scheduler = scheduler or run_inline

    @property
    def strategy(self) -> str:
        return self.config.strategy

    def set_scheduler(self, scheduler: Optional[Scheduler]) -> None:
        self._scheduler = scheduler or run_inline

    # ------------------------------------------------------------------ open
    def open(self, source_location: str) -> DocumentHandle:
        """Read and parse the document.

        Raises:
            SourceUnavailable: the source cannot be read.
            DecodeCorrupt: the bytes are not a PDF with at least one page.
        """
        data = read_source(source_location, timeout_s=self.config.fetch_timeout_s)
        if not data:
            raise DecodeCorrupt("The document is empty.")
        try:
            document = fitz.open(stream=data, filetype="pdf")
        except Exception as exc:
            raise DecodeCorrupt(f"Could not parse document: {exc}") from exc
        if document.needs_pass:
            document.close()
            raise DecodeCorrupt("The document is password protected.")
        if document.page_count == 0:
            document.close()
            raise DecodeCorrupt("The document does not contain any pages.")

        if self.strategy == EAGER:
            cache_size = None
        else:
            cache_size = max(1, int(self.config.page_cache_size))
        handle = DocumentHandle(
            str(source_location), document, self.strategy, cache_size
        )
        logger.info(
            "Opened %s (%d pages, %s decoding)",
            source_location,
            handle.page_count,
            self.strategy,
        )
        return handle

    def page_count(self, handle: DocumentHandle) -> int:
        return handle.page_count

    # ------------------------------------------------------------ rendering
    def zoom_for(self, page_width_pt: float) -> float:
        if page_width_pt <= 0:
            return float(self.config.oversample)
        return self.config.oversample * self.config.target_width / page_width_pt

    def _rasterize_page(self, handle: DocumentHandle, index: int) -> PageSurfaceData:
        with handle.lock:
            if handle.closed:
                raise PageDecodeFailed(index, "document closed")
            try:
                page = handle.document.load_page(index)
                rect = page.rect
                zoom = self.zoom_for(rect.width)
                pix = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=False)
                encoded = pix.tobytes(PNG)
            except Exception as exc:
                raise PageDecodeFailed(index, str(exc)) from exc
        return PageSurfaceData(
            index=index,
            width=int(pix.width),
            height=int(pix.height),
            stride=int(pix.stride),
            alpha=bool(pix.alpha),
            samples=encoded,
            zoom=float(zoom),
            source_width=float(rect.width),
            source_height=float(rect.height),
            encoding=PNG,
        )

    def render_page(self, handle: DocumentHandle, index: int) -> PageResult:
        """Render ``index`` now and record the outcome on the handle.

        A page failure is stored and returned as :class:`PageFailure`; it
        never aborts the document.
        """
        try:
            surface = self._rasterize_page(handle, index)
            handle.pages.put(index, surface)
            return surface
        except Exception as exc:
            reason = exc.reason if isinstance(exc, PageDecodeFailed) else repr(exc)
            failure = PageFailure(index, reason)
            with handle.lock:
                handle.failures[index] = failure
            if not handle.cancelled:
                logger.warning(
                    "Page %d of %s failed to decode: %s",
                    index + 1,
                    handle.source_location,
                    reason,
                )
            return failure
        finally:
            with handle.lock:
                handle.in_flight.discard(index)

    def get_page(self, handle: DocumentHandle, index: int) -> PageResult:
        """Return the page raster, a :class:`PageFailure` or :data:`PENDING`.

        In lazy mode the first request for a page schedules its rendering;
        further requests while it is in flight do not.
        """
        if not 0 <= index < handle.page_count:
            return PageFailure(index, "page index out of range")
        result = handle.lookup(index)
        if result is not PENDING:
            return result
        if handle.strategy == LAZY and not handle.cancelled and handle.claim(index):
            self._scheduler(
                lambda: self._render_claimed(handle, index),
                lambda outcome: self._deliver(handle, index, outcome),
            )
            return handle.lookup(index)
        return PENDING

    def prefetch(self, handle: DocumentHandle, indices) -> None:
        for index in indices:
            if 0 <= index < handle.page_count:
                self.get_page(handle, index)

    def _render_claimed(self, handle: DocumentHandle, index: int) -> PageResult:
        if handle.cancelled:
            with handle.lock:
                handle.in_flight.discard(index)
            return PENDING
        return self.render_page(handle, index)

    def _deliver(self, handle: DocumentHandle, index: int, outcome: object) -> None:
        if handle.cancelled or outcome is PENDING:
            logger.debug(
                "Dropping page %d of cancelled decode %s", index, handle.source_location
            )
            return
        handle.page_decoded.emit(index, outcome)

    def rasterize_all(
        self,
        handle: DocumentHandle,
        on_progress: Optional[Callable[[int], None]] = None,
    ) -> bool:
        """Render every page in order (eager strategy).

        ``on_progress`` receives strictly increasing percentages, the last
        of which is exactly 100 and only sent once every page is done.
        Returns False if the handle was cancelled before finishing.
        """
        total = handle.page_count
        last = 0
        for index in range(total):
            if handle.cancelled:
                return False
            if handle.lookup(index) is PENDING:
                with handle.lock:
                    handle.in_flight.add(index)
                self.render_page(handle, index)
            completed = index + 1
            if completed < total:
                progress = min(99, int(round(100.0 * completed / total)))
            else:
                progress = 100
            if progress > last:
                last = progress
                if handle.cancelled:
                    return False
                if on_progress is not None:
                    on_progress(progress)
        return not handle.cancelled

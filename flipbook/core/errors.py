from __future__ import annotations


class FlipbookError(Exception):
    """Base class for errors raised while decoding a document."""


class SourceUnavailable(FlipbookError):
    """The document source could not be read (missing file, network error)."""


class DecodeTimeout(SourceUnavailable):
    """Decoding did not finish within the configured timeout."""


class DecodeCorrupt(FlipbookError):
    """The source was read but is not a usable paginated document."""


class PageDecodeFailed(FlipbookError):
    """A single page could not be rendered; the document stays usable."""

    def __init__(self, index: int, reason: str) -> None:
        super().__init__(f"Page {index} could not be rendered: {reason}")
        self.index = int(index)
        self.reason = str(reason)

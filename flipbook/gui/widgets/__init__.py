from flipbook.gui.widgets.flipbook_controls import FlipbookControlsWidget
from flipbook.gui.widgets.flipbook_view import FlipbookView
from flipbook.gui.widgets.flipbook_viewer import FlipbookViewerWidget
from flipbook.gui.widgets.library_view import LibraryView
from flipbook.gui.widgets.page_surface import render_surface

__all__ = [
    "FlipbookControlsWidget",
    "FlipbookView",
    "FlipbookViewerWidget",
    "LibraryView",
    "render_surface",
]

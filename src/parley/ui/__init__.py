"""Terminal UI module for parley.

Provides a blessed-based full-screen chat interface.

Module structure (Parnas principle - each module hides a design decision):
- config.py: Constants (timings, glyphs, colours, notices)
- keys.py: How keystrokes are classified
- render.py: Screen layout and how a cell grid reaches the terminal
- wizard.py: Interactive configuration prompts
- app.py: Application orchestration (event handling, terminal lifecycle)

The package root only re-exports the renderer; import ``parley.ui.app``
for the application so the session package can use ``ui.config``
without an import cycle.
"""

from .render import Cell, ScreenGrid, compute_layout, render

__all__ = [
    "Cell",
    "ScreenGrid",
    "compute_layout",
    "render",
]

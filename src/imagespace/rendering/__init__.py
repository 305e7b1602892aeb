"""Rendering: depth-sorted matplotlib views of real-world and image space."""

from imagespace.rendering.interactive import render_mpl_interactive
from imagespace.rendering.static import render_mpl

__all__ = [
    "render_mpl",
    "render_mpl_interactive",
]

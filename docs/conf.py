"""Sphinx configuration for imagespace documentation."""

import os
import sys

project = "imagespace"
copyright = "2026, imagespace contributors"
author = "imagespace contributors"
release = "0.1.0"

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
    "sphinx.ext.intersphinx",
    "sphinx_autodoc_typehints",
]

exclude_patterns = ["_build"]

# Docstrings are Google style throughout.
napoleon_google_docstring = True
napoleon_numpy_docstring = False

autodoc_member_order = "bysource"
typehints_defaults = "comma"

intersphinx_mapping = {
    "python": ("https://docs.python.org/3", None),
    "numpy": ("https://numpy.org/doc/stable/", None),
    "matplotlib": ("https://matplotlib.org/stable/", None),
}

html_theme = "sphinx_rtd_theme"
html_static_path = ["_static"]


def _render_transition_stills(app):
    """Render the transition stills into ``_static`` before reading sources."""
    if os.environ.get("SKIP_IMAGE_GEN"):
        return
    static_dir = os.path.join(os.path.dirname(__file__), "_static")
    sys.path.insert(0, static_dir)
    try:
        from generate_images import main

        main()
    finally:
        sys.path.pop(0)


def setup(app):
    app.connect("builder-inited", _render_transition_stills)

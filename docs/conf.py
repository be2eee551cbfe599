"""Sphinx settings for the Discline API reference."""

from __future__ import annotations

import sys
from pathlib import Path

# autodoc imports ``discline`` straight from the checkout.
REPO_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(REPO_ROOT))

from discline import __version__  # noqa: E402

project = "Discline"
author = "Discline contributors"
copyright = f"2025, {author}"
version = release = __version__

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.autosummary",
    "sphinx.ext.napoleon",
]

root_doc = "index"
exclude_patterns = ["_build"]

# Every public module carries numpydoc docstrings.
napoleon_google_docstring = False
napoleon_numpy_docstring = True

autosummary_generate = True
autodoc_member_order = "bysource"
autodoc_typehints = "description"
autodoc_default_options = {
    "members": True,
    "show-inheritance": True,
}

html_theme = "sphinx_rtd_theme"
html_title = f"Discline {release}"

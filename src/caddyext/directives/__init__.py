"""
Directive registry package.

Loads the ordered directive list from a Caddy directives file, appends new
directives, and writes the file back through tree-sitter validated edits.
"""

from .facade import DirectiveRegistry
from .loader import extract_directives, load_registry
from .syntax import GoSource, parse_go, render
from .writer import atomic_write, render_directives

__all__ = [
    # Main facade
    "DirectiveRegistry",
    "load_registry",

    # Components
    "extract_directives",
    "render_directives",
    "atomic_write",
    "GoSource",
    "parse_go",
    "render",
]

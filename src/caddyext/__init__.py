"""
caddyext - Caddy directive registry manager

Maintains the ordered list of plugin directives compiled into Caddy.
"""

__version__ = "0.1.0"

from caddyext.config import RegistryConfig, load_config
from caddyext.directives import DirectiveRegistry, load_registry
from caddyext.exceptions import (
    CaddyextError,
    ConsistencyError,
    DuplicateDirectiveError,
    InvalidDirectiveError,
    ParseError,
    ReadError,
    RenderError,
    WriteError,
)
from caddyext.schemas import Directive

__all__ = [
    "__version__",
    "load_registry",
    "DirectiveRegistry",
    "Directive",
    "RegistryConfig",
    "load_config",
    "CaddyextError",
    "ConsistencyError",
    "DuplicateDirectiveError",
    "InvalidDirectiveError",
    "ParseError",
    "ReadError",
    "RenderError",
    "WriteError",
]

"""
CLI Command Modules

Each module contains a logical group of related commands.
"""

from caddyext.cli import directives

__all__ = ['directives']

"""
caddyext Path Configuration

Centralized path management for caddyext data files.
All paths are relative to the project root (current working directory).

Directory Structure:
.caddyext/
├── config.json          # Project-local configuration
└── logs/                # Log files (opt-in)
"""

from pathlib import Path
from typing import Optional


class CaddyextPaths:
    """
    Centralized path configuration for caddyext.

    All paths are lazily resolved relative to project_root.
    Default project_root is current working directory.
    """

    CADDYEXT_DIR = ".caddyext"
    CONFIG_NAME = "config.json"
    LOGS_DIR = "logs"

    def __init__(self, project_root: Optional[Path] = None, home: Optional[Path] = None):
        """
        Initialize paths configuration.

        Args:
            project_root: Root directory for the project. Defaults to CWD.
            home: Home directory holding the global config. Defaults to ~.
        """
        self._project_root = project_root
        self._home = home

    @property
    def project_root(self) -> Path:
        """Get the project root directory."""
        if self._project_root is None:
            return Path.cwd()
        return self._project_root

    @property
    def caddyext_dir(self) -> Path:
        """Get the .caddyext directory path."""
        return self.project_root / self.CADDYEXT_DIR

    @property
    def global_dir(self) -> Path:
        """Get the ~/.caddyext directory path."""
        home = self._home if self._home is not None else Path.home()
        return home / self.CADDYEXT_DIR

    @property
    def local_config(self) -> Path:
        return self.caddyext_dir / self.CONFIG_NAME

    @property
    def global_config(self) -> Path:
        return self.global_dir / self.CONFIG_NAME

    @property
    def logs_dir(self) -> Path:
        """Get the logs directory path."""
        return self.caddyext_dir / self.LOGS_DIR

    def ensure_dirs(self) -> None:
        """Create all necessary directories if they don't exist."""
        self.caddyext_dir.mkdir(parents=True, exist_ok=True)
        self.logs_dir.mkdir(exist_ok=True)


def get_paths(project_root: Optional[Path] = None) -> CaddyextPaths:
    """
    Get the paths configuration.

    Args:
        project_root: Optional project root. Defaults to CWD.

    Returns:
        CaddyextPaths instance
    """
    return CaddyextPaths(project_root)

"""
caddyext Configuration

Hierarchical config system with global defaults + local overrides:
- Global: ~/.caddyext/config.json (cross-project settings)
- Local: .caddyext/config.json (project-specific overrides)
- Environment: CADDYEXT_* variables (highest precedence)

Config structure:
{
  "directives": {
    "list_name": "directiveOrder",
    "framework_prefix": "github.com/mholt/caddy",
    "setup_member": "Setup",
    "directives_file": "caddy/directives.go"
  }
}
"""

import json
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ValidationError, field_validator

from caddyext.exceptions import ConfigError
from caddyext.logging_config import logger
from caddyext.paths import CaddyextPaths

GO_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

DEFAULT_CONFIG = {
    "directives": {
        "list_name": "directiveOrder",
        "framework_prefix": "github.com/mholt/caddy",
        "setup_member": "Setup",
        "directives_file": "caddy/directives.go",
    }
}

ENV_OVERRIDES = {
    "CADDYEXT_LIST_NAME": "list_name",
    "CADDYEXT_FRAMEWORK_PREFIX": "framework_prefix",
    "CADDYEXT_SETUP_MEMBER": "setup_member",
    "CADDYEXT_DIRECTIVES_FILE": "directives_file",
}


class RegistryConfig(BaseModel):
    """
    Settings that describe the shape of the directives file.
    """
    list_name: str = "directiveOrder"
    framework_prefix: str = "github.com/mholt/caddy"
    setup_member: str = "Setup"
    directives_file: str = "caddy/directives.go"

    @field_validator("list_name", "setup_member")
    @classmethod
    def _must_be_identifier(cls, value: str) -> str:
        if not GO_IDENTIFIER.match(value):
            raise ValueError(f"'{value}' is not a valid Go identifier")
        return value

    @field_validator("framework_prefix")
    @classmethod
    def _must_not_be_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("framework_prefix must not be empty")
        return value

    def is_framework_import(self, import_path: str) -> bool:
        return import_path.startswith(self.framework_prefix)


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries, with override taking precedence.
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def _read_config_file(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Failed to load config from {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return data


def load_config(
    project_root: Optional[Path] = None,
    paths: Optional[CaddyextPaths] = None,
) -> RegistryConfig:
    """
    Load configuration with hierarchical override.

    Load order (with override):
    1. Default config (hardcoded)
    2. Global config (~/.caddyext/config.json)
    3. Local config (.caddyext/config.json)
    4. CADDYEXT_* environment variables

    Args:
        project_root: Project root directory (defaults to CWD)
        paths: Optional explicit paths object (overrides project_root)

    Returns:
        Validated RegistryConfig

    Raises:
        ConfigError: If a config file is unreadable or a value is invalid.
    """
    paths = paths or CaddyextPaths(project_root)
    config = DEFAULT_CONFIG.copy()

    for config_path in (paths.global_config, paths.local_config):
        if config_path.exists():
            config = _deep_merge(config, _read_config_file(config_path))
            logger.debug(f"Loaded config from {config_path}")

    section = dict(config.get("directives") or {})
    for env_name, key in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            section[key] = value

    try:
        return RegistryConfig(**section)
    except ValidationError as e:
        raise ConfigError(f"Invalid directives configuration: {e}") from e

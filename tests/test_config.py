"""
Tests for hierarchical configuration loading.
"""

import json

import pytest

from caddyext.config import RegistryConfig, load_config
from caddyext.exceptions import ConfigError
from caddyext.paths import CaddyextPaths


@pytest.fixture
def paths(temp_dir):
    return CaddyextPaths(project_root=temp_dir / "project", home=temp_dir / "home")


def write_config(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))


def test_defaults(paths):
    config = load_config(paths=paths)
    assert config == RegistryConfig()
    assert config.list_name == "directiveOrder"
    assert config.is_framework_import("github.com/mholt/caddy/middleware")
    assert not config.is_framework_import("github.com/x/directive1")


def test_local_overrides_global(paths):
    write_config(paths.global_config, {"directives": {"list_name": "globalList", "setup_member": "Init"}})
    write_config(paths.local_config, {"directives": {"list_name": "localList"}})

    config = load_config(paths=paths)
    assert config.list_name == "localList"
    assert config.setup_member == "Init"


def test_environment_overrides_files(paths, monkeypatch):
    write_config(paths.local_config, {"directives": {"framework_prefix": "example.com/a"}})
    monkeypatch.setenv("CADDYEXT_FRAMEWORK_PREFIX", "example.com/b")

    assert load_config(paths=paths).framework_prefix == "example.com/b"


def test_invalid_value(paths):
    write_config(paths.local_config, {"directives": {"list_name": "not an identifier"}})
    with pytest.raises(ConfigError, match="Invalid directives configuration"):
        load_config(paths=paths)


def test_unreadable_json(paths):
    paths.local_config.parent.mkdir(parents=True)
    paths.local_config.write_text("{not json")
    with pytest.raises(ConfigError, match="Failed to load config"):
        load_config(paths=paths)


def test_non_object_json(paths):
    write_config(paths.global_config, ["directives"])
    with pytest.raises(ConfigError, match="JSON object"):
        load_config(paths=paths)

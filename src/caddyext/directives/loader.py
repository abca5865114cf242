"""
Loads directive registries from Go source files.
"""

from pathlib import Path
from typing import Dict, List, Optional, Union

from caddyext.config import RegistryConfig
from caddyext.exceptions import (
    ConsistencyError,
    DirectiveFileNotFoundError,
    ReadError,
)
from caddyext.logging_config import logger
from caddyext.schemas import Directive, ImportSpec

from .syntax import GoSource, parse_go


def read_source(path: Path) -> str:
    """
    Read a directives file, keeping its line endings intact.

    Raises:
        DirectiveFileNotFoundError: If the file does not exist.
        ReadError: If the file cannot be read or is not UTF-8.
    """
    try:
        return path.read_bytes().decode("utf-8")
    except FileNotFoundError as e:
        raise DirectiveFileNotFoundError(str(path)) from e
    except (OSError, UnicodeDecodeError) as e:
        raise ReadError(str(path), str(e)) from e


def split_imports(source: GoSource, config: RegistryConfig):
    """
    Partition the file's import specs into framework and directive imports.

    Returns:
        (framework_specs, directive_specs), each in declaration order
    """
    framework, directives = [], []
    for spec in source.imports():
        if config.is_framework_import(spec.path):
            framework.append(spec)
        else:
            directives.append(spec)
    return framework, directives


def extract_directives(source: GoSource, config: RegistryConfig) -> List[Directive]:
    """
    Rebuild the ordered directive list from a parsed file.

    List elements that refer to a framework package (Caddy's built-in
    directives) are skipped. Every remaining element must be backed by
    exactly one directive import with a matching package name.

    Args:
        source: Parsed directives file
        config: Registry configuration

    Returns:
        Directives in list-literal order

    Raises:
        ConsistencyError: If imports and list elements do not pair up.
    """
    file_path = source.file_path
    literal = source.list_literal(config.list_name)
    if literal is None:
        raise ConsistencyError(
            f"{file_path}: no '{config.list_name}' list literal declaration found"
        )

    framework_specs, directive_specs = split_imports(source, config)
    framework_packages = {spec.package_name for spec in framework_specs}

    elements = []
    for element in literal.elements:
        if element.name is None or element.qualifier is None:
            raise ConsistencyError(
                f"{file_path}:{element.line}: unrecognized {config.list_name} "
                f"element '{element.text}'"
            )
        if element.qualifier in framework_packages:
            continue
        elements.append(element)

    if len(elements) != len(directive_specs):
        raise ConsistencyError(
            f"{file_path}: {len(directive_specs)} directive imports but "
            f"{len(elements)} {config.list_name} entries"
        )

    by_package: Dict[str, ImportSpec] = {}
    for spec in directive_specs:
        if spec.package_name in by_package:
            raise ConsistencyError(
                f"{file_path}:{spec.line}: package name '{spec.package_name}' "
                f"is imported more than once"
            )
        by_package[spec.package_name] = spec

    directives = []
    seen_names = set()
    used_packages = set()
    for element in elements:
        spec = by_package.get(element.qualifier)
        if spec is None:
            raise ConsistencyError(
                f"{file_path}:{element.line}: directive '{element.name}' refers "
                f"to '{element.qualifier}', which is not imported"
            )
        if element.qualifier in used_packages:
            raise ConsistencyError(
                f"{file_path}:{element.line}: package '{element.qualifier}' "
                f"backs more than one directive"
            )
        if element.name in seen_names:
            raise ConsistencyError(
                f"{file_path}:{element.line}: directive '{element.name}' is listed twice"
            )
        used_packages.add(element.qualifier)
        seen_names.add(element.name)
        directives.append(Directive(name=element.name, import_path=spec.path))

    return directives


def load_registry(
    path: Union[str, Path],
    config: Optional[RegistryConfig] = None,
):
    """
    Load a directive registry from a Go source file.

    Args:
        path: Path to the directives file
        config: Optional registry configuration (defaults apply otherwise)

    Returns:
        DirectiveRegistry reflecting the file

    Raises:
        ReadError: If the file is missing or unreadable.
        ParseError: If the file is not valid Go.
        ConsistencyError: If imports and list entries disagree.
    """
    from .facade import DirectiveRegistry

    path = Path(path)
    config = config or RegistryConfig()

    text = read_source(path)
    source = parse_go(text, str(path))
    directives = extract_directives(source, config)

    logger.debug(f"Loaded {len(directives)} directives from {path}")
    return DirectiveRegistry(path, source, directives, config)

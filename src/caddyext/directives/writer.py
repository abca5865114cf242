"""
Writes pending directives back into the Go source.

New import specs go in front of the existing directive imports, so the
most recently added directive is imported first. New list entries are
appended, so the list keeps chronological (precedence) order.
"""

import difflib
import os
import shutil
import tempfile
from pathlib import Path
from typing import List, Sequence

from caddyext.config import RegistryConfig
from caddyext.exceptions import ConsistencyError, RenderError, WriteError
from caddyext.logging_config import logger
from caddyext.schemas import Directive, ImportSpec

from .loader import extract_directives
from .syntax import Edit, GoSource, ImportDeclaration, go_quote, render


def import_line(directive: Directive) -> str:
    return f"{directive.name} {go_quote(directive.import_path)}"


def list_entry(directive: Directive, config: RegistryConfig) -> str:
    return f"{{{go_quote(directive.name)}, {directive.name}.{config.setup_member}}}"


def _lines(indent: str, items: List[str], newline: str, suffix: str = "") -> str:
    return "".join(f"{indent}{item}{suffix}{newline}" for item in items)


def import_edits(
    source: GoSource,
    pending: Sequence[Directive],
    config: RegistryConfig,
) -> List[Edit]:
    """
    Edits inserting import specs for pending directives.

    Specs are placed right after the framework imports, ahead of any
    directive import already present, newest first.
    """
    specs = [import_line(d) for d in reversed(pending)]
    newline = source.newline
    declarations = source.import_declarations()

    for declaration in declarations:
        for spec in declaration.specs:
            if not config.is_framework_import(spec.path):
                return [_insert_before(source, declaration, spec, specs)]

    grouped = [d for d in declarations if d.grouped]
    if grouped:
        target = grouped[0]
        for declaration in grouped:
            if any(config.is_framework_import(s.path) for s in declaration.specs):
                target = declaration
        return [_append_to_group(source, target, specs)]

    if declarations:
        at = source.line_end(declarations[-1].end_byte)
        text = _lines("import ", specs, newline)
        if not source.data[:at].endswith(b"\n"):
            text = newline + text
        return [Edit(at, at, text)]

    at = source.package_clause_end()
    body = _lines("\t", specs, newline)
    return [Edit(at, at, f"{newline}{newline}import ({newline}{body})")]


def _insert_before(
    source: GoSource,
    declaration: ImportDeclaration,
    spec: ImportSpec,
    specs: List[str],
) -> Edit:
    newline = source.newline
    if declaration.grouped:
        if source.starts_line(spec.start_byte):
            at = source.line_start(spec.start_byte)
            return Edit(at, at, _lines(source.line_indent(spec.start_byte), specs, newline))
        return Edit(spec.start_byte, spec.start_byte, "".join(f"{s}; " for s in specs))

    if source.starts_line(declaration.start_byte):
        at = source.line_start(declaration.start_byte)
        return Edit(at, at, _lines("import ", specs, newline))
    at = declaration.start_byte
    return Edit(at, at, "".join(f"import {s}; " for s in specs))


def _append_to_group(
    source: GoSource,
    declaration: ImportDeclaration,
    specs: List[str],
) -> Edit:
    newline = source.newline
    close = declaration.close_byte

    if not declaration.specs:
        if source.starts_line(close):
            at = source.line_start(close)
            return Edit(at, at, _lines("\t", specs, newline))
        return Edit(close, close, newline + _lines("\t", specs, newline))

    last = declaration.specs[-1]
    if source.same_line(last.end_byte, close):
        return Edit(last.end_byte, last.end_byte, "".join(f"; {s}" for s in specs))

    indent = source.line_indent(last.start_byte) if source.starts_line(last.start_byte) else "\t"
    at = source.line_end(last.end_byte)
    return Edit(at, at, _lines(indent, specs, newline))


def list_edits(
    source: GoSource,
    pending: Sequence[Directive],
    config: RegistryConfig,
) -> List[Edit]:
    """
    Edits appending pending directives to the end of the list literal,
    oldest first.
    """
    literal = source.list_literal(config.list_name)
    if literal is None:
        raise ConsistencyError(
            f"{source.file_path}: no '{config.list_name}' list literal declaration found"
        )

    entries = [list_entry(d, config) for d in pending]
    newline = source.newline
    open_byte, close_byte = literal.open_byte, literal.close_byte

    if not literal.elements:
        if source.starts_line(close_byte) and not source.same_line(open_byte, close_byte):
            indent = source.line_indent(close_byte) + "\t"
            at = source.line_start(close_byte)
            return [Edit(at, at, _lines(indent, entries, newline, ","))]
        base = source.line_indent(open_byte)
        text = newline + _lines(base + "\t", entries, newline, ",") + base
        return [Edit(close_byte, close_byte, text)]

    last = literal.elements[-1]
    if source.same_line(open_byte, close_byte):
        return [Edit(last.end_byte, last.end_byte, "".join(f", {e}" for e in entries))]

    if source.starts_line(close_byte):
        if source.starts_line(last.start_byte):
            indent = source.line_indent(last.start_byte)
        else:
            indent = source.line_indent(close_byte) + "\t"
        at = source.line_start(close_byte)
        edits = [Edit(at, at, _lines(indent, entries, newline, ","))]
        if not literal.trailing_comma:
            # Go needs a comma before each line break inside the literal
            edits.insert(0, Edit(last.end_byte, last.end_byte, ","))
        return edits

    # Closing brace shares the last element's line: {\n\ta,\n\tb} or {\n\ta,\n\tb,}
    indent = source.line_indent(last.start_byte)
    if literal.trailing_comma:
        return [Edit(close_byte, close_byte, "".join(f"{newline}{indent}{e}," for e in entries))]
    return [Edit(last.end_byte, last.end_byte, "".join(f",{newline}{indent}{e}" for e in entries))]


def render_directives(
    source: GoSource,
    directives: Sequence[Directive],
    persisted: int,
    config: RegistryConfig,
) -> GoSource:
    """
    Render the source with every directive after index `persisted` added.

    The rendered text is re-parsed and its directives compared with the
    expected sequence before it is returned.

    Raises:
        RenderError: If the result is not valid Go or does not reload to
            the expected directives.
    """
    pending = list(directives[persisted:])
    if not pending:
        return source

    edits = import_edits(source, pending, config) + list_edits(source, pending, config)
    rendered = render(source, edits)

    try:
        reloaded = extract_directives(rendered, config)
    except ConsistencyError as e:
        raise RenderError(source.file_path, str(e)) from e

    if reloaded != list(directives):
        raise RenderError(
            source.file_path,
            "rendered file does not reload to the expected directives: "
            f"{[d.name for d in reloaded]} != {[d.name for d in directives]}",
        )

    logger.debug(f"Rendered {len(pending)} new directives into {source.file_path}")
    return rendered


def atomic_write(file_path: Path, content: str) -> None:
    """
    Write file atomically using temp file + rename.

    Raises:
        WriteError: If any step fails. The target file is left untouched
            and the temp file is removed.
    """
    path = Path(file_path)

    try:
        # Same directory keeps the rename on one filesystem
        fd, temp_path = tempfile.mkstemp(
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp"
        )
    except OSError as e:
        logger.error(f"Failed to create temp file for {path}: {e}")
        raise WriteError(str(path), str(e)) from e

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content.encode("utf-8"))
            f.flush()
            os.fsync(f.fileno())
        if path.exists():
            shutil.copymode(str(path), temp_path)
        os.replace(temp_path, str(path))
    except OSError as e:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        logger.error(f"Failed during atomic write of {path}: {e}")
        raise WriteError(str(path), str(e)) from e

    logger.debug(f"Atomic write completed: {path}")


def write_directives(
    file_path: Path,
    source: GoSource,
    directives: Sequence[Directive],
    persisted: int,
    config: RegistryConfig,
) -> GoSource:
    """
    Render pending directives and replace the file with the result.

    Returns:
        The rendered source now on disk
    """
    rendered = render_directives(source, directives, persisted, config)
    atomic_write(file_path, rendered.text)
    logger.info(f"Saved {len(directives)} directives to {file_path}")
    return rendered


def unified_diff(file_path: str, original: str, modified: str) -> str:
    """
    Generate unified diff between original and modified content.
    """
    diff_lines = difflib.unified_diff(
        original.splitlines(keepends=True),
        modified.splitlines(keepends=True),
        fromfile=f"a/{file_path}",
        tofile=f"b/{file_path}",
    )
    return "".join(diff_lines)

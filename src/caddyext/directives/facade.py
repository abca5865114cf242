"""
DirectiveRegistry: ordered, append-only view over a directives file.
"""

from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

from caddyext.config import GO_IDENTIFIER, RegistryConfig
from caddyext.exceptions import DuplicateDirectiveError, InvalidDirectiveError
from caddyext.logging_config import logger
from caddyext.schemas import Directive

from .syntax import GoSource
from .writer import render_directives, unified_diff, write_directives

GO_KEYWORDS = frozenset({
    "break", "case", "chan", "const", "continue", "default", "defer", "else",
    "fallthrough", "for", "func", "go", "goto", "if", "import", "interface",
    "map", "package", "range", "return", "select", "struct", "switch", "type",
    "var",
})

# Characters Go rejects in import paths, besides spaces and non-graphic runes
IMPORT_PATH_FORBIDDEN = frozenset("!\"#$%&'()*,:;<=>?[\\]^`{|}\ufffd")


class DirectiveRegistry:
    """
    Ordered registry of directives backed by a parsed Go file.

    Directives are kept in declaration order, which is the order they take
    effect in. The registry only grows: add_directive appends in memory and
    save() flushes every pending directive to disk in one atomic write.

    Not safe for concurrent use; callers must serialize access.
    """

    def __init__(
        self,
        path: Path,
        source: GoSource,
        directives: Sequence[Directive],
        config: Optional[RegistryConfig] = None,
    ):
        self._path = Path(path)
        self._source = source
        self._directives: List[Directive] = list(directives)
        # Directives before this index are reflected in self._source
        self._persisted = len(self._directives)
        self._config = config or RegistryConfig()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def source(self) -> str:
        """Source text as last loaded or saved."""
        return self._source.text

    @property
    def config(self) -> RegistryConfig:
        return self._config

    @property
    def has_pending_changes(self) -> bool:
        return self._persisted < len(self._directives)

    def list(self) -> Tuple[Directive, ...]:
        """All directives in declaration order."""
        return tuple(self._directives)

    def pending(self) -> Tuple[Directive, ...]:
        """Directives added since the last load or save, oldest first."""
        return tuple(self._directives[self._persisted:])

    def get(self, name: str) -> Optional[Directive]:
        for directive in self._directives:
            if directive.name == name:
                return directive
        return None

    def __contains__(self, name: object) -> bool:
        return any(directive.name == name for directive in self._directives)

    def __len__(self) -> int:
        return len(self._directives)

    def __iter__(self) -> Iterator[Directive]:
        return iter(self.list())

    def __repr__(self) -> str:
        return (
            f"DirectiveRegistry(path={str(self._path)!r}, "
            f"directives={len(self._directives)}, pending={len(self.pending())})"
        )

    def add_directive(self, name: str, import_path: str) -> Directive:
        """
        Append a directive. Nothing is written until save().

        Args:
            name: Directive name, also used as the Go import alias
            import_path: Go import path of the implementing package

        Returns:
            The new Directive

        Raises:
            DuplicateDirectiveError: If the name is already registered.
            InvalidDirectiveError: If the name or import path is unusable.
        """
        if not name:
            raise InvalidDirectiveError("Directive name must not be empty")
        if name in self:
            raise DuplicateDirectiveError(name)
        if not GO_IDENTIFIER.match(name) or name in GO_KEYWORDS:
            raise InvalidDirectiveError(
                f"Directive name '{name}' is not a valid Go identifier"
            )
        if name == "_":
            raise InvalidDirectiveError("Directive name '_' is the blank identifier")
        if name in self._package_names():
            raise InvalidDirectiveError(
                f"Directive name '{name}' collides with an imported package name"
            )
        if not import_path or not import_path.strip():
            raise InvalidDirectiveError(
                f"Import path for directive '{name}' must not be empty"
            )
        bad = [c for c in import_path if c in IMPORT_PATH_FORBIDDEN or not c.isprintable() or c.isspace()]
        if bad:
            raise InvalidDirectiveError(
                f"Import path {import_path!r} contains invalid character {bad[0]!r}"
            )
        if self._config.is_framework_import(import_path):
            raise InvalidDirectiveError(
                f"Import path '{import_path}' belongs to the framework, not a directive"
            )

        directive = Directive(name=name, import_path=import_path)
        self._directives.append(directive)
        logger.debug(f"Added directive {directive}")
        return directive

    def _package_names(self) -> set:
        return {spec.package_name for spec in self._source.imports()}

    def preview(self) -> str:
        """
        Unified diff of what save() would write. Empty if nothing is pending.

        Raises:
            RenderError: If the pending directives cannot be rendered.
        """
        rendered = render_directives(
            self._source, self._directives, self._persisted, self._config
        )
        return unified_diff(str(self._path), self._source.text, rendered.text)

    def save(self) -> None:
        """
        Write all pending directives to the file.

        On failure the file and the in-memory state are left as they were,
        so save() can be retried.

        Raises:
            RenderError: If the mutated source is not valid.
            WriteError: If the file cannot be replaced.
        """
        rendered = write_directives(
            self._path, self._source, self._directives, self._persisted, self._config
        )
        self._source = rendered
        self._persisted = len(self._directives)

# Custom exceptions for caddyext

from typing import Optional


class CaddyextError(Exception):
    """Base exception for all application-specific errors."""
    pass


class ReadError(CaddyextError):
    """Raised when the directives file cannot be read."""
    def __init__(self, file_path: str, message: str):
        self.file_path = file_path
        self.message = message
        super().__init__(f"Failed to read {file_path}: {message}")


class DirectiveFileNotFoundError(ReadError):
    """Raised when the directives file does not exist."""
    def __init__(self, file_path: str):
        super().__init__(file_path, "file not found")


class ParseError(CaddyextError):
    """Raised when a file cannot be parsed by tree-sitter."""
    def __init__(
        self,
        file_path: str,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        self.file_path = file_path
        self.message = message
        self.line = line
        self.column = column
        super().__init__(f"Failed to parse {file_path}: {message}")


class GrammarNotFoundError(CaddyextError):
    """Raised when a required tree-sitter grammar is not found."""
    def __init__(self, language: str, install_command: str):
        self.language = language
        self.install_command = install_command
        super().__init__(
            f"Grammar for '{language}' not found. Install it with: {install_command}"
        )


class ConsistencyError(CaddyextError):
    """
    Raised when the import block and the directive list disagree.

    This means the file was edited by hand or corrupted. It is never repaired
    automatically.
    """
    pass


class DuplicateDirectiveError(CaddyextError):
    """Raised when adding a directive whose name is already registered."""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Directive '{name}' is already registered")


class InvalidDirectiveError(CaddyextError, ValueError):
    """Raised when a directive name or import path is malformed."""
    pass


class RenderError(CaddyextError):
    """Raised when the mutated source cannot be rendered as valid Go."""
    def __init__(self, file_path: str, message: str):
        self.file_path = file_path
        self.message = message
        super().__init__(f"Failed to render {file_path}: {message}")


class WriteError(CaddyextError):
    """Raised when the rendered source cannot be persisted."""
    def __init__(self, file_path: str, message: str):
        self.file_path = file_path
        self.message = message
        super().__init__(f"Failed to write {file_path}: {message}")


class ConfigError(CaddyextError):
    """Raised for configuration-related problems."""
    pass

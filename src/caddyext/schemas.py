import re
from pydantic import BaseModel, ConfigDict
from typing import List, Optional


class Directive(BaseModel):
    """
    A registered directive: the name it is known by and the Go package
    implementing it.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    import_path: str

    def __str__(self) -> str:
        return f"{self.name} ({self.import_path})"


class ImportSpec(BaseModel):
    """
    Represents one import specification found in the directives file.
    """
    path: str
    alias: Optional[str] = None
    start_byte: int
    end_byte: int
    line: int

    @property
    def package_name(self) -> str:
        """The identifier the package is referred to by in the file."""
        if self.alias and self.alias not in ("_", "."):
            return self.alias
        segments = self.path.rstrip("/").split("/")
        # Major version suffixes (/v2) are not part of the package name
        if len(segments) > 1 and re.match(r"^v[0-9]+$", segments[-1]):
            return segments[-2]
        return segments[-1]


class ListElement(BaseModel):
    """
    Represents one element of the directive order list literal.

    name and qualifier are None when the element has an unrecognized shape.
    """
    name: Optional[str] = None
    qualifier: Optional[str] = None
    text: str
    start_byte: int
    end_byte: int
    line: int


class RegistrySnapshot(BaseModel):
    """
    JSON-friendly view of a registry, used by the CLI.
    """
    file_path: str
    directives: List[Directive]
    pending: List[Directive] = []

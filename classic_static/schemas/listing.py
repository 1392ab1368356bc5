"""Directory listing schemas."""

from enum import Enum

from pydantic import BaseModel


class EntryKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"


class SortKey(str, Enum):
    NAME = "name"
    TYPE = "type"
    SIZE = "size"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ListingItem(BaseModel):
    """One row of a rendered directory index."""
    name: str
    kind: EntryKind
    mime: str  # mime type, "DIR" or "unknown"
    size_label: str
    size_bytes: int | None = None
    uri: str
    reserved: bool = False

    @property
    def is_directory(self) -> bool:
        return self.kind == EntryKind.DIRECTORY

from dataclasses import dataclass
from enum import Enum
from functools import total_ordering
from pathlib import Path
from typing import Optional


class FileType(Enum):
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    UNKNOWN = "unknown"

    @property
    def is_supported(self) -> bool:
        return self is not FileType.UNKNOWN


class DirType(Enum):
    DATE = "date"
    DEVICE = "device"


@total_ordering
@dataclass(frozen=True)
class DeviceKey:
    """
    Key of a device bucket inside a date directory.

    Either a named device directory or the `files` sentinel, meaning the
    files are placed directly in the date directory. Directories sort
    before the sentinel so loose files are listed after all subdirectories.
    """
    name: Optional[str] = None

    @classmethod
    def directory(cls, name: str) -> "DeviceKey":
        return cls(name)

    @classmethod
    def files(cls) -> "DeviceKey":
        return cls(None)

    @property
    def is_directory(self) -> bool:
        return self.name is not None

    def _sort_key(self):
        return (self.name is None, self.name or "")

    def __lt__(self, other):
        if not isinstance(other, DeviceKey):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __str__(self) -> str:
        return self.name if self.name is not None else ""


@dataclass(frozen=True)
class SourceFile:
    """
    A source file classified for sorting.
    """
    file_name: str
    file_path: Path
    file_type: FileType
    extension: str          # lowercase, without dot; "" if missing
    date_key: str           # YYYY.MM.DD or the "no date" marker
    device_key: DeviceKey
    size_bytes: int = 0

    def source_display_name(self, has_multiple_sources: bool) -> str:
        """
        Full path when reading from several source folders, otherwise just
        the file name since the folder is always the same.
        """
        if has_multiple_sources:
            return str(self.file_path)
        return self.file_name

import os
from datetime import datetime, timezone
from pathlib import Path

import pytest

from imgsorter.metadata.extract import MediaMetadata
from imgsorter.models import DeviceKey, FileType, SourceFile
from imgsorter.reporting import strip_ansi
from imgsorter.settings import Settings


class FakeMetadata:
    """Stands in for MetadataExtractor, answering by file name."""

    def __init__(self, by_name=None):
        self.by_name = by_name or {}
        self.calls = []

    def read(self, path, file_type):
        self.calls.append(path.name)
        return self.by_name.get(path.name, MediaMetadata())


class OutputCollector:
    """Collects report lines instead of printing them."""

    def __init__(self):
        self.lines = []

    def __call__(self, line=""):
        self.lines.extend(strip_ansi(str(line)).split("\n"))

    def containing(self, text):
        return [line for line in self.lines if text in line]


def set_mtime(path: Path, year: int, month: int, day: int):
    ts = datetime(year, month, day, 12, 0, tzinfo=timezone.utc).timestamp()
    os.utime(path, (ts, ts))


@pytest.fixture
def make_settings(tmp_path):
    """Settings factory with source and target inside tmp_path."""
    def _make(**overrides):
        values = dict(
            source_dirs=(tmp_path / "src",),
            target_dir=tmp_path / "target",
            silent=True,
        )
        values.update(overrides)
        return Settings(**values)
    return _make


@pytest.fixture
def make_file(tmp_path):
    """
    SourceFile factory. With `create=True` the file is written to disk
    under tmp_path/<folder>.
    """
    def _make(name, date="2020.05.01", device=None, file_type=FileType.IMAGE,
              folder="src", create=False, content=b"data"):
        path = tmp_path / folder / name
        if create:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        device_key = DeviceKey.directory(device) if device else DeviceKey.files()
        return SourceFile(
            file_name=name,
            file_path=path,
            file_type=file_type,
            extension=Path(name).suffix.lower().lstrip("."),
            date_key=date,
            device_key=device_key,
            size_bytes=len(content) if create else 0,
        )
    return _make


@pytest.fixture
def output():
    return OutputCollector()


@pytest.fixture
def fake_metadata():
    return FakeMetadata()

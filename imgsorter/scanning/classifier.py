import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Set, Tuple

from .. import config
from ..metadata.extract import MediaMetadata, MetadataExtractor
from ..models import DeviceKey, FileType, SourceFile
from ..settings import Settings


class FileClassifier:
    """
    Turns a source path into a SourceFile with its target date and device.

    Holds no state besides the read-only settings, so a single instance can
    be shared by all parsing threads.
    """

    def __init__(self, settings: Settings, metadata: Optional[MetadataExtractor] = None):
        self.settings = settings
        self.metadata = metadata or MetadataExtractor()

    def classify(self, path: Path) -> Optional[Tuple[SourceFile, Set[str]]]:
        """
        Returns the classified file and the device names which were not
        found in the custom device names table, or None if the file can't be read.
        """
        try:
            stat_result = path.stat()
        except OSError as e:
            logging.warning(f"Could not read metadata for {path}: {e}")
            return None

        file_type, ext = self.resolve_file_type(path)
        meta = self.metadata.read(path, file_type) if file_type.is_supported else MediaMetadata()
        return self.build(path, stat_result, file_type, ext, meta)

    def build(self,
              path: Path,
              stat_result: Optional[os.stat_result],
              file_type: FileType,
              ext: str,
              meta: MediaMetadata) -> Tuple[SourceFile, Set[str]]:
        device_key, non_custom = self.resolve_device_key(meta.device_name(self.settings.include_device_make))

        source_file = SourceFile(
            file_name=path.name,
            file_path=path,
            file_type=file_type,
            extension=ext,
            date_key=meta.date or self._modified_date(stat_result) or config.NO_DATE_STR,
            device_key=device_key,
            size_bytes=stat_result.st_size if stat_result else 0,
        )
        return source_file, non_custom

    def resolve_file_type(self, path: Path) -> Tuple[FileType, str]:
        """Type by extension, checking the built-in tables first and then the custom ones."""
        ext = path.suffix.lower().lstrip('.')

        if ext in config.IMAGE_EXTS:
            return FileType.IMAGE, ext
        if ext in config.VIDEO_EXTS:
            return FileType.VIDEO, ext
        if ext in config.AUDIO_EXTS:
            return FileType.AUDIO, ext

        custom = self.settings.custom_extensions
        if ext in custom.get(config.IMAGE, ()):
            return FileType.IMAGE, ext
        if ext in custom.get(config.VIDEO, ()):
            return FileType.VIDEO, ext
        if ext in custom.get(config.AUDIO, ()):
            return FileType.AUDIO, ext

        return FileType.UNKNOWN, ext

    def resolve_device_key(self, device_name: Optional[str]) -> Tuple[DeviceKey, Set[str]]:
        non_custom: Set[str] = set()

        if not device_name:
            if self.settings.always_create_device_subdirs:
                return DeviceKey.directory(config.UNKNOWN_DEVICE_DIR_NAME), non_custom
            return DeviceKey.files(), non_custom

        custom_name = self.settings.custom_device_name(device_name)
        if custom_name:
            return DeviceKey.directory(custom_name), non_custom

        non_custom.add(device_name)
        return DeviceKey.directory(device_name), non_custom

    def _modified_date(self, stat_result: Optional[os.stat_result]) -> Optional[str]:
        if stat_result is None:
            return None
        try:
            modified = datetime.fromtimestamp(stat_result.st_mtime, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
        return modified.strftime(config.DATE_DIR_FORMAT)

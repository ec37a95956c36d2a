import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import exifread
from pymediainfo import MediaInfo

from .. import config
from ..models import FileType


@dataclass(frozen=True)
class MediaMetadata:
    """
    The bits of metadata used for sorting: capture date and device.

    `date` is already formatted as a date directory name (YYYY.MM.DD).
    """
    date: Optional[str] = None
    camera_model: Optional[str] = None
    camera_make: Optional[str] = None

    def device_name(self, include_make: bool) -> Optional[str]:
        """
        Composes the device name from model and make.

        The make is prepended only if the model doesn't already start with it,
        e.g. make "HUAWEI" and model "HUAWEI CAN-L11" gives "HUAWEI CAN-L11".
        """
        if not self.camera_model:
            return None
        if not include_make or not self.camera_make:
            return self.camera_model
        if self.camera_model.lower().startswith(self.camera_make.lower()):
            return self.camera_model
        return f"{self.camera_make} {self.camera_model}"


class MetadataExtractor:
    """
    Reads capture date and device information from media files.

    Strategies:
      - Images: Uses 'exifread' (fast, Python-native).
      - Video/Audio: Uses 'pymediainfo'.

    Any failure is logged at debug level and results in empty metadata,
    in which case the caller falls back to the file's modified date.
    """

    def read(self, path: Path, file_type: FileType) -> MediaMetadata:
        if file_type is FileType.IMAGE:
            return self.get_image_metadata(path)
        if file_type in (FileType.VIDEO, FileType.AUDIO):
            return self.get_video_metadata(path)
        return MediaMetadata()

    def get_image_metadata(self, path: Path) -> MediaMetadata:
        try:
            with path.open('rb') as f:
                # details=False speeds up processing significantly
                tags = exifread.process_file(f, details=False)
        except Exception as e:
            logging.debug(f"Could not read EXIF for {path}: {e}")
            return MediaMetadata()

        make = self._clean_device_str(tags.get(config.MAKE_TAG))
        model = self._clean_device_str(tags.get(config.MODEL_TAG))

        return MediaMetadata(
            date=self._parse_exif_date(tags, path),
            camera_model=model,
            camera_make=make,
        )

    def get_video_metadata(self, path: Path) -> MediaMetadata:
        try:
            mi = MediaInfo.parse(str(path))
        except Exception as e:
            logging.debug(f"MediaInfo failed for {path}: {e}")
            return MediaMetadata()

        for track in mi.tracks:
            if track.track_type != "General":
                continue

            date = None
            for field in config.VIDEO_DATE_FIELDS:
                val = getattr(track, field, None)
                if val:
                    dt = self._parse_flexible_date(str(val))
                    if dt:
                        date = dt.strftime(config.DATE_DIR_FORMAT)
                        break

            model = self._first_attr(track, config.VIDEO_MODEL_FIELDS)
            make = self._first_attr(track, config.VIDEO_MAKE_FIELDS)
            return MediaMetadata(date=date, camera_model=model, camera_make=make)

        return MediaMetadata()

    # --- Internal Helpers ---

    def _first_attr(self, track: Any, fields) -> Optional[str]:
        for field in fields:
            cleaned = self._clean_device_str(getattr(track, field, None))
            if cleaned:
                return cleaned
        return None

    def _clean_device_str(self, value: Any) -> Optional[str]:
        """
        Some cameras pad their names or wrap them in quotes,
        e.g. 'ALLVIEW P5 camera              '
        """
        if value is None:
            return None
        cleaned = str(value).replace('"', '').replace(',', '').strip()
        return cleaned or None

    def _parse_exif_date(self, tags, path: Path) -> Optional[str]:
        for tag in config.DATE_TAGS:
            if tag in tags:
                try:
                    # EXIF format is usually "YYYY:MM:DD HH:MM:SS"
                    dt_str = str(tags[tag]).strip().replace(':', '-', 2)
                    dt = datetime.strptime(dt_str, "%Y-%m-%d %H:%M:%S")
                    return dt.strftime(config.DATE_DIR_FORMAT)
                except ValueError:
                    logging.debug(f"Could not parse EXIF date '{tags[tag]}' for {path}")
                    continue
        return None

    def _parse_flexible_date(self, dt_str: str) -> Optional[datetime]:
        """
        Handles various date formats (ISO, UTC prefixes/suffixes, EXIF style).
        """
        clean = dt_str.replace("UTC", "").strip()
        if not clean:
            return None

        # 1. Try ISO format (e.g. 2020-01-01T12:00:00)
        try:
            return datetime.fromisoformat(clean)
        except ValueError:
            pass

        # 2. Try Standard EXIF style "YYYY:MM:DD HH:MM:SS"
        try:
            clean_exif = clean.replace(":", "-", 2)
            if "." in clean_exif:
                clean_exif = clean_exif.split(".")[0]
            return datetime.strptime(clean_exif, "%Y-%m-%d %H:%M:%S")
        except ValueError:
            return None

from pathlib import Path

from ..models import DeviceKey


def should_create_device_subdir(device_key: DeviceKey,
                                device_count: int,
                                file_count: int,
                                always_create: bool) -> bool:
    """
    Decides whether a device gets its own subfolder inside a date folder.

    A date with a single device doesn't need to be split. A date with two
    devices and two files is usually one photo taken with a camera plus a
    copy without EXIF received through a messenger app, so it isn't split
    either. Loose files (no device) never get a subfolder.
    """
    # Loose files stay in the date folder even with always_create set
    if not device_key.is_directory:
        return False
    if always_create:
        return True
    has_distinct_devices = device_count > 1
    has_double_file = device_count == 2 and file_count == 2
    return has_distinct_devices and not has_double_file


def device_destination(date_path: Path, device_key: DeviceKey, create_subdir: bool) -> Path:
    if create_subdir:
        return date_path / device_key.name
    return date_path

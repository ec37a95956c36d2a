import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Set, Tuple

from .. import config
from ..models import DeviceKey, SourceFile


@dataclass
class DeviceBucket:
    """
    All files of one date directory, grouped by device.

    `max_dir_path_len` caches the longest "date/device" string seen for this
    bucket, which is what the report needs for column alignment.
    """
    files: Dict[DeviceKey, List[SourceFile]] = field(default_factory=dict)
    max_dir_path_len: int = 0

    def add(self, file: SourceFile):
        self.files.setdefault(file.device_key, []).append(file)
        path_len = len(file.date_key) + 1 + len(str(file.device_key))
        self.max_dir_path_len = max(self.max_dir_path_len, path_len)

    def extend(self, other: "DeviceBucket"):
        for device_key, files in other.files.items():
            self.files.setdefault(device_key, []).extend(files)
        self.max_dir_path_len = max(self.max_dir_path_len, other.max_dir_path_len)

    @property
    def device_count(self) -> int:
        return len(self.files)

    @property
    def file_count(self) -> int:
        return sum(len(files) for files in self.files.values())

    def unique_file_names(self) -> Set[str]:
        return {f.file_name for files in self.files.values() for f in files}

    def all_files(self) -> List[SourceFile]:
        return [f for _, files in self.items() for f in files]

    def items(self) -> Iterator[Tuple[DeviceKey, List[SourceFile]]]:
        """Device buckets in DeviceKey order: named directories first, loose files last."""
        for device_key in sorted(self.files):
            yield device_key, self.files[device_key]


@dataclass
class TargetTree:
    """
    Date -> device -> files layout of the target folder.

    Built while parsing, consolidated once, then only read while dispatching.
    """
    buckets: Dict[str, DeviceBucket] = field(default_factory=dict)
    unknown_extensions: Set[str] = field(default_factory=set)

    def add(self, file: SourceFile):
        self.buckets.setdefault(file.date_key, DeviceBucket()).add(file)

    def record_unknown(self, extension: str):
        self.unknown_extensions.add(extension.lower())

    def merge(self, other: "TargetTree"):
        """
        Folds `other` into this tree. Both trees must not be used by another
        thread. `other` is left unchanged and shares no buckets with this tree.
        """
        for date_key, bucket in other.buckets.items():
            self.buckets.setdefault(date_key, DeviceBucket()).extend(bucket)
        self.unknown_extensions |= other.unknown_extensions

    def __len__(self) -> int:
        return len(self.buckets)

    def __contains__(self, date_key: str) -> bool:
        return date_key in self.buckets

    def __getitem__(self, date_key: str) -> DeviceBucket:
        return self.buckets[date_key]

    def items(self) -> Iterator[Tuple[str, DeviceBucket]]:
        """Date buckets sorted by key, which is chronological for YYYY.MM.DD."""
        for date_key in sorted(self.buckets):
            yield date_key, self.buckets[date_key]

    @property
    def file_count(self) -> int:
        return sum(bucket.file_count for bucket in self.buckets.values())

    def isolate_sparse_buckets(self, min_files_per_dir: int, oneoffs_dir_name: str) -> int:
        """
        Moves the files of sparse date buckets into a single overflow bucket.

        A bucket is sparse if all its files belong to one device and it holds
        fewer than `min_files_per_dir` distinct file names. A threshold of 0
        turns this off.

        Returns:
            The number of isolated files.
        """
        if min_files_per_dir <= 0:
            return 0

        sparse_dates = [
            date_key for date_key, bucket in self.items()
            if bucket.device_count < 2 and len(bucket.unique_file_names()) < min_files_per_dir
        ]
        if not sparse_dates:
            return 0

        isolated_files: List[SourceFile] = []
        for date_key in sparse_dates:
            isolated_files.extend(self.buckets.pop(date_key).all_files())

        oneoffs = DeviceBucket({DeviceKey.files(): isolated_files}, len(oneoffs_dir_name))
        isolated = len(isolated_files)
        if oneoffs_dir_name in self.buckets:
            # A date folder can't normally clash with the overflow name, but a
            # custom name like "no date" could
            self.buckets[oneoffs_dir_name].extend(oneoffs)
        else:
            self.buckets[oneoffs_dir_name] = oneoffs

        logging.debug(f"Isolated {isolated} files from {len(sparse_dates)} sparse folders into '{oneoffs_dir_name}'")
        return isolated

    def compute_max_path_len(self, always_create_device_subdirs: bool, oneoffs_dir_name: str) -> int:
        """
        Longest "date/device" path among the buckets which will get device
        subfolders, used to align the report columns.
        """
        lengths = [
            bucket.max_dir_path_len
            for bucket in self.buckets.values()
            if always_create_device_subdirs or bucket.device_count > 1
        ]
        max_len = max(lengths, default=config.DATE_DIR_LEN)

        if oneoffs_dir_name in self.buckets:
            max_len = max(max_len, len(oneoffs_dir_name))
        return max_len

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Set

from ..models import DirType, SourceFile
from ..reporting import OutputColor, Padder, bold_white, colorize, format_file_size, indent_string
from ..settings import Settings
from ..stats import FileStats
from .rules import device_destination, should_create_device_subdir
from .tree import TargetTree

DIR_WILL_BE_CREATED = "[new folder will be created]"
DIR_EXISTS = "[target folder exists, will not create]"

SOURCE_MISSING = "source file does not exist"
DUPLICATE_SOURCE = "duplicate source file, will be skipped"
TARGET_EXISTS = "target file exists, will be skipped"
WILL_COPY = "file will be copied"
READ_ONLY_WILL_COPY = "source is read only, file will be copied"
WILL_MOVE = "file will be moved"


@dataclass(frozen=True)
class FileOutcome:
    status: str
    color: OutputColor

    def colored(self) -> str:
        return colorize(self.status, self.color)


class CompactCounter:
    """Tracks runs of identical statuses within one device folder."""

    def __init__(self, compacting_threshold: int):
        self.compacting_threshold = compacting_threshold
        self.current_status = ""
        self.current_status_count = 0
        self.skipped_status_count = 0

    def reset_status(self, new_status: str):
        self.current_status = new_status
        self.current_status_count = 0
        self.skipped_status_count = 0

    def inc_current_status(self):
        self.current_status_count += 1

    def inc_skipped_status(self):
        self.skipped_status_count += 1

    def has_reached_threshold(self) -> bool:
        return self.current_status_count >= self.compacting_threshold

    def has_skipped_statuses(self) -> bool:
        return self.skipped_status_count > 0

    def is_same_status(self, new_status: str) -> bool:
        return self.current_status == new_status


class DryRunSimulator:
    """
    Prints the target folder tree and what would happen to each file,
    without touching the filesystem.

    Sample output:

        [2019.01.28] (2 devices, 3 files, 3.34 MB) ...... [new folder will be created]
         ├── [Canon 100D] ............................... [new folder will be created]
         │    ├── IMG-1.jpg <--- IMG-1.jpg .............. target file exists, will be skipped
         │    └── IMG-2.jpg <--- IMG-2.jpg .............. file will be copied
         └── IMG-3.jpg <-------- IMG-3.jpg .............. file will be copied
    """

    def __init__(self, settings: Settings, stats: FileStats, padder: Padder,
                 out: Callable[[str], None] = print):
        self.settings = settings
        self.stats = stats
        self.padder = padder
        self.out = out
        # Target paths claimed so far in this run
        self.claimed_targets: Set[Path] = set()

    @property
    def is_compacting(self) -> bool:
        return self.settings.is_compacting_enabled and not (self.settings.verbose or self.settings.debug)

    def run(self, tree: TargetTree):
        separator = bold_white(self.padder.dryrun_separator())
        self.out("")
        self.out(separator)
        self.out(bold_white(self.padder.dryrun_header()))
        self.out(separator)

        for date_key, bucket in tree.items():
            device_count = bucket.device_count
            file_count = bucket.file_count
            size = sum(f.size_bytes for f in bucket.all_files())
            self.stats.file_size_total += size

            date_path = self.settings.target_dir / date_key
            devices_str = "device" if device_count == 1 else "devices"
            files_str = "file" if file_count == 1 else "files"
            date_text = (f"[{date_key}] ({device_count} {devices_str}, "
                         f"{file_count} {files_str}, {format_file_size(size)})")
            date_status = self.check_target_dir(date_path, DirType.DATE)
            self.out(bold_white(self.padder.dryrun_dir_line(date_text, date_status)))

            devices = list(bucket.items())
            for index, (device_key, files) in enumerate(devices):
                is_last_dir = index == len(devices) - 1
                create_subdir = should_create_device_subdir(
                    device_key, device_count, file_count, self.settings.always_create_device_subdirs)
                destination = device_destination(date_path, device_key, create_subdir)

                indent_level = 0
                if create_subdir:
                    indent_level = 1
                    device_status = self.check_target_dir(destination, DirType.DEVICE)
                    device_text = self.padder.dryrun_device_dir(device_key.name, is_last_dir)
                    self.out(self.padder.dryrun_dir_line(device_text, device_status))

                self._simulate_files(files, destination, indent_level, is_last_dir)

            self.out("")

    def check_target_dir(self, path: Path, dir_type: DirType) -> str:
        self.stats.inc_dir_total_by_type(dir_type)
        if path.exists():
            return DIR_EXISTS
        self.stats.inc_dir_created_by_type(dir_type)
        return DIR_WILL_BE_CREATED

    def check_file(self, file: SourceFile, target_path: Path) -> FileOutcome:
        """
        Predicts what a write run would do with this file and counts it.

        Duplicates are checked before the target, so only the first of
        several duplicates is reported as already existing in the target.
        """
        if not file.file_path.exists():
            return FileOutcome(SOURCE_MISSING, OutputColor.ERROR)

        if target_path in self.claimed_targets:
            self.stats.inc_skipped_by_type(file.file_type)
            return FileOutcome(DUPLICATE_SOURCE, OutputColor.WARNING)
        self.claimed_targets.add(target_path)

        if target_path.exists():
            self.stats.inc_skipped_by_type(file.file_type)
            return FileOutcome(TARGET_EXISTS, OutputColor.WARNING)

        if self.settings.copy_not_move:
            self.stats.inc_copied_by_type(file.file_type)
            return FileOutcome(WILL_COPY, OutputColor.GOOD)

        try:
            mode = file.file_path.stat().st_mode
        except OSError as e:
            logging.debug(f"Could not stat {file.file_path}: {e}")
            return FileOutcome(f"error reading metadata: {e}", OutputColor.ERROR)

        if mode & 0o222 == 0:
            self.stats.inc_copied_by_type(file.file_type)
            return FileOutcome(READ_ONLY_WILL_COPY, OutputColor.ERROR)

        self.stats.inc_moved_by_type(file.file_type)
        return FileOutcome(WILL_MOVE, OutputColor.GOOD)

    def _simulate_files(self, files: List[SourceFile], destination: Path,
                        indent_level: int, is_last_dir: bool):
        has_multiple_sources = self.padder.metrics.has_multiple_sources
        counter = CompactCounter(self.settings.compacting_threshold)

        for index, file in enumerate(files):
            is_first = index == 0
            is_last = index == len(files) - 1
            outcome = self.check_file(file, destination / file.file_name)

            target = indent_string(indent_level, file.file_name, is_last_dir,
                                   is_last and (indent_level == 1 or is_last_dir))
            line = self.padder.dryrun_file_line(
                target, file.source_display_name(has_multiple_sources), outcome.colored())

            if not self.is_compacting:
                self.out(line)
                continue

            if is_first:
                counter.reset_status(outcome.status)
                counter.inc_current_status()
                self.out(line)
            elif counter.is_same_status(outcome.status):
                if not counter.has_reached_threshold():
                    counter.inc_current_status()
                    self.out(line)
                else:
                    counter.inc_skipped_status()
            else:
                if counter.has_skipped_statuses():
                    self.out(self.padder.snipped_line(counter.skipped_status_count, indent_level, is_last_dir))
                counter.reset_status(outcome.status)
                counter.inc_current_status()
                self.out(line)

            if is_last and counter.has_skipped_statuses():
                self.out(self.padder.snipped_line(counter.skipped_status_count, indent_level, is_last_dir))

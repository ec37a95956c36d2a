import shutil
import logging
from pathlib import Path
from typing import Callable

from ..models import DirType, SourceFile
from ..reporting import Padder, bold_white, green, orange, red
from ..settings import Settings
from ..stats import FileStats
from .rules import device_destination, should_create_device_subdir
from .tree import TargetTree

ALREADY_EXISTS = "already exists"
OK = "ok"
SOURCE_REMOVED = " (source file removed)"
ERROR = "ERROR"


class FileMover:
    """
    Copies or moves the files of a consolidated tree into the target folder.

    Failures are counted per file and per folder; nothing here aborts the run.
    """

    def __init__(self, settings: Settings, stats: FileStats, padder: Padder,
                 out: Callable[[str], None] = print):
        self.settings = settings
        self.stats = stats
        self.padder = padder
        self.out = out

    def execute(self, tree: TargetTree):
        operation = "copy" if self.settings.copy_not_move else "move"
        logging.info(f"Processing {tree.file_count} files (Move={not self.settings.copy_not_move})...")

        separator = bold_white(self.padder.write_separator())
        self.out("")
        self.out(bold_white(f"Starting to {operation} files..."))
        self.out("")
        self.out(separator)
        self.out(bold_white(self.padder.write_header()))
        self.out(separator)

        has_multiple_sources = self.padder.metrics.has_multiple_sources

        for date_key, bucket in tree.items():
            device_count = bucket.device_count
            file_count = bucket.file_count
            self.stats.file_size_total += sum(f.size_bytes for f in bucket.all_files())

            date_path = self.settings.target_dir / date_key
            self.create_subdir_if_required(date_path, DirType.DATE)

            for device_key, files in bucket.items():
                create_subdir = should_create_device_subdir(
                    device_key, device_count, file_count, self.settings.always_create_device_subdirs)
                destination = device_destination(date_path, device_key, create_subdir)
                if create_subdir:
                    self.create_subdir_if_required(destination, DirType.DEVICE)

                for file in files:
                    dest = destination / file.file_name
                    status = self.copy_file_if_not_exists(file, dest)
                    self.out(self.padder.write_file_line(
                        file.source_display_name(has_multiple_sources),
                        str(self._relative(dest)),
                        status))

            self.out("")

    def create_subdir_if_required(self, path: Path, dir_type: DirType) -> bool:
        """
        Creates a date or device folder unless it already exists.

        Returns False only if the folder could not be created.
        """
        self.stats.inc_dir_total_by_type(dir_type)

        if path.exists():
            # Date folders are not reported, there would be too many
            if dir_type is DirType.DEVICE:
                self.out("")
                self.out(orange(f"[Folder {self._relative(path)} already exists]"))
            return True

        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self.stats.inc_error_dir_create_by_type(dir_type)
            logging.error(f"Failed to create folder {path}: {e}")
            self.out(red(f"Failed to create folder {self._relative(path)}: {e.strerror or e}"))
            return False

        self.stats.inc_dir_created_by_type(dir_type)
        shown = path.resolve() if self.settings.verbose else self._relative(path)
        self.out("")
        self.out(bold_white(f"[Created folder {shown}]"))
        return True

    def copy_file_if_not_exists(self, file: SourceFile, dest: Path) -> str:
        """
        Copies the file to `dest` and, when moving, removes the source.

        A move whose source can't be removed is counted as a copy, since the
        source is still there.
        """
        if dest.exists():
            logging.debug(f"Target file exists: {self._relative(dest)}")
            self.stats.inc_skipped_by_type(file.file_type)
            return orange(ALREADY_EXISTS)

        try:
            shutil.copy2(file.file_path, dest)
        except OSError as e:
            logging.error(f"File copy error: {file.file_path}: {e}")
            self.stats.error_file_create += 1
            # A partial copy would be skipped as existing on the next run
            try:
                dest.unlink(missing_ok=True)
            except OSError as err:
                logging.error(f"Could not remove partial copy {dest}: {err}")
            return red(ERROR)

        if self.settings.copy_not_move:
            self.stats.inc_copied_by_type(file.file_type)
            return green(OK)

        try:
            file.file_path.unlink()
        except OSError as e:
            logging.error(f"File delete error: {file.file_path}: {e}")
            self.stats.error_file_delete += 1
            self.stats.inc_copied_by_type(file.file_type)
            return f"{green(OK)}{red(f' (error removing source: {e})')}"

        self.stats.inc_moved_by_type(file.file_type)
        return f"{green(OK)}{SOURCE_REMOVED}"

    def _relative(self, path: Path) -> Path:
        try:
            return path.relative_to(self.settings.target_dir)
        except ValueError:
            return path

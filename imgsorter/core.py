import dataclasses
import logging
import time
from enum import Enum
from typing import Callable, Optional

from .exceptions import NoSupportedFilesError
from .metadata.extract import MetadataExtractor
from .organization.mover import FileMover
from .organization.simulator import DryRunSimulator
from .reporting import LayoutMetrics, Padder, build_source_dirs_list, magenta, orange, red
from .scanning.filesystem import SourceReader
from .scanning.parser import ChunkResult, SourceParser
from .settings import Settings
from .stats import FileStats


class Confirmation(Enum):
    PROCEED = "proceed"
    CANCEL = "cancel"
    DRY_RUN = "dry_run"


class ImgSorterApp:
    def __init__(self,
                 settings: Settings,
                 metadata: Optional[MetadataExtractor] = None,
                 out: Callable[[str], None] = print,
                 confirm: Optional[Callable[[], Confirmation]] = None):
        """
        Args:
            metadata: Reads capture date and device from files. Defaults to
                      the exifread/pymediainfo based extractor.
            out: Receives each line of the report.
            confirm: Asks the user whether to proceed. Only used when not silent.
        """
        self.settings = settings
        self.metadata = metadata or MetadataExtractor()
        self.out = out
        self.confirm = confirm

    def run(self) -> Optional[FileStats]:
        """
        Executes the sorting pipeline.
        1. Discover source folders and files
        2. Confirm with the user
        3. Parse files into the date/device tree and consolidate it
        4. Dry run or copy/move
        5. Print the summary

        Returns:
            The run statistics, or None if the user cancelled.
        """
        stats = FileStats()
        settings = self.settings

        # --- Step 1: Discovery ---
        reader = SourceReader(settings, stats)

        start = time.perf_counter()
        groups = reader.expand_source_dirs()
        stats.time_fetch_dirs = time.perf_counter() - start

        start = time.perf_counter()
        source_files = reader.read_source_files(groups)
        stats.time_fetch_files = time.perf_counter() - start

        entries = [path for files in source_files.values() for path in files]
        if not entries:
            raise NoSupportedFilesError("There are no supported files in the current source(s), exiting.")

        has_multiple_sources = reader.has_multiple_sources(groups)
        logging.info(f"Found {len(entries)} files in {sum(len(g) for g in groups)} source folders")

        # --- Step 2: Confirmation ---
        self._print_summary(groups, len(entries))
        settings = self._confirm(settings)
        if settings is None:
            self.out("Cancelled by user, exiting.")
            return None

        time_processing = time.perf_counter()
        self.out("–" * 75)
        self.out("")

        # --- Step 3: Parsing ---
        start = time.perf_counter()
        result = SourceParser(settings, self.metadata).parse(entries)
        stats.unknown_skipped += result.unknown_skipped
        stats.dirs_ignored += result.ignored

        isolated = result.tree.isolate_sparse_buckets(settings.min_files_per_dir, settings.oneoffs_dir_name)
        if isolated:
            logging.info(f"Moved {isolated} files from sparse folders to '{settings.oneoffs_dir_name}'")
        max_path_len = result.tree.compute_max_path_len(
            settings.always_create_device_subdirs, settings.oneoffs_dir_name)
        stats.time_parse_files = time.perf_counter() - start

        metrics = LayoutMetrics(
            max_path_len=max_path_len,
            max_source_filename=result.max_source_filename,
            max_source_path=result.max_source_path,
            has_multiple_sources=has_multiple_sources,
        )
        padder = Padder(metrics, align=settings.align_file_output)

        # --- Step 4: Dispatch ---
        start = time.perf_counter()
        if len(result.tree):
            if settings.dry_run:
                DryRunSimulator(settings, stats, padder, self.out).run(result.tree)
            else:
                FileMover(settings, stats, padder, self.out).execute(result.tree)
        stats.time_write_files = time.perf_counter() - start
        stats.time_total = (time.perf_counter() - time_processing
                            + stats.time_fetch_dirs + stats.time_fetch_files)

        # --- Step 5: Summary ---
        self._print_results(result, stats, settings)
        return stats

    def _print_summary(self, groups, file_count: int):
        if self.settings.copy_not_move:
            write_op = orange("copied:")
        else:
            write_op = red("moved: ")

        self.out("═" * 75)
        self.out(build_source_dirs_list(groups, self.settings.verbose))
        self.out(f"Target directory:   {self.settings.target_dir}")
        self.out(f"Files to be {write_op} {file_count}")
        self.out("═" * 75)

    def _confirm(self, settings: Settings) -> Optional[Settings]:
        """Returns the settings to run with, or None if the run was cancelled."""
        if settings.silent:
            self.out("> Silent mode is enabled. Proceeding without user confirmation.")
            if settings.dry_run:
                self.out("> This is a dry run. No folders will be created. No files will be copied or moved.")
            return settings
        if self.confirm is None:
            return settings

        self.out(magenta(
            "OK to proceed? Type one of the options then press Enter:\n"
            "• 'y' or 'yes' to continue\n"
            "• 'n' or 'no' to cancel\n"
            "• 'd' or 'dry' to do a dry run"))

        answer = self.confirm()
        if answer is Confirmation.CANCEL:
            return None
        if answer is Confirmation.DRY_RUN:
            self.out("This is a dry run. No folders will be created. No files will be copied or moved.")
            return dataclasses.replace(settings, dry_run=True)
        return dataclasses.replace(settings, dry_run=False)

    def _print_results(self, result: ChunkResult, stats: FileStats, settings: Settings):
        if result.tree.unknown_extensions:
            extensions = ", ".join(f"'{e}'" for e in sorted(result.tree.unknown_extensions))
            self.out(f"Skipped files with these unknown extensions: {extensions}")
            self.out("")

        if settings.verbose and result.skipped_files:
            skipped = "\n ".join(result.skipped_files)
            self.out(f"Skipped unknown files:\n {skipped}")
            self.out("")

        if result.non_custom_device_names:
            devices = ", ".join(f"'{d}'" for d in sorted(result.non_custom_device_names))
            self.out(f"Device models with non-custom names: {devices}")
            self.out("")

        self.out(stats.render(settings.dry_run, settings.copy_not_move))

        if settings.silent:
            self.out("> Silent mode is enabled. Exiting without user confirmation.")

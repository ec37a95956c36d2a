import os
import logging
from pathlib import Path
from typing import Dict, List, Sequence

from ..exceptions import SourceNotFoundError
from ..settings import Settings
from ..stats import FileStats


class SourceReader:
    """Discovers the source folders and lists the files to be sorted."""

    def __init__(self, settings: Settings, stats: FileStats):
        self.settings = settings
        self.stats = stats

    def expand_source_dirs(self) -> List[List[Path]]:
        """
        Returns one group per configured source root. With recursion on, a
        group holds the root followed by all of its subfolders, depth-first.
        """
        groups = []
        for root in self.settings.source_dirs:
            if not root.is_dir():
                logging.warning(f"Source folder is not a directory, skipping: {root}")
                continue
            if self.settings.source_recursive:
                groups.append(list(self._iter_dirs(root)))
            else:
                groups.append([root])

        if not groups:
            raise SourceNotFoundError("None of the source folders could be read")
        return groups

    @staticmethod
    def has_multiple_sources(groups: Sequence[Sequence[Path]]) -> bool:
        return sum(len(group) for group in groups) > 1

    def read_source_files(self, groups: Sequence[Sequence[Path]]) -> Dict[Path, List[Path]]:
        """Lists the regular files of every source folder, keyed by the group's root."""
        source_files: Dict[Path, List[Path]] = {}
        for group in groups:
            files: List[Path] = []
            for directory in group:
                files.extend(self._list_files(directory))
            source_files[group[0]] = files

        self.stats.files_count_total = sum(len(files) for files in source_files.values())
        return source_files

    def _list_files(self, directory: Path) -> List[Path]:
        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except OSError as e:
            logging.warning(f"Could not read source folder {directory}: {e}")
            self.stats.dirs_ignored += 1
            return []

        entries.sort(key=lambda e: e.name.lower())

        files = []
        for e in entries:
            try:
                if e.is_file():
                    files.append(Path(e.path))
                    continue
                is_dir = e.is_dir()
            except OSError as err:
                logging.warning(f"Could not read {e.path}: {err}")
                self.stats.dirs_ignored += 1
                continue

            # Subfolders are listed separately when recursive
            if is_dir and not self.settings.source_recursive:
                logging.debug(f"Recursive option is off, skipping subfolder {e.name} in {directory}")
                self.stats.dirs_ignored += 1
        return files

    def _iter_dirs(self, root: Path):
        """Depth-first walker using os.scandir, yielding the root first."""
        stack = [root]
        while stack:
            current = stack.pop()
            yield current

            try:
                with os.scandir(current) as it:
                    entries = list(it)
            except OSError:
                # Reported once the folder's files are read
                continue

            # Sort for stable traversal order
            entries.sort(key=lambda e: e.name.lower())
            dirs = [Path(e.path) for e in entries if e.is_dir(follow_symlinks=False)]

            # Push dirs to stack (reversed so we process A before Z)
            for d in reversed(dirs):
                stack.append(d)

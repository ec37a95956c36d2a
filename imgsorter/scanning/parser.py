import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Set

from tqdm import tqdm

from ..metadata.extract import MetadataExtractor
from ..organization.tree import TargetTree
from ..settings import Settings
from .classifier import FileClassifier


@dataclass
class ChunkResult:
    """
    Everything parsed from one chunk of source files.

    Each parsing thread owns its result until it is merged by the
    coordinating thread.
    """
    tree: TargetTree = field(default_factory=TargetTree)
    max_source_filename: int = 0
    max_source_path: int = 0
    skipped_files: List[str] = field(default_factory=list)
    non_custom_device_names: Set[str] = field(default_factory=set)
    unknown_skipped: int = 0
    ignored: int = 0

    def merge(self, other: "ChunkResult"):
        self.tree.merge(other.tree)
        self.max_source_filename = max(self.max_source_filename, other.max_source_filename)
        self.max_source_path = max(self.max_source_path, other.max_source_path)
        self.skipped_files.extend(other.skipped_files)
        self.non_custom_device_names |= other.non_custom_device_names
        self.unknown_skipped += other.unknown_skipped
        self.ignored += other.ignored


class ChunkParser:
    def __init__(self, classifier: FileClassifier):
        self.classifier = classifier

    def parse(self, entries: Sequence[Path], progress: Optional[tqdm] = None) -> ChunkResult:
        result = ChunkResult()

        for path in entries:
            classified = self.classifier.classify(path)
            if progress is not None:
                progress.update(1)

            if classified is None:
                result.ignored += 1
                continue

            source_file, non_custom = classified
            result.non_custom_device_names |= non_custom

            if not source_file.file_type.is_supported:
                logging.debug(f"Skipping unknown file type: {path}")
                result.unknown_skipped += 1
                result.tree.record_unknown(source_file.extension)
                result.skipped_files.append(source_file.file_name)
                continue

            result.tree.add(source_file)
            result.max_source_filename = max(result.max_source_filename, len(source_file.file_name))
            result.max_source_path = max(result.max_source_path, len(str(source_file.file_path)))

        return result


def split_into_chunks(entries: Sequence[Path], count: int) -> List[List[Path]]:
    """
    Splits entries into at most `count` contiguous chunks whose sizes differ
    by at most one. Never returns empty chunks.
    """
    count = max(1, min(count, len(entries)))
    size, remainder = divmod(len(entries), count)

    chunks = []
    start = 0
    for i in range(count):
        end = start + size + (1 if i < remainder else 0)
        if end > start:
            chunks.append(list(entries[start:end]))
        start = end
    return chunks


class SourceParser:
    """
    Parses all source files into a single ChunkResult, either on the
    current thread or split across a pool of worker threads.
    """

    def __init__(self, settings: Settings, metadata: Optional[MetadataExtractor] = None):
        self.settings = settings
        self.chunk_parser = ChunkParser(FileClassifier(settings, metadata))

    def parse(self, entries: Sequence[Path]) -> ChunkResult:
        if self.settings.max_threads <= 1:
            return self._parse_sequential(entries)
        return self._parse_threaded(entries, self.settings.max_threads - 1)

    def _parse_sequential(self, entries: Sequence[Path]) -> ChunkResult:
        with tqdm(total=len(entries), desc="Parsing files", unit="file",
                  disable=self.settings.silent) as progress:
            return self.chunk_parser.parse(entries, progress)

    def _parse_threaded(self, entries: Sequence[Path], worker_count: int) -> ChunkResult:
        chunks = split_into_chunks(entries, worker_count)
        logging.info(f"Parallel parse: {len(entries)} files in {len(chunks)} chunks")

        result = ChunkResult()
        with ThreadPoolExecutor(max_workers=len(chunks) or 1) as executor:
            futures = [executor.submit(self.chunk_parser.parse, chunk) for chunk in chunks]

            # Fold in submission order so the resulting file order is stable
            for future in tqdm(futures, desc="Parsing chunks", unit="chunk",
                               disable=self.settings.silent):
                result.merge(future.result())

        return result

"""
Text formatting for the console report: colors, column alignment and the
directory tree drawn during dry runs.
"""
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Sequence

from colorama import Fore, Style

# Dry run tree glyphs
TREE_ENTRY_MID = " ├── "
TREE_ENTRY_LAST = " └── "
TREE_INDENT_MID = " │    "
TREE_INDENT_LAST = "      "
TREE_ENTRY_SNIP = " ·-- "

STATUS_WIDTH = 20

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


class OutputColor(Enum):
    ERROR = "error"
    WARNING = "warning"
    NEUTRAL = "neutral"
    GOOD = "good"


def red(text: str) -> str:
    return f"{Fore.LIGHTRED_EX}{text}{Style.RESET_ALL}"


def orange(text: str) -> str:
    return f"{Fore.LIGHTYELLOW_EX}{text}{Style.RESET_ALL}"


def green(text: str) -> str:
    return f"{Fore.LIGHTGREEN_EX}{text}{Style.RESET_ALL}"


def magenta(text: str) -> str:
    return f"{Fore.LIGHTMAGENTA_EX}{text}{Style.RESET_ALL}"


def bold_white(text: str) -> str:
    return f"{Style.BRIGHT}{text}{Style.RESET_ALL}"


def warn_arrow() -> str:
    return orange(">")


def colorize(text: str, color: OutputColor) -> str:
    if color is OutputColor.ERROR:
        return red(text)
    if color is OutputColor.WARNING:
        return orange(text)
    if color is OutputColor.GOOD:
        return green(text)
    return bold_white(text)


def strip_ansi(text: str) -> str:
    return _ANSI_RE.sub("", text)


def visible_len(text: str) -> int:
    return len(strip_ansi(text))


def format_file_size(size_bytes: int) -> str:
    units = ["B", "KB", "MB", "GB", "TB"]
    size = float(size_bytes)
    i = 0
    while size >= 1024 and i < len(units) - 1:
        size /= 1024
        i += 1
    if i == 0:
        return f"{int(size)} {units[i]}"
    return f"{size:.2f} {units[i]}"


def indent_string(indent_level: int, text: str, is_last_dir: bool, is_last_element: bool) -> str:
    """
    Prefixes an entry with the tree glyphs for its depth.

    Level 0 entries hang directly off the date folder, level 1 entries sit
    inside a device folder.
    """
    entry = TREE_ENTRY_LAST if is_last_element else TREE_ENTRY_MID
    if indent_level == 0:
        return f"{entry}{text}"
    parent = TREE_INDENT_LAST if is_last_dir else TREE_INDENT_MID
    return f"{parent}{entry}{text}"


@dataclass(frozen=True)
class LayoutMetrics:
    """Column widths gathered while parsing and consolidating the tree."""
    max_path_len: int = 10
    max_source_filename: int = 0
    max_source_path: int = 0
    has_multiple_sources: bool = False

    @property
    def source_width(self) -> int:
        if self.has_multiple_sources:
            return self.max_source_path
        return self.max_source_filename


class Padder:
    """
    Builds aligned report lines.

    With `align` off, fixed separators are used instead of padding to the
    widest entry.
    """

    def __init__(self, metrics: LayoutMetrics, align: bool = True):
        self.metrics = metrics
        self.align = align
        # Widest indented file name in a dry run tree
        self.tree_width = len(TREE_INDENT_MID) + len(TREE_ENTRY_MID) + metrics.max_source_filename
        # Widest date/device/file target path in a write run
        self.target_width = metrics.max_path_len + 1 + metrics.max_source_filename

    # --- Dry run ---

    @property
    def dryrun_status_column(self) -> int:
        return self.tree_width + self.metrics.source_width + 7

    def dryrun_header(self) -> str:
        if not self.align:
            return "TARGET FILE <--- SOURCE PATH ... OPERATION STATUS"
        return (f"{'TARGET FILE':<{self.tree_width + 6}}"
                f"{'SOURCE PATH':<{self.metrics.source_width + 5}}"
                "OPERATION STATUS")

    def dryrun_separator(self) -> str:
        if not self.align:
            return "-" * (len(self.dryrun_header()) + STATUS_WIDTH)
        return "-" * (self.dryrun_status_column + 4 + STATUS_WIDTH)

    def dryrun_dir_line(self, text: str, status: str) -> str:
        if not self.align:
            return f"{text} ... {status}"
        dots = "." * max(0, self.dryrun_status_column - visible_len(text) - 1)
        return f"{text} {dots}... {status}"

    def dryrun_device_dir(self, device_name: str, is_last_dir: bool) -> str:
        entry = TREE_ENTRY_LAST if is_last_dir else TREE_ENTRY_MID
        return f"{entry}[{device_name}]"

    def dryrun_file_line(self, target: str, source: str, status: str) -> str:
        if not self.align:
            return f"{target} <--- {source} ... {status}"
        dashes = "-" * max(0, self.tree_width - visible_len(target))
        dots = "." * max(0, self.metrics.source_width - visible_len(source))
        return f"{target} <{dashes}--- {source} {dots}... {status}"

    def snipped_line(self, count: int, indent_level: int, is_last_dir: bool) -> str:
        text = f"(snipped output for {count} files with same status)"
        if indent_level == 0:
            return f"{TREE_ENTRY_SNIP}{text}"
        parent = TREE_INDENT_LAST if is_last_dir else TREE_INDENT_MID
        return f"{parent}{TREE_ENTRY_SNIP}{text}"

    # --- Write ---

    def write_header(self) -> str:
        if not self.align:
            return "SOURCE PATH ───> TARGET FILE ... OPERATION STATUS"
        return (f"{'SOURCE PATH':<{self.metrics.source_width + 5}}"
                f"{'TARGET FILE':<{self.target_width + 5}}"
                "OPERATION STATUS")

    def write_separator(self) -> str:
        if not self.align:
            return "─" * (len(self.write_header()) + STATUS_WIDTH)
        return "─" * (self.metrics.source_width + self.target_width + 10 + STATUS_WIDTH)

    def write_file_line(self, source: str, target: str, status: str) -> str:
        if not self.align:
            return f"{source} ───> {target} ... {status}"
        lines = "─" * max(0, self.metrics.source_width - visible_len(source))
        dots = "." * max(0, self.target_width - visible_len(target))
        return f"{source} {lines}──> {target} {dots}... {status}"


def build_source_dirs_list(groups: Sequence[Sequence[Path]], verbose: bool) -> str:
    """
    Renders the source folders shown before asking for confirmation.

    A single folder is shown as is. Several folders are numbered per
    configured root; unless verbose, subfolders are summarized as a count.
    """
    single_label = "Source directory:   "
    multi_label = "Source directories: "
    spacing = " " * len(multi_label)

    total = sum(len(group) for group in groups)
    if total <= 1:
        return f"{single_label}{', '.join(str(d) for group in groups for d in group)}"

    lines: List[str] = []
    if verbose:
        digits = len(str(total))
        for outer_index, group in enumerate(groups):
            for index, directory in enumerate(group):
                label = multi_label if not lines else spacing
                lines.append(f"{label}{outer_index + 1}-{index + 1:0{digits}d}. {directory}")
        return "\n".join(lines)

    digits = len(str(len(groups)))
    for outer_index, group in enumerate(groups):
        label = multi_label if outer_index == 0 else spacing
        lines.append(f"{label}{outer_index + 1:0{digits}d}. {group[0]}")
        if len(group) > 1:
            lines.append(f"{spacing}·- {len(group) - 1} more subfolders")
    return "\n".join(lines)

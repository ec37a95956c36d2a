import math
from dataclasses import dataclass

from .models import DirType, FileType
from .reporting import OutputColor, bold_white, colorize, format_file_size, orange, warn_arrow


@dataclass
class FileStats:
    """
    Counters for a whole run.

    Only the coordinating thread touches these. Parsing threads report their
    own counts, which are added in after all of them finish.
    """
    files_count_total: int = 0
    file_size_total: int = 0

    img_moved: int = 0
    img_copied: int = 0
    img_skipped: int = 0
    vid_moved: int = 0
    vid_copied: int = 0
    vid_skipped: int = 0
    aud_moved: int = 0
    aud_copied: int = 0
    aud_skipped: int = 0
    unknown_skipped: int = 0

    dirs_ignored: int = 0
    date_dirs_total: int = 0
    date_dirs_created: int = 0
    device_dirs_total: int = 0
    device_dirs_created: int = 0

    error_file_create: int = 0
    error_file_delete: int = 0
    error_date_dir_create: int = 0
    error_device_dir_create: int = 0

    # Seconds
    time_fetch_dirs: float = 0.0
    time_fetch_files: float = 0.0
    time_parse_files: float = 0.0
    time_write_files: float = 0.0
    time_total: float = 0.0

    def inc_moved_by_type(self, file_type: FileType):
        if file_type is FileType.IMAGE:
            self.img_moved += 1
        elif file_type is FileType.VIDEO:
            self.vid_moved += 1
        elif file_type is FileType.AUDIO:
            self.aud_moved += 1

    def inc_copied_by_type(self, file_type: FileType):
        if file_type is FileType.IMAGE:
            self.img_copied += 1
        elif file_type is FileType.VIDEO:
            self.vid_copied += 1
        elif file_type is FileType.AUDIO:
            self.aud_copied += 1

    def inc_skipped_by_type(self, file_type: FileType):
        if file_type is FileType.IMAGE:
            self.img_skipped += 1
        elif file_type is FileType.VIDEO:
            self.vid_skipped += 1
        elif file_type is FileType.AUDIO:
            self.aud_skipped += 1

    def inc_dir_total_by_type(self, dir_type: DirType):
        if dir_type is DirType.DATE:
            self.date_dirs_total += 1
        else:
            self.device_dirs_total += 1

    def inc_dir_created_by_type(self, dir_type: DirType):
        if dir_type is DirType.DATE:
            self.date_dirs_created += 1
        else:
            self.device_dirs_created += 1

    def inc_error_dir_create_by_type(self, dir_type: DirType):
        if dir_type is DirType.DATE:
            self.error_date_dir_create += 1
        else:
            self.error_device_dir_create += 1

    @property
    def files_moved(self) -> int:
        return self.img_moved + self.vid_moved + self.aud_moved

    @property
    def files_copied(self) -> int:
        return self.img_copied + self.vid_copied + self.aud_copied

    @property
    def files_skipped(self) -> int:
        return self.img_skipped + self.vid_skipped + self.aud_skipped

    # --- Report ---

    def render(self, dry_run: bool, copy_not_move: bool) -> str:
        """Statistics block printed at the end of a run."""
        if dry_run:
            return self._render_dry_run()

        lines = [self._render_write()]
        if self.files_count_total == self.unknown_skipped:
            lines.append(orange("No supported files found in source folder."))
        else:
            if self.error_file_create > 0:
                lines.append(f"{warn_arrow()} Some files could not be created in the target path")
            if not copy_not_move and self.error_file_delete > 0:
                lines.append(f"{warn_arrow()} Some files were copied but the source files could not be removed")
        return "\n".join(lines)

    def _widths(self):
        f_digits = len(str(self.files_count_total))
        # dir counts get half again the width of the file counts
        d_digits = math.ceil(f_digits * 3 / 2)
        return f_digits, d_digits

    def _row(self, moved: int, copied: int, skipped: int, width: int) -> str:
        return (f"│{_padded(moved, OutputColor.NEUTRAL, width)}"
                f"│{_padded(copied, OutputColor.NEUTRAL, width)}"
                f"│{_padded(skipped, OutputColor.WARNING, width)}│")

    def _dirs(self, created: int, total: int, width: int) -> str:
        return (f"│{_padded(created, OutputColor.NEUTRAL, width)}"
                f"│{_padded(total, OutputColor.NEUTRAL, width)}│")

    def _render_write(self) -> str:
        f, d = self._widths()
        sep = "─" * 46
        return "\n".join([
            sep,
            f"Total files:                  {_colored(self.files_count_total, OutputColor.NEUTRAL)} "
            f"({bold_white(format_file_size(self.file_size_total))})",
            sep,
            f"Images moved|copied|skipped:  {self._row(self.img_moved, self.img_copied, self.img_skipped, f)}",
            f"Videos moved|copied|skipped:  {self._row(self.vid_moved, self.vid_copied, self.vid_skipped, f)}",
            f"Audios moved|copied|skipped:  {self._row(self.aud_moved, self.aud_copied, self.aud_skipped, f)}",
            sep,
            f"Date   folders created|total: {self._dirs(self.date_dirs_created, self.date_dirs_total, d)}",
            f"Device folders created|total: {self._dirs(self.device_dirs_created, self.device_dirs_total, d)}",
            f"Source folders ignored:       {_colored(self.dirs_ignored, OutputColor.WARNING)}",
            f"Unknown files skipped:        {_colored(self.unknown_skipped, OutputColor.WARNING)}",
            f"File delete errors:           {_colored(self.error_file_delete, OutputColor.ERROR)}",
            f"File create errors:           {_colored(self.error_file_create, OutputColor.ERROR)}",
            f"Date folders create errors:   {_colored(self.error_date_dir_create, OutputColor.ERROR)}",
            f"Device folders create errors: {_colored(self.error_device_dir_create, OutputColor.ERROR)}",
            sep,
            f"Time fetching folders:        {_seconds(self.time_fetch_dirs)} sec",
            f"Time fetching files:          {_seconds(self.time_fetch_files)} sec",
            f"Time parsing files:           {_seconds(self.time_parse_files)} sec",
            f"Time writing files:           {_seconds(self.time_write_files)} sec",
            sep,
            f"Total time taken:             {_seconds(self.time_total)} sec",
            sep,
        ])

    def _render_dry_run(self) -> str:
        f, d = self._widths()
        sep = "–" * 54
        return "\n".join([
            sep,
            f"Total files:                    {_colored(self.files_count_total, OutputColor.NEUTRAL)} "
            f"({bold_white(format_file_size(self.file_size_total))})",
            sep,
            f"Images to move|copy|skip:       {self._row(self.img_moved, self.img_copied, self.img_skipped, f)}",
            f"Videos to move|copy|skip:       {self._row(self.vid_moved, self.vid_copied, self.vid_skipped, f)}",
            f"Audios to move|copy|skip:       {self._row(self.aud_moved, self.aud_copied, self.aud_skipped, f)}",
            sep,
            f"Date folders   to create|total: {self._dirs(self.date_dirs_created, self.date_dirs_total, d)}",
            f"Device folders to create|total: {self._dirs(self.device_dirs_created, self.device_dirs_total, d)}",
            sep,
            f"Source folders to skip:         {_colored(self.dirs_ignored, OutputColor.WARNING)}",
            f"Unknown files to skip:          {_colored(self.unknown_skipped, OutputColor.WARNING)}",
            "File delete errors:             n/a",
            "File create errors:             n/a",
            "Date folders create errors:     n/a",
            "Device folders create errors:   n/a",
            sep,
            f"Time fetching folders:          {_seconds(self.time_fetch_dirs)} sec",
            f"Time fetching files:            {_seconds(self.time_fetch_files)} sec",
            f"Time parsing files:             {_seconds(self.time_parse_files)} sec",
            f"Time printing files:            {_seconds(self.time_write_files)} sec",
            sep,
            f"Total time taken:               {_seconds(self.time_total)} sec",
            sep,
        ])


def _colored(value: int, level: OutputColor) -> str:
    if value > 0:
        return colorize(str(value), level)
    return str(value)


def _padded(value: int, level: OutputColor, width: int) -> str:
    text = str(value).rjust(width)
    if value > 0:
        return colorize(text, level)
    return text


def _seconds(value: float) -> str:
    return bold_white(f"{value:.3f}")

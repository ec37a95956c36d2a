import pytest
from pathlib import Path

from imgsorter.models import DirType, FileType
from imgsorter.reporting import (LayoutMetrics, OutputColor, Padder, build_source_dirs_list, colorize,
                                 format_file_size, indent_string, red, strip_ansi)
from imgsorter.stats import FileStats


@pytest.mark.parametrize("size, expected", [
    (0, "0 B"),
    (1023, "1023 B"),
    (1024, "1.00 KB"),
    (int(3.5 * 1024 * 1024), "3.50 MB"),
    (5 * 1024 ** 4, "5.00 TB"),
])
def test_format_file_size(size, expected):
    assert format_file_size(size) == expected


def test_colors_can_be_stripped():
    assert strip_ansi(red("oops")) == "oops"
    assert strip_ansi(colorize("fine", OutputColor.GOOD)) == "fine"
    assert colorize("fine", OutputColor.GOOD) != "fine"


def test_indent_string():
    assert indent_string(0, "a.jpg", is_last_dir=False, is_last_element=False) == " ├── a.jpg"
    assert indent_string(0, "a.jpg", is_last_dir=True, is_last_element=True) == " └── a.jpg"
    assert indent_string(1, "a.jpg", is_last_dir=False, is_last_element=True) == " │    └── a.jpg"
    assert indent_string(1, "a.jpg", is_last_dir=True, is_last_element=False) == "       ├── a.jpg"


def test_dry_run_lines_are_aligned():
    padder = Padder(LayoutMetrics(max_path_len=16, max_source_filename=21))

    short = padder.dryrun_file_line(indent_string(0, "a.jpg", False, False), "a.jpg", "file will be copied")
    long = padder.dryrun_file_line(indent_string(1, "IMG_20200101_0001.jpg", False, True),
                                   "IMG_20200101_0001.jpg", red("target file exists, will be skipped"))
    folder = padder.dryrun_dir_line("[2020.01.01] (1 device, 2 files, 1.00 KB)", "[new folder will be created]")

    short_col = short.index("file will be copied")
    assert strip_ansi(long).index("target file exists") == short_col
    assert folder.index("[new folder will be created]") == short_col


def test_write_lines_are_aligned():
    padder = Padder(LayoutMetrics(max_path_len=16, max_source_filename=10,
                                  max_source_path=30, has_multiple_sources=True))

    a = padder.write_file_line("/pics/a.jpg", "2020.01.01/a.jpg", "ok")
    b = padder.write_file_line("/pics/more/longer.jpg", "2020.01.01/Canon/longer.jpg", "already exists")

    assert a.index("ok") == b.index("already exists")
    assert "──> 2020.01.01/a.jpg" in a


def test_unaligned_output_uses_fixed_separators():
    padder = Padder(LayoutMetrics(max_path_len=16, max_source_filename=40), align=False)

    assert padder.dryrun_file_line("a.jpg", "a.jpg", "file will be copied") == \
        "a.jpg <--- a.jpg ... file will be copied"
    assert padder.write_file_line("a.jpg", "2020.01.01/a.jpg", "ok") == "a.jpg ───> 2020.01.01/a.jpg ... ok"
    assert padder.dryrun_dir_line("[2020.01.01]", "[new folder will be created]") == \
        "[2020.01.01] ... [new folder will be created]"


def test_snipped_line():
    padder = Padder(LayoutMetrics())
    assert padder.snipped_line(3, 0, False) == " ·-- (snipped output for 3 files with same status)"
    assert padder.snipped_line(3, 1, False).startswith(" │    ·-- ")


def test_source_list_single_folder():
    assert build_source_dirs_list([[Path("/pics")]], verbose=False) == "Source directory:   /pics"


def test_source_list_compact_and_verbose():
    groups = [[Path("/pics"), Path("/pics/a"), Path("/pics/b")], [Path("/phone")]]

    compact = build_source_dirs_list(groups, verbose=False).split("\n")
    assert compact[0] == "Source directories: 1. /pics"
    assert compact[1].strip() == "·- 2 more subfolders"
    assert compact[2].strip() == "2. /phone"

    verbose = build_source_dirs_list(groups, verbose=True).split("\n")
    assert len(verbose) == 4
    assert verbose[0] == "Source directories: 1-1. /pics"
    assert verbose[3].strip() == "2-1. /phone"


# --- Stats ---

def test_stats_counters_by_type():
    stats = FileStats()
    stats.inc_copied_by_type(FileType.IMAGE)
    stats.inc_moved_by_type(FileType.VIDEO)
    stats.inc_skipped_by_type(FileType.AUDIO)
    stats.inc_skipped_by_type(FileType.UNKNOWN)
    stats.inc_dir_total_by_type(DirType.DATE)
    stats.inc_dir_created_by_type(DirType.DEVICE)
    stats.inc_error_dir_create_by_type(DirType.DEVICE)

    assert (stats.img_copied, stats.vid_moved, stats.aud_skipped) == (1, 1, 1)
    assert stats.files_copied == 1
    assert stats.files_moved == 1
    assert stats.files_skipped == 1
    assert stats.date_dirs_total == 1
    assert stats.device_dirs_created == 1
    assert stats.error_device_dir_create == 1


def test_stats_render_dry_run():
    stats = FileStats(files_count_total=12, img_copied=10, unknown_skipped=2)
    text = strip_ansi(stats.render(dry_run=True, copy_not_move=True))

    assert "Images to move|copy|skip:       │ 0│10│ 0│" in text
    assert "Unknown files to skip:          2" in text
    assert "File delete errors:             n/a" in text


def test_stats_render_write_with_errors():
    stats = FileStats(files_count_total=3, img_copied=1, error_file_create=1, error_file_delete=1)
    text = strip_ansi(stats.render(dry_run=False, copy_not_move=False))

    assert "Images moved|copied|skipped:  │0│1│0│" in text
    assert "Some files could not be created in the target path" in text
    assert "Some files were copied but the source files could not be removed" in text


def test_stats_render_no_supported_files():
    stats = FileStats(files_count_total=2, unknown_skipped=2)
    text = strip_ansi(stats.render(dry_run=False, copy_not_move=True))

    assert "No supported files found in source folder." in text

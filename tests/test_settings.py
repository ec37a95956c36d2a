import logging
import pytest
from pathlib import Path

from imgsorter.exceptions import ConfigError, SourceNotFoundError
from imgsorter.settings import load_settings, read_config_file, resolve_target_dir


def _write_config(tmp_path, text):
    cfg = tmp_path / "imgsorter.toml"
    cfg.write_text(text, encoding="utf-8")
    return cfg


def test_missing_config_uses_defaults(tmp_path):
    settings = load_settings(tmp_path / "nope.toml", cwd=tmp_path)

    assert settings.source_dirs == (tmp_path,)
    assert settings.target_dir == tmp_path / "imgsorted"
    assert settings.dry_run is True
    assert settings.copy_not_move is True
    assert settings.source_recursive is True
    assert settings.min_files_per_dir == 1
    assert settings.compacting_threshold == 0
    assert settings.oneoffs_dir_name == "Miscellaneous"
    assert settings.max_threads == 1
    assert settings.custom_extensions == {"image": (), "video": (), "audio": ()}
    assert not settings.is_compacting_enabled


def test_full_config(tmp_path):
    src = tmp_path / "pics"
    src.mkdir()
    target = tmp_path / "sorted"
    cfg = _write_config(tmp_path, f"""
[folders]
source_dirs = ['{src.as_posix()}']
target_dir = '{target.as_posix()}'
min_files_per_dir = 3
min_files_before_compacting_output = 5
target_oneoffs_subdir_name = 'Oneoffs'

[options]
dry_run = false
verbose = true
align_file_output = false
always_create_device_subdirs = true
source_recursive = false
include_device_make = false
copy_not_move = false
silent = true

[custom.devices]
'Samsung SM-A415F' = "Maria's phone"

[custom.extensions]
image = [ ".PSD", "gif" ]
video = [ "MKV" ]

[advanced]
max_threads = 4
""")

    settings = load_settings(cfg, cwd=tmp_path)

    assert settings.source_dirs == (src,)
    assert settings.target_dir == target
    assert settings.min_files_per_dir == 3
    assert settings.compacting_threshold == 5
    assert settings.is_compacting_enabled
    assert settings.oneoffs_dir_name == "Oneoffs"
    assert settings.dry_run is False
    assert settings.verbose is True
    assert settings.align_file_output is False
    assert settings.always_create_device_subdirs is True
    assert settings.source_recursive is False
    assert settings.include_device_make is False
    assert settings.copy_not_move is False
    assert settings.silent is True
    assert settings.custom_device_name("SAMSUNG sm-a415f") == "Maria's phone"
    assert settings.custom_device_name("Canon") is None
    assert settings.custom_extensions == {"image": ("psd", "gif"), "video": ("mkv",), "audio": ()}
    assert settings.max_threads == 4


def test_existing_target_gets_subfolder(tmp_path):
    target = tmp_path / "existing"
    target.mkdir()
    assert resolve_target_dir(target) == target / "imgsorted"
    assert resolve_target_dir(tmp_path / "new") == tmp_path / "new"


def test_invalid_sources_are_dropped(tmp_path, caplog):
    good = tmp_path / "good"
    good.mkdir()
    cfg = _write_config(tmp_path, f"""
[folders]
source_dirs = ['{good.as_posix()}', '{(tmp_path / "bad").as_posix()}']
""")

    with caplog.at_level(logging.WARNING):
        settings = load_settings(cfg, cwd=tmp_path)

    assert settings.source_dirs == (good,)
    assert "invalid and were ignored" in caplog.text


def test_all_invalid_sources_is_fatal(tmp_path):
    cfg = _write_config(tmp_path, f"""
[folders]
source_dirs = ['{(tmp_path / "bad").as_posix()}']
""")

    with pytest.raises(SourceNotFoundError):
        load_settings(cfg, cwd=tmp_path)


def test_negative_numbers_keep_defaults(tmp_path):
    cfg = _write_config(tmp_path, """
[folders]
min_files_per_dir = -2

[advanced]
max_threads = -1
""")

    settings = load_settings(cfg, cwd=tmp_path)

    assert settings.min_files_per_dir == 1
    assert settings.max_threads == 1


def test_debug_implies_verbose(tmp_path):
    cfg = _write_config(tmp_path, """
[options]
debug = true
verbose = false
""")

    settings = load_settings(cfg, cwd=tmp_path)

    assert settings.debug is True
    assert settings.verbose is True


def test_malformed_config_falls_back_to_defaults(tmp_path, caplog):
    cfg = _write_config(tmp_path, "[folders\nsource_dirs = ")

    with caplog.at_level(logging.ERROR):
        settings = load_settings(cfg, cwd=tmp_path)

    assert settings.source_dirs == (tmp_path,)
    assert "Continuing with defaults" in caplog.text


def test_read_config_file_errors(tmp_path):
    with pytest.raises(ConfigError):
        read_config_file(tmp_path / "missing.toml")

    bad = _write_config(tmp_path, "not = [valid")
    with pytest.raises(ConfigError):
        read_config_file(bad)


def test_cli_source_overrides_configured_folders(tmp_path):
    configured = tmp_path / "configured"
    configured.mkdir()
    cli = tmp_path / "here"
    cli.mkdir()
    cfg = _write_config(tmp_path, f"""
[folders]
source_dirs = ['{configured.as_posix()}']
target_dir = '{(tmp_path / "elsewhere").as_posix()}'
min_files_per_dir = 2
""")

    settings = load_settings(cfg, cli_source=str(cli), cwd=tmp_path)

    assert settings.using_cli_source
    assert settings.source_dirs == (cli,)
    assert settings.target_dir == cli / "imgsorted"
    assert settings.min_files_per_dir == 2


def test_invalid_cli_source_is_ignored(tmp_path):
    settings = load_settings(tmp_path / "nope.toml", cli_source=str(tmp_path / "missing"), cwd=tmp_path)

    assert not settings.using_cli_source
    assert settings.source_dirs == (tmp_path,)


def test_verbose_reports_missing_keys(tmp_path, caplog):
    cfg = _write_config(tmp_path, """
[options]
verbose = true
""")

    with caplog.at_level(logging.INFO):
        load_settings(cfg, cwd=tmp_path)

    assert "Config key 'dry_run' is empty, invalid or missing" in caplog.text

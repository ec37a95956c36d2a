import logging
from pathlib import Path

import pytest

from imgsorter import main as main_module
from imgsorter.core import Confirmation
from imgsorter.main import ask_for_confirmation, main, parse_args, setup_logging


@pytest.fixture
def no_logging_setup(monkeypatch):
    monkeypatch.setattr(main_module, "setup_logging", lambda verbose, log_file=None: None)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def _reader(*answers):
    it = iter(answers)

    def read():
        try:
            return next(it)
        except StopIteration:
            raise EOFError
    return read


def test_parse_args_defaults():
    args = parse_args([])
    assert args.source is None
    assert args.config == Path("imgsorter.toml")
    assert args.verbose is False
    assert args.log_file is None


def test_parse_args_all_options(tmp_path):
    args = parse_args([str(tmp_path), "-c", "other.toml", "-v", "--log-file", "run.log"])
    assert args.source == str(tmp_path)
    assert args.config == Path("other.toml")
    assert args.verbose is True
    assert args.log_file == Path("run.log")


@pytest.mark.parametrize("answers, expected", [
    (("y",), Confirmation.PROCEED),
    ((" YES ",), Confirmation.PROCEED),
    (("n",), Confirmation.CANCEL),
    (("maybe", "", "D"), Confirmation.DRY_RUN),
    ((), Confirmation.CANCEL),
])
def test_ask_for_confirmation(answers, expected, capsys):
    assert ask_for_confirmation(_reader(*answers)) is expected


def test_ask_for_confirmation_repeats_on_invalid_input(capsys):
    ask_for_confirmation(_reader("what", "dry"))
    assert "press one of" in capsys.readouterr().out


def test_setup_logging_writes_log_file(tmp_path, restore_root_logger):
    log_file = tmp_path / "run.log"

    setup_logging(verbose=True, log_file=log_file)
    logging.debug("hello from the test")

    assert restore_root_logger.level == logging.DEBUG
    assert logging.getLogger("exifread").level == logging.ERROR
    for handler in restore_root_logger.handlers:
        handler.flush()
    assert "hello from the test" in log_file.read_text(encoding="utf-8")


def test_main_exits_when_all_sources_invalid(tmp_path, no_logging_setup, capsys):
    cfg = tmp_path / "imgsorter.toml"
    cfg.write_text(f"[folders]\nsource_dirs = ['{(tmp_path / 'missing').as_posix()}']\n", encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        main(["-c", str(cfg)])

    assert exc.value.code == 1
    assert "All source folders are invalid" in capsys.readouterr().out


def test_main_exits_cleanly_without_files(tmp_path, no_logging_setup, capsys):
    empty = tmp_path / "empty"
    empty.mkdir()

    with pytest.raises(SystemExit) as exc:
        main([str(empty), "-c", str(tmp_path / "nope.toml")])

    assert exc.value.code == 0
    assert "There are no supported files" in capsys.readouterr().out


def test_main_silent_run(tmp_path, no_logging_setup, capsys):
    src = tmp_path / "src"
    src.mkdir()
    (src / "notes.txt").write_text("hi")
    target = tmp_path / "target"
    cfg = tmp_path / "imgsorter.toml"
    cfg.write_text(f"""
[folders]
source_dirs = ['{src.as_posix()}']
target_dir = '{target.as_posix()}'

[options]
silent = true
dry_run = false
""", encoding="utf-8")

    main(["-c", str(cfg)])

    out = capsys.readouterr().out
    assert "IMGSORTER v" in out
    assert "Skipped files with these unknown extensions: 'txt'" in out
    assert not target.exists()


def test_main_reports_unexpected_errors(tmp_path, no_logging_setup, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("boom")
    monkeypatch.setattr(main_module, "load_settings", boom)

    with pytest.raises(SystemExit) as exc:
        main(["-c", str(tmp_path / "nope.toml")])

    assert exc.value.code == 1

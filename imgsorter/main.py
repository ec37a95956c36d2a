import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Callable, Optional

from colorama import just_fix_windows_console

from . import config
from .core import Confirmation, ImgSorterApp
from .exceptions import NoSupportedFilesError, SourceNotFoundError
from .reporting import red
from .settings import load_settings

VERSION = "0.1.0"


def setup_logging(verbose: bool, log_file: Optional[Path] = None):
    """
    Sets up logging to the console and, optionally, to a file.

    Nothing is written inside the target folder, so dry runs leave the
    filesystem untouched.
    """
    log_level = logging.DEBUG if verbose else logging.INFO

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=handlers,
        force=True,
    )

    # Silence chatty libraries
    logging.getLogger("exifread").setLevel(logging.ERROR)


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="imgsorter: sort images, videos and audio files by date and device")

    p.add_argument("source", nargs="?", default=None,
                   help="Folder to sort in place, overriding the source and target folders from the config")
    p.add_argument("-c", "--config", type=Path, default=config.DEFAULT_CONFIG_FILE,
                   help="Path to the TOML config file (default: imgsorter.toml)")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    p.add_argument("--log-file", type=Path, default=None, help="Also write the log to this file")

    return p.parse_args(argv)


def ask_for_confirmation(reader: Callable[[], str] = input) -> Confirmation:
    while True:
        try:
            answer = reader().strip().lower()
        except EOFError:
            return Confirmation.CANCEL

        if answer in ("y", "yes"):
            return Confirmation.PROCEED
        if answer in ("n", "no"):
            return Confirmation.CANCEL
        if answer in ("d", "dry"):
            return Confirmation.DRY_RUN
        print("...press one of 'y/yes', 'n/no' or 'd/dry', then Enter")


def main(argv=None):
    args = parse_args(argv)
    just_fix_windows_console()

    setup_logging(args.verbose, args.log_file)

    print("─" * 75)
    print(f"IMGSORTER v{VERSION}".center(75))
    print("─" * 75)

    try:
        settings = load_settings(args.config, cli_source=args.source)
        if args.verbose and not settings.verbose:
            settings = dataclasses.replace(settings, verbose=True)
        logging.debug(f"Settings: {settings}")

        app = ImgSorterApp(settings, confirm=ask_for_confirmation)
        app.run()
    except SourceNotFoundError as e:
        print(red(str(e)))
        sys.exit(1)
    except NoSupportedFilesError as e:
        print(red(str(e)))
        sys.exit(0)
    except KeyboardInterrupt:
        logging.warning("Operation cancelled by user.")
        sys.exit(1)
    except Exception:
        logging.exception("Fatal error during sorting.")
        sys.exit(1)


if __name__ == "__main__":
    main()

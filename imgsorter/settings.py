"""
Loads run settings from the TOML config file.

Missing or invalid keys fall back to the defaults in config.py. Only the
absence of any valid source folder is fatal.
"""
import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from . import config
from .exceptions import ConfigError, SourceNotFoundError


def _default_custom_extensions() -> Dict[str, Tuple[str, ...]]:
    return {category: () for category in config.CUSTOM_EXTENSION_CATEGORIES}


@dataclass(frozen=True)
class Settings:
    """
    Read-only snapshot of all options for a run.

    Shared as-is by every parsing worker, so it must never be mutated once
    the run starts. Use dataclasses.replace() to derive a modified copy.
    """
    source_dirs: Tuple[Path, ...]
    target_dir: Path
    source_recursive: bool = config.DEFAULT_SOURCE_RECURSIVE
    min_files_per_dir: int = config.DEFAULT_MIN_FILES_PER_DIR
    compacting_threshold: int = config.DEFAULT_COMPACTING_THRESHOLD
    oneoffs_dir_name: str = config.DEFAULT_ONEOFFS_DIR_NAME
    always_create_device_subdirs: bool = config.DEFAULT_ALWAYS_CREATE_DEVICE_SUBDIRS
    include_device_make: bool = config.DEFAULT_INCLUDE_DEVICE_MAKE
    align_file_output: bool = config.DEFAULT_ALIGN_OUTPUT
    copy_not_move: bool = config.DEFAULT_COPY_NOT_MOVE
    dry_run: bool = config.DEFAULT_DRY_RUN
    silent: bool = config.DEFAULT_SILENT
    verbose: bool = config.DEFAULT_VERBOSE
    debug: bool = False
    max_threads: int = config.DEFAULT_MAX_THREADS
    # Keys are lowercase for case-insensitive lookups
    custom_device_names: Dict[str, str] = field(default_factory=dict)
    custom_extensions: Dict[str, Tuple[str, ...]] = field(default_factory=_default_custom_extensions)
    using_cli_source: bool = False

    @property
    def is_compacting_enabled(self) -> bool:
        return self.compacting_threshold > 0

    def custom_device_name(self, device_name: str) -> Optional[str]:
        return self.custom_device_names.get(device_name.lower())


class _TomlReader:
    """Typed accessors over a TOML table which record missing and invalid keys."""

    def __init__(self):
        self.missing: List[str] = []
        self.invalid: List[Tuple[str, str]] = []

    def table(self, parent: Dict[str, Any], key: str) -> Dict[str, Any]:
        value = parent.get(key)
        if not isinstance(value, dict):
            self.missing.append(key)
            return {}
        return value

    def boolean(self, table: Dict[str, Any], key: str) -> Optional[bool]:
        value = table.get(key)
        if not isinstance(value, bool):
            self.missing.append(key)
            return None
        return value

    def positive_int(self, table: Dict[str, Any], key: str) -> Optional[int]:
        value = table.get(key)
        # bool is a subclass of int
        if not isinstance(value, int) or isinstance(value, bool):
            self.missing.append(key)
            return None
        if value < 0:
            self.invalid.append((key, "Number must be greater than 0"))
            return None
        return value

    def string(self, table: Dict[str, Any], key: str) -> Optional[str]:
        value = table.get(key)
        if not isinstance(value, str) or not value:
            self.missing.append(key)
            return None
        return value

    def string_list(self, table: Dict[str, Any], key: str) -> Optional[List[str]]:
        value = table.get(key)
        if not isinstance(value, list):
            self.missing.append(key)
            return None
        return [v for v in value if isinstance(v, str)]

    def string_dict(self, table: Dict[str, Any], key: str) -> Optional[Dict[str, str]]:
        value = table.get(key)
        if not isinstance(value, dict):
            self.missing.append(key)
            return None
        return {k.lower(): v for k, v in value.items() if isinstance(v, str)}


def read_config_file(config_path: Path) -> Dict[str, Any]:
    """Parses the TOML config file into a dict."""
    try:
        with config_path.open("rb") as f:
            return tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"Could not read config file at {config_path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Could not parse config file at {config_path}: {e}") from e


def validate_source_paths(sources: List[Path]) -> Tuple[List[Path], List[Path]]:
    """Splits sources into (existing, missing) paths."""
    valid = [p for p in sources if p.exists()]
    invalid = [p for p in sources if not p.exists()]
    return valid, invalid


def resolve_target_dir(target: Path) -> Path:
    """
    Existing targets get a dedicated subfolder so sorted files are not
    mixed with whatever the folder already holds.
    """
    if target.exists():
        return target / config.DEFAULT_TARGET_SUBDIR
    return target


def load_settings(config_path: Path = config.DEFAULT_CONFIG_FILE,
                  cli_source: Optional[str] = None,
                  cwd: Optional[Path] = None) -> Settings:
    """
    Builds the Settings for a run.

    Args:
        config_path: TOML file to read. If missing or invalid, defaults are used.
        cli_source: Optional path given on the command line. When valid, it is
                    used as both source and target, ignoring the config folders.
        cwd: Working directory used for defaults (current dir if not given).
    """
    cwd = cwd or Path.cwd()
    source_dirs: List[Path] = [cwd]
    target_dir = cwd / config.DEFAULT_TARGET_SUBDIR
    using_cli_source = False

    if cli_source:
        cli_path = Path(cli_source)
        if cli_path.exists():
            logging.info(f"Using source path at: {cli_path}")
            source_dirs = [cli_path]
            target_dir = resolve_target_dir(cli_path)
            using_cli_source = True
        else:
            logging.warning(f"User provided path is not valid: {cli_source}")

    try:
        raw = read_config_file(config_path)
        logging.info(f"Using config file at: {config_path}")
    except ConfigError as e:
        logging.error(f"{e}. Continuing with defaults.")
        raw = {}

    reader = _TomlReader()
    values: Dict[str, Any] = {}

    # --- [folders] ---
    folders = reader.table(raw, "folders")

    if not using_cli_source and folders:
        configured = reader.string_list(folders, "source_dirs")
        if configured is None:
            logging.warning(f"No source folders found in config, using current working directory: {cwd}")
        else:
            valid, invalid = validate_source_paths([Path(p) for p in configured])
            if not valid:
                raise SourceNotFoundError(
                    "All source folders are invalid:\n " + "\n ".join(str(p) for p in invalid))
            if invalid:
                invalid_list = "\n ".join(str(p) for p in invalid)
                logging.warning(f"Some source folders were invalid and were ignored:\n {invalid_list}")
            source_dirs = valid

        target = reader.string(folders, "target_dir")
        if target:
            target_dir = resolve_target_dir(Path(target))

    for key, field_name in (("min_files_per_dir", "min_files_per_dir"),
                            ("min_files_before_compacting_output", "compacting_threshold")):
        number = reader.positive_int(folders, key)
        if number is not None:
            values[field_name] = number

    oneoffs = reader.string(folders, "target_oneoffs_subdir_name")
    if oneoffs:
        values["oneoffs_dir_name"] = oneoffs

    # --- [options] ---
    options = reader.table(raw, "options")

    # Not exposed in the sample config, for development only
    debug = options.get("debug")
    if isinstance(debug, bool):
        values["debug"] = debug
        values["verbose"] = debug
    else:
        verbose = reader.boolean(options, "verbose")
        if verbose is not None:
            values["verbose"] = verbose

    for key in ("source_recursive", "dry_run", "align_file_output", "include_device_make",
                "always_create_device_subdirs", "copy_not_move", "silent"):
        flag = reader.boolean(options, key)
        if flag is not None:
            values[key] = flag

    # --- [custom] ---
    custom = reader.table(raw, "custom")

    devices = reader.string_dict(custom, "devices")
    if devices is not None:
        values["custom_device_names"] = devices

    extensions_table = reader.table(custom, "extensions")
    custom_extensions = _default_custom_extensions()
    for category in config.CUSTOM_EXTENSION_CATEGORIES:
        exts = reader.string_list(extensions_table, category)
        if exts is not None:
            custom_extensions[category] = tuple(e.lower().lstrip('.') for e in exts)
    values["custom_extensions"] = custom_extensions

    # --- [advanced] ---
    advanced = reader.table(raw, "advanced")
    max_threads = reader.positive_int(advanced, "max_threads")
    if max_threads:
        values["max_threads"] = max_threads

    settings = Settings(
        source_dirs=tuple(source_dirs),
        target_dir=target_dir,
        using_cli_source=using_cli_source,
        **values,
    )

    if settings.verbose:
        for key in reader.missing:
            logging.info(f"Config key '{key}' is empty, invalid or missing. Using preset default.")
        for key, message in reader.invalid:
            logging.info(f"Config key '{key}' is invalid: {message}")

    return settings

"""
Custom exception hierarchy for imgsorter.

Only conditions which abort a whole run are raised. Failures affecting a
single file or directory are counted in FileStats and processing continues.
"""


class ImgSorterError(Exception):
    """Base exception for all imgsorter errors."""
    pass


class ConfigError(ImgSorterError):
    """Raised when the config file cannot be read or parsed."""
    pass


class SourceNotFoundError(ImgSorterError):
    """Raised when none of the configured source folders exist."""
    pass


class NoSupportedFilesError(ImgSorterError):
    """Raised when no files were found in any of the source folders."""
    pass

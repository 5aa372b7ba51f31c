"""
Exception hierarchy for readtext.

Configuration and resolution errors are raised before any file is read;
format errors carry the path of the file that could not be read.
"""

from pathlib import Path
from typing import Optional, Union


class ReadtextError(Exception):
    """Base class for everything readtext raises on purpose."""


class ConfigurationError(ReadtextError, ValueError):
    """Invalid arguments, detected before reading."""


# ── resolution ───────────────────────────────────────────────────────────────

class ResolutionError(ReadtextError):
    """An input element could not be turned into files."""


class NoMatchingFilesError(ResolutionError, FileNotFoundError):
    def __init__(self, element: str):
        self.element = element
        super().__init__(f"File '{element}' does not exist (no matching files).")


class DirectoryInputError(ResolutionError, IsADirectoryError):
    def __init__(self, element: str):
        self.element = element
        suggestion = element.rstrip("/\\") + "/*"
        super().__init__(
            f"File '{element}' does not exist, but a directory of this name does exist. "
            f"To read all files in a directory, pass a glob expression like '{suggestion}'."
        )


class FetchError(ResolutionError):
    """A remote URL could not be downloaded."""


# ── format ───────────────────────────────────────────────────────────────────

class FormatError(ReadtextError):
    """A file's content could not be read by its format reader."""

    def __init__(self, path: Union[str, Path, None], message: str):
        self.path = Path(path) if path is not None else None
        super().__init__(f"{path}: {message}" if path is not None else message)


class TextFieldError(FormatError):
    """The designated text field is absent from a row-oriented file."""


class ConverterError(FormatError):
    """An external converter is missing or failed."""

    def __init__(self, path, message: str, tool: Optional[str] = None):
        self.tool = tool
        super().__init__(path, message)


class ConverterTimeout(ConverterError):
    """The converter ran longer than the configured timeout."""

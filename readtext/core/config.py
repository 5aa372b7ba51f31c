"""
Configuration for a readtext call.

ReadtextConfig holds every option of one call and validates it up front.
ReadContext is the per-call value threaded through resolver, readers and
assembler: it carries the verbosity and collects the warnings emitted.
"""

import logging
import os
import re
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Union

from .errors import ConfigurationError
from .models import DocvarsSource, FileFormat, MissingFilePolicy, Verbosity

log = logging.getLogger("readtext")

VERBOSITY_ENV = "READTEXT_VERBOSITY"


def _verbosity_from_env() -> int:
    raw = os.getenv(VERBOSITY_ENV)
    if raw is None or not raw.strip():
        return int(Verbosity.WARNINGS)
    try:
        level = int(raw)
    except ValueError:
        level = -1
    if level not in range(4):
        log.warning(f"Ignoring {VERBOSITY_ENV}={raw!r}; must be one of 0, 1, 2, 3")
        return int(Verbosity.WARNINGS)
    return level


_default_verbosity: int = _verbosity_from_env()


def get_default_verbosity() -> int:
    return _default_verbosity


def set_default_verbosity(level: int) -> None:
    global _default_verbosity
    _check_verbosity(level)
    _default_verbosity = int(level)


@contextmanager
def scoped_verbosity(level: Optional[int]) -> Iterator[int]:
    """Override the process-wide verbosity for the duration of the block."""
    saved = _default_verbosity
    if level is not None:
        set_default_verbosity(level)
    try:
        yield _default_verbosity
    finally:
        set_default_verbosity(saved)


def _check_verbosity(level) -> None:
    if isinstance(level, bool) or level not in range(4):
        raise ConfigurationError("verbosity must be one of 0, 1, 2, 3")


@dataclass
class ReadtextConfig:
    """
    Options for one readtext call.
    Provides sensible defaults, allows overrides.
    """
    # Which column / field / XPath holds the text
    text_field:       Optional[Union[str, int]] = None

    # Docvars from file names / paths
    docvarsfrom:      Union[str, DocvarsSource] = DocvarsSource.METADATA
    dvsep:            str = "_"
    docvarnames:      Optional[Sequence[str]] = None

    # One encoding for all files, or one per resolved file
    encoding:         Optional[Union[str, Sequence[str]]] = None

    ignore_missing_files: bool = False
    verbosity:        Optional[int] = None       # None → process default

    # Performance
    workers:          int = 1
    converter_timeout: Optional[float] = None    # seconds, per converter call

    replace_special_characters: bool = False

    # Format passthrough (sep, quotechar, ...) and converter overrides
    reader_options:   Dict[str, Any] = field(default_factory=dict)
    converters:       Dict[FileFormat, Callable] = field(default_factory=dict)

    def validate(self):
        """Validate configuration; raises ConfigurationError."""
        if self.verbosity is not None:
            _check_verbosity(self.verbosity)

        try:
            self.docvarsfrom = DocvarsSource.parse(self.docvarsfrom)
        except ValueError:
            raise ConfigurationError(
                f"docvarsfrom must be one of 'metadata', 'filenames', 'filepaths' "
                f"(got {self.docvarsfrom!r})"
            )

        if self.text_field is not None and (
            isinstance(self.text_field, bool) or not isinstance(self.text_field, (str, int))
        ):
            raise ConfigurationError("text_field must be a column name, column index or XPath")

        if not isinstance(self.dvsep, str) or not self.dvsep:
            raise ConfigurationError("dvsep must be a non-empty regular expression")
        try:
            re.compile(self.dvsep)
        except re.error as exc:
            raise ConfigurationError(f"dvsep is not a valid regular expression: {exc}")

        if self.docvarnames is not None:
            if isinstance(self.docvarnames, str):
                self.docvarnames = [self.docvarnames]
            if not all(isinstance(n, str) and n for n in self.docvarnames):
                raise ConfigurationError("docvarnames must be non-empty strings")

        for enc in self.encodings:
            if not isinstance(enc, str) or not enc:
                raise ConfigurationError("encoding must be a string or a list of strings")

        if isinstance(self.workers, bool) or not isinstance(self.workers, int) or self.workers < 1:
            raise ConfigurationError("workers must be a positive integer")
        if self.converter_timeout is not None and self.converter_timeout <= 0:
            raise ConfigurationError("converter_timeout must be positive")

        for fmt, fn in self.converters.items():
            if not isinstance(fmt, FileFormat) or not callable(fn):
                raise ConfigurationError("converters must map FileFormat to a callable")

    @property
    def encodings(self) -> List[str]:
        if self.encoding is None:
            return []
        if isinstance(self.encoding, str):
            return [self.encoding]
        return list(self.encoding)

    @property
    def missing_file_policy(self) -> MissingFilePolicy:
        return MissingFilePolicy.IGNORE if self.ignore_missing_files else MissingFilePolicy.FAIL

    @property
    def effective_verbosity(self) -> int:
        return get_default_verbosity() if self.verbosity is None else int(self.verbosity)


class ReadContext:
    """
    Per-call observability: gates messages by verbosity and records warnings.
    Never changes control flow.
    """

    def __init__(self, verbosity: int = Verbosity.WARNINGS):
        self.verbosity = Verbosity(verbosity)
        self.warnings: List[str] = []
        self.errors:   List[str] = []

    def error(self, message: str) -> None:
        self.errors.append(message)
        log.error(message)

    def warn(self, message: str) -> None:
        self.warnings.append(message)
        if self.verbosity >= Verbosity.WARNINGS:
            log.warning(message)

    def summary(self, message: str) -> None:
        if self.verbosity >= Verbosity.SUMMARY:
            log.info(message)

    def detail(self, message: str) -> None:
        if self.verbosity >= Verbosity.DETAIL:
            log.info(message)

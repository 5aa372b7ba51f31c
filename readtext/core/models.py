"""
Core data models for the readtext pipeline.
Every reader produces a list of Records regardless of source format;
the assembler turns those into one DataFrame.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from pathlib import Path
from typing import Any, Dict, Optional


class FileFormat(Enum):
    """Closed set of formats a resolved file can be dispatched to."""
    TXT   = "txt"
    CSV   = "csv"
    TSV   = "tsv"
    TAB   = "tab"
    JSON  = "json"
    XML   = "xml"
    HTML  = "html"
    PDF   = "pdf"
    DOCX  = "docx"
    DOC   = "doc"

    @property
    def requires_text_field(self) -> bool:
        """Formats that always need to know which field holds the text."""
        return self in (FileFormat.CSV, FileFormat.TSV, FileFormat.TAB, FileFormat.XML)


# extension (lowercase, no dot) → format
EXTENSION_MAP: Dict[str, FileFormat] = {
    "txt":  FileFormat.TXT,
    "csv":  FileFormat.CSV,
    "tsv":  FileFormat.TSV,
    "tab":  FileFormat.TAB,
    "json": FileFormat.JSON,
    "xml":  FileFormat.XML,
    "html": FileFormat.HTML,
    "htm":  FileFormat.HTML,
    "pdf":  FileFormat.PDF,
    "docx": FileFormat.DOCX,
    "doc":  FileFormat.DOC,
}


def format_for_path(path) -> Optional[FileFormat]:
    """Format from the (case-insensitive) extension, None when unrecognised."""
    ext = Path(path).suffix.lstrip(".").lower()
    return EXTENSION_MAP.get(ext)


class DocvarsSource(Enum):
    """Where docvars come from besides the file content."""
    METADATA  = "metadata"     # content only
    FILENAMES = "filenames"    # base name sans extension
    FILEPATHS = "filepaths"    # full path, directories first

    @classmethod
    def parse(cls, value) -> "DocvarsSource":
        if isinstance(value, cls):
            return value
        if value is None or value == "none":
            return cls.METADATA
        return cls(value)


class Verbosity(IntEnum):
    ERRORS   = 0
    WARNINGS = 1
    SUMMARY  = 2
    DETAIL   = 3


class MissingFilePolicy(Enum):
    FAIL   = "fail"
    IGNORE = "ignore"


@dataclass(frozen=True)
class ResolvedFile:
    """A concrete, existing file ready to be read."""
    path:           Path
    declared_type:  Optional[FileFormat]        # None → unknown extension
    encoding:       Optional[str] = None        # None → reader default

    @property
    def name(self) -> str:
        return self.path.name


@dataclass
class Record:
    """One (text, docvars) pair read from part or all of one file."""
    text:     str
    docvars:  Dict[str, Any] = field(default_factory=dict)

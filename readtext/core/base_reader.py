"""
Base reader interface and reader registry.
Every format-specific reader inherits BaseReader.
"""

import math
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Type, Union

import pandas as pd

from .config import ReadContext
from .errors import ConfigurationError, TextFieldError
from .models import FileFormat, Record, ResolvedFile, format_for_path

TextField = Optional[Union[str, int]]


class BaseReader(ABC):
    """All readers must implement this interface."""

    #: formats this reader handles
    SUPPORTED_FORMATS: List[FileFormat] = []

    @abstractmethod
    def read(
        self,
        file: ResolvedFile,
        text_field: TextField,
        ctx: ReadContext,
    ) -> List[Record]:
        """
        Parse one resolved file into its ordered records.
        Raises FormatError (or a subclass) when the content cannot be read;
        the error names the file.
        """


# ── Registry ─────────────────────────────────────────────────────────────────

class ReaderRegistry:
    """Maps file formats → reader classes."""

    def __init__(self):
        self._registry: Dict[FileFormat, Type[BaseReader]] = {}

    def register(self, reader_class: Type[BaseReader]):
        for fmt in reader_class.SUPPORTED_FORMATS:
            self._registry[fmt] = reader_class
        return reader_class                 # allow use as decorator

    def get(self, fmt: FileFormat) -> Type[BaseReader]:
        reader_cls = self._registry.get(fmt)
        if reader_cls is None:
            raise ValueError(
                f"No reader registered for '{fmt.value}'. "
                f"Supported: {[f.value for f in self._registry]}"
            )
        return reader_cls

    def dispatch_format(self, file: ResolvedFile, ctx: ReadContext) -> FileFormat:
        """Format to read `file` as; unknown extensions fall back to plain text."""
        fmt = file.declared_type or format_for_path(file.path)
        if fmt is None or fmt not in self._registry:
            ext = file.path.suffix.lstrip(".").lower()
            ctx.warn(f'Unsupported extension "{ext}" of file {file.path}, treating as plain text')
            return FileFormat.TXT
        return fmt

    @property
    def supported_formats(self) -> List[FileFormat]:
        return list(self._registry.keys())


# Singleton, importable everywhere
registry = ReaderRegistry()


# ── helpers shared by row-oriented readers ───────────────────────────────────

def resolve_text_column(columns: List[Any], text_field: TextField, path) -> Any:
    """Column holding the text: by name, or by 0-based position."""
    if text_field is None:
        raise ConfigurationError(
            f"text_field must be specified for {path} (a column name or index)"
        )
    if isinstance(text_field, int):
        if not 0 <= text_field < len(columns):
            raise TextFieldError(
                path, f"text_field index {text_field} out of range ({len(columns)} columns)"
            )
        return columns[text_field]
    if text_field not in columns:
        raise TextFieldError(path, f"text_field '{text_field}' not found in {list(columns)}")
    return text_field


def as_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return str(value)


def frame_to_records(frame: pd.DataFrame, text_field: TextField, path) -> List[Record]:
    """Split a parsed table into records: one column is the text, the rest docvars."""
    columns = list(frame.columns)
    text_col = resolve_text_column(columns, text_field, path)

    records: List[Record] = []
    for row in frame.to_dict(orient="records"):
        text = row.pop(text_col)
        docvars = {str(k): v for k, v in row.items()}
        records.append(Record(text=as_text(text), docvars=docvars))
    return records

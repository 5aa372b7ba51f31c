"""
Delimited Reader
────────────────
.csv (comma) and .tsv / .tab (tab) files, parsed with pandas.
One record per row; `text_field` picks the text column, every other
column becomes a docvar with its pandas-inferred type.
"""

import logging
from typing import List, Optional

import pandas as pd

from ..core.base_reader import BaseReader, frame_to_records, registry
from ..core.config import ReadContext
from ..core.errors import FormatError
from ..core.models import FileFormat, Record, ResolvedFile

log = logging.getLogger(__name__)

DEFAULT_SEPARATORS = {
    FileFormat.CSV: ",",
    FileFormat.TSV: "\t",
    FileFormat.TAB: "\t",
}


@registry.register
class DelimitedReader(BaseReader):
    SUPPORTED_FORMATS = [FileFormat.CSV, FileFormat.TSV, FileFormat.TAB]

    def __init__(self, sep: Optional[str] = None, quotechar: str = '"'):
        self.sep       = sep
        self.quotechar = quotechar

    def read(self, file: ResolvedFile, text_field, ctx: ReadContext) -> List[Record]:
        fmt = file.declared_type or FileFormat.CSV
        sep = self.sep or DEFAULT_SEPARATORS.get(fmt, ",")

        try:
            frame = pd.read_csv(
                file.path,
                sep=sep,
                quotechar=self.quotechar,
                encoding=file.encoding or "utf-8",
            )
        except pd.errors.EmptyDataError:
            return []
        except (pd.errors.ParserError, UnicodeDecodeError, LookupError) as exc:
            raise FormatError(file.path, f"cannot parse delimited file: {exc}")

        ctx.detail(f"{file.name}: {len(frame)} rows, columns {list(frame.columns)}")
        return frame_to_records(frame, text_field, file.path)

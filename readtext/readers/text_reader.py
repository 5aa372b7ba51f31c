"""
Plain Text Reader
─────────────────
Handles .txt files, and any file whose extension is not recognised.
The whole file is one record with no docvars.
"""

import logging
from typing import List

from ..core.base_reader import BaseReader, registry
from ..core.config import ReadContext
from ..core.errors import FormatError
from ..core.models import FileFormat, Record, ResolvedFile

log = logging.getLogger(__name__)

# Tried in order when the caller gives no encoding
FALLBACK_ENCODINGS = ("utf-8-sig", "cp1252", "latin-1")


def read_text(file: ResolvedFile, ctx: ReadContext) -> str:
    """Decode a file with its declared encoding, or the fallback ladder."""
    raw = file.path.read_bytes()
    if file.encoding:
        try:
            return raw.decode(file.encoding)
        except LookupError:
            raise FormatError(file.path, f"unknown encoding '{file.encoding}'")
        except UnicodeDecodeError as exc:
            raise FormatError(file.path, f"cannot decode as {file.encoding}: {exc}")

    for enc in FALLBACK_ENCODINGS:
        try:
            text = raw.decode(enc)
        except UnicodeDecodeError:
            ctx.detail(f"{file.name}: not {enc}, trying next encoding")
            continue
        return text
    # latin-1 decodes any byte sequence
    raise FormatError(file.path, "could not decode file with any supported encoding")


@registry.register
class TextReader(BaseReader):
    SUPPORTED_FORMATS = [FileFormat.TXT]

    def read(self, file: ResolvedFile, text_field, ctx: ReadContext) -> List[Record]:
        return [Record(text=read_text(file, ctx))]

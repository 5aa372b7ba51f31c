"""
PDF Reader
──────────
  1. pdftotext (poppler/xpdf) → stdout is the text
  2. if the tool is missing or fails, pdfplumber page text joined with
     blank lines

The whole file is one record.
"""

import logging
from pathlib import Path
from typing import List

import pdfplumber

from ..core.base_reader import registry
from ..core.errors import ConverterError
from ..core.models import FileFormat
from .converters import ConverterReader, pdftotext

log = logging.getLogger(__name__)


def pdfplumber_text(path: Path, timeout=None) -> str:
    try:
        with pdfplumber.open(str(path)) as pdf:
            pages = [(page.extract_text() or "").strip() for page in pdf.pages]
    except Exception as exc:
        raise ConverterError(path, f"pdfplumber failed: {exc}", tool="pdfplumber")
    log.debug(f"{path.name}: {len(pages)} pages via pdfplumber")
    return "\n\n".join(pages)


@registry.register
class PDFReader(ConverterReader):
    SUPPORTED_FORMATS = [FileFormat.PDF]

    def default_chain(self) -> List:
        return [pdftotext, pdfplumber_text]

"""
DOCX / DOC Reader
─────────────────
• .docx  → python-docx (paragraphs and tables in body order)
           Pandoc as fallback (handles corrupt/unusual .docx)
• .doc   → antiword
           LibreOffice converts to .docx → python-docx as fallback

The whole file is one record.
"""

import logging
import zipfile
from pathlib import Path
from typing import List

from docx import Document as DocxDocument
from docx.opc.exceptions import PackageNotFoundError
from docx.table import Table as DocxTable
from docx.text.paragraph import Paragraph as DocxPara

from ..core.base_reader import registry
from ..core.errors import ConverterError
from ..core.models import FileFormat
from .converters import ConverterReader, antiword, pandoc, soffice_to_docx, with_temp_dir

log = logging.getLogger(__name__)


def _table_to_text(table: DocxTable) -> str:
    """Convert a docx table to a plain-text grid."""
    rows = []
    for row in table.rows:
        cells = [cell.text.strip().replace("\n", " ") for cell in row.cells]
        rows.append(" | ".join(cells))
    return "\n".join(rows)


def python_docx_text(path: Path, timeout=None) -> str:
    """
    Walk all block elements (paragraphs and tables) in body order.
    python-docx doesn't expose tables in paragraph order by default;
    we access the raw XML child elements to preserve ordering.
    """
    try:
        doc = DocxDocument(str(path))
    except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError) as exc:
        raise ConverterError(path, f"python-docx failed: {exc}", tool="python-docx")

    blocks: List[str] = []
    for child in doc.element.body.iterchildren():
        tag = child.tag.split("}")[-1] if "}" in child.tag else child.tag
        if tag == "p":
            blocks.append(DocxPara(child, doc).text)
        elif tag == "tbl":
            table_text = _table_to_text(DocxTable(child, doc))
            if table_text:
                blocks.append(table_text)
    log.debug(f"{path.name}: {len(blocks)} blocks via python-docx")
    return "\n".join(blocks)


def soffice_then_docx(path: Path, timeout=None) -> str:
    def convert(src: Path, tmp_dir: str) -> str:
        return python_docx_text(soffice_to_docx(src, tmp_dir, timeout))
    return with_temp_dir(convert, path)


@registry.register
class DocxReader(ConverterReader):
    SUPPORTED_FORMATS = [FileFormat.DOCX]

    def default_chain(self) -> List:
        return [python_docx_text, pandoc]


@registry.register
class DocReader(ConverterReader):
    SUPPORTED_FORMATS = [FileFormat.DOC]

    def default_chain(self) -> List:
        return [antiword, soffice_then_docx]

"""
HTML Reader
───────────
Visible text of the document body (scripts and styles dropped), one
line per text node. One record per file, no docvars.
"""

from typing import List

from bs4 import BeautifulSoup

from ..core.base_reader import BaseReader, registry
from ..core.config import ReadContext
from ..core.models import FileFormat, Record, ResolvedFile
from .text_reader import read_text

INVISIBLE_TAGS = ("script", "style", "noscript", "template")


def html_to_text(markup: str) -> str:
    soup = BeautifulSoup(markup, "lxml")
    for tag in soup(INVISIBLE_TAGS):
        tag.decompose()
    body = soup.body or soup
    return "\n".join(body.stripped_strings)


@registry.register
class HtmlReader(BaseReader):
    SUPPORTED_FORMATS = [FileFormat.HTML]

    def read(self, file: ResolvedFile, text_field, ctx: ReadContext) -> List[Record]:
        if text_field is not None:
            ctx.detail(f"{file.name}: text_field is ignored for HTML")
        return [Record(text=html_to_text(read_text(file, ctx)))]

"""
XML Reader
──────────
Flat XML only: the root's children are records, each record's child
elements and attributes are its fields.

`text_field` is either
  • a field name / 0-based field index  → that field is the text
  • an XPath expression (contains "/")  → every matched node is a record;
    its attributes and its parent's other child elements become docvars
"""

import logging
from typing import Any, Dict, List

import pandas as pd
from lxml import etree

from ..core.base_reader import BaseReader, as_text, frame_to_records, registry
from ..core.config import ReadContext
from ..core.errors import ConfigurationError, FormatError, TextFieldError
from ..core.models import FileFormat, Record, ResolvedFile

log = logging.getLogger(__name__)


def is_xpath(text_field) -> bool:
    return isinstance(text_field, str) and "/" in text_field


def local_name(element) -> str:
    return etree.QName(element).localname


def element_text(element) -> str:
    return "".join(element.itertext()).strip()


@registry.register
class XmlReader(BaseReader):
    SUPPORTED_FORMATS = [FileFormat.XML]

    def read(self, file: ResolvedFile, text_field, ctx: ReadContext) -> List[Record]:
        if text_field is None:
            raise ConfigurationError(
                f"text_field must be specified for XML file {file.path} "
                f"(a field name, index or XPath expression)"
            )

        root = self._parse(file)

        if is_xpath(text_field):
            records = self._read_xpath(root, text_field, file)
        else:
            frame = pd.DataFrame([self._fields(child) for child in self._record_elements(root)])
            if frame.empty:
                return []
            records = frame_to_records(frame, text_field, file.path)

        ctx.detail(f"{file.name}: {len(records)} XML records")
        return records

    # ── parsing ──────────────────────────────────────────────────────────

    @staticmethod
    def _parse(file: ResolvedFile):
        parser = etree.XMLParser(encoding=file.encoding, resolve_entities=False)
        try:
            return etree.parse(str(file.path), parser).getroot()
        except (etree.XMLSyntaxError, LookupError) as exc:
            raise FormatError(file.path, f"malformed XML: {exc}")

    @staticmethod
    def _record_elements(root) -> List[Any]:
        return [child for child in root if isinstance(child.tag, str)]

    @staticmethod
    def _fields(record) -> Dict[str, Any]:
        fields: Dict[str, Any] = dict(record.attrib)
        for child in record:
            if isinstance(child.tag, str):
                fields[local_name(child)] = element_text(child)
        return fields

    # ── XPath selection ──────────────────────────────────────────────────

    def _read_xpath(self, root, expression: str, file: ResolvedFile) -> List[Record]:
        try:
            nodes = root.xpath(expression)
        except etree.XPathError as exc:
            raise TextFieldError(file.path, f"invalid XPath '{expression}': {exc}")

        if not isinstance(nodes, list):
            # scalar results (count(), string()) are a single text
            return [Record(text=as_text(nodes))]

        records: List[Record] = []
        for node in nodes:
            if isinstance(node, etree._Element):
                docvars = self._sibling_fields(node)
                docvars.update(node.attrib)
                records.append(Record(text=element_text(node), docvars=docvars))
            else:
                records.append(Record(text=str(node)))
        return records

    @staticmethod
    def _sibling_fields(node) -> Dict[str, Any]:
        parent = node.getparent()
        if parent is None:
            return {}
        name = local_name(node)
        fields: Dict[str, Any] = dict(parent.attrib)
        for sibling in parent:
            if sibling is node or not isinstance(sibling.tag, str):
                continue
            if local_name(sibling) == name:
                continue
            fields[local_name(sibling)] = element_text(sibling)
        return fields

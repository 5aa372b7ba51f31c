"""
readtext Pipeline
─────────────────
The single public entry point for the whole system.

Usage
─────
    from readtext import readtext

    # plain text files, docvars from the file names
    df = readtext("inaugural/*.txt", docvarsfrom="filenames", dvsep="-",
                  docvarnames=["year", "president"])

    # one document per row of a CSV
    df = readtext("speeches.csv", text_field="speech")

    # mixed inputs: globs, archives and URLs in one call
    df = readtext(["data/*.json", "corpus.zip", "https://host/texts.tar.gz"],
                  text_field="text", ignore_missing_files=True)

The result is a pandas DataFrame: doc_id, text, then any docvars.
Warnings emitted during the call are kept in `df.attrs["warnings"]`.
"""

import inspect
import logging
import warnings
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import httpx
import pandas as pd

# Auto-register all readers by importing them
from .readers import (  # noqa: F401
    delimited_reader,
    docx_reader,
    html_reader,
    json_reader,
    pdf_reader,
    text_reader,
    xml_reader,
)
from .core.assembler import assemble
from .core.base_reader import BaseReader, registry
from .core.config import ReadContext, ReadtextConfig, scoped_verbosity
from .core.docvars import extract_filename_docvars
from .core.errors import ConfigurationError, ConverterTimeout
from .core.models import DocvarsSource, FileFormat, Record, ResolvedFile
from .core.normalize import replace_special_characters
from .core.resolver import FileSetResolver, bind_encodings

log = logging.getLogger(__name__)


class ReadtextPipeline:
    """
    Resolves files → picks the right reader per file → merges the records.

    Supported formats (out of the box):
        Text      : .txt (and anything unrecognised, with a warning)
        Delimited : .csv, .tsv, .tab
        Structured: .json, .xml, .html/.htm
        Binary    : .pdf, .docx, .doc (through converters)
        Archives  : .zip, .tar, .tar.gz/.tgz, .tar.bz2, .tar.xz, .gz
    """

    def __init__(
        self,
        config: Optional[ReadtextConfig] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self.config = config or ReadtextConfig()
        self.config.validate()
        self.http_client = http_client

    # ── whole call ────────────────────────────────────────────────────────

    def read(self, file: Union[str, Sequence[str]]) -> pd.DataFrame:
        config = self.config
        with scoped_verbosity(config.effective_verbosity) as level:
            ctx = ReadContext(level)
            ctx.summary(f"Reading texts from {file}")

            with FileSetResolver(
                config.missing_file_policy, ctx, http_client=self.http_client
            ) as resolver:
                paths = resolver.resolve(file)
                files = bind_encodings(paths, config.encodings)
                self._check_text_field(files, ctx)
                record_sets = self._read_all(files, ctx)
                filename_docvars = self._filename_docvars(files, ctx)

            result = assemble(files, record_sets, filename_docvars, ctx)
            n = len(result)
            ctx.summary(f"read {n} document{'' if n == 1 else 's'}")

        result.attrs["warnings"] = list(ctx.warnings)
        return result

    # ── per file ──────────────────────────────────────────────────────────

    def read_file(self, file: ResolvedFile, ctx: ReadContext) -> List[Record]:
        """Dispatch one resolved file to its reader."""
        fmt = registry.dispatch_format(file, ctx)
        reader = self._build_reader(registry.get(fmt), fmt)

        ctx.detail(f"Reading '{file.name}' with {type(reader).__name__}")
        try:
            records = reader.read(file, self.config.text_field, ctx)
        except ConverterTimeout as exc:
            ctx.error(f"Skipping {file.path}: {exc}")
            return []

        if not records:
            ctx.warn(f"No documents read from {file.path}")
        if self.config.replace_special_characters:
            for record in records:
                record.text = replace_special_characters(record.text)

        ctx.detail(f"'{file.name}': {len(records)} document(s)")
        return records

    def _read_all(self, files: List[ResolvedFile], ctx: ReadContext) -> List[List[Record]]:
        if self.config.workers > 1 and len(files) > 1:
            log.debug(f"Reading {len(files)} files on {self.config.workers} threads")
            with ThreadPoolExecutor(max_workers=self.config.workers) as pool:
                # map() yields in submission order
                return list(pool.map(lambda f: self.read_file(f, ctx), files))
        return [self.read_file(f, ctx) for f in files]

    # ── utility ───────────────────────────────────────────────────────────

    def _check_text_field(self, files: List[ResolvedFile], ctx: ReadContext) -> None:
        """Fail before reading anything when a file needs a text_field and none is given."""
        if self.config.text_field is not None:
            return
        for f in files:
            fmt = f.declared_type
            needed = fmt is not None and (
                fmt.requires_text_field
                or (fmt is FileFormat.JSON and json_reader.needs_text_field(f, ctx))
            )
            if needed:
                raise ConfigurationError(
                    f"text_field must be specified for {fmt.value} file {f.path}"
                )

    def _filename_docvars(self, files: List[ResolvedFile], ctx: ReadContext) -> Optional[pd.DataFrame]:
        source = self.config.docvarsfrom
        if source is DocvarsSource.METADATA:
            return None
        return extract_filename_docvars(
            [f.path for f in files],
            source,
            dvsep=self.config.dvsep,
            docvarnames=self.config.docvarnames,
            ctx=ctx,
        )

    def _build_reader(self, reader_cls, fmt: FileFormat) -> BaseReader:
        """
        Construct reader, passing only kwargs the __init__ accepts.
        (TextReader has no sep, so we can't blindly pass all.)
        """
        available: Dict[str, Any] = dict(self.config.reader_options)
        available["converter"] = self.config.converters.get(fmt)
        available["converter_timeout"] = self.config.converter_timeout

        sig    = inspect.signature(reader_cls.__init__)
        params = set(sig.parameters.keys()) - {"self"}
        kwargs = {k: v for k, v in available.items() if k in params}
        return reader_cls(**kwargs)


def readtext(
    file: Union[str, Sequence[str]],
    ignore_missing_files: bool = False,
    text_field: Optional[Union[str, int]] = None,
    docvarsfrom: Union[str, DocvarsSource] = "metadata",
    dvsep: str = "_",
    docvarnames: Optional[Sequence[str]] = None,
    encoding: Optional[Union[str, Sequence[str]]] = None,
    verbosity: Optional[int] = None,
    workers: int = 1,
    converter_timeout: Optional[float] = None,
    replace_special_characters: bool = False,
    converters: Optional[Dict[FileFormat, Callable]] = None,
    http_client: Optional[httpx.Client] = None,
    **reader_options,
) -> pd.DataFrame:
    """
    Read texts and their document-level variables from one or more sources.

    Parameters
    ──────────
    file                 : path, glob pattern, archive or URL, or a list of them
    ignore_missing_files : if False, an element matching no file is an error
    text_field           : column name / 0-based index (csv, tsv, json, xml)
                           or XPath expression (xml) holding the text
    docvarsfrom          : "metadata" (content only), "filenames" or "filepaths"
    dvsep                : regular expression separating docvars in names
    docvarnames          : names for the file-name docvars (default docvar1, ...)
    encoding             : one encoding for all files, or one per resolved file
    verbosity            : 0 errors, 1 + warnings, 2 + summary, 3 + per-file detail
    workers              : read files on a thread pool of this size
    converter_timeout    : seconds before a pdf/doc/docx converter is abandoned;
                           the file is then skipped
    replace_special_characters : normalise dashes, spaces and quotes by
                           Unicode category
    converters           : FileFormat → callable(path) -> text overrides
    http_client          : httpx.Client used for URL downloads
    **reader_options     : passed to readers that accept them (sep, quotechar)
    """
    if "textfield" in reader_options:
        warnings.warn("textfield is deprecated; use text_field instead", DeprecationWarning, stacklevel=2)
        legacy = reader_options.pop("textfield")
        if text_field is None:
            text_field = legacy

    config = ReadtextConfig(
        text_field=text_field,
        docvarsfrom=docvarsfrom,
        dvsep=dvsep,
        docvarnames=docvarnames,
        encoding=encoding,
        ignore_missing_files=ignore_missing_files,
        verbosity=verbosity,
        workers=workers,
        converter_timeout=converter_timeout,
        replace_special_characters=replace_special_characters,
        reader_options=reader_options,
        converters=dict(converters or {}),
    )
    return ReadtextPipeline(config, http_client=http_client).read(file)

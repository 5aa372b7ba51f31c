"""
External converters
───────────────────
A converter turns a file path into text or raises ConverterError.
Binary formats (PDF, Word) are read entirely through converters so that
tests, or callers, can swap in their own (`ReadtextConfig.converters`).

The defaults shell out to command-line tools and capture stdout:
    pdftotext  (poppler / xpdf)   PDF
    antiword                      legacy .doc
    pandoc                        .docx fallback
    soffice    (LibreOffice)      .doc → .docx fallback
"""

import logging
import shutil
import subprocess
import tempfile
from abc import abstractmethod
from functools import partial
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from ..core.base_reader import BaseReader
from ..core.config import ReadContext
from ..core.errors import ConverterError, ConverterTimeout
from ..core.models import Record, ResolvedFile

log = logging.getLogger(__name__)

Converter = Callable[[Path], str]


def run_tool(
    args: Sequence[str],
    path: Path,
    timeout: Optional[float] = None,
) -> str:
    """Run a converter executable and return its stdout as text."""
    tool = args[0]
    log.debug(f"Running {' '.join(args)} (timeout={timeout})")
    try:
        result = subprocess.run(list(args), capture_output=True, timeout=timeout)
    except FileNotFoundError:
        raise ConverterError(path, f"{tool} not found. Install {tool} to read this file.", tool=tool)
    except subprocess.TimeoutExpired:
        raise ConverterTimeout(path, f"{tool} timed out after {timeout}s", tool=tool)

    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace").strip()
        raise ConverterError(
            path, f"{tool} exited with status {result.returncode}: {stderr[:300]}", tool=tool
        )
    return result.stdout.decode("utf-8", errors="replace")


# ── default converters ───────────────────────────────────────────────────────

def pdftotext(path: Path, timeout: Optional[float] = None) -> str:
    return run_tool(["pdftotext", "-enc", "UTF-8", str(path), "-"], path, timeout)


def antiword(path: Path, timeout: Optional[float] = None) -> str:
    return run_tool(["antiword", str(path)], path, timeout)


def pandoc(path: Path, timeout: Optional[float] = None) -> str:
    return run_tool(["pandoc", str(path), "-t", "plain", "--wrap=none"], path, timeout)


def soffice_to_docx(path: Path, outdir: str, timeout: Optional[float] = None) -> Path:
    """Use LibreOffice (soffice) to convert .doc → .docx inside `outdir`."""
    run_tool(
        ["soffice", "--headless", "--convert-to", "docx", "--outdir", outdir, str(path)],
        path,
        timeout,
    )
    converted = list(Path(outdir).glob("*.docx"))
    if not converted:
        raise ConverterError(path, "LibreOffice produced no .docx output", tool="soffice")
    return converted[0]


def with_temp_dir(fn: Callable[[Path, str], str], path: Path) -> str:
    tmp_dir = tempfile.mkdtemp(prefix="readtext-")
    try:
        return fn(path, tmp_dir)
    finally:
        shutil.rmtree(tmp_dir, ignore_errors=True)


# ── reader base ──────────────────────────────────────────────────────────────

class ConverterReader(BaseReader):
    """
    Whole-file reader backed by a converter chain.

    The primary converter runs first; on ConverterError each fallback is
    tried in turn. A timeout is never retried. An injected converter
    replaces the whole chain.
    """

    def __init__(
        self,
        converter: Optional[Converter] = None,
        converter_timeout: Optional[float] = None,
    ):
        self.timeout = converter_timeout
        if converter is not None:
            self.chain: List[Converter] = [converter]
        else:
            self.chain = [partial(fn, timeout=self.timeout) for fn in self.default_chain()]

    @abstractmethod
    def default_chain(self) -> List[Callable]:
        """Converters tried in order when none is injected."""

    def read(self, file: ResolvedFile, text_field, ctx: ReadContext) -> List[Record]:
        first_error: Optional[ConverterError] = None
        for convert in self.chain:
            try:
                text = convert(file.path)
            except ConverterTimeout:
                raise
            except ConverterError as exc:
                first_error = first_error or exc
                ctx.detail(f"{file.name}: {exc}; trying next converter")
                continue
            return [Record(text=text)]
        raise first_error

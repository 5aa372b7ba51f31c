"""
File Set Resolver
─────────────────
Turns the `file` argument (paths, glob patterns, archives, URLs, or a
list mixing them) into an ordered, de-duplicated list of local files.

  • literal path       → the file; a directory is an error (use "dir/*")
  • glob pattern       → sorted matches; matched directories are walked
  • archive            → extracted to a temporary directory; if it holds
                         a single top-level directory, that one is used
  • http(s) URL        → downloaded to a temporary directory, then
                         resolved as a local path (so a URL to a .zip works)

Temporary directories live until the resolver is closed.
"""

import glob
import gzip
import logging
import os
import re
import shutil
import tarfile
import tempfile
import zipfile
from contextlib import ExitStack
from pathlib import Path
from typing import List, Optional, Sequence, Union
from urllib.parse import unquote, urlparse

import httpx

from .config import ReadContext
from .errors import (
    ConfigurationError,
    DirectoryInputError,
    FetchError,
    NoMatchingFilesError,
    ResolutionError,
)
from .models import MissingFilePolicy, ResolvedFile, format_for_path

log = logging.getLogger(__name__)

ARCHIVE_SUFFIXES = (
    ".zip", ".tar", ".tar.gz", ".tgz", ".tar.bz2", ".tbz2", ".tar.xz", ".txz", ".gz",
)
GLOB_CHARS   = re.compile(r"[*?\[]")
URL_SCHEMES  = ("http", "https")
IGNORED_ENTRIES = ("__MACOSX",)

USER_AGENT    = "readtext"
FETCH_TIMEOUT = 60.0


def is_url(element: str) -> bool:
    return urlparse(element).scheme.lower() in URL_SCHEMES


def is_glob(element: str) -> bool:
    return bool(GLOB_CHARS.search(element))


def is_archive(path: Path) -> bool:
    return path.name.lower().endswith(ARCHIVE_SUFFIXES)


def _visible(path: Path) -> bool:
    return not path.name.startswith(".") and path.name not in IGNORED_ENTRIES


def extract_archive(archive: Path, dest: Path) -> None:
    """Unpack a zip / tar(.gz|.bz2|.xz) / single-file .gz archive into `dest`."""
    name = archive.name.lower()
    try:
        if name.endswith(".zip"):
            with zipfile.ZipFile(archive) as zf:
                zf.extractall(dest)
        elif tarfile.is_tarfile(archive):
            with tarfile.open(archive) as tf:
                if hasattr(tarfile, "data_filter"):
                    tf.extractall(dest, filter="data")
                else:
                    tf.extractall(dest)
        elif name.endswith(".gz"):
            with gzip.open(archive, "rb") as src, open(dest / archive.name[:-3], "wb") as out:
                shutil.copyfileobj(src, out)
        else:
            raise ResolutionError(f"Unsupported archive format: {archive}")
    except (zipfile.BadZipFile, tarfile.TarError, OSError) as exc:
        raise ResolutionError(f"Cannot extract archive {archive}: {exc}") from exc


def bind_encodings(paths: Sequence[Path], encodings: Sequence[str]) -> List[ResolvedFile]:
    """
    Pair each resolved path with its encoding.
    One encoding applies to every file; more than one must match the
    number of files exactly, position by position.
    """
    if len(encodings) > 1 and len(encodings) != len(paths):
        raise ConfigurationError(
            f"encoding parameter must be length 1, or as long as the number of files "
            f"({len(encodings)} encodings for {len(paths)} files)"
        )
    if len(encodings) > 1:
        per_file = list(encodings)
    else:
        per_file = [encodings[0] if encodings else None] * len(paths)
    return [
        ResolvedFile(path=p, declared_type=format_for_path(p), encoding=enc)
        for p, enc in zip(paths, per_file)
    ]


class FileSetResolver:
    """
    Expands input specifications into local files.

    Usage
    ─────
        with FileSetResolver(MissingFilePolicy.FAIL, ctx) as resolver:
            paths = resolver.resolve(["data/*.txt", "https://host/corpus.zip"])
            ...                         # read them before leaving the block
    """

    def __init__(
        self,
        policy: MissingFilePolicy = MissingFilePolicy.FAIL,
        ctx: Optional[ReadContext] = None,
        http_client: Optional[httpx.Client] = None,
        fetch_timeout: float = FETCH_TIMEOUT,
    ):
        self.policy        = policy
        self.ctx           = ctx or ReadContext()
        self.fetch_timeout = fetch_timeout
        self._http_client  = http_client
        self._stack        = ExitStack()

    def __enter__(self) -> "FileSetResolver":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Remove downloaded files and extracted archives."""
        self._stack.close()

    # ── public ────────────────────────────────────────────────────────────

    def resolve(self, spec: Union[str, Sequence[str]]) -> List[Path]:
        elements = [spec] if isinstance(spec, str) else spec
        if isinstance(elements, (bytes, bytearray)) or not isinstance(elements, Sequence):
            raise ConfigurationError("file must be a string or a list of strings")
        if not elements or not all(isinstance(e, str) for e in elements):
            raise ConfigurationError("file must be a string or a list of strings")

        files: List[Path] = []
        seen = set()
        for element in elements:
            matched = self._resolve_element(element)
            if not matched:
                if self.policy is MissingFilePolicy.FAIL:
                    raise NoMatchingFilesError(element)
                self.ctx.detail(f"No files match '{element}', ignoring")
                continue

            for path in matched:
                key = os.path.realpath(path)
                if key in seen:
                    continue
                seen.add(key)
                files.append(path)
                self.ctx.detail(f"Resolved '{element}' → {path}")
        return files

    # ── private ───────────────────────────────────────────────────────────

    def _resolve_element(self, element: str) -> List[Path]:
        if is_url(element):
            return self._resolve_path(self._fetch(element), element)
        if is_glob(element) and not os.path.lexists(element):
            return self._expand_glob(element)
        return self._resolve_path(Path(element), element)

    def _resolve_path(self, path: Path, element: str) -> List[Path]:
        if path.is_dir():
            raise DirectoryInputError(element)
        if not path.is_file():
            return []
        if is_archive(path):
            return self._extract(path)
        return [path]

    def _expand_glob(self, pattern: str) -> List[Path]:
        files: List[Path] = []
        for match in sorted(glob.glob(pattern, recursive=True)):
            files.extend(self._expand_entry(Path(match)))
        return files

    def _expand_entry(self, path: Path) -> List[Path]:
        if path.is_dir():
            return self._walk(path)
        if is_archive(path):
            return self._extract(path)
        return [path] if path.is_file() else []

    def _walk(self, directory: Path) -> List[Path]:
        files: List[Path] = []
        for entry in sorted(directory.iterdir()):
            if _visible(entry):
                files.extend(self._expand_entry(entry))
        return files

    def _extract(self, archive: Path) -> List[Path]:
        tmp_dir = Path(self._stack.enter_context(tempfile.TemporaryDirectory(prefix="readtext-")))
        extract_archive(archive, tmp_dir)
        self.ctx.detail(f"Extracted {archive} → {tmp_dir}")

        entries = [e for e in tmp_dir.iterdir() if _visible(e)]
        if len(entries) == 1 and entries[0].is_dir():
            return self._walk(entries[0])
        return self._walk(tmp_dir)

    def _client(self) -> httpx.Client:
        if self._http_client is None:
            self._http_client = self._stack.enter_context(httpx.Client(
                follow_redirects=True,
                timeout=self.fetch_timeout,
                headers={"User-Agent": USER_AGENT},
            ))
        return self._http_client

    def _fetch(self, url: str) -> Path:
        tmp_dir = Path(self._stack.enter_context(tempfile.TemporaryDirectory(prefix="readtext-")))
        name = Path(unquote(urlparse(url).path)).name or "download"

        self.ctx.detail(f"Downloading {url}")
        try:
            response = self._client().get(url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise FetchError(f"Could not download {url}: {exc}") from exc

        log.debug(f"GET {url} → {response.status_code}, {len(response.content)} bytes")
        target = tmp_dir / name
        target.write_bytes(response.content)
        return target

import gzip
import io
import tarfile
import zipfile
from pathlib import Path

import httpx
import pytest

from readtext.core.errors import (
    ConfigurationError,
    DirectoryInputError,
    FetchError,
    NoMatchingFilesError,
)
from readtext.core.models import FileFormat, MissingFilePolicy
from readtext.core.resolver import FileSetResolver, bind_encodings


def make_zip(path: Path, members: dict) -> Path:
    with zipfile.ZipFile(path, "w") as zf:
        for name, content in members.items():
            zf.writestr(name, content)
    return path


def make_tar_gz(path: Path, members: dict) -> Path:
    with tarfile.open(path, "w:gz") as tf:
        for name, content in members.items():
            data = content.encode("utf-8")
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tf.addfile(info, io.BytesIO(data))
    return path


def test_literal_path_resolves_to_itself(write) -> None:
    path = write("a.txt")

    with FileSetResolver() as resolver:
        assert resolver.resolve(str(path)) == [path]


def test_glob_is_sorted_and_walks_matched_directories(tmp_path: Path, write) -> None:
    write("corpus/pos/b.txt")
    write("corpus/neg/a.txt")
    write("corpus/neg/c.txt")

    with FileSetResolver() as resolver:
        paths = resolver.resolve(str(tmp_path / "corpus" / "*"))

    rel = [p.relative_to(tmp_path).as_posix() for p in paths]
    assert rel == ["corpus/neg/a.txt", "corpus/neg/c.txt", "corpus/pos/b.txt"]


def test_duplicates_are_dropped_keeping_first_position(tmp_path: Path, write) -> None:
    a = write("a.txt")
    write("b.txt")

    with FileSetResolver() as resolver:
        paths = resolver.resolve([str(tmp_path / "b.txt"), str(tmp_path / "*.txt"), str(a)])

    assert [p.name for p in paths] == ["b.txt", "a.txt"]


def test_directory_without_wildcard_is_fatal(tmp_path: Path, write) -> None:
    write("texts/a.txt")

    with FileSetResolver(MissingFilePolicy.IGNORE) as resolver:
        with pytest.raises(DirectoryInputError) as excinfo:
            resolver.resolve(str(tmp_path / "texts"))

    assert "texts/*" in str(excinfo.value)


def test_missing_file_fails_by_default(tmp_path: Path) -> None:
    missing = str(tmp_path / "nope.txt")

    with FileSetResolver() as resolver:
        with pytest.raises(NoMatchingFilesError) as excinfo:
            resolver.resolve(missing)

    assert excinfo.value.element == missing


def test_glob_matching_nothing_fails_by_default(tmp_path: Path) -> None:
    with FileSetResolver() as resolver:
        with pytest.raises(NoMatchingFilesError):
            resolver.resolve(str(tmp_path / "*.csv"))


def test_ignore_policy_keeps_other_elements(tmp_path: Path, write) -> None:
    present = write("a.txt")

    with FileSetResolver(MissingFilePolicy.IGNORE) as resolver:
        paths = resolver.resolve([str(tmp_path / "nope.txt"), str(present)])

    assert paths == [present]


@pytest.mark.parametrize("spec", [123, [b"a.txt"], ["a.txt", None], []])
def test_non_string_spec_is_a_configuration_error(spec) -> None:
    with FileSetResolver() as resolver:
        with pytest.raises(ConfigurationError):
            resolver.resolve(spec)


def test_zip_with_single_top_level_directory(tmp_path: Path) -> None:
    archive = make_zip(tmp_path / "corpus.zip", {
        "corpus/one.txt": "first",
        "corpus/two.txt": "second",
    })

    with FileSetResolver() as resolver:
        paths = resolver.resolve(str(archive))
        assert [p.name for p in paths] == ["one.txt", "two.txt"]
        assert paths[0].read_text(encoding="utf-8") == "first"

    # extracted files are removed when the resolver closes
    assert not paths[0].exists()


def test_tar_gz_top_level_members(tmp_path: Path) -> None:
    archive = make_tar_gz(tmp_path / "corpus.tar.gz", {"b.txt": "bee", "a.txt": "ay"})

    with FileSetResolver() as resolver:
        paths = resolver.resolve(str(archive))
        assert [p.name for p in paths] == ["a.txt", "b.txt"]


def test_plain_gzip_file_is_decompressed(tmp_path: Path) -> None:
    archive = tmp_path / "speech.txt.gz"
    with gzip.open(archive, "wb") as fh:
        fh.write(b"compressed words")

    with FileSetResolver() as resolver:
        (path,) = resolver.resolve(str(archive))
        assert path.name == "speech.txt"
        assert path.read_bytes() == b"compressed words"


def test_empty_archive_counts_as_missing(tmp_path: Path) -> None:
    archive = make_zip(tmp_path / "empty.zip", {})

    with FileSetResolver() as resolver:
        with pytest.raises(NoMatchingFilesError):
            resolver.resolve(str(archive))


def test_url_is_downloaded_keeping_its_base_name() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/files/speech.txt"
        return httpx.Response(200, content=b"hello from afar")

    client = httpx.Client(transport=httpx.MockTransport(handler))
    with FileSetResolver(http_client=client) as resolver:
        (path,) = resolver.resolve("https://example.org/files/speech.txt")
        assert path.name == "speech.txt"
        assert path.read_text(encoding="utf-8") == "hello from afar"


def test_url_to_an_archive_is_extracted(tmp_path: Path) -> None:
    payload = make_zip(tmp_path / "remote.zip", {"x.txt": "x", "y.txt": "y"}).read_bytes()
    client = httpx.Client(transport=httpx.MockTransport(
        lambda request: httpx.Response(200, content=payload)
    ))

    with FileSetResolver(http_client=client) as resolver:
        paths = resolver.resolve("http://example.org/remote.zip")
        assert [p.name for p in paths] == ["x.txt", "y.txt"]


def test_failed_download_is_fatal_even_when_ignoring_missing_files() -> None:
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(404)))

    with FileSetResolver(MissingFilePolicy.IGNORE, http_client=client) as resolver:
        with pytest.raises(FetchError):
            resolver.resolve("https://example.org/gone.txt")


def test_bind_single_encoding_to_every_file() -> None:
    paths = [Path("a.txt"), Path("b.csv")]

    files = bind_encodings(paths, ["latin-1"])

    assert [f.encoding for f in files] == ["latin-1", "latin-1"]
    assert [f.declared_type for f in files] == [FileFormat.TXT, FileFormat.CSV]


def test_bind_one_encoding_per_file_positionally() -> None:
    files = bind_encodings([Path("a.txt"), Path("b.txt")], ["utf-8", "latin-1"])

    assert [f.encoding for f in files] == ["utf-8", "latin-1"]


def test_bind_without_encoding_leaves_reader_default() -> None:
    files = bind_encodings([Path("a.foo")], [])

    assert files[0].encoding is None
    assert files[0].declared_type is None


def test_bind_encoding_count_mismatch_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        bind_encodings([Path("a.txt"), Path("b.txt"), Path("c.txt")], ["utf-8", "latin-1"])

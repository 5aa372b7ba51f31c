from collections.abc import Iterator
from pathlib import Path

import pytest

from readtext.core import config


@pytest.fixture(autouse=True)
def reset_default_verbosity() -> Iterator[None]:
    saved = config.get_default_verbosity()
    config.set_default_verbosity(1)
    yield
    config.set_default_verbosity(saved)


@pytest.fixture
def write(tmp_path: Path):
    """Create a UTF-8 text file under tmp_path, making parent directories."""

    def _write(relative: str, content: str = "text", encoding: str = "utf-8") -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding=encoding)
        return path

    return _write

import logging

import pytest

from readtext.core import config
from readtext.core.config import ReadContext, ReadtextConfig, scoped_verbosity
from readtext.core.errors import ConfigurationError
from readtext.core.models import DocvarsSource, MissingFilePolicy, Verbosity


def test_defaults_validate() -> None:
    cfg = ReadtextConfig()
    cfg.validate()

    assert cfg.docvarsfrom is DocvarsSource.METADATA
    assert cfg.encodings == []
    assert cfg.missing_file_policy is MissingFilePolicy.FAIL


@pytest.mark.parametrize("value, expected", [
    ("filenames", DocvarsSource.FILENAMES),
    ("filepaths", DocvarsSource.FILEPATHS),
    ("none", DocvarsSource.METADATA),
    (None, DocvarsSource.METADATA),
])
def test_docvarsfrom_values(value, expected) -> None:
    cfg = ReadtextConfig(docvarsfrom=value)
    cfg.validate()

    assert cfg.docvarsfrom is expected


@pytest.mark.parametrize("overrides", [
    {"docvarsfrom": "content"},
    {"dvsep": ""},
    {"dvsep": "("},
    {"text_field": 1.5},
    {"text_field": True},
    {"docvarnames": ["year", ""]},
    {"encoding": ["utf-8", 8]},
    {"workers": 0},
    {"converter_timeout": 0},
    {"converters": {"pdf": lambda path: ""}},
])
def test_invalid_options(overrides) -> None:
    with pytest.raises(ConfigurationError):
        ReadtextConfig(**overrides).validate()


def test_configuration_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        ReadtextConfig(workers=-2).validate()


def test_single_docvarname_is_wrapped() -> None:
    cfg = ReadtextConfig(docvarnames="year")
    cfg.validate()

    assert cfg.docvarnames == ["year"]


def test_scoped_verbosity_restores_on_error() -> None:
    with pytest.raises(RuntimeError):
        with scoped_verbosity(3) as level:
            assert level == 3
            assert config.get_default_verbosity() == 3
            raise RuntimeError("boom")

    assert config.get_default_verbosity() == 1


def test_scoped_verbosity_none_keeps_the_default() -> None:
    config.set_default_verbosity(2)

    with scoped_verbosity(None) as level:
        assert level == 2


def test_effective_verbosity_falls_back_to_process_default() -> None:
    config.set_default_verbosity(0)

    assert ReadtextConfig().effective_verbosity == 0
    assert ReadtextConfig(verbosity=3).effective_verbosity == 3


def test_invalid_environment_verbosity_falls_back(monkeypatch, caplog) -> None:
    monkeypatch.setenv(config.VERBOSITY_ENV, "loud")

    assert config._verbosity_from_env() == Verbosity.WARNINGS
    assert "READTEXT_VERBOSITY" in caplog.text


def test_environment_verbosity(monkeypatch) -> None:
    monkeypatch.setenv(config.VERBOSITY_ENV, "3")

    assert config._verbosity_from_env() == 3


def test_context_gates_messages_by_verbosity(caplog) -> None:
    caplog.set_level(logging.INFO, logger="readtext")
    ctx = ReadContext(Verbosity.SUMMARY)

    ctx.summary("summary line")
    ctx.detail("detail line")
    ctx.warn("warning line")

    assert "summary line" in caplog.text
    assert "detail line" not in caplog.text
    assert ctx.warnings == ["warning line"]


def test_errors_are_logged_at_any_verbosity(caplog) -> None:
    ctx = ReadContext(Verbosity.ERRORS)

    ctx.warn("quiet warning")
    ctx.error("loud error")

    assert "loud error" in caplog.text
    assert "quiet warning" not in caplog.text
    assert ctx.errors == ["loud error"]

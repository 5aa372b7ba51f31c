from .pipeline import ReadtextPipeline, readtext
from .core.config import (
    ReadContext,
    ReadtextConfig,
    get_default_verbosity,
    scoped_verbosity,
    set_default_verbosity,
)
from .core.errors import (
    ConfigurationError,
    ConverterError,
    ConverterTimeout,
    DirectoryInputError,
    FetchError,
    FormatError,
    NoMatchingFilesError,
    ReadtextError,
    ResolutionError,
    TextFieldError,
)
from .core.models import DocvarsSource, FileFormat, Record, ResolvedFile, Verbosity

__version__ = "0.1.0"

__all__ = [
    "readtext",
    "ReadtextPipeline",
    "ReadtextConfig",
    "ReadContext",
    "get_default_verbosity",
    "set_default_verbosity",
    "scoped_verbosity",
    "DocvarsSource",
    "FileFormat",
    "Record",
    "ResolvedFile",
    "Verbosity",
    "ReadtextError",
    "ConfigurationError",
    "ResolutionError",
    "NoMatchingFilesError",
    "DirectoryInputError",
    "FetchError",
    "FormatError",
    "TextFieldError",
    "ConverterError",
    "ConverterTimeout",
]

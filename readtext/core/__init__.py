from .models import DocvarsSource, FileFormat, MissingFilePolicy, Record, ResolvedFile, Verbosity
from .base_reader import BaseReader, registry

__all__ = [
    "DocvarsSource",
    "FileFormat",
    "MissingFilePolicy",
    "Record",
    "ResolvedFile",
    "Verbosity",
    "BaseReader",
    "registry",
]

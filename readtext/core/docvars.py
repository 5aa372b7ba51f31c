"""
Docvars from file names and paths
─────────────────────────────────
"1789-Washington.txt" with dvsep="-"  →  docvar1=1789, docvar2="Washington"

With DocvarsSource.FILEPATHS the directory components come first, each
split on dvsep as well. Columns are then type-imputed as a whole:
integer, float, logical, else left as text. The first parser that
accepts every value of the column wins.
"""

import re
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from .config import ReadContext
from .models import DocvarsSource

NA_STRINGS    = {"", "NA"}
TRUE_STRINGS  = {"TRUE", "True", "true", "T"}
FALSE_STRINGS = {"FALSE", "False", "false", "F"}

INTEGER_RE = re.compile(r"^[+-]?\d+$")
FLOAT_RE   = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$|^[+-]?(inf|Inf|NaN|nan)$")

INT64_MIN, INT64_MAX = -2**63, 2**63 - 1


def default_name(position: int) -> str:
    return f"docvar{position}"


def split_segments(path: Path, dvsep: str, source: DocvarsSource) -> List[str]:
    """Ordered name segments: base name sans extension, preceded by directories for FILEPATHS."""
    path = Path(path)
    segments: List[str] = []
    if source is DocvarsSource.FILEPATHS:
        parent = path.parent
        dirs = parent.parts[1:] if parent.anchor else parent.parts
        for part in dirs:
            if part in ("", "."):
                continue
            segments.extend(s for s in re.split(dvsep, part) if s)
    segments.extend(re.split(dvsep, path.stem))
    return segments


def name_segments(
    segments: Sequence[str],
    docvarnames: Optional[Sequence[str]],
) -> Tuple[Dict[str, str], bool]:
    """
    Name each segment. Supplied names are used in order; segments beyond
    them get positional default names, surplus names are dropped.
    Returns the mapping and whether the counts disagreed.
    """
    names = list(docvarnames or [])
    mismatch = bool(names) and len(names) != len(segments)
    named: Dict[str, str] = {}
    for i, value in enumerate(segments, start=1):
        name = names[i - 1] if i <= len(names) else default_name(i)
        named[name] = value
    return named, mismatch


def extract_filename_docvars(
    paths: Sequence[Path],
    source: DocvarsSource,
    dvsep: str = "_",
    docvarnames: Optional[Sequence[str]] = None,
    ctx: Optional[ReadContext] = None,
) -> pd.DataFrame:
    """One row per path, one column per named segment, types imputed per column."""
    ctx = ctx or ReadContext()
    rows: List[Dict[str, str]] = []
    for path in paths:
        segments = split_segments(path, dvsep, source)
        named, mismatch = name_segments(segments, docvarnames)
        if mismatch:
            ctx.summary(
                f"{path}: {len(segments)} docvar segments but {len(docvarnames)} "
                f"docvarnames supplied"
            )
        rows.append(named)
    return impute_docvar_types(pd.DataFrame(rows, index=range(len(rows))))


# ── type imputation ──────────────────────────────────────────────────────────

def _is_missing(value) -> bool:
    return value is None or (isinstance(value, float) and value != value) or value in NA_STRINGS


def _parse_integer(value: str) -> int:
    if not INTEGER_RE.match(value.strip()):
        raise ValueError(value)
    number = int(value)
    # wider than int64: left to the float parser
    if not INT64_MIN <= number <= INT64_MAX:
        raise ValueError(value)
    return number


def _parse_float(value: str) -> float:
    if not FLOAT_RE.match(value.strip()):
        raise ValueError(value)
    return float(value)


def _parse_logical(value: str) -> bool:
    if value in TRUE_STRINGS:
        return True
    if value in FALSE_STRINGS:
        return False
    raise ValueError(value)


# Ordered attempt list: (parser, dtype without missing, dtype with missing)
TYPE_PARSERS: List[Tuple[Callable[[str], object], str, str]] = [
    (_parse_integer, "int64",   "Int64"),
    (_parse_float,   "float64", "float64"),
    (_parse_logical, "bool",    "boolean"),
]


def impute_column(values: pd.Series) -> pd.Series:
    """Convert a whole column with the first parser that accepts every value."""
    missing = [_is_missing(v) for v in values]
    present = [str(v) for v, m in zip(values, missing) if not m]
    if not present:
        return values

    for parser, dtype, nullable_dtype in TYPE_PARSERS:
        try:
            parsed = iter([parser(v) for v in present])
        except ValueError:
            continue
        converted = [None if m else next(parsed) for m in missing]
        return pd.Series(
            converted,
            index=values.index,
            name=values.name,
            dtype=nullable_dtype if any(missing) else dtype,
        )

    return pd.Series(
        [None if m else str(v) for v, m in zip(values, missing)],
        index=values.index,
        name=values.name,
        dtype=object,
    )


def impute_docvar_types(frame: pd.DataFrame) -> pd.DataFrame:
    return pd.DataFrame(
        {col: impute_column(frame[col]) for col in frame.columns},
        index=frame.index,
    )

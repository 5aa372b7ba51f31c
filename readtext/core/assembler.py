"""
Result assembly
───────────────
Merges every file's records (plus optional file-name docvars) into one
DataFrame: doc_id, text, then the union of docvar columns in first-seen
order. Absent values are left missing.

Document ids
  • one record      → base name              "speech.txt"
  • several records → base name + position   "speeches.csv.1", "speeches.csv.2"
  • same base name in different directories → every id is prefixed with
    the shortest trailing part of its directory that makes ids unique
                                             "2019/speech.txt", "2020/speech.txt"
"""

import os
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from .config import ReadContext
from .models import Record, ResolvedFile

ID_COLUMNS = ("doc_id", "text")


def record_ids(name: str, count: int) -> List[str]:
    if count == 1:
        return [name]
    return [f"{name}.{i}" for i in range(1, count + 1)]


def _dir_parts(path: Path) -> List[str]:
    parent = Path(os.path.abspath(path)).parent
    return list(parent.parts[1:] if parent.anchor else parent.parts)


def directory_prefixes(paths: Sequence[Path]) -> List[str]:
    """
    Shortest trailing directory fragment for each path such that
    (fragment, base name) pairs are unique. Empty strings when base names
    are already unique.
    """
    names = [Path(p).name for p in paths]
    if len(set(names)) == len(names):
        return [""] * len(paths)

    parts = [_dir_parts(p) for p in paths]
    depth = max(len(p) for p in parts)
    for k in range(1, depth + 1):
        prefixes = ["/".join(p[-k:]) for p in parts]
        if len(set(zip(prefixes, names))) == len(names):
            return prefixes
    return ["/".join(p) for p in parts]


def assign_doc_ids(
    paths: Sequence[Path],
    counts: Sequence[int],
    ctx: Optional[ReadContext] = None,
) -> List[List[str]]:
    """Ids for every record of every file, grouped per file."""
    ctx = ctx or ReadContext()
    contributing = [i for i, n in enumerate(counts) if n > 0]
    prefixes = dict(zip(contributing, directory_prefixes([paths[i] for i in contributing])))

    ids: List[List[str]] = []
    for i, (path, count) in enumerate(zip(paths, counts)):
        base = record_ids(Path(path).name, count)
        prefix = prefixes.get(i, "")
        ids.append([f"{prefix}/{rid}" if prefix else rid for rid in base])

    return _ensure_unique(ids, ctx)


def _ensure_unique(ids: List[List[str]], ctx: ReadContext) -> List[List[str]]:
    counts = Counter(doc_id for group in ids for doc_id in group)
    if all(n == 1 for n in counts.values()):
        return ids

    taken = set(counts)
    seen: Counter = Counter()
    unique: List[List[str]] = []
    for group in ids:
        renamed = []
        for doc_id in group:
            seen[doc_id] += 1
            if counts[doc_id] > 1 and seen[doc_id] > 1:
                n = seen[doc_id]
                candidate = f"{doc_id}-{n}"
                while candidate in taken:
                    n += 1
                    candidate = f"{doc_id}-{n}"
                taken.add(candidate)
                ctx.warn(f"Duplicate document id '{doc_id}' renamed to '{candidate}'")
                doc_id = candidate
            renamed.append(doc_id)
        unique.append(renamed)
    return unique


def assemble(
    files: Sequence[ResolvedFile],
    record_sets: Sequence[List[Record]],
    filename_docvars: Optional[pd.DataFrame] = None,
    ctx: Optional[ReadContext] = None,
) -> pd.DataFrame:
    """
    Merge per-file records into the result table.
    `filename_docvars` has one row per file, in the same order as `files`.
    """
    ctx = ctx or ReadContext()
    ids = assign_doc_ids([f.path for f in files], [len(r) for r in record_sets], ctx)

    columns: Dict[str, None] = dict.fromkeys(ID_COLUMNS)
    rows: List[Dict[str, Any]] = []
    file_index: List[int] = []

    for i, (file, records) in enumerate(zip(files, record_sets)):
        for doc_id, record in zip(ids[i], records):
            row: Dict[str, Any] = {"doc_id": doc_id, "text": record.text}
            for key, value in record.docvars.items():
                if key in ID_COLUMNS:
                    renamed = f"{key}_docvar"
                    ctx.warn(f"{file.path}: docvar '{key}' renamed to '{renamed}'")
                    key = renamed
                row[key] = value
                columns.setdefault(key)
            rows.append(row)
            file_index.append(i)

    if not rows:
        return pd.DataFrame(columns=list(ID_COLUMNS))
    result = pd.DataFrame.from_records(rows, columns=list(columns))

    if filename_docvars is not None and len(filename_docvars.columns):
        expanded = filename_docvars.iloc[file_index].reset_index(drop=True)
        for col in expanded.columns:
            if col in ID_COLUMNS:
                ctx.warn(f"Filename docvar '{col}' conflicts with a reserved column, skipped")
                continue
            if col in result.columns:
                ctx.warn(f"Filename docvar '{col}' replaces the content docvar of the same name")
            result[col] = expanded[col]

    return result

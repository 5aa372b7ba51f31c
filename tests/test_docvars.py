import logging
from pathlib import Path

import pandas as pd
import pytest

from readtext.core.config import ReadContext
from readtext.core.docvars import (
    extract_filename_docvars,
    impute_column,
    name_segments,
    split_segments,
)
from readtext.core.models import DocvarsSource, Verbosity


def test_filename_segments_become_positional_docvars() -> None:
    frame = extract_filename_docvars(
        [Path("1789-Washington.txt"), Path("1793-Washington.txt")],
        DocvarsSource.FILENAMES,
        dvsep="-",
    )

    assert list(frame.columns) == ["docvar1", "docvar2"]
    assert frame["docvar1"].tolist() == [1789, 1793]
    assert frame["docvar1"].dtype == "int64"
    assert frame["docvar2"].tolist() == ["Washington", "Washington"]


def test_supplied_names_are_used_in_order() -> None:
    frame = extract_filename_docvars(
        [Path("1789-Washington.txt")],
        DocvarsSource.FILENAMES,
        dvsep="-",
        docvarnames=["year", "president"],
    )

    assert frame.loc[0, "year"] == 1789
    assert frame.loc[0, "president"] == "Washington"


def test_dvsep_is_a_regular_expression() -> None:
    assert split_segments(Path("a-b_c.txt"), "[-_]", DocvarsSource.FILENAMES) == ["a", "b", "c"]


def test_filepaths_put_directories_first() -> None:
    segments = split_segments(Path("2019/en_US/speech_1.txt"), "_", DocvarsSource.FILEPATHS)

    assert segments == ["2019", "en", "US", "speech", "1"]


def test_fewer_names_than_segments_fall_back_to_positional() -> None:
    named, mismatch = name_segments(["1789", "Washington", "first"], ["year"])

    assert named == {"year": "1789", "docvar2": "Washington", "docvar3": "first"}
    assert mismatch


def test_surplus_names_are_dropped() -> None:
    named, mismatch = name_segments(["1789"], ["year", "president"])

    assert named == {"year": "1789"}
    assert mismatch


def test_no_names_is_not_a_mismatch() -> None:
    assert name_segments(["a", "b"], None) == ({"docvar1": "a", "docvar2": "b"}, False)


def test_name_count_mismatch_is_reported_at_summary_verbosity(caplog) -> None:
    caplog.set_level(logging.INFO, logger="readtext")

    extract_filename_docvars(
        [Path("1789-Washington.txt")],
        DocvarsSource.FILENAMES,
        dvsep="-",
        docvarnames=["year"],
        ctx=ReadContext(Verbosity.SUMMARY),
    )

    assert "2 docvar segments but 1 docvarnames supplied" in caplog.text


def test_name_count_mismatch_is_quiet_at_warning_verbosity(caplog) -> None:
    caplog.set_level(logging.INFO, logger="readtext")

    extract_filename_docvars(
        [Path("1789-Washington.txt")],
        DocvarsSource.FILENAMES,
        dvsep="-",
        docvarnames=["year"],
        ctx=ReadContext(Verbosity.WARNINGS),
    )

    assert "docvarnames supplied" not in caplog.text


def test_rows_with_fewer_segments_leave_missing_values() -> None:
    frame = extract_filename_docvars(
        [Path("a_1.txt"), Path("b.txt")], DocvarsSource.FILENAMES
    )

    assert frame["docvar2"].dtype == "Int64"
    assert frame.loc[0, "docvar2"] == 1
    assert pd.isna(frame.loc[1, "docvar2"])


@pytest.mark.parametrize(
    "values, dtype, expected",
    [
        (["1", "-2", "30"],        "int64",   [1, -2, 30]),
        (["1", "2.5"],             "float64", [1.0, 2.5]),
        (["TRUE", "F", "false"],   "bool",    [True, False, False]),
        (["1789", "Washington"],   "object",  ["1789", "Washington"]),
    ],
)
def test_columns_are_imputed_as_a_whole(values, dtype, expected) -> None:
    column = impute_column(pd.Series(values, dtype=object))

    assert column.dtype == dtype
    assert column.tolist() == expected


def test_na_strings_become_missing_in_nullable_columns() -> None:
    column = impute_column(pd.Series(["1", "NA", ""], dtype=object))

    assert column.dtype == "Int64"
    assert column[0] == 1
    assert column[1:].isna().all()


def test_all_missing_column_is_left_alone() -> None:
    column = impute_column(pd.Series(["NA", ""], dtype=object))

    assert column.tolist() == ["NA", ""]


def test_integers_wider_than_int64_become_floats() -> None:
    column = impute_column(pd.Series(["12345678901234567890123", "7"], dtype=object))

    assert column.dtype == "float64"
    assert column.tolist() == [float("12345678901234567890123"), 7.0]


def test_int64_bounds_stay_integer() -> None:
    column = impute_column(pd.Series([str(2**63 - 1), str(-2**63)], dtype=object))

    assert column.dtype == "int64"
    assert column.tolist() == [2**63 - 1, -2**63]


def test_oversized_number_in_a_filename() -> None:
    frame = extract_filename_docvars(
        [Path("12345678901234567890123_report.txt")], DocvarsSource.FILENAMES
    )

    assert frame["docvar1"].dtype == "float64"
    assert frame.loc[0, "docvar2"] == "report"

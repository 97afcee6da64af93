"""Read delimited text files into DataFrames of raw text."""

from pathlib import Path

import pandas as pd

from gridsift.exceptions import DataLoadError


def _separator_for(suffix: str) -> str | None:
    if suffix == ".tsv":
        return "\t"
    if suffix == ".csv":
        return ","
    # .txt: let pandas sniff the delimiter
    return None


def read_table(path: Path, nrows: int | None = None) -> pd.DataFrame:
    """
    Read a delimited text file keeping every cell as text.

    Empty cells become empty strings; no value is converted or interpreted
    as missing, that is left to format guessing.

    Args:
        path: Path to a .csv, .tsv or .txt file
        nrows: Optional maximum number of data rows to read

    Returns:
        DataFrame with one str column per field

    Raises:
        DataLoadError: If the file cannot be read or the format is unsupported
        FileNotFoundError: If the file does not exist
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    suffix = path.suffix.lower()
    if suffix not in (".csv", ".tsv", ".txt"):
        raise DataLoadError(
            f"Unsupported file format: {suffix}. Supported formats: .csv, .tsv, .txt"
        )

    separator = _separator_for(suffix)
    try:
        return pd.read_csv(
            path,
            sep=separator,
            dtype=str,
            keep_default_na=False,
            na_filter=False,
            nrows=nrows,
            engine="python" if separator is None else "c",
        )
    except pd.errors.EmptyDataError as e:
        raise DataLoadError(f"The file is empty or invalid: {path}") from e
    except pd.errors.ParserError as e:
        raise DataLoadError(f"Parsing error occurred while reading the file: {path}") from e
    except Exception as e:
        raise DataLoadError(f"Unexpected error while loading file {path}: {e}") from e

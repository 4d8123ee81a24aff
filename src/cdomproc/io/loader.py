from pathlib import Path
from typing import Iterable, Union

import numpy as np
import pandas as pd

from cdomproc.core.absorption import ScanRecord
from cdomproc.core.table import RawTable

PathLike = Union[str, Path]


def _clean_header(name) -> str:
    text = "" if name is None else str(name)
    # pandas labels blank header cells "Unnamed: N"
    if text.startswith("Unnamed:") or text.lower() == "nan":
        return ""
    return text.strip()


def load_absorbance_df(df: pd.DataFrame, source=None) -> RawTable:
    """
    Convert a spectrophotometer export into a RawTable.

    Column labels become headers; cells that are not numbers (unit rows,
    trailing instrument metadata) become NaN and rows without a numeric
    first column are dropped.
    """
    if df.shape[1] < 2:
        src = f" ({source})" if source else ""
        raise ValueError(
            f"Absorbance table{src} must contain at least one wavelength/absorbance column pair."
        )

    numeric = df.apply(pd.to_numeric, errors="coerce").to_numpy(dtype=float)
    table = RawTable(values=numeric, headers=[_clean_header(c) for c in df.columns])
    table = table.data_rows()

    if table.n_rows == 0:
        src = f" ({source})" if source else ""
        raise ValueError(f"Absorbance table{src} contains no numeric data rows.")
    return table


def load_absorbance_csv(path: PathLike) -> RawTable:
    """Load a CSV export (e.g. Cary UV-Vis) as a RawTable."""
    fpath = Path(path)
    df = pd.read_csv(fpath, header=0, engine="python", on_bad_lines="skip")
    return load_absorbance_df(df, source=fpath)


def load_absorbance_excel(path: PathLike, sheet_name: Union[int, str] = 0) -> RawTable:
    """Load an Excel export as a RawTable."""
    fpath = Path(path)
    df = pd.read_excel(fpath, sheet_name=sheet_name, header=0)
    return load_absorbance_df(df, source=fpath)


def load_absorbance_table(path: PathLike, sheet_name: Union[int, str] = 0) -> RawTable:
    suffix = Path(path).suffix.lower()
    if suffix == ".csv":
        return load_absorbance_csv(path)
    if suffix in (".xlsx", ".xls"):
        return load_absorbance_excel(path, sheet_name=sheet_name)
    raise ValueError(f"Unsupported absorbance file format: {suffix!r}")


def records_to_dataframe(records: Iterable[ScanRecord]) -> pd.DataFrame:
    """Long-form table, one row per record and wavelength."""
    frames = []
    for rec in records:
        frames.append(
            pd.DataFrame(
                {
                    "station": rec.station,
                    "Wavelength": rec.wavelength,
                    "abs_raw": rec.abs_raw,
                    "di1": rec.di1,
                    "di2": rec.di2,
                    "di_avg": rec.di_avg,
                    "abs_corr": rec.abs_corr,
                    "ag": rec.ag,
                }
            )
        )
    if not frames:
        return pd.DataFrame(
            columns=["station", "Wavelength", "abs_raw", "di1", "di2", "di_avg", "abs_corr", "ag"]
        )
    return pd.concat(frames, ignore_index=True)

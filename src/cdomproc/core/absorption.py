from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from cdomproc.config import LN10_DECADIC
from cdomproc.core.blank import BlankCorrection


def _frozen(values: np.ndarray) -> np.ndarray:
    out = np.array(values, dtype=float, copy=True)
    out.setflags(write=False)
    return out


@dataclass(frozen=True)
class ScanRecord:
    """
    Processed CDOM spectrum for one station group.

    Arrays are read-only and ordered by ascending wavelength.
    """

    station: str
    key: str
    wavelength: np.ndarray
    abs_raw: np.ndarray
    good_scans: Tuple[str, ...]
    excluded_scans: Tuple[str, ...]
    di1: np.ndarray
    di2: np.ndarray
    di_avg: np.ndarray
    abs_corr: np.ndarray
    ag: np.ndarray
    pathlength: float
    di1_column: int
    di2_column: int


def orient_ascending(wavelength: np.ndarray, *series: np.ndarray) -> Tuple[np.ndarray, ...]:
    """Reverse wavelength and every companion series when wavelength descends."""
    wavelength = np.asarray(wavelength, dtype=float)
    if wavelength.size > 1 and wavelength[0] > wavelength[-1]:
        return (wavelength[::-1],) + tuple(np.asarray(s, dtype=float)[::-1] for s in series)
    return (wavelength,) + tuple(np.asarray(s, dtype=float) for s in series)


def absorption_coefficient(abs_corr: np.ndarray, pathlength: float) -> np.ndarray:
    """ag = 2.303 * abs_corr / pathlength (pathlength in cm)."""
    return LN10_DECADIC * np.asarray(abs_corr, dtype=float) / pathlength


def compute_absorption(
    station: str,
    key: str,
    wavelength: np.ndarray,
    abs_raw: np.ndarray,
    blank: BlankCorrection,
    pathlength: float,
    good_scans: Sequence[str] = (),
    excluded_scans: Sequence[str] = (),
) -> ScanRecord:
    """DI-correct the averaged absorbance and convert it to CDOM absorption."""
    if not pathlength > 0:
        raise ValueError(f"pathlength must be positive (cm), got {pathlength!r}.")

    wavelength = np.asarray(wavelength, dtype=float)
    abs_raw = np.asarray(abs_raw, dtype=float)
    if not (wavelength.shape == abs_raw.shape == blank.di_avg.shape):
        raise ValueError("Wavelength, absorbance and DI scans do not share one grid.")

    abs_corr = abs_raw - blank.di_avg

    wavelength, abs_raw, di1, di2, di_avg, abs_corr = orient_ascending(
        wavelength, abs_raw, blank.di1, blank.di2, blank.di_avg, abs_corr
    )

    return ScanRecord(
        station=station,
        key=key,
        wavelength=_frozen(wavelength),
        abs_raw=_frozen(abs_raw),
        good_scans=tuple(good_scans),
        excluded_scans=tuple(excluded_scans),
        di1=_frozen(di1),
        di2=_frozen(di2),
        di_avg=_frozen(di_avg),
        abs_corr=_frozen(abs_corr),
        ag=_frozen(absorption_coefficient(abs_corr, pathlength)),
        pathlength=float(pathlength),
        di1_column=blank.di1_column,
        di2_column=blank.di2_column,
    )

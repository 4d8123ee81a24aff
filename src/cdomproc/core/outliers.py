import logging
import warnings
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np
from scipy.stats import median_abs_deviation

from cdomproc.config import OutlierConfig

logger = logging.getLogger(__name__)


def nanmean(values: np.ndarray, axis: Optional[int] = None) -> np.ndarray:
    """Mean ignoring NaN. All-NaN slices give NaN without a RuntimeWarning."""
    values = np.asarray(values, dtype=float)
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", category=RuntimeWarning)
        return np.nanmean(values, axis=axis)


def is_outlier(values: np.ndarray, threshold: float = 3.0) -> np.ndarray:
    """
    Flag values more than `threshold` scaled MADs away from the median.

    MAD is scaled by 1.4826 so it estimates the standard deviation of
    normally distributed data. NaN entries are ignored and never flagged.
    """
    x = np.asarray(values, dtype=float)
    flags = np.zeros(x.shape, dtype=bool)
    finite = np.isfinite(x)
    if not finite.any():
        return flags

    center = np.median(x[finite])
    spread = median_abs_deviation(x[finite], scale="normal")
    flags[finite] = np.abs(x[finite] - center) > threshold * spread
    return flags


@dataclass(frozen=True)
class FilterResult:
    abs_raw: np.ndarray
    retained: Tuple[int, ...]
    excluded: Tuple[int, ...]


def outlier_filter_core(
    A: np.ndarray,
    wavelength: np.ndarray,
    config: OutlierConfig,
    labels: Optional[Sequence[str]] = None,
) -> FilterResult:
    """
    Average replicate scans (columns of `A`) after dropping outlier scans.

    Each scan is reduced to its mean absorbance in every sub-band; a scan
    is kept only if no sub-band flags it. Raises ValueError when every
    scan is flagged; `labels` name the scans in that message.
    """
    A = np.asarray(A, dtype=float)
    if A.ndim == 1:
        A = A[:, None]
    wavelength = np.asarray(wavelength, dtype=float)
    if A.shape[0] != wavelength.shape[0]:
        raise ValueError(
            f"Scan matrix has {A.shape[0]} rows but wavelength has {wavelength.shape[0]} values."
        )

    n_cols = A.shape[1]
    if n_cols <= config.min_replicates:
        return FilterResult(abs_raw=nanmean(A, axis=1), retained=tuple(range(n_cols)), excluded=())

    votes = np.zeros(n_cols, dtype=int)
    for lo, hi in config.bands:
        rows = (wavelength >= lo) & (wavelength <= hi)
        if not rows.any():
            logger.debug("No samples in %g-%g nm, band skipped for outlier test.", lo, hi)
            continue
        band_means = nanmean(A[rows, :], axis=0)
        votes += is_outlier(band_means, threshold=config.threshold).astype(int)

    retained = tuple(int(i) for i in np.flatnonzero(votes == 0))
    excluded = tuple(int(i) for i in np.flatnonzero(votes > 0))

    if not retained:
        names = [labels[i] for i in excluded] if labels is not None else list(excluded)
        raise ValueError(
            f"All {n_cols} replicate scans were flagged as outliers: {names}. "
            "No absorbance average can be formed for this group."
        )

    return FilterResult(abs_raw=nanmean(A[:, list(retained)], axis=1), retained=retained, excluded=excluded)


class OutlierFilter:
    """Replicate-scan screening with robust statistics over spectral sub-bands."""

    def __init__(self, config: Optional[OutlierConfig] = None):
        self.config = config or OutlierConfig()

    def apply(
        self,
        A: np.ndarray,
        wavelength: np.ndarray,
        labels: Optional[Sequence[str]] = None,
    ) -> FilterResult:
        return outlier_filter_core(A, wavelength, config=self.config, labels=labels)

"""
cdomproc: CDOM absorption processing package

Core features:
- Replicate grouping and outlier screening of absorbance scans
- DI blank correction and absorption coefficients
- Exponential spectral slope fitting

Typical usage:

    from cdomproc import process_absorbance, fit_spectral_slope
    from cdomproc.io import load_absorbance_table
"""

from .config import AbsorptionConfig, OutlierConfig, SlopeFitConfig
from .core.absorption import ScanRecord
from .core.pipeline import AbsorbancePipeline, GroupFailure, ProcessingResult, process_absorbance
from .core.slope import SpectralSlopeFit, SpectralSlopeFitter, compute_slope_ratio, fit_spectral_slope
from .core.table import RawTable
from .exceptions import (
    CdomProcessingError,
    FitConvergenceError,
    MalformedIdentifierError,
    MissingBlankScanError,
    ValueNotFoundError,
)

__all__ = [
    "AbsorptionConfig",
    "OutlierConfig",
    "SlopeFitConfig",
    "RawTable",
    "ScanRecord",
    "AbsorbancePipeline",
    "GroupFailure",
    "ProcessingResult",
    "process_absorbance",
    "SpectralSlopeFit",
    "SpectralSlopeFitter",
    "fit_spectral_slope",
    "compute_slope_ratio",
    "CdomProcessingError",
    "FitConvergenceError",
    "MalformedIdentifierError",
    "MissingBlankScanError",
    "ValueNotFoundError",
]

"""
Core modules for CDOM absorption processing.
"""

from .outliers import OutlierFilter
from .pipeline import AbsorbancePipeline, process_absorbance
from .slope import SpectralSlopeFitter, fit_spectral_slope

__all__ = [
    "AbsorbancePipeline",
    "OutlierFilter",
    "SpectralSlopeFitter",
    "fit_spectral_slope",
    "process_absorbance",
]

from dataclasses import dataclass, field
from typing import Tuple


# Decadic -> Napierian conversion used by the absorption formula (ln 10, rounded)
LN10_DECADIC: float = 2.303

# Sub-bands (nm) used to compare replicate scans against the group median
DEFAULT_OUTLIER_BANDS: Tuple[Tuple[float, float], ...] = (
    (490.0, 510.0),
    (390.0, 410.0),
    (290.0, 310.0),
)

# Start value for the spectral slope (nm^-1)
DEFAULT_S0: float = 0.015


@dataclass
class OutlierConfig:
    """Configuration for replicate-scan outlier rejection."""

    bands: Tuple[Tuple[float, float], ...] = DEFAULT_OUTLIER_BANDS

    # Scaled median absolute deviations from the median
    threshold: float = 3.0

    # Groups with this many replicates or fewer are averaged without filtering
    min_replicates: int = 2


@dataclass
class AbsorptionConfig:
    """
    Configuration for absorbance -> CDOM absorption processing.
    Defaults follow the LOAI lab UV-Vis workflow (wavelengths in nm).
    """

    lam_min: float = 250.0
    lam_max: float = 750.0

    outliers: OutlierConfig = field(default_factory=OutlierConfig)

    # Header tokens
    blank_token: str = "DI"
    replicate_token: str = "_R"
    sample_type_token: str = "_ag"
    excluded_token: str = "line"


@dataclass
class SlopeFitConfig:
    """Configuration for the exponential spectral slope fit."""

    s0: float = DEFAULT_S0
    confidence: float = 0.95
    maxfev: int = 2000

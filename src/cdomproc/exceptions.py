from typing import Optional, Sequence

import numpy as np


class CdomProcessingError(Exception):
    """Base class for cdomproc errors."""


class MalformedIdentifierError(CdomProcessingError, ValueError):
    """A column header does not name a usable sample."""

    def __init__(self, header: str, reason: str):
        self.header = header
        self.reason = reason
        super().__init__(f"Unusable sample identifier {header!r}: {reason}")


class MissingBlankScanError(CdomProcessingError, ValueError):
    """No DI scan brackets a station group."""

    def __init__(self, message: str, side: str, group_min: int, group_max: int):
        self.side = side
        self.group_min = group_min
        self.group_max = group_max
        super().__init__(message)


class ValueNotFoundError(CdomProcessingError, ValueError):
    """A requested wavelength has no exact match in the wavelength vector."""

    def __init__(self, name: str, value: float):
        self.name = name
        self.value = value
        super().__init__(
            f"{name}={value!r} has no exact match in the wavelength vector. "
            "Fit bounds and the reference wavelength must be values present "
            "in the data."
        )


class FitConvergenceError(CdomProcessingError, RuntimeError):
    """The nonlinear least-squares solver did not converge."""

    def __init__(
        self,
        message: str,
        start_point: Sequence[float],
        residuals: Optional[np.ndarray] = None,
    ):
        self.message = message
        self.start_point = tuple(float(p) for p in start_point)
        self.residuals = residuals
        super().__init__(
            f"Spectral slope fit did not converge: {message} "
            f"(start point a={self.start_point[0]:.6g}, s={self.start_point[1]:.6g})"
        )

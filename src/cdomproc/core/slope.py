"""
Spectral slope of CDOM absorption.

The absorption spectrum over a wavelength window is modelled as

    ag(x) = a * exp(-(x - lam0) * s)          (exponential)
    ag(x) = a * exp(-(x - lam0) * s) + K      (exponential_offset)

with the reference wavelength `lam0` and offset `K` held fixed, so only the
absorption at the reference wavelength `a` and the slope `s` are fitted.

Suggested reading:
    Twardowski et al. (2004), Marine Chemistry 89, 69-88.
    Helms et al. (2008), Limnology and Oceanography 53(3), 955-969.
"""

import logging
import warnings
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from scipy import stats
from scipy.optimize import OptimizeWarning, curve_fit

from cdomproc.config import SlopeFitConfig
from cdomproc.core.absorption import ScanRecord
from cdomproc.exceptions import FitConvergenceError, ValueNotFoundError


class ExponentialModel:
    name = "exponential"

    def __init__(self, lam0: float):
        self.lam0 = float(lam0)
        self.K = None

    def __call__(self, x, a, s):
        return a * np.exp(-(x - self.lam0) * s)


class ExponentialOffsetModel:
    name = "exponential_offset"

    def __init__(self, lam0: float, K: float):
        self.lam0 = float(lam0)
        self.K = float(K)

    def __call__(self, x, a, s):
        return a * np.exp(-(x - self.lam0) * s) + self.K


def select_model(lam0: float, K: Optional[float] = None):
    """Pick the model variant; fixed parameters are bound to the instance."""
    if K is None:
        return ExponentialModel(lam0)
    return ExponentialOffsetModel(lam0, K)


@dataclass(frozen=True)
class FitStatistics:
    sse: float
    rsquare: float
    dfe: int
    adjrsquare: float
    rmse: float


@dataclass(frozen=True)
class SpectralSlopeFit:
    a: float
    s: float
    lam0: float
    K: Optional[float]
    model: str
    stats: FitStatistics
    residuals: np.ndarray
    # rows: lower / upper bound, columns: a / s
    cint: np.ndarray
    wavelength: np.ndarray
    yhat: np.ndarray
    nfev: int
    covariance_estimated: bool


@dataclass(frozen=True)
class SlopeRatio:
    s_short: SpectralSlopeFit
    s_long: SpectralSlopeFit

    @property
    def ratio(self) -> float:
        return self.s_short.s / self.s_long.s


def _exact_index(wavelength: np.ndarray, value: float, name: str, last: bool = False) -> int:
    hits = np.flatnonzero(wavelength == value)
    if hits.size == 0:
        raise ValueNotFoundError(name, value)
    return int(hits[-1] if last else hits[0])


def goodness_of_fit(y: np.ndarray, yhat: np.ndarray, n_coefficients: int) -> FitStatistics:
    residuals = y - yhat
    n = y.size
    sse = float(np.sum(residuals ** 2))
    sst = float(np.sum((y - np.mean(y)) ** 2))
    dfe = n - n_coefficients

    rsquare = 1.0 - sse / sst if sst > 0 else np.nan
    if dfe > 0:
        adjrsquare = 1.0 - (1.0 - rsquare) * (n - 1) / dfe
        rmse = float(np.sqrt(sse / dfe))
    else:
        adjrsquare = np.nan
        rmse = np.nan

    return FitStatistics(sse=sse, rsquare=rsquare, dfe=dfe, adjrsquare=adjrsquare, rmse=rmse)


def confidence_intervals(popt: np.ndarray, pcov: np.ndarray, dfe: int, confidence: float) -> np.ndarray:
    """Student-t intervals from the parameter covariance, shape (2, n_params)."""
    if dfe <= 0 or not np.all(np.isfinite(pcov)):
        return np.full((2, popt.size), np.nan)
    tval = stats.t.ppf((1.0 + confidence) / 2.0, dfe)
    half = tval * np.sqrt(np.clip(np.diag(pcov), 0.0, None))
    return np.vstack([popt - half, popt + half])


def fit_spectral_slope_core(
    wavelength: np.ndarray,
    absorption: np.ndarray,
    lambda_start: float,
    lambda_stop: float,
    lam0: float,
    K: Optional[float],
    config: SlopeFitConfig,
    logger: logging.Logger,
) -> SpectralSlopeFit:
    wavelength = np.asarray(wavelength, dtype=float).ravel()
    absorption = np.asarray(absorption, dtype=float).ravel()
    if wavelength.shape != absorption.shape:
        raise ValueError("'wavelength' and 'absorption' must have the same length.")
    if not 0 < config.confidence < 1:
        raise ValueError("'confidence' must be between 0 and 1.")

    ind = _exact_index(wavelength, lambda_start, "lambda_start", last=True)
    ind2 = _exact_index(wavelength, lambda_stop, "lambda_stop", last=True)
    lo, hi = min(ind, ind2), max(ind, ind2)
    x = wavelength[lo:hi + 1]
    y = absorption[lo:hi + 1]

    if x.size < 2:
        raise ValueError(
            f"Fit window {lambda_start}-{lambda_stop} nm holds {x.size} point(s); at least 2 are required."
        )
    if not (np.all(np.isfinite(x)) and np.all(np.isfinite(y))):
        raise ValueError(f"Fit window {lambda_start}-{lambda_stop} nm contains missing values.")

    a0 = float(absorption[_exact_index(wavelength, lam0, "lam0")])
    p0 = np.array([a0, config.s0], dtype=float)

    model = select_model(lam0, K)

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", OptimizeWarning)
        try:
            popt, pcov, infodict, _, _ = curve_fit(
                model,
                x,
                y,
                p0=p0,
                method="lm",
                maxfev=config.maxfev,
                full_output=True,
            )
        except RuntimeError as exc:
            raise FitConvergenceError(str(exc), start_point=p0, residuals=y - model(x, *p0)) from exc

    covariance_estimated = bool(np.all(np.isfinite(pcov)))
    if not covariance_estimated:
        logger.warning(
            "Covariance of the slope fit over %s-%s nm could not be estimated; "
            "confidence intervals are undefined.",
            lambda_start,
            lambda_stop,
        )

    yhat = model(x, *popt)
    gof = goodness_of_fit(y, yhat, n_coefficients=popt.size)

    return SpectralSlopeFit(
        a=float(popt[0]),
        s=float(popt[1]),
        lam0=model.lam0,
        K=model.K,
        model=model.name,
        stats=gof,
        residuals=y - yhat,
        cint=confidence_intervals(popt, pcov, gof.dfe, config.confidence),
        wavelength=x,
        yhat=yhat,
        nfev=int(infodict.get("nfev", 0)),
        covariance_estimated=covariance_estimated,
    )


class SpectralSlopeFitter:
    """Fits the exponential CDOM model; holds the solver configuration."""

    def __init__(self, config: Optional[SlopeFitConfig] = None, logger: Optional[logging.Logger] = None):
        self.config = config or SlopeFitConfig()
        self.logger = logger or logging.getLogger(__name__)

    def fit(
        self,
        wavelength: np.ndarray,
        absorption: np.ndarray,
        lambda_start: float,
        lambda_stop: float,
        lam0: float,
        K: Optional[float] = None,
    ) -> SpectralSlopeFit:
        return fit_spectral_slope_core(
            wavelength,
            absorption,
            lambda_start,
            lambda_stop,
            lam0,
            K,
            config=self.config,
            logger=self.logger,
        )

    def fit_record(
        self,
        record: ScanRecord,
        lambda_start: float,
        lambda_stop: float,
        lam0: Optional[float] = None,
        K: Optional[float] = None,
    ) -> SpectralSlopeFit:
        """Fit `record.ag`; lam0 defaults to the window start."""
        return self.fit(
            record.wavelength,
            record.ag,
            lambda_start,
            lambda_stop,
            lambda_start if lam0 is None else lam0,
            K,
        )

    def slope_ratio(
        self,
        wavelength: np.ndarray,
        absorption: np.ndarray,
        short: Tuple[float, float] = (275.0, 295.0),
        long: Tuple[float, float] = (350.0, 400.0),
    ) -> SlopeRatio:
        """S_R = S(275-295) / S(350-400), each window referenced to its start."""
        return SlopeRatio(
            s_short=self.fit(wavelength, absorption, short[0], short[1], short[0]),
            s_long=self.fit(wavelength, absorption, long[0], long[1], long[0]),
        )


def fit_spectral_slope(
    wavelength: np.ndarray,
    absorption: np.ndarray,
    lambda_start: float,
    lambda_stop: float,
    lam0: float,
    K: Optional[float] = None,
    config: Optional[SlopeFitConfig] = None,
    logger: Optional[logging.Logger] = None,
) -> SpectralSlopeFit:
    """
    Fit the exponential absorption model over [lambda_start, lambda_stop].

    `lambda_start`, `lambda_stop` and `lam0` must match wavelength values
    exactly (ValueNotFoundError otherwise). The solver starts from the
    absorption at `lam0` and s0 = 0.015 nm^-1; FitConvergenceError is raised
    when it exhausts its evaluation budget.
    """
    return SpectralSlopeFitter(config=config, logger=logger).fit(
        wavelength, absorption, lambda_start, lambda_stop, lam0, K
    )


def compute_slope_ratio(
    wavelength: np.ndarray,
    absorption: np.ndarray,
    short: Tuple[float, float] = (275.0, 295.0),
    long: Tuple[float, float] = (350.0, 400.0),
    config: Optional[SlopeFitConfig] = None,
) -> SlopeRatio:
    return SpectralSlopeFitter(config=config).slope_ratio(wavelength, absorption, short=short, long=long)

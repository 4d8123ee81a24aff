import numpy as np
import pytest

from cdomproc.config import OutlierConfig
from cdomproc.core.outliers import OutlierFilter, is_outlier, nanmean

# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------

def make_replicates(n_cols, wavelength=None):
    """Exponential CDOM-like scans with small, evenly spread offsets."""
    if wavelength is None:
        wavelength = np.arange(750.0, 249.0, -1.0)
    base = 0.3 * np.exp(-0.018 * (wavelength - 300.0))
    A = np.column_stack([base + 0.001 * i for i in range(n_cols)])
    return A, wavelength

# ----------------------------------------------------------------------
# 1. Helpers
# ----------------------------------------------------------------------

def test_nanmean_ignores_missing_values():
    A = np.array([[1.0, np.nan], [np.nan, np.nan], [2.0, 4.0]])
    out = nanmean(A, axis=1)

    assert out[0] == 1.0
    assert np.isnan(out[1])
    assert out[2] == 3.0


def test_is_outlier_scaled_mad():
    flags = is_outlier(np.array([1.0, 1.1, 0.9, 1.05, 10.0]))
    assert flags.tolist() == [False, False, False, False, True]


def test_is_outlier_never_flags_nan():
    flags = is_outlier(np.array([1.0, np.nan, 1.0, 50.0]))
    assert flags.tolist() == [False, False, False, True]


def test_is_outlier_all_nan():
    assert not is_outlier(np.array([np.nan, np.nan])).any()

# ----------------------------------------------------------------------
# 2. Filter behaviour
# ----------------------------------------------------------------------

@pytest.mark.parametrize("n_cols", [1, 2])
def test_two_or_fewer_replicates_are_averaged(n_cols):
    A, wl = make_replicates(n_cols)
    A[:, 0] *= 10.0  # would be an outlier in a larger group

    result = OutlierFilter().apply(A, wl)

    assert result.excluded == ()
    assert result.retained == tuple(range(n_cols))
    assert np.allclose(result.abs_raw, A.mean(axis=1))


def test_consistent_replicates_are_all_kept():
    A, wl = make_replicates(3)
    result = OutlierFilter().apply(A, wl)

    assert result.retained == (0, 1, 2)
    assert np.allclose(result.abs_raw, A.mean(axis=1))


def test_spiked_replicate_is_excluded():
    """One scan at 10x the others at 500, 400 and 300 nm."""
    A, wl = make_replicates(4)
    spiked = A.copy()
    spiked[:, 2] *= 10.0

    result = OutlierFilter().apply(spiked, wl)

    assert result.excluded == (2,)
    assert result.retained == (0, 1, 3)
    assert np.allclose(result.abs_raw, A[:, [0, 1, 3]].mean(axis=1))


def test_single_band_deviation_is_enough():
    A, wl = make_replicates(4)
    band = (wl >= 390) & (wl <= 410)
    A[band, 1] += 0.5

    result = OutlierFilter().apply(A, wl)
    assert result.excluded == (1,)


def test_band_without_samples_is_skipped():
    """A window above 320 nm has no 290-310 nm samples; the other bands still vote."""
    A, wl = make_replicates(4, wavelength=np.arange(320.0, 601.0))
    A[:, 3] *= 10.0

    result = OutlierFilter().apply(A, wl)
    assert result.excluded == (3,)


def test_no_band_inside_window_keeps_everything():
    A, wl = make_replicates(4, wavelength=np.arange(600.0, 701.0))
    A[:, 0] *= 10.0

    result = OutlierFilter().apply(A, wl)
    assert result.excluded == ()


def test_missing_values_are_ignored_in_mean():
    A, wl = make_replicates(3)
    A[10, 0] = np.nan

    result = OutlierFilter().apply(A, wl)
    assert np.isclose(result.abs_raw[10], A[10, 1:].mean())


def test_custom_threshold():
    A, wl = make_replicates(3)
    A[:, 2] += 0.01  # well separated from the other two

    strict = OutlierFilter(OutlierConfig(threshold=1.0)).apply(A, wl)
    assert strict.excluded == (2,)


def test_shape_mismatch_raises():
    A, wl = make_replicates(3)
    with pytest.raises(ValueError, match="rows but wavelength"):
        OutlierFilter().apply(A, wl[:-1])


def test_every_replicate_flagged_raises():
    """Each scan deviates in a different band, so none survives."""
    wl = np.arange(750.0, 249.0, -1.0)
    A = np.ones((wl.size, 3))
    for col, (lo, hi) in enumerate([(490, 510), (390, 410), (290, 310)]):
        A[(wl >= lo) & (wl <= hi), col] = 5.0

    with pytest.raises(ValueError, match=r"All 3 replicate scans.*\['R1', 'R2', 'R3'\]"):
        OutlierFilter().apply(A, wl, labels=["R1", "R2", "R3"])

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from cdomproc.exceptions import MissingBlankScanError


@dataclass(frozen=True)
class BlankCorrection:
    di1: np.ndarray
    di2: np.ndarray
    di_avg: np.ndarray
    di1_column: int
    di2_column: int


def find_bracketing_blanks(
    blank_positions: Sequence[int],
    group_min: int,
    group_max: int,
) -> Tuple[int, int]:
    """
    Nearest DI scan before the group and nearest DI scan after it.

    Positions are column indices; the group spans [group_min, group_max].
    """
    positions = sorted(int(p) for p in blank_positions)

    before = [p for p in positions if p < group_min]
    after = [p for p in positions if p > group_max]

    if not before:
        raise MissingBlankScanError(
            f"No DI scan precedes columns {group_min}-{group_max}. "
            "Each station group must be bracketed by DI blank scans.",
            side="before",
            group_min=group_min,
            group_max=group_max,
        )
    if not after:
        raise MissingBlankScanError(
            f"No DI scan follows columns {group_min}-{group_max}. "
            "Each station group must be bracketed by DI blank scans.",
            side="after",
            group_min=group_min,
            group_max=group_max,
        )

    return before[-1], after[0]


class BlankCorrector:
    """
    Looks up the bracketing DI scans of a station group in the raw table.
    Blank scans are used as-is; their quality is the caller's concern.
    """

    def __init__(self, values: np.ndarray, blank_positions: Sequence[int]):
        self.values = np.asarray(values, dtype=float)
        self.blank_positions = sorted(int(p) for p in blank_positions)

        for pos in self.blank_positions:
            if not (0 <= pos < self.values.shape[1]):
                raise IndexError(
                    f"Blank column {pos} out of bounds (table has {self.values.shape[1]} columns)."
                )

    def correct(self, group_columns: Sequence[int], rows: np.ndarray) -> BlankCorrection:
        """
        `group_columns` are data-column positions of the group's scans,
        `rows` selects the group's wavelength window.
        """
        di1_col, di2_col = find_bracketing_blanks(
            self.blank_positions, min(group_columns), max(group_columns)
        )
        di1 = self.values[rows, di1_col]
        di2 = self.values[rows, di2_col]

        return BlankCorrection(
            di1=di1,
            di2=di2,
            di_avg=(di1 + di2) / 2,
            di1_column=di1_col,
            di2_column=di2_col,
        )

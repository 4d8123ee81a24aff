from dataclasses import dataclass
from typing import List, Sequence

import numpy as np


@dataclass(frozen=True)
class RawTable:
    """
    Absorbance export as a numeric matrix plus one header string per column.

    Scans are laid out in column pairs: the scan name sits in the header of
    its wavelength column `i` and the absorbance values in column `i + 1`.
    """

    values: np.ndarray
    headers: List[str]

    def __post_init__(self):
        values = np.asarray(self.values, dtype=float)
        if values.ndim != 2:
            raise ValueError(f"RawTable values must be 2-D, got shape {values.shape}.")
        headers = ["" if h is None else str(h) for h in self.headers]
        if len(headers) != values.shape[1]:
            raise ValueError(
                "Header count does not match the numeric matrix.\n"
                f"  - headers: {len(headers)}\n"
                f"  - columns: {values.shape[1]}"
            )
        object.__setattr__(self, "values", values)
        object.__setattr__(self, "headers", headers)

    @classmethod
    def from_columns(cls, headers: Sequence[str], columns: Sequence[Sequence[float]]) -> "RawTable":
        return cls(values=np.column_stack([np.asarray(c, dtype=float) for c in columns]), headers=list(headers))

    @property
    def n_rows(self) -> int:
        return self.values.shape[0]

    @property
    def n_columns(self) -> int:
        return self.values.shape[1]

    def data_rows(self) -> "RawTable":
        """Keep only rows whose first column holds a finite number."""
        keep = np.isfinite(self.values[:, 0])
        return RawTable(values=self.values[keep, :], headers=list(self.headers))

import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence

import numpy as np

from cdomproc.config import AbsorptionConfig
from cdomproc.core.absorption import ScanRecord, compute_absorption
from cdomproc.core.blank import BlankCorrector
from cdomproc.core.identifiers import StationGroup, group_scans, scan_label
from cdomproc.core.outliers import OutlierFilter
from cdomproc.core.table import RawTable


@dataclass(frozen=True)
class GroupFailure:
    key: str
    station: str
    reason: str


@dataclass
class ProcessingResult:
    records: List[ScanRecord] = field(default_factory=list)
    failures: List[GroupFailure] = field(default_factory=list)

    @property
    def failed_keys(self) -> List[str]:
        return [f.key for f in self.failures]


class AbsorbancePipeline:
    """
    Orchestrates the CDOM absorption workflow for one absorbance table:
    Grouping -> Outlier Filter -> Averaging -> DI Correction -> Absorption.
    """

    def __init__(
        self,
        config: Optional[AbsorptionConfig] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config or AbsorptionConfig()
        self.outlier_filter = OutlierFilter(self.config.outliers)
        self.logger = logger or logging.getLogger(__name__)

    def _validate_window(self):
        if not self.config.lam_min < self.config.lam_max:
            raise ValueError(
                f"lam_min ({self.config.lam_min}) must be smaller than lam_max ({self.config.lam_max})."
            )

    def _process_group(
        self,
        table: RawTable,
        group: StationGroup,
        blanks: BlankCorrector,
        pathlength: float,
    ) -> ScanRecord:
        data_cols = list(group.data_columns)
        if max(data_cols) >= table.n_columns:
            raise ValueError(
                f"Scan {group.labels[-1]!r} has no absorbance column next to its wavelength column."
            )

        wl_full = table.values[:, group.columns[0]]
        with np.errstate(invalid="ignore"):
            rows = (wl_full >= self.config.lam_min) & (wl_full <= self.config.lam_max)
        if not rows.any():
            raise ValueError(
                f"No wavelengths within {self.config.lam_min}-{self.config.lam_max} nm."
            )

        wavelength = wl_full[rows]
        A = table.values[np.ix_(rows, data_cols)]

        labels = [scan_label(group.labels[i], self.config) for i in range(len(group.labels))]
        filtered = self.outlier_filter.apply(A, wavelength, labels=labels)
        if filtered.excluded:
            self.logger.info(
                "%s: excluded outlier scans %s",
                group.station,
                [labels[i] for i in filtered.excluded],
            )

        correction = blanks.correct(data_cols, rows)

        return compute_absorption(
            station=group.station,
            key=group.key,
            wavelength=wavelength,
            abs_raw=filtered.abs_raw,
            blank=correction,
            pathlength=pathlength,
            good_scans=[labels[i] for i in filtered.retained],
            excluded_scans=[labels[i] for i in filtered.excluded],
        )

    def run(
        self,
        table: RawTable,
        pathlength: float,
        existing_records: Optional[Sequence[ScanRecord]] = None,
    ) -> ProcessingResult:
        """
        Process every station group of `table`.

        New records are appended after `existing_records`, which is left
        untouched. A group that cannot be processed is reported in
        `failures` and does not stop the batch.
        """
        self._validate_window()
        if not pathlength > 0:
            raise ValueError(f"pathlength must be positive (cm), got {pathlength!r}.")

        table = table.data_rows()
        groups, blank_positions = group_scans(table.headers, config=self.config)
        dangling = [p for p in blank_positions if p >= table.n_columns]
        if dangling:
            self.logger.warning("Ignoring DI scans without an absorbance column: %s", dangling)
            blank_positions = [p for p in blank_positions if p < table.n_columns]
        blanks = BlankCorrector(table.values, blank_positions)

        result = ProcessingResult(records=list(existing_records or []))

        for group in groups:
            try:
                record = self._process_group(table, group, blanks, pathlength)
            except ValueError as exc:
                self.logger.warning("Station %s (%s) failed: %s", group.station, group.key, exc)
                result.failures.append(GroupFailure(key=group.key, station=group.station, reason=str(exc)))
                continue
            result.records.append(record)

        self.logger.info(
            "Processed %d station groups: %d records, %d failures.",
            len(groups),
            len(groups) - len(result.failures),
            len(result.failures),
        )
        return result


def process_absorbance(
    table: RawTable,
    pathlength: float,
    existing_records: Optional[Sequence[ScanRecord]] = None,
    lam_min: Optional[float] = None,
    lam_max: Optional[float] = None,
    config: Optional[AbsorptionConfig] = None,
    logger: Optional[logging.Logger] = None,
) -> ProcessingResult:
    """
    Functional wrapper around AbsorbancePipeline.run.

    `lam_min` / `lam_max` override the config window (250-750 nm by default).
    """
    cfg = config or AbsorptionConfig()
    if lam_min is not None:
        cfg = replace(cfg, lam_min=float(lam_min))
    if lam_max is not None:
        cfg = replace(cfg, lam_max=float(lam_max))
    return AbsorbancePipeline(config=cfg, logger=logger).run(
        table, pathlength, existing_records=existing_records
    )

"""
Sample identifier parsing and scan grouping.

Headers follow the lab naming convention

    cruise_date_station_depth_sampletype_replicate   e.g. LS_200309_1_5_ag_R1

DI water blanks carry ``DI`` anywhere in the name.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from cdomproc.config import AbsorptionConfig
from cdomproc.exceptions import MalformedIdentifierError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SampleIdentifier:
    header: str
    key: str
    station: str
    is_blank: bool = False
    is_replicate: bool = False
    replicate: Optional[str] = None


@dataclass(frozen=True)
class StationGroup:
    """Replicate scans sharing one canonical key, in table order."""

    key: str
    station: str
    columns: Tuple[int, ...]
    labels: Tuple[str, ...]

    @property
    def data_columns(self) -> Tuple[int, ...]:
        return tuple(c + 1 for c in self.columns)


def _before(text: str, token: str) -> str:
    return text.split(token, 1)[0]


def parse_identifier(header: str, config: Optional[AbsorptionConfig] = None) -> SampleIdentifier:
    """
    Derive the canonical key and scan role from a column header.

    Raises MalformedIdentifierError when the header does not name a sample
    (empty key or a baseline ``line`` scan).
    """
    cfg = config or AbsorptionConfig()
    header = "" if header is None else str(header)

    if cfg.blank_token in header:
        return SampleIdentifier(header=header, key=header, station=header, is_blank=True)

    replicate = None
    if cfg.replicate_token in header:
        key, replicate = header.split(cfg.replicate_token, 1)
    else:
        key = header

    if not key.strip():
        raise MalformedIdentifierError(header, "empty sample key")
    if cfg.excluded_token in key:
        raise MalformedIdentifierError(header, f"key contains {cfg.excluded_token!r}")

    station = _before(key, cfg.sample_type_token) if cfg.sample_type_token in key else key

    return SampleIdentifier(
        header=header,
        key=key,
        station=station,
        is_replicate=replicate is not None,
        replicate=replicate,
    )


def group_scans(
    headers: Sequence[str],
    config: Optional[AbsorptionConfig] = None,
) -> Tuple[List[StationGroup], List[int]]:
    """
    Group header indices by canonical key, ordered by first appearance.

    Returns the groups and the sorted data-column positions (header index + 1)
    of the DI blank scans.
    """
    cfg = config or AbsorptionConfig()

    members: Dict[str, List[int]] = {}
    stations: Dict[str, str] = {}
    blanks: List[int] = []

    for idx, header in enumerate(headers):
        try:
            ident = parse_identifier(header, config=cfg)
        except MalformedIdentifierError as exc:
            # Unlabelled absorbance columns are expected; anything else is worth a note
            if str(header or "").strip():
                logger.info("Skipping column %d: %s", idx, exc)
            continue

        if ident.is_blank:
            blanks.append(idx + 1)
            continue

        members.setdefault(ident.key, []).append(idx)
        stations.setdefault(ident.key, ident.station)

    groups = [
        StationGroup(
            key=key,
            station=stations[key],
            columns=tuple(cols),
            labels=tuple(str(headers[c]) for c in cols),
        )
        for key, cols in members.items()
    ]
    return groups, sorted(blanks)


def scan_label(header: str, config: Optional[AbsorptionConfig] = None) -> str:
    """Short replicate label, the text after ``ag_`` (``R1`` for ``..._ag_R1``)."""
    cfg = config or AbsorptionConfig()
    token = cfg.sample_type_token.lstrip("_") + "_"
    if token in header:
        return header.split(token, 1)[1]
    return header

import pytest

from cdomproc.config import AbsorptionConfig
from cdomproc.core.identifiers import group_scans, parse_identifier, scan_label
from cdomproc.exceptions import MalformedIdentifierError

# ----------------------------------------------------------------------
# 1. Identifier rules
# ----------------------------------------------------------------------

def test_replicate_suffix_is_stripped_from_key():
    ident = parse_identifier("LS_200309_1_5_ag_R1")

    assert ident.key == "LS_200309_1_5_ag"
    assert ident.station == "LS_200309_1_5"
    assert ident.is_replicate
    assert ident.replicate == "1"
    assert not ident.is_blank


def test_header_without_replicate_marker_is_its_own_key():
    ident = parse_identifier("LS_200309_1_5_ag")

    assert ident.key == "LS_200309_1_5_ag"
    assert ident.station == "LS_200309_1_5"
    assert not ident.is_replicate


def test_station_without_sample_type_keeps_full_key():
    ident = parse_identifier("LS_200309_2_0_R3")
    assert ident.key == "LS_200309_2_0"
    assert ident.station == "LS_200309_2_0"


def test_di_scan_is_blank():
    ident = parse_identifier("DI_200309_R1")
    assert ident.is_blank
    assert ident.key == "DI_200309_R1"


@pytest.mark.parametrize("header", ["", "   ", "Baseline 100%T", "zero_line_R1"])
def test_unusable_headers_raise(header):
    with pytest.raises(MalformedIdentifierError):
        parse_identifier(header)


def test_custom_tokens_from_config():
    cfg = AbsorptionConfig(blank_token="MQ", replicate_token="-rep")
    assert parse_identifier("MQ_1", config=cfg).is_blank
    assert parse_identifier("S1_ag-rep2", config=cfg).key == "S1_ag"


def test_scan_label():
    assert scan_label("LS_200309_1_5_ag_R2") == "R2"
    assert scan_label("LS_200309_2_0_R3") == "LS_200309_2_0_R3"

# ----------------------------------------------------------------------
# 2. Grouping
# ----------------------------------------------------------------------

def test_groups_follow_first_appearance_order():
    headers = ["DI_a", "", "B_ag_R1", "", "A_ag_R1", "", "B_ag_R2", "", "DI_b", ""]
    groups, blanks = group_scans(headers)

    assert [g.key for g in groups] == ["B_ag", "A_ag"]
    assert groups[0].columns == (2, 6)
    assert groups[0].data_columns == (3, 7)
    assert groups[0].labels == ("B_ag_R1", "B_ag_R2")
    assert groups[1].columns == (4,)
    assert blanks == [1, 9]


def test_baseline_and_empty_columns_are_not_grouped():
    headers = ["Baseline 100%T", "", "DI_1", "", "S1_ag_R1", "", "DI_2", ""]
    groups, blanks = group_scans(headers)

    assert [g.key for g in groups] == ["S1_ag"]
    assert blanks == [3, 7]

import pytest

from scrim import config
from scrim.errors import InvalidRequest, RecordNotFound, StoreError
from scrim.ids import (
    decode_schedule_id,
    encode_schedule_id,
    fraksi_for_schedule_id,
    fraksi_offset,
    sheet_row,
)


def test_first_row_of_each_faction():
    assert encode_schedule_id(config.FRAKSI_1, 1) == 1001
    assert encode_schedule_id(config.FRAKSI_2, 1) == 2001


def test_decode_recovers_position():
    for fraksi in config.FACTIONS:
        for position in (1, 2, 57, 999):
            assert decode_schedule_id(fraksi, encode_schedule_id(fraksi, position)) == position


def test_ids_of_different_factions_never_collide():
    fraksi_1_ids = {encode_schedule_id(config.FRAKSI_1, p) for p in range(1, 1000)}
    fraksi_2_ids = {encode_schedule_id(config.FRAKSI_2, p) for p in range(1, 1000)}
    assert not fraksi_1_ids & fraksi_2_ids


def test_decode_with_wrong_faction_is_not_found():
    with pytest.raises(RecordNotFound):
        decode_schedule_id(config.FRAKSI_1, 2001)
    with pytest.raises(RecordNotFound):
        decode_schedule_id(config.FRAKSI_2, 1001)


def test_position_outside_offset_range_cannot_be_encoded():
    with pytest.raises(StoreError):
        encode_schedule_id(config.FRAKSI_1, 1000)
    with pytest.raises(StoreError):
        encode_schedule_id(config.FRAKSI_1, 0)


def test_unknown_faction():
    with pytest.raises(InvalidRequest) as exc_info:
        fraksi_offset("Fraksi 3")
    assert exc_info.value.message == "Valid fraksi is required"


def test_fraksi_for_schedule_id():
    assert fraksi_for_schedule_id(1001) == config.FRAKSI_1
    assert fraksi_for_schedule_id(2999) == config.FRAKSI_2
    assert fraksi_for_schedule_id(1000) is None
    assert fraksi_for_schedule_id(42) is None


def test_sheet_row_skips_header():
    assert sheet_row(1) == 2
    assert sheet_row(10) == 11

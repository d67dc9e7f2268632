import datetime as dt

import pytest
from pydantic import ValidationError

from scrim import config
from scrim.models import (
    AttendanceCreate,
    AttendanceRecord,
    MatchResultPayload,
    MatchResultRecord,
    ScheduleItem,
    ScheduleRef,
    ScrimForm,
    determine_status,
    first_error_message,
    utc_timestamp,
)


def error_for(model, **data):
    with pytest.raises(ValidationError) as exc_info:
        model(**data)
    return first_error_message(exc_info.value)


def test_status_covers_every_score_pair():
    for rev in range(config.MIN_SCORE, config.MAX_SCORE + 1):
        for opponent in range(config.MIN_SCORE, config.MAX_SCORE + 1):
            status = determine_status(rev, opponent)
            if rev > opponent:
                assert status == config.STATUS_WIN
            elif rev < opponent:
                assert status == config.STATUS_LOSS
            else:
                assert status == config.STATUS_DRAW


def test_utc_timestamp_has_milliseconds_and_z():
    now = dt.datetime(2025, 9, 10, 9, 37, 16, 301000, tzinfo=dt.timezone.utc)
    assert utc_timestamp(now) == "2025-09-10T09:37:16.301Z"


def test_utc_timestamp_converts_other_zones():
    jakarta = dt.timezone(dt.timedelta(hours=7))
    now = dt.datetime(2025, 9, 10, 16, 0, 0, tzinfo=jakarta)
    assert utc_timestamp(now) == "2025-09-10T09:00:00.000Z"


def test_scrim_form_joins_maps():
    form = ScrimForm(
        fraksi=config.FRAKSI_1,
        tanggalScrim="2025-10-01",
        lawan="Alpha",
        map=["Ascension", "Cyclone"],
        startMatch="19:00",
    )
    assert form.to_row() == ["2025-10-01", "Alpha", "Ascension, Cyclone", "19:00"]


@pytest.mark.parametrize("field, value, message", [
    ("tanggalScrim", "", "Tanggal Scrim is required"),
    ("lawan", "A", "Lawan must be at least 2 characters"),
    ("map", [], "Pilih minimal satu map"),
    ("startMatch", "7pm", "Start Match must be in HH:mm format"),
    ("fraksi", "Fraksi 3", "Valid fraksi is required"),
])
def test_scrim_form_messages(field, value, message):
    data = {
        "fraksi": config.FRAKSI_1,
        "tanggalScrim": "2025-10-01",
        "lawan": "Alpha",
        "map": ["Ascension"],
        "startMatch": "19:00",
        field: value,
    }
    assert error_for(ScrimForm, **data) == message


@pytest.mark.parametrize("value", [0, -3, True, "1001"])
def test_record_id_must_be_positive_integer(value):
    assert error_for(ScheduleRef, id=value, fraksi=config.FRAKSI_1) == "Valid ID is required"


def test_missing_field_names_location():
    assert error_for(ScheduleRef, fraksi=config.FRAKSI_1) == "id: Field required"


def test_attendance_player_name_trimmed_and_required():
    payload = AttendanceCreate(scheduleId=1001, fraksi=config.FRAKSI_1, playerName="  Budi ")
    assert payload.player_name == "Budi"
    assert error_for(
        AttendanceCreate, scheduleId=1001, fraksi=config.FRAKSI_1, playerName="   "
    ) == "Player name is required"
    assert error_for(
        AttendanceCreate, scheduleId=0, fraksi=config.FRAKSI_1, playerName="Budi"
    ) == "Valid scheduleId is required"


def test_attendance_matching_ignores_case_and_spaces():
    record = AttendanceRecord.from_row(1, ["1001", config.FRAKSI_1, "Budi", "unavailable"])
    assert record.reason == ""
    assert record.matches(1001, config.FRAKSI_1, " budi ")
    assert not record.matches(1001, config.FRAKSI_2, "Budi")
    assert not record.matches(1002, config.FRAKSI_1, "Budi")


@pytest.mark.parametrize("score, message", [
    (100, "Score must be between 0-99"),
    (-1, "Score must be between 0-99"),
    ("5", "Score must be a whole number"),
    (2.5, "Score must be a whole number"),
])
def test_score_validation(score, message):
    assert error_for(
        MatchResultPayload,
        scheduleId=1001, fraksi=config.FRAKSI_1, revScore=score, opponentScore=3, recordedBy="Budi",
    ) == message


def test_recorded_by_required():
    assert error_for(
        MatchResultPayload,
        scheduleId=1001, fraksi=config.FRAKSI_1, revScore=1, opponentScore=3, recordedBy=" ",
    ) == "Recorded by field is required"


def test_match_result_row_round_trip_keeps_fields():
    payload = MatchResultPayload(
        scheduleId=2003, fraksi=config.FRAKSI_2, revScore=13, opponentScore=11,
        notes=" close game ", recordedBy="Sari",
    )
    record = MatchResultRecord.from_payload(4, payload, "2025-09-10T09:37:16.301Z")
    assert record.status == config.STATUS_WIN
    assert record.notes == "close game"

    restored = MatchResultRecord.from_row(4, record.to_row())
    assert restored == record


@pytest.mark.parametrize("notes, expected", [("GG\n", "GG"), ("  ", ""), (None, "")])
def test_payload_notes_match_stored_notes(notes, expected):
    payload = MatchResultPayload(
        scheduleId=1001, fraksi=config.FRAKSI_1, revScore=13, opponentScore=7,
        notes=notes, recordedBy="Budi",
    )
    assert payload.notes == expected
    assert payload.model_dump(by_alias=True)["notes"] == expected
    record = MatchResultRecord.from_payload(1, payload, "2025-09-10T09:37:16.301Z")
    assert record.notes == payload.notes


def test_malformed_result_row_reads_zeroes():
    record = MatchResultRecord.from_row(1, ["abc", config.FRAKSI_1, "", "x"])
    assert record.schedule_id == 0
    assert record.rev_score == 0
    assert record.opponent_score == 0
    assert record.status == ""


def test_schedule_item_maps():
    item = ScheduleItem.from_row(1001, ["2025-10-01", "Alpha", "Ascension, Cyclone"])
    assert item.start_match == ""
    assert item.maps == ["Ascension", "Cyclone"]
    assert item.model_dump(by_alias=True) == {
        "id": 1001,
        "tanggalScrim": "2025-10-01",
        "lawan": "Alpha",
        "map": "Ascension, Cyclone",
        "startMatch": "",
    }

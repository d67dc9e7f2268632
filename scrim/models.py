from __future__ import annotations

import datetime as dt
import re
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError, field_validator

from . import config

TIME_PATTERN = re.compile(r"^\d{2}:\d{2}$")


def _check_fraksi(value: Any) -> str:
    if value not in config.FACTIONS:
        raise ValueError("Valid fraksi is required")
    return value


def _positive_id(message: str):
    def check(value: Any) -> int:
        # bool is an int subclass; JSON true must not pass as id 1
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ValueError(message)
        return value
    return check


def _score(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError("Score must be a whole number")
    if value < config.MIN_SCORE or value > config.MAX_SCORE:
        raise ValueError(f"Score must be between {config.MIN_SCORE}-{config.MAX_SCORE}")
    return value


FraksiName = Annotated[str, BeforeValidator(_check_fraksi)]
RecordId = Annotated[int, BeforeValidator(_positive_id("Valid ID is required"))]
ScheduleRefId = Annotated[int, BeforeValidator(_positive_id("Valid scheduleId is required"))]
Score = Annotated[int, BeforeValidator(_score)]


def first_error_message(exc: ValidationError) -> str:
    """Human readable message of the first pydantic error."""
    errors = exc.errors()
    if not errors:
        return str(exc)
    error = errors[0]
    ctx_error = error.get("ctx", {}).get("error")
    if ctx_error is not None:
        return str(ctx_error)
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    if location:
        return f"{location}: {error['msg']}"
    return error["msg"]


def determine_status(rev_score: int, opponent_score: int) -> str:
    if rev_score > opponent_score:
        return config.STATUS_WIN
    if rev_score < opponent_score:
        return config.STATUS_LOSS
    return config.STATUS_DRAW


def utc_timestamp(now: Optional[dt.datetime] = None) -> str:
    """ISO-8601 UTC timestamp with milliseconds, e.g. 2025-09-10T09:37:16.301Z."""
    now = now or dt.datetime.now(dt.timezone.utc)
    return now.astimezone(dt.timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _cell(row: List[str], index: int) -> str:
    return row[index] if index < len(row) and row[index] is not None else ""


def _to_int(value: Any) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return 0


# Schedules

class ScheduleFields(BaseModel):
    tanggal_scrim: str = Field(alias="tanggalScrim")
    lawan: str
    map: List[str]
    start_match: str = Field(alias="startMatch")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("tanggal_scrim")
    @classmethod
    def _tanggal_required(cls, value: str) -> str:
        if len(value) < 1:
            raise ValueError("Tanggal Scrim is required")
        return value

    @field_validator("lawan")
    @classmethod
    def _lawan_length(cls, value: str) -> str:
        if len(value) < 2:
            raise ValueError("Lawan must be at least 2 characters")
        return value

    @field_validator("map")
    @classmethod
    def _at_least_one_map(cls, value: List[str]) -> List[str]:
        if len(value) < 1:
            raise ValueError("Pilih minimal satu map")
        return value

    @field_validator("start_match")
    @classmethod
    def _time_format(cls, value: str) -> str:
        if not TIME_PATTERN.match(value):
            raise ValueError("Start Match must be in HH:mm format")
        return value

    def to_row(self) -> List[str]:
        return [self.tanggal_scrim, self.lawan, config.MAP_SEPARATOR.join(self.map), self.start_match]


class ScrimForm(ScheduleFields):
    fraksi: FraksiName


class ScheduleRef(BaseModel):
    id: RecordId
    fraksi: FraksiName


class ScheduleUpdate(ScrimForm):
    id: RecordId


class ScheduleItem(BaseModel):
    id: int
    tanggal_scrim: str = Field(alias="tanggalScrim")
    lawan: str
    map: str
    start_match: str = Field(alias="startMatch")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_row(cls, schedule_id: int, row: List[str]) -> "ScheduleItem":
        return cls(
            id=schedule_id,
            tanggal_scrim=_cell(row, 0),
            lawan=_cell(row, 1),
            map=_cell(row, 2),
            start_match=_cell(row, 3),
        )

    @property
    def maps(self) -> List[str]:
        return [name.strip() for name in self.map.split(",") if name.strip()]


# Attendance

class AttendanceCreate(BaseModel):
    schedule_id: ScheduleRefId = Field(alias="scheduleId")
    fraksi: FraksiName
    player_name: str = Field(alias="playerName")
    reason: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("player_name")
    @classmethod
    def _player_required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Player name is required")
        return value.strip()


class AttendanceDelete(AttendanceCreate):
    pass


class AttendanceRecord(BaseModel):
    id: int
    schedule_id: int = Field(alias="scheduleId")
    fraksi: str
    player_name: str = Field(alias="playerName")
    status: str
    reason: str = ""
    timestamp: str = ""

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_row(cls, position: int, row: List[str]) -> "AttendanceRecord":
        return cls(
            id=position,
            schedule_id=_to_int(_cell(row, 0)),
            fraksi=_cell(row, 1),
            player_name=_cell(row, 2),
            status=_cell(row, 3),
            reason=_cell(row, 4),
            timestamp=_cell(row, 5),
        )

    def to_row(self) -> List[str]:
        return [str(self.schedule_id), self.fraksi, self.player_name, self.status, self.reason, self.timestamp]

    def matches(self, schedule_id: int, fraksi: str, player_name: str) -> bool:
        return (
            self.schedule_id == schedule_id
            and self.fraksi == fraksi
            and self.player_name.lower() == player_name.strip().lower()
        )


# Match results

class MatchResultPayload(BaseModel):
    schedule_id: ScheduleRefId = Field(alias="scheduleId")
    fraksi: FraksiName
    rev_score: Score = Field(alias="revScore")
    opponent_score: Score = Field(alias="opponentScore")
    notes: Optional[str] = ""
    recorded_by: str = Field(alias="recordedBy")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("recorded_by")
    @classmethod
    def _recorder_required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Recorded by field is required")
        return value.strip()

    @field_validator("notes")
    @classmethod
    def _strip_notes(cls, value: Optional[str]) -> str:
        # Stored rows hold trimmed notes; the dumped payload must agree with them
        return (value or "").strip()

    @property
    def status(self) -> str:
        return determine_status(self.rev_score, self.opponent_score)


class MatchResultUpdate(MatchResultPayload):
    id: RecordId


class MatchResultRecord(BaseModel):
    id: int
    schedule_id: int = Field(alias="scheduleId")
    fraksi: str
    rev_score: int = Field(alias="revScore")
    opponent_score: int = Field(alias="opponentScore")
    status: str
    notes: str = ""
    recorded_by: str = Field(default="", alias="recordedBy")
    timestamp: str = ""
    opponent: str = ""

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_row(cls, position: int, row: List[str]) -> "MatchResultRecord":
        return cls(
            id=position,
            schedule_id=_to_int(_cell(row, 0)),
            fraksi=_cell(row, 1),
            rev_score=_to_int(_cell(row, 2)),
            opponent_score=_to_int(_cell(row, 3)),
            status=_cell(row, 4),
            notes=_cell(row, 5),
            recorded_by=_cell(row, 6),
            timestamp=_cell(row, 7),
        )

    @classmethod
    def from_payload(cls, position: int, payload: MatchResultPayload, timestamp: str) -> "MatchResultRecord":
        return cls(
            id=position,
            schedule_id=payload.schedule_id,
            fraksi=payload.fraksi,
            rev_score=payload.rev_score,
            opponent_score=payload.opponent_score,
            status=payload.status,
            notes=(payload.notes or "").strip(),
            recorded_by=payload.recorded_by,
            timestamp=timestamp,
        )

    def to_row(self) -> List[str]:
        return [
            str(self.schedule_id),
            self.fraksi,
            str(self.rev_score),
            str(self.opponent_score),
            self.status,
            self.notes,
            self.recorded_by,
            self.timestamp,
        ]

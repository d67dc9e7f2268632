"""Synthetic schedule ids.

Each faction tab numbers its rows from 1, so a faction offset is added to the
row position to keep ids unique once both tabs are shown together:
Fraksi 1 row 1 is 1001, Fraksi 2 row 1 is 2001. The ids are derived from row
position and go stale as soon as an earlier row is deleted.
"""
from . import config
from .errors import InvalidRequest, RecordNotFound, StoreError

HEADER_ROWS = 1


def fraksi_offset(fraksi):
    try:
        return config.FRAKSI_OFFSETS[fraksi]
    except KeyError:
        raise InvalidRequest("Valid fraksi is required") from None


def encode_schedule_id(fraksi, position):
    """Turn a 1-based row position within a faction tab into a schedule id."""
    if position < 1 or position >= config.OFFSET_SPAN:
        raise StoreError(f"Row position {position} cannot be encoded as a schedule id")
    return fraksi_offset(fraksi) + position


def decode_schedule_id(fraksi, schedule_id):
    """Recover the 1-based row position of a schedule id within its faction tab."""
    position = schedule_id - fraksi_offset(fraksi)
    if position < 1 or position >= config.OFFSET_SPAN:
        raise RecordNotFound(f"Schedule {schedule_id} does not belong to {fraksi}")
    return position


def fraksi_for_schedule_id(schedule_id):
    """Return the faction whose offset range contains the id, or None."""
    for fraksi, offset in config.FRAKSI_OFFSETS.items():
        if offset < schedule_id < offset + config.OFFSET_SPAN:
            return fraksi
    return None


def sheet_row(position):
    """Physical 1-based sheet row for a data position (row 1 is the header)."""
    return position + HEADER_ROWS

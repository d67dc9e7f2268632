"""Maps schedules, attendance and match results to and from sheet rows.

The repository only needs a row store with ``get_rows``, ``append_row``,
``update_row`` and ``delete_row`` (see :class:`scrim.sheets_manager.SheetsManager`).
Duplicate checks are a read followed by a write with nothing in between to
stop a concurrent writer, so two simultaneous submissions can both pass.
"""
import logging

from . import config
from .errors import DuplicateRecord, InvalidRequest, RecordNotFound
from .ids import decode_schedule_id, encode_schedule_id, fraksi_offset
from .models import AttendanceRecord, MatchResultRecord, ScheduleItem, utc_timestamp

logger = logging.getLogger(__name__)

# Schedule ids encode the row position below the next faction offset
MAX_SCHEDULES = config.OFFSET_SPAN - 1


class ScrimRepository:
    def __init__(self, store):
        self.store = store

    # Schedules

    def get_schedules(self, fraksi):
        fraksi_offset(fraksi)
        rows = self.store.get_rows(fraksi)
        if len(rows) > MAX_SCHEDULES:
            # Rows past the id range were written outside the API and cannot be addressed
            logger.warning("%s has %d rows; ignoring rows after %d", fraksi, len(rows), MAX_SCHEDULES)
            rows = rows[:MAX_SCHEDULES]
        return [
            ScheduleItem.from_row(encode_schedule_id(fraksi, position), row)
            for position, row in enumerate(rows, start=1)
        ]

    def _schedule_position(self, fraksi, schedule_id):
        position = decode_schedule_id(fraksi, schedule_id)
        if position > len(self.store.get_rows(fraksi)):
            raise RecordNotFound(f"Schedule {schedule_id} not found in {fraksi}")
        return position

    def append_schedule(self, form):
        if len(self.store.get_rows(form.fraksi)) >= MAX_SCHEDULES:
            raise InvalidRequest(f"{form.fraksi} already has the maximum of {MAX_SCHEDULES} schedules")
        self.store.append_row(form.fraksi, form.to_row())
        logger.info("Scheduled scrim vs %s for %s on %s", form.lawan, form.fraksi, form.tanggal_scrim)

    def update_schedule(self, update):
        position = self._schedule_position(update.fraksi, update.id)
        self.store.update_row(update.fraksi, position, update.to_row())
        return ScheduleItem.from_row(update.id, update.to_row())

    def delete_schedule(self, fraksi, schedule_id):
        position = self._schedule_position(fraksi, schedule_id)
        self.store.delete_row(fraksi, position)
        logger.info("Deleted schedule %d from %s", schedule_id, fraksi)

    # Attendance

    def _all_attendance(self):
        rows = self.store.get_rows(config.SHEET_ATTENDANCE)
        return [AttendanceRecord.from_row(position, row) for position, row in enumerate(rows, start=1)]

    def get_attendance(self, schedule_id=None, fraksi=None):
        records = self._all_attendance()
        if schedule_id is not None:
            records = [record for record in records if record.schedule_id == schedule_id]
        if fraksi:
            records = [record for record in records if record.fraksi == fraksi]
        return records

    def mark_unavailable(self, payload, now=None):
        """Record that a player cannot attend a scrim."""
        records = self._all_attendance()
        if any(record.matches(payload.schedule_id, payload.fraksi, payload.player_name) for record in records):
            raise DuplicateRecord("Player already marked as unavailable for this match")

        record = AttendanceRecord(
            id=len(records) + 1,
            schedule_id=payload.schedule_id,
            fraksi=payload.fraksi,
            player_name=payload.player_name,
            status=config.STATUS_UNAVAILABLE,
            reason=(payload.reason or "").strip(),
            timestamp=utc_timestamp(now),
        )
        self.store.append_row(config.SHEET_ATTENDANCE, record.to_row())
        logger.info("Marked %s unavailable for schedule %d", record.player_name, record.schedule_id)
        return record

    def mark_available(self, payload):
        """Delete the first attendance mark for the player; others stay untouched."""
        for record in self._all_attendance():
            if record.matches(payload.schedule_id, payload.fraksi, payload.player_name):
                self.store.delete_row(config.SHEET_ATTENDANCE, record.id)
                logger.info("Marked %s available for schedule %d", record.player_name, record.schedule_id)
                return record
        raise RecordNotFound("Attendance record not found")

    # Match results

    def _all_results(self):
        rows = self.store.get_rows(config.SHEET_MATCH_RESULTS)
        return [MatchResultRecord.from_row(position, row) for position, row in enumerate(rows, start=1)]

    def _with_opponents(self, records):
        opponents = {}
        for fraksi in sorted({record.fraksi for record in records}):
            if fraksi not in config.FACTIONS:
                continue
            opponents[fraksi] = {item.id: item.lawan for item in self.get_schedules(fraksi)}
        return [
            record.model_copy(update={"opponent": opponents.get(record.fraksi, {}).get(record.schedule_id, "")})
            for record in records
        ]

    def get_match_results(self, schedule_id=None, fraksi=None):
        records = self._all_results()
        if schedule_id is not None:
            records = [record for record in records if record.schedule_id == schedule_id]
        if fraksi:
            records = [record for record in records if record.fraksi == fraksi]
        return self._with_opponents(records)

    def create_match_result(self, payload, now=None):
        records = self._all_results()
        if any(r.schedule_id == payload.schedule_id and r.fraksi == payload.fraksi for r in records):
            raise DuplicateRecord("Match result already exists for this schedule")

        record = MatchResultRecord.from_payload(len(records) + 1, payload, utc_timestamp(now))
        self.store.append_row(config.SHEET_MATCH_RESULTS, record.to_row())
        logger.info(
            "Recorded %s %d-%d for schedule %d (%s)",
            record.status, record.rev_score, record.opponent_score, record.schedule_id, record.fraksi
        )
        return record

    def _result_exists(self, result_id):
        if result_id > len(self.store.get_rows(config.SHEET_MATCH_RESULTS)):
            raise RecordNotFound(f"Match result {result_id} not found")

    def update_match_result(self, update, now=None):
        self._result_exists(update.id)
        record = MatchResultRecord.from_payload(update.id, update, utc_timestamp(now))
        self.store.update_row(config.SHEET_MATCH_RESULTS, update.id, record.to_row())
        logger.info("Updated match result %d to %s", record.id, record.status)
        return record

    def delete_match_result(self, result_id):
        self._result_exists(result_id)
        self.store.delete_row(config.SHEET_MATCH_RESULTS, result_id)
        logger.info("Deleted match result %d", result_id)

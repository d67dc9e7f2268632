"""Optimistic local copies of API collections.

A view mutates its local copy straight away, tags the touched record with the
pending write, sends the write, and after a short delay re-fetches to
reconcile. A failed write restores the snapshot taken before the mutation.
A pending tag is only cleared once a re-fetch shows the write landed; until
then the optimistic version stays on screen, and after
``config.MAX_RECONCILE_ATTEMPTS`` unconfirmed reconciliations it is dropped.
"""
import copy
import logging
import time
from dataclasses import dataclass, field

from . import config
from .client import ScrimClientError

logger = logging.getLogger(__name__)

PENDING_CREATE = "create"
PENDING_UPDATE = "update"
PENDING_DELETE = "delete"

# Fields that must match before a server record confirms a pending write
SCHEDULE_FIELDS = ("tanggalScrim", "lawan", "map", "startMatch")
ATTENDANCE_FIELDS = ("scheduleId", "fraksi", "playerName", "reason")
RESULT_FIELDS = ("scheduleId", "fraksi", "revScore", "opponentScore", "notes", "recordedBy")


@dataclass
class LocalRecord:
    key: object
    data: dict = field(default_factory=dict)
    pending: str = None
    attempts: int = 0


class OptimisticCollection:
    """Local list of records addressed by ``key_func(record)``.

    ``compare_fields`` decide whether a server record confirms a pending
    create or update. Creates are matched on those fields alone because the
    server assigns their ids.
    """

    def __init__(self, key_func, compare_fields, records=(), max_attempts=config.MAX_RECONCILE_ATTEMPTS):
        self.key_func = key_func
        self.compare_fields = tuple(compare_fields)
        self.max_attempts = max_attempts
        self._records = []
        self.replace(records)

    def __len__(self):
        return len(self.records)

    @property
    def records(self):
        """Visible records: everything except rows pending deletion."""
        return [record.data for record in self._records if record.pending != PENDING_DELETE]

    @property
    def pending(self):
        return [record for record in self._records if record.pending]

    def pending_for(self, key):
        for record in self._records:
            if record.key == key:
                return record.pending
        return None

    def replace(self, records):
        """Take server records as-is, discarding local state."""
        self._records = [LocalRecord(self.key_func(data), dict(data)) for data in records]

    def snapshot(self):
        return copy.deepcopy(self._records)

    def restore(self, snapshot):
        self._records = copy.deepcopy(snapshot)

    def _find(self, key):
        for record in self._records:
            if record.key == key and record.pending != PENDING_DELETE:
                return record
        raise KeyError(key)

    def create(self, data):
        record = LocalRecord(self.key_func(data), dict(data), PENDING_CREATE)
        self._records.append(record)
        return record

    def update(self, key, changes):
        record = self._find(key)
        record.data = {**record.data, **changes}
        record.key = self.key_func(record.data)
        if record.pending != PENDING_CREATE:
            record.pending = PENDING_UPDATE
        record.attempts = 0
        return record

    def delete(self, key):
        record = self._find(key)
        record.pending = PENDING_DELETE
        record.attempts = 0
        return record

    def _same(self, local, server):
        return all(local.get(name) == server.get(name) for name in self.compare_fields)

    def _confirmed(self, local, server_records, server_by_key):
        if local.pending == PENDING_CREATE:
            return any(self._same(local.data, server) for server in server_records)
        server = server_by_key.get(local.key)
        if local.pending == PENDING_DELETE:
            return server is None
        return server is not None and self._same(local.data, server)

    def reconcile(self, server_records):
        """Replace local rows with server rows, keeping unconfirmed pending writes.

        Returns the pending records given up on in this round.
        """
        server_records = [dict(data) for data in server_records]
        server_by_key = {self.key_func(data): data for data in server_records}
        merged = [LocalRecord(self.key_func(data), data) for data in server_records]
        dropped = []

        for local in self.pending:
            if self._confirmed(local, server_records, server_by_key):
                continue
            local.attempts += 1
            if local.attempts >= self.max_attempts:
                logger.warning("Dropping unconfirmed %s of %s", local.pending, local.key)
                dropped.append(local)
                continue

            position = next((i for i, row in enumerate(merged) if row.key == local.key), None)
            if local.pending == PENDING_CREATE or position is None:
                if local.pending != PENDING_DELETE:
                    merged.append(local)
            else:
                merged[position] = local

        self._records = merged
        return dropped


class SyncedCollection:
    """Couples an :class:`OptimisticCollection` with the API calls behind it.

    ``loader(fresh)`` returns the server records; writes are plain callables
    that raise :class:`ScrimClientError` on failure.
    """

    def __init__(self, collection, loader, reconcile_delay=config.RECONCILE_DELAY, sleep=time.sleep,
                 clock=time.monotonic):
        self.collection = collection
        self.loader = loader
        self.reconcile_delay = reconcile_delay
        self._sleep = sleep
        self._clock = clock
        self.last_write = None
        self.last_reconcile = None
        self.dropped = []

    @property
    def records(self):
        return self.collection.records

    def refresh(self, fresh=False):
        """Reload from the server, reconciling instead while writes are pending."""
        if self.collection.pending:
            return self.reconcile()
        self.collection.replace(self.loader(fresh))
        return []

    def reconcile(self):
        self.last_reconcile = self._clock()
        try:
            server_records = self.loader(True)
        except ScrimClientError as exc:
            # Pending tags stay until a later reconciliation succeeds
            logger.warning("Reconciliation fetch failed: %s", exc.message)
            return []
        dropped = self.collection.reconcile(server_records)
        self.dropped.extend(dropped)
        return dropped

    def reconcile_due(self):
        """Reconcile pending writes once the delay since the last write or check has passed.

        Called on every render so unconfirmed writes keep being checked until
        they are confirmed or dropped.
        """
        if not self.collection.pending:
            return []
        checked = [stamp for stamp in (self.last_write, self.last_reconcile) if stamp is not None]
        if checked and self._clock() - max(checked) < self.reconcile_delay:
            return []
        return self.reconcile()

    def _mutate(self, apply, write):
        snapshot = self.collection.snapshot()
        apply()
        try:
            result = write()
        except ScrimClientError:
            self.collection.restore(snapshot)
            raise
        self.last_write = self._clock()
        self._sleep(self.reconcile_delay)
        self.reconcile()
        return result

    def create(self, data, write):
        return self._mutate(lambda: self.collection.create(data), write)

    def update(self, key, changes, write):
        return self._mutate(lambda: self.collection.update(key, changes), write)

    def delete(self, key, write):
        return self._mutate(lambda: self.collection.delete(key), write)

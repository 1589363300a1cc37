"""
Infrastructure layer: in-memory persistence for alerts and prescription maps.

Updates are optimistic: the caller passes the version it read, and a
mismatch is reported as a lost update instead of being overwritten.
"""
import logging
import threading
from typing import Dict, Generic, List, Optional, TypeVar

from fieldpulse.domain.errors import ConcurrentUpdateError, NotFoundError
from fieldpulse.domain.models import Alert, PrescriptionMap

logger = logging.getLogger(__name__)

Record = TypeVar("Record", Alert, PrescriptionMap)


class InMemoryRepository(Generic[Record]):
    """Append-and-update store keyed by record id."""

    entity_name = "record"

    def __init__(self):
        self._records: Dict[str, Record] = {}
        self._lock = threading.Lock()

    def add(self, record: Record) -> Record:
        with self._lock:
            if record.id in self._records:
                raise ValueError(f"{self.entity_name} {record.id} already exists")
            self._records[record.id] = record
        return record

    def get(self, record_id: str) -> Record:
        """
        Raises:
            NotFoundError: If no record has this id
        """
        with self._lock:
            record = self._records.get(record_id)
        if record is None:
            raise NotFoundError(
                f"{self.entity_name.capitalize()} {record_id} not found",
                field="id",
            )
        return record

    def update(self, record: Record, expected_version: int) -> Record:
        """
        Replace a record if nobody changed it since it was read.

        Raises:
            NotFoundError: If the record does not exist
            ConcurrentUpdateError: If the stored version differs from expected_version
        """
        with self._lock:
            current = self._records.get(record.id)
            if current is None:
                raise NotFoundError(
                    f"{self.entity_name.capitalize()} {record.id} not found",
                    field="id",
                )
            if current.version != expected_version:
                logger.warning(f"Lost update on {self.entity_name} {record.id}: "
                               f"expected v{expected_version}, found v{current.version}")
                raise ConcurrentUpdateError(
                    f"{self.entity_name.capitalize()} {record.id} was modified concurrently",
                    field="version",
                    expected=expected_version,
                    found=current.version,
                )
            self._records[record.id] = record
        return record

    def list_for_parcel(self, parcel_id: str) -> List[Record]:
        with self._lock:
            records = list(self._records.values())
        return [r for r in records if r.parcel_id == parcel_id]

    def clear(self) -> None:
        with self._lock:
            self._records.clear()


class AlertRepository(InMemoryRepository[Alert]):
    entity_name = "alert"


class PrescriptionMapRepository(InMemoryRepository[PrescriptionMap]):
    entity_name = "prescription map"


_alert_repository: Optional[AlertRepository] = None
_map_repository: Optional[PrescriptionMapRepository] = None


def get_alert_repository() -> AlertRepository:
    global _alert_repository
    if _alert_repository is None:
        _alert_repository = AlertRepository()
    return _alert_repository


def get_map_repository() -> PrescriptionMapRepository:
    global _map_repository
    if _map_repository is None:
        _map_repository = PrescriptionMapRepository()
    return _map_repository

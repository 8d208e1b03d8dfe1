"""Data access layer - full-list load and replace-on-write for each record kind

Every collection is read whole, changed in memory and written back whole.
Nothing coordinates concurrent writers: two requests appending at the same
time both read the old list, and the later write wins.
"""

import logging
from typing import Any, Generic, List, Optional, TypeVar
from sqlalchemy.orm import Session
from finance_tracker.infrastructure.database.models import RecordCollection
from finance_tracker.infrastructure.observability.metrics import collection_write_counter
from finance_tracker.domain.models import Card, CategoryRule, Installment, Setting, Transaction
from finance_tracker.domain.exceptions import RecordNotFoundError, StorageError
from finance_tracker.domain.validation import serialize_record, validate_record

T = TypeVar("T")

logger = logging.getLogger(__name__)


class _DocumentStore:
    def __init__(self, db: Session):
        self.db = db

    def _read(self, kind: str) -> Optional[Any]:
        row = self.db.get(RecordCollection, kind)
        return row.payload if row is not None else None

    def _write(self, kind: str, payload: Any) -> None:
        row = self.db.get(RecordCollection, kind)
        if row is None:
            self.db.add(RecordCollection(kind=kind, payload=payload))
        else:
            row.payload = payload
        self.db.flush()
        collection_write_counter.labels(kind=kind).inc()


class CollectionRepository(_DocumentStore, Generic[T]):
    """Repository for one list-valued record collection"""

    collection: str = ""
    record_kind: str = ""

    def load_all(self) -> List[T]:
        """
        Load and validate every stored record.

        Raises:
            StorageError: stored document is not a list or holds an invalid record
        """
        payload = self._read(self.collection)
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise StorageError(f"Stored {self.collection} is not a list")

        items = []
        for index, raw in enumerate(payload):
            result = validate_record(self.record_kind, raw)
            if not result.ok:
                logger.error(
                    "Invalid stored record",
                    extra={"collection": self.collection, "index": index, "errors": result.errors},
                )
                raise StorageError(f"Stored {self.collection}[{index}] is invalid: {result.errors}")
            items.append(result.value)
        return items

    def save_all(self, items: List[T]) -> None:
        """Replace the whole collection"""
        self._write(self.collection, [serialize_record(item) for item in items])

    def append(self, item: T) -> T:
        items = self.load_all()
        items.append(item)
        self.save_all(items)
        return item

    def extend(self, new_items: List[T]) -> List[T]:
        items = self.load_all()
        items.extend(new_items)
        self.save_all(items)
        return new_items

    def remove(self, item_id: str) -> None:
        """
        Raises:
            RecordNotFoundError: no record has this id
        """
        items = self.load_all()
        remaining = [item for item in items if item.id != item_id]
        if len(remaining) == len(items):
            raise RecordNotFoundError(f"No {self.record_kind} with id {item_id}")
        self.save_all(remaining)


class TransactionRepository(CollectionRepository[Transaction]):
    collection = "transactions"
    record_kind = "transaction"


class CardRepository(CollectionRepository[Card]):
    collection = "cards"
    record_kind = "card"


class CategoryRuleRepository(CollectionRepository[CategoryRule]):
    """Rules are stored in priority order; the list is only ever replaced whole"""

    collection = "category_rules"
    record_kind = "category_rule"


class InstallmentRepository(CollectionRepository[Installment]):
    collection = "installments"
    record_kind = "installment"


class SettingRepository(_DocumentStore):
    """Repository for the settings singleton"""

    collection = "settings"

    def load(self) -> Setting:
        """Stored settings, or defaults when none were saved yet"""
        payload = self._read(self.collection)
        result = validate_record("setting", payload if payload is not None else {})
        if not result.ok:
            raise StorageError(f"Stored settings are invalid: {result.errors}")
        return result.value

    def save(self, setting: Setting) -> Setting:
        self._write(self.collection, serialize_record(setting))
        return setting

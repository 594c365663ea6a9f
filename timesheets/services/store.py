"""
Document store with live query subscriptions.

Collections are backed by SQLAlchemy tables. Every subscriber gets the whole
current collection (filtered/ordered by its FilterSpec) as an immutable
Snapshot, first on subscribe and then after each write to that collection.
Snapshots are pushed into a single-slot channel, so a slow consumer only
ever sees the most recent one.
"""
from sqlalchemy import DateTime, desc, asc
from sqlalchemy.exc import SQLAlchemyError
from pydantic import BaseModel
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Optional, Tuple, Type, Union
from timesheets.database import Database
from timesheets.exceptions import StoreNotConfiguredError, WriteError, InvalidInputError
from timesheets.models.schemas import TimeEntry, Project
from timesheets.models.timesheet import TimeEntryRecord, ProjectRecord
from timesheets.utils.timezone import as_utc_instant
import asyncio
import logging

logger = logging.getLogger(__name__)

ENTRIES = "entries"
PROJECTS = "projects"

COLLECTIONS: Dict[str, Tuple[Type, Type[BaseModel]]] = {
    ENTRIES: (TimeEntryRecord, TimeEntry),
    PROJECTS: (ProjectRecord, Project),
}


@dataclass(frozen=True)
class FilterSpec:
    """Equality filters plus an optional ordering field."""
    equals: Dict[str, Any] = field(default_factory=dict)
    order_by: Optional[str] = None
    descending: bool = False


@dataclass(frozen=True)
class Snapshot:
    collection: str
    documents: Tuple[BaseModel, ...]
    version: int

    def __len__(self):
        return len(self.documents)

    def __iter__(self):
        return iter(self.documents)


class ChannelClosed(Exception):
    """Raised by SnapshotChannel.get() once the channel is closed and drained."""


class SnapshotChannel:
    """Single-slot channel: put() overwrites, get() takes the latest."""

    def __init__(self):
        self._slot: Optional[Snapshot] = None
        self._latest: Optional[Snapshot] = None
        self._closed = False
        self._event = asyncio.Event()

    @property
    def latest(self) -> Optional[Snapshot]:
        """Most recent snapshot delivered, whether or not it was consumed."""
        return self._latest

    @property
    def closed(self) -> bool:
        return self._closed

    def put(self, snapshot: Snapshot):
        if self._closed:
            return
        self._slot = snapshot
        self._latest = snapshot
        self._event.set()

    async def get(self) -> Snapshot:
        while True:
            if self._slot is not None:
                snapshot, self._slot = self._slot, None
                self._event.clear()
                return snapshot
            if self._closed:
                raise ChannelClosed()
            await self._event.wait()
            self._event.clear()

    def close(self):
        self._closed = True
        self._slot = None
        self._event.set()


class Subscription:
    def __init__(
        self,
        store: "DocumentStore",
        collection: str,
        filter_spec: Optional[FilterSpec],
        callback: Optional[Callable[[Snapshot], None]] = None
    ):
        self.store = store
        self.collection = collection
        self.filter_spec = filter_spec
        self.callback = callback
        self.channel = SnapshotChannel()
        self.active = True

    def deliver(self, snapshot: Snapshot):
        if not self.active:
            return
        self.channel.put(snapshot)
        if self.callback is not None:
            try:
                self.callback(snapshot)
            except Exception:
                logger.exception(f"Snapshot callback failed for '{self.collection}'")

    def unsubscribe(self):
        """Release the stream. No callback or channel delivery happens afterwards."""
        if not self.active:
            return
        self.active = False
        self.store._release(self)
        self.channel.close()

    async def __aiter__(self):
        while True:
            try:
                yield await self.channel.get()
            except ChannelClosed:
                return


class DocumentStore:
    def __init__(self, database: Optional[Database]):
        self.database = database
        self._subscriptions: Dict[str, list] = {name: [] for name in COLLECTIONS}
        self._versions: Dict[str, int] = {name: 0 for name in COLLECTIONS}

    @property
    def configured(self) -> bool:
        return self.database is not None

    def _require_database(self, operation: str) -> Database:
        if self.database is None:
            raise StoreNotConfiguredError(operation)
        return self.database

    @staticmethod
    def _collection(name: str):
        try:
            return COLLECTIONS[name]
        except KeyError:
            raise InvalidInputError("collection", f"unknown collection '{name}'")

    def fetch(self, collection: str, filter_spec: Optional[FilterSpec] = None) -> Snapshot:
        """One-shot query returning the current snapshot."""
        database = self._require_database(f"query '{collection}'")
        record_cls, document_cls = self._collection(collection)

        with database.session() as db:
            query = db.query(record_cls)
            if filter_spec is not None:
                for name in list(filter_spec.equals) + ([filter_spec.order_by] if filter_spec.order_by else []):
                    if not hasattr(record_cls, name):
                        raise InvalidInputError("filter", f"'{collection}' has no field '{name}'")
                if filter_spec.equals:
                    query = query.filter_by(**filter_spec.equals)
                if filter_spec.order_by:
                    direction = desc if filter_spec.descending else asc
                    query = query.order_by(direction(getattr(record_cls, filter_spec.order_by)), record_cls.id)
            records = query.all()
            documents = tuple(document_cls(**self._columns(record)) for record in records)

        return Snapshot(collection=collection, documents=documents, version=self._versions[collection])

    def subscribe(
        self,
        collection: str,
        filter_spec: Optional[FilterSpec] = None,
        callback: Optional[Callable[[Snapshot], None]] = None
    ) -> Subscription:
        """Subscribe to full snapshots of a collection.

        The current snapshot is delivered before this returns.
        """
        self._require_database(f"subscribe to '{collection}'")
        initial = self.fetch(collection, filter_spec)

        subscription = Subscription(self, collection, filter_spec, callback)
        self._subscriptions[collection].append(subscription)
        logger.info(f"New subscription on '{collection}' ({len(self._subscriptions[collection])} active)")

        subscription.deliver(initial)
        return subscription

    async def write(self, collection: str, document: Union[Dict[str, Any], BaseModel]) -> str:
        """Insert one document and return its identifier.

        Failures raise WriteError and are not retried.
        """
        database = self._require_database(f"write to '{collection}'")
        record_cls, _ = self._collection(collection)

        if isinstance(document, BaseModel):
            document = document.model_dump()
        columns = {c.name: c for c in record_cls.__table__.columns}
        fields = {}
        for name, value in document.items():
            if name not in columns or name in ("id", "created_at"):
                continue
            if isinstance(columns[name].type, DateTime) and isinstance(value, (str, date)):
                value = as_utc_instant(value)
            fields[name] = value
        ignored = set(document) - set(columns)
        if ignored:
            logger.debug(f"Ignoring unknown fields for '{collection}': {sorted(ignored)}")

        with database.session() as db:
            try:
                record = record_cls(**fields)
                record.created_at = datetime.now(timezone.utc)
                db.add(record)
                db.commit()
                db.refresh(record)
                document_id = record.id
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Error writing to '{collection}': {str(e)}")
                raise WriteError(collection, str(e.__class__.__name__)) from e

        self._versions[collection] += 1
        logger.info(f"Wrote document {document_id} to '{collection}' (version {self._versions[collection]})")

        self._publish(collection)
        return document_id

    def _publish(self, collection: str):
        for subscription in list(self._subscriptions[collection]):
            try:
                snapshot = self.fetch(collection, subscription.filter_spec)
            except SQLAlchemyError as e:
                logger.error(f"Could not build snapshot for '{collection}': {str(e)}")
                continue
            subscription.deliver(snapshot)

    def _release(self, subscription: Subscription):
        subscribers = self._subscriptions[subscription.collection]
        if subscription in subscribers:
            subscribers.remove(subscription)
        logger.info(f"Subscription on '{subscription.collection}' released ({len(subscribers)} active)")

    def close(self):
        for subscribers in self._subscriptions.values():
            for subscription in list(subscribers):
                subscription.unsubscribe()

    @staticmethod
    def _columns(record) -> Dict[str, Any]:
        return {c.name: getattr(record, c.name) for c in record.__table__.columns}

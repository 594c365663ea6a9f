from typing import Optional, Tuple
from pydantic import BaseModel
from timesheets.exceptions import StoreNotConfiguredError
from timesheets.services.store import DocumentStore, FilterSpec, Snapshot, Subscription
import logging

logger = logging.getLogger(__name__)


class LiveView:
    """
    Working set kept in step with a store subscription.

    Each snapshot replaces the whole set; there is no merging, and the last
    snapshot delivered wins.
    """

    def __init__(self, store: DocumentStore, collection: str, filter_spec: Optional[FilterSpec] = None):
        self.store = store
        self.collection = collection
        self.filter_spec = filter_spec
        self.version = -1
        self._documents: Tuple[BaseModel, ...] = ()
        self._subscription: Optional[Subscription] = None

    @property
    def is_open(self) -> bool:
        return self._subscription is not None and self._subscription.active

    @property
    def documents(self) -> Tuple[BaseModel, ...]:
        if not self.is_open:
            raise StoreNotConfiguredError(f"read live '{self.collection}'")
        return self._documents

    def open(self):
        if self.is_open:
            return
        self._subscription = self.store.subscribe(self.collection, self.filter_spec, callback=self._replace)

    def _replace(self, snapshot: Snapshot):
        self._documents = snapshot.documents
        self.version = snapshot.version
        logger.debug(f"Live view '{self.collection}' now at version {snapshot.version} ({len(snapshot)} documents)")

    def close(self):
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

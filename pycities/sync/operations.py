"""Remote store interface and the operations applied against it."""

from __future__ import annotations

import logging
from typing import Protocol

from ..models import ListEntry, SiteInfo
from .comparator import SyncAction, SyncDecision
from .scanner import Entry

logger = logging.getLogger(__name__)


class RemoteStore(Protocol):
    """What the sync engine needs from a remote site.

    :class:`~pycities.api.NeocitiesClient` implements this over HTTP.
    """

    def list(self) -> list[ListEntry]: ...

    def upload(self, path: str, data: bytes) -> str: ...

    def delete(self, paths: list[str]) -> str: ...

    def info(self) -> SiteInfo: ...

    def key(self) -> str: ...


class SyncOperations:
    """Applies single sync decisions to a remote store."""

    def __init__(self, store: RemoteStore):
        """Initialize sync operations.

        Args:
            store: Remote store the decisions are applied to
        """
        self.store = store

    def apply(self, decision: SyncDecision) -> str:
        """Apply one decision.

        Returns:
            Message returned by the store

        Raises:
            NeocitiesError: If the store rejects the operation
            OSError: If the local file cannot be read
        """
        logger.info("Action: %s", decision)
        if decision.action is SyncAction.UPLOAD:
            return self.upload_file(decision.entry)
        if decision.action is SyncAction.DELETE_REMOTE:
            return self.delete_remote(decision.entry)
        raise ValueError(f"Unknown sync action: {decision.action!r}")

    def upload_file(self, entry: Entry) -> str:
        """Upload the current contents of a local entry.

        The file is read again here rather than reusing what was hashed
        when the tree was built, since it may have changed in between.
        """
        if entry.local_path is None:
            raise ValueError(f"Entry {entry.path!r} has no local path")
        data = entry.local_path.read_bytes()
        return self.store.upload(entry.path, data)

    def delete_remote(self, entry: Entry) -> str:
        """Delete a remote file or directory (with its contents)."""
        return self.store.delete([entry.path])

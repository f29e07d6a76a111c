"""Tree comparison logic: turns local and remote trees into an action plan."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .scanner import Entry


class SyncAction(str, Enum):
    """Actions that can be taken during a deploy."""

    UPLOAD = "upload"
    """Upload local file to remote"""

    DELETE_REMOTE = "delete_remote"
    """Delete remote file or directory"""


@dataclass(frozen=True)
class SyncDecision:
    """A planned change to the remote tree."""

    action: SyncAction
    """Action to take"""

    entry: Entry
    """Local entry to upload, or remote entry to delete"""

    reason: str = ""
    """Human-readable reason for this decision"""

    @classmethod
    def upload(cls, entry: Entry, reason: str = "") -> "SyncDecision":
        return cls(SyncAction.UPLOAD, entry, reason)

    @classmethod
    def delete_remote(cls, entry: Entry, reason: str = "") -> "SyncDecision":
        return cls(SyncAction.DELETE_REMOTE, entry, reason)

    @property
    def path(self) -> str:
        return self.entry.path

    def __str__(self) -> str:
        if self.action is SyncAction.UPLOAD:
            return f"upload {self.entry.path}"
        return f"delete remote {self.entry.path}"


class FileComparator:
    """Compares a local tree with a remote tree.

    Both trees must be sorted by path, as returned by
    :func:`~pycities.sync.scanner.local_tree` and
    :func:`~pycities.sync.scanner.remote_tree`. This is not checked.
    """

    def compare_trees(
        self, local: list[Entry], remote: list[Entry]
    ) -> list[SyncDecision]:
        """Compare two trees and return the ordered list of remote changes.

        The trees are merged by path in ascending order, so the plan is
        ascending too, and a directory always comes before its contents.
        Deletions made redundant by the deletion of a parent directory are
        then dropped.

        Args:
            local: Sorted local tree
            remote: Sorted remote tree

        Returns:
            List of SyncDecision objects, in the order they must be applied
        """
        decisions: list[SyncDecision] = []
        i = j = 0
        while i < len(local) or j < len(remote):
            local_entry = local[i] if i < len(local) else None
            remote_entry = remote[j] if j < len(remote) else None

            if remote_entry is None or (
                local_entry is not None and local_entry.path < remote_entry.path
            ):
                decisions.extend(self._handle_local_only(local_entry))
                i += 1
            elif local_entry is None or remote_entry.path < local_entry.path:
                decisions.extend(self._handle_remote_only(remote_entry))
                j += 1
            else:
                decisions.extend(self._compare_existing(local_entry, remote_entry))
                i += 1
                j += 1

        return self.suppress_cascade(decisions)

    def _handle_local_only(self, local: Optional[Entry]) -> list[SyncDecision]:
        """Handle an entry that only exists locally."""
        assert local is not None
        if local.is_file:
            return [SyncDecision.upload(local, "New local file")]
        # Directories are created implicitly by uploading their files
        return []

    def _handle_remote_only(self, remote: Optional[Entry]) -> list[SyncDecision]:
        """Handle an entry that only exists remotely."""
        assert remote is not None
        return [SyncDecision.delete_remote(remote, "Deleted locally")]

    def _compare_existing(self, local: Entry, remote: Entry) -> list[SyncDecision]:
        """Compare entries that exist in both trees."""
        if local.is_dir and remote.is_file:
            return [SyncDecision.delete_remote(remote, "Replaced by a local directory")]
        if local.is_file and remote.is_dir:
            return [
                SyncDecision.delete_remote(remote, "Replaced by a local file"),
                SyncDecision.upload(local, "Replaces a remote directory"),
            ]
        if local.is_file and not local.is_same(remote):
            return [SyncDecision.upload(local, "Contents changed")]
        return []

    @staticmethod
    def suppress_cascade(decisions: list[SyncDecision]) -> list[SyncDecision]:
        """Drop deletions of entries whose parent directory is deleted just before.

        Deleting a directory on the server deletes its contents, so deleting
        a child afterwards would fail. Since the plan is sorted, the children
        of a deleted directory immediately follow it.
        """
        result: list[SyncDecision] = []
        for decision in decisions:
            if result:
                last = result[-1]
                if (
                    last.action is SyncAction.DELETE_REMOTE
                    and decision.action is SyncAction.DELETE_REMOTE
                    and decision.path.startswith(last.path + "/")
                ):
                    continue
            result.append(decision)
        return result


def make_plan(local: list[Entry], remote: list[Entry]) -> list[SyncDecision]:
    """Compute the ordered list of changes that turns ``remote`` into ``local``."""
    return FileComparator().compare_trees(local, remote)

"""Core sync engine for deploying a local directory to a site."""

import logging
from pathlib import Path
from typing import Optional, Union

from rich.progress import Progress, SpinnerColumn, TextColumn

from ..exceptions import NeocitiesError
from ..output import OutputFormatter
from .comparator import SyncAction, SyncDecision, make_plan
from .operations import RemoteStore, SyncOperations
from .scanner import local_tree, remote_tree

logger = logging.getLogger(__name__)


class SyncEngine:
    """Core sync engine that makes a site mirror a local directory."""

    def __init__(
        self,
        store: RemoteStore,
        output: Optional[OutputFormatter] = None,
    ):
        """Initialize sync engine.

        Args:
            store: Remote store of the site (usually a NeocitiesClient)
            output: Output formatter for displaying progress/status
        """
        self.store = store
        self.output = output or OutputFormatter()
        self.operations = SyncOperations(store)

    def deploy(
        self,
        local: Union[str, Path],
        free_account: bool = False,
        ignore_errors: bool = False,
        dry_run: bool = False,
    ) -> dict:
        """Deploy a local directory to the site.

        Args:
            local: Local directory holding the site
            free_account: Leave out files free accounts cannot upload
            ignore_errors: Log failed actions and go on instead of stopping
            dry_run: Only show what would be done

        Returns:
            Dictionary with sync statistics

        Raises:
            OSError: If the local tree cannot be read
            NeocitiesError: If the remote tree cannot be listed, or an
                action fails and ``ignore_errors`` is not set
        """
        decisions = self.plan(local, free_account)
        stats = self._categorize_decisions(decisions)
        self._display_sync_plan(decisions, dry_run)

        if not dry_run:
            stats["errors"] = self.execute(decisions, ignore_errors=ignore_errors)

        if not self.output.quiet:
            self._display_summary(stats, dry_run)
        return stats

    def plan(
        self, local: Union[str, Path], free_account: bool = False
    ) -> list[SyncDecision]:
        """Build both trees and compare them."""
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
            disable=self.output.quiet,
        ) as progress:
            task = progress.add_task("Scanning local directory...", total=None)
            local_entries = local_tree(local, free_account)
            progress.update(
                task, description=f"Found {len(local_entries)} local entries"
            )

            task = progress.add_task("Listing remote files...", total=None)
            remote_entries = remote_tree(self.store.list())
            progress.update(
                task, description=f"Found {len(remote_entries)} remote entries"
            )

        logger.debug(
            "Comparing %d local and %d remote entries",
            len(local_entries),
            len(remote_entries),
        )
        return make_plan(local_entries, remote_entries)

    def execute(
        self, decisions: list[SyncDecision], ignore_errors: bool = False
    ) -> int:
        """Apply decisions in order.

        The order matters: when a remote directory is replaced by a file,
        the directory must be deleted before the file is uploaded.

        Args:
            decisions: Plan returned by :meth:`plan`
            ignore_errors: Log failures and continue with the next decision

        Returns:
            Number of decisions that failed (always 0 unless ``ignore_errors``)

        Raises:
            NeocitiesError: First store failure, unless ``ignore_errors``
            OSError: First local read failure, unless ``ignore_errors``
        """
        errors = 0
        for decision in decisions:
            try:
                self.operations.apply(decision)
            except (NeocitiesError, OSError) as e:
                if not ignore_errors:
                    raise
                errors += 1
                logger.error("%s: %s", decision, e)
                self.output.error(f"Failed to {decision}: {e}")
        return errors

    @staticmethod
    def _categorize_decisions(decisions: list[SyncDecision]) -> dict:
        return {
            "uploads": sum(1 for d in decisions if d.action is SyncAction.UPLOAD),
            "deletes": sum(
                1 for d in decisions if d.action is SyncAction.DELETE_REMOTE
            ),
            "errors": 0,
        }

    def _display_sync_plan(self, decisions: list[SyncDecision], dry_run: bool) -> None:
        if self.output.quiet:
            return
        if not decisions:
            self.output.info("Site is up to date")
            return
        if dry_run:
            for decision in decisions:
                reason = f" ({decision.reason})" if decision.reason else ""
                self.output.info(f"  {decision}{reason}")

    def _display_summary(self, stats: dict, dry_run: bool) -> None:
        prefix = "Would upload" if dry_run else "Uploaded"
        self.output.print_summary(
            "Dry run summary" if dry_run else "Deploy summary",
            [
                (prefix, f"{stats['uploads']} file(s)"),
                ("Would delete" if dry_run else "Deleted", f"{stats['deletes']} entry(s)"),
                ("Errors", str(stats["errors"])),
            ],
        )

"""Sync engine for pycities - deploy a local directory to a site."""

from .comparator import FileComparator, SyncAction, SyncDecision, make_plan
from .engine import SyncEngine
from .ignore import IGNORE_FILE_NAME, IgnoreFileManager, IgnoreRule, load_ignore_file
from .operations import RemoteStore, SyncOperations
from .scanner import DirectoryScanner, Entry, FileInfo, local_tree, remote_tree

__all__ = [
    "SyncEngine",
    "SyncOperations",
    "RemoteStore",
    "DirectoryScanner",
    "Entry",
    "FileInfo",
    "local_tree",
    "remote_tree",
    "FileComparator",
    "SyncAction",
    "SyncDecision",
    "make_plan",
    "IgnoreFileManager",
    "IgnoreRule",
    "IGNORE_FILE_NAME",
    "load_ignore_file",
]

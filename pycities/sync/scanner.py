"""Building local and remote trees for sync operations."""

import errno
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ..exceptions import NeocitiesInvalidResponseError, PathEncodingError
from ..models import ListEntry
from ..utils import file_fingerprint, has_allowed_extension
from .ignore import IGNORE_FILE_NAME, IgnoreFileManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileInfo:
    """Size and SHA-1 hash of a file."""

    size: int
    """File size in bytes"""

    sha1_sum: str
    """Lowercase hex SHA-1 of the contents"""


@dataclass(frozen=True)
class Entry:
    """A file or directory of a local or remote tree.

    Files carry ``info``, directories do not.
    """

    path: str
    """Path relative to the tree root (using forward slashes)"""

    info: Optional[FileInfo] = None
    """Size and hash, for files only"""

    local_path: Optional[Path] = None
    """Canonical absolute path, for local entries only"""

    @property
    def is_file(self) -> bool:
        return self.info is not None

    @property
    def is_dir(self) -> bool:
        return self.info is None

    def is_same(self, other: "Entry") -> bool:
        """Check whether two entries have the same content."""
        return self.info == other.info

    @classmethod
    def from_list_entry(cls, entry: ListEntry) -> "Entry":
        """Create an Entry from a ``/list`` record.

        Raises:
            NeocitiesInvalidResponseError: If a file record has no size or hash
        """
        if entry.is_directory:
            return cls(path=entry.path)
        if entry.size is None or entry.sha1_hash is None:
            raise NeocitiesInvalidResponseError(
                f"Remote file {entry.path!r} has no size or SHA-1 hash"
            )
        return cls(path=entry.path, info=FileInfo(entry.size, entry.sha1_hash))


def _resolve(path: Path) -> Path:
    """Canonicalize an existing path, following symlinks.

    Raises:
        OSError: If the path does not exist or a symlink loops
    """
    try:
        return path.resolve(strict=True)
    except RuntimeError as e:
        # Python < 3.13 reports symlink loops as RuntimeError
        raise OSError(errno.ELOOP, "Symlink loop", str(path)) from e


def _sorted(entries: list[Entry]) -> list[Entry]:
    return sorted(entries, key=lambda e: e.path)


def remote_tree(manifest: list[ListEntry]) -> list[Entry]:
    """Create a tree from the records returned by the ``/list`` endpoint."""
    return _sorted([Entry.from_list_entry(item) for item in manifest])


class DirectoryScanner:
    """Scans a local directory into a sorted list of entries.

    Hidden files are included and symlinks are followed. Only
    ``.neocitiesignore`` files are consulted for ignore patterns; patterns
    declared in a subdirectory apply to that subtree only.

    Examples:
        >>> scanner = DirectoryScanner(free_account=True)
        >>> entries = scanner.scan_local(Path("/home/user/site"))
    """

    def __init__(self, free_account: bool = False):
        """Initialize directory scanner.

        Args:
            free_account: Drop files whose extension free accounts cannot
                upload, as if they did not exist locally
        """
        self.free_account = free_account
        self._ignore_manager: Optional[IgnoreFileManager] = None

    def scan_local(self, directory: Union[str, Path]) -> list[Entry]:
        """Recursively scan a local directory.

        Args:
            directory: Root of the tree

        Returns:
            Entries sorted by path, without the root itself

        Raises:
            OSError: If the root or any path below it cannot be read
            PathEncodingError: If a path is not valid UTF-8
        """
        root = _resolve(Path(directory))
        if not root.is_dir():
            raise NotADirectoryError(errno.ENOTDIR, "Not a directory", str(root))

        self._ignore_manager = IgnoreFileManager(base_path=root)
        entries: list[Entry] = []
        self._scan_directory(root, root, entries, ancestors=frozenset({root}))
        logger.debug("Scanned %d local entries under %s", len(entries), root)
        return _sorted(entries)

    def _scan_directory(
        self,
        directory: Path,
        root: Path,
        entries: list[Entry],
        ancestors: frozenset,
    ) -> None:
        assert self._ignore_manager is not None
        self._ignore_manager.load_from_directory(directory)

        for item in directory.iterdir():
            relative_path = self._relative_path(item, root)
            # is_dir() follows symlinks
            is_dir = item.is_dir()

            if item.name == IGNORE_FILE_NAME and not is_dir:
                continue
            if self._ignore_manager.is_ignored(relative_path, is_dir=is_dir):
                logger.debug("Ignoring (from rules): %s", relative_path)
                continue

            local_path = _resolve(item)
            if is_dir:
                if local_path in ancestors:
                    raise OSError(errno.ELOOP, "Symlink loop", str(item))
                entries.append(Entry(path=relative_path, local_path=local_path))
                self._scan_directory(
                    item, root, entries, ancestors=ancestors | {local_path}
                )
                continue

            if not has_allowed_extension(self.free_account, relative_path):
                logger.debug("Skipping (not allowed for free accounts): %s", relative_path)
                continue

            sha1_sum, size = file_fingerprint(local_path)
            entries.append(
                Entry(
                    path=relative_path,
                    info=FileInfo(size=size, sha1_sum=sha1_sum),
                    local_path=local_path,
                )
            )

    @staticmethod
    def _relative_path(item: Path, root: Path) -> str:
        # as_posix() gives forward slashes on all platforms
        relative_path = item.relative_to(root).as_posix()
        try:
            relative_path.encode("utf-8")
        except UnicodeEncodeError as e:
            raise PathEncodingError(f"Non-UTF-8 path: {item!r}") from e
        return relative_path


def local_tree(root: Union[str, Path], free_account: bool = False) -> list[Entry]:
    """Create a sorted tree of the local directory ``root``."""
    return DirectoryScanner(free_account=free_account).scan_local(root)

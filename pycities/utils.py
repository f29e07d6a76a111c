"""Utility functions for pycities."""

import hashlib
from pathlib import Path, PurePosixPath
from typing import BinaryIO

# =============================================================================
# Constants
# =============================================================================

# Default base URL of the Neocities API
DEFAULT_API_URL: str = "https://neocities.org/api"

# Read size used when hashing file contents (64 KB)
HASH_CHUNK_SIZE: int = 64 * 1024

# File extensions accepted by the server for free accounts.
# See https://neocities.org/site_files/allowed_types
ALLOWED_EXTS_FOR_FREE_ACCOUNTS: frozenset[str] = frozenset(
    ext.lower()
    for ext in (
        "apng", "asc", "atom", "avif", "bin", "css", "csv", "dae", "eot",
        "epub", "geojson", "gif", "gltf", "gpg", "htm", "html", "ico", "jpeg",
        "jpg", "js", "json", "key", "kml", "knowl", "less", "manifest", "map",
        "markdown", "md", "mf", "mid", "midi", "mtl", "obj", "opml", "osdx",
        "otf", "pdf", "pgp", "pls", "png", "rdf", "resolveHandle", "rss",
        "sass", "scss", "svg", "text", "toml", "tsv", "ttf", "txt", "webapp",
        "webmanifest", "webp", "woff", "woff2", "xcf", "xml", "yaml", "yml",
    )
)  # fmt: skip


# =============================================================================
# Content fingerprinting
# =============================================================================


def fingerprint(stream: BinaryIO, chunk_size: int = HASH_CHUNK_SIZE) -> tuple[str, int]:
    """Compute the SHA-1 digest and length of a byte stream.

    The stream is consumed until EOF.

    Args:
        stream: Readable binary stream
        chunk_size: Number of bytes read at a time

    Returns:
        Tuple of (lowercase hex SHA-1 digest, number of bytes read)

    Examples:
        >>> import io
        >>> fingerprint(io.BytesIO(b"Hello, world!"))
        ('943a702d06f34599aee1f8da8ef9f7296031d699', 13)
    """
    hasher = hashlib.sha1()
    size = 0
    while chunk := stream.read(chunk_size):
        hasher.update(chunk)
        size += len(chunk)
    return hasher.hexdigest(), size


def file_fingerprint(path: Path) -> tuple[str, int]:
    """Fingerprint the current contents of a file on disk."""
    with open(path, "rb") as f:
        return fingerprint(f)


# =============================================================================
# Extension gating
# =============================================================================


def has_allowed_extension(free_account: bool, path: str) -> bool:
    """Check whether a path may be uploaded to an account.

    Paid accounts accept every file type. For free accounts the final
    extension of ``path`` (case-insensitive) must be in
    ``ALLOWED_EXTS_FOR_FREE_ACCOUNTS``.

    Examples:
        >>> has_allowed_extension(True, "hello.txt")
        True
        >>> has_allowed_extension(True, "hello.exe")
        False
        >>> has_allowed_extension(False, "hello.exe")
        True
    """
    if not free_account:
        return True
    ext = PurePosixPath(path).suffix.lstrip(".").lower()
    return ext in ALLOWED_EXTS_FOR_FREE_ACCOUNTS


# =============================================================================
# Size formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"

"""Data models for Neocities API responses."""

from dataclasses import dataclass, field
from typing import Any, Optional

from .exceptions import NeocitiesInvalidResponseError


def _field(data: dict[str, Any], name: str, kind: type, required: bool = True) -> Any:
    """Fetch a typed field from a decoded JSON object.

    Raises:
        NeocitiesInvalidResponseError: If the field is missing (and required)
            or has the wrong type
    """
    value = data.get(name)
    if value is None:
        if required:
            raise NeocitiesInvalidResponseError(f"missing field `{name}`")
        return None
    # bool is a subclass of int, but never a valid integer field here
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise NeocitiesInvalidResponseError(
            f"invalid type for field `{name}`: expected {kind.__name__}, "
            f"got {type(value).__name__}"
        )
    return value


def _object(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise NeocitiesInvalidResponseError(f"expected an object for {what}")
    return data


@dataclass
class ListEntry:
    """An item of the ``/list`` endpoint response.

    For files all fields are present; for directories ``size`` and
    ``sha1_hash`` are absent.
    """

    path: str
    """Path of the entry, relative to the site root"""

    is_directory: bool
    """True if the entry is a directory"""

    updated_at: str
    """Date and time of the last update"""

    size: Optional[int] = None
    """Size in bytes (files only)"""

    sha1_hash: Optional[str] = None
    """SHA-1 hash of the contents (files only)"""

    @classmethod
    def from_dict(cls, data: Any) -> "ListEntry":
        data = _object(data, "list entry")
        return cls(
            path=_field(data, "path", str),
            is_directory=_field(data, "is_directory", bool),
            updated_at=_field(data, "updated_at", str),
            size=_field(data, "size", int, required=False),
            sha1_hash=_field(data, "sha1_hash", str, required=False),
        )


def parse_file_list(data: Any) -> list[ListEntry]:
    """Decode the ``files`` array of a ``/list`` response."""
    if not isinstance(data, list):
        raise NeocitiesInvalidResponseError("expected an array for `files`")
    return [ListEntry.from_dict(item) for item in data]


@dataclass
class SiteInfo:
    """Payload of the ``/info`` endpoint.

    The API documentation does not say which fields are nullable; the
    optional ones below are those observed to be missing in practice.
    """

    sitename: str
    views: int
    hits: int
    created_at: str
    last_updated: Optional[str] = None
    domain: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    latest_ipfs_hash: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "SiteInfo":
        data = _object(data, "info")
        tags = _field(data, "tags", list)
        if not all(isinstance(tag, str) for tag in tags):
            raise NeocitiesInvalidResponseError("invalid type for field `tags`")
        return cls(
            sitename=_field(data, "sitename", str),
            views=_field(data, "views", int),
            hits=_field(data, "hits", int),
            created_at=_field(data, "created_at", str),
            last_updated=_field(data, "last_updated", str, required=False),
            domain=_field(data, "domain", str, required=False),
            tags=tags,
            latest_ipfs_hash=_field(data, "latest_ipfs_hash", str, required=False),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "sitename": self.sitename,
            "views": self.views,
            "hits": self.hits,
            "created_at": self.created_at,
            "last_updated": self.last_updated,
            "domain": self.domain,
            "tags": list(self.tags),
            "latest_ipfs_hash": self.latest_ipfs_hash,
        }

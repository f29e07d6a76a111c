"""Exceptions raised by pycities."""

from __future__ import annotations

from enum import Enum


class NeocitiesError(Exception):
    """Base exception for all pycities errors."""


class NeocitiesNetworkError(NeocitiesError):
    """Network or connection failure before a response body was available."""


class NeocitiesInvalidResponseError(NeocitiesError):
    """Response body is not valid JSON or lacks a required field."""


class NeocitiesConfigError(NeocitiesError):
    """Configuration file could not be used."""


class PathEncodingError(NeocitiesError):
    """A local path cannot be represented as UTF-8 text."""


class ErrorKind(str, Enum):
    """Kinds of error returned by the API.

    The API does not document these; the list was collected from the
    responses the server actually sends. ``STATUS`` is never sent by the
    server: it is produced locally when the body of a 4xx/5xx response
    cannot be decoded.
    """

    SITE_NOT_FOUND = "site_not_found"
    INVALID_AUTH = "invalid_auth"
    CANNOT_DELETE_INDEX = "cannot_delete_index"
    CANNOT_DELETE_SITE_DIRECTORY = "cannot_delete_site_directory"
    MISSING_FILES = "missing_files"
    INVALID_FILE_TYPE = "invalid_file_type"
    STATUS = "status"
    UNKNOWN = "unknown"

    @classmethod
    def from_error_type(cls, error_type: str | None) -> ErrorKind:
        """Decode the ``error_type`` field of an error envelope.

        Unrecognised values decode to ``UNKNOWN`` so that new error types on
        the server side do not break the client.
        """
        if not error_type:
            return cls.UNKNOWN
        try:
            kind = cls(error_type)
        except ValueError:
            return cls.UNKNOWN
        if kind in (cls.STATUS, cls.UNKNOWN):
            return cls.UNKNOWN
        return kind

    def __str__(self) -> str:
        return self.value


class NeocitiesAPIError(NeocitiesError):
    """Well-formed error envelope returned by the API."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.UNKNOWN):
        super().__init__(f"API error: {message} ({kind})")
        self.message = message
        self.kind = kind

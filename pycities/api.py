"""API client for Neocities."""

from __future__ import annotations

import logging
import os
from pathlib import PurePosixPath
from typing import Any, Callable, TypeVar

import httpx

from . import __version__
from .auth import Auth
from .exceptions import (
    ErrorKind,
    NeocitiesAPIError,
    NeocitiesInvalidResponseError,
    NeocitiesNetworkError,
)
from .models import ListEntry, SiteInfo, parse_file_list
from .utils import DEFAULT_API_URL

logger = logging.getLogger(__name__)

T = TypeVar("T")

API_URL_ENV = "PYCITIES_API_URL"
DEFAULT_USER_AGENT = f"pycities/{__version__}"


def _as_str(value: Any) -> str:
    if not isinstance(value, str):
        raise NeocitiesInvalidResponseError(
            f"expected a string, got {type(value).__name__}"
        )
    return value


def parse_response(
    response: httpx.Response, field: str, decode: Callable[[Any], T]
) -> T:
    """Extract a typed value from an API response envelope.

    Every response carries ``result: "success" | "error"``. For a success
    the value of ``field`` is passed to ``decode``; for an error a
    :class:`NeocitiesAPIError` is raised with the decoded error kind.

    If the body cannot be decoded and the HTTP status is 4xx/5xx, the
    status line is reported as an ``ErrorKind.STATUS`` API error instead
    of a decoding error.

    Args:
        response: HTTP response from the server
        field: Name of the field holding the payload
        decode: Callable turning the raw JSON value into the result type

    Returns:
        Decoded payload

    Raises:
        NeocitiesAPIError: If the API returned an error envelope
        NeocitiesInvalidResponseError: If the body could not be decoded
    """
    try:
        return _decode_envelope(response, field, decode)
    except NeocitiesInvalidResponseError as e:
        if 400 <= response.status_code <= 599:
            message = f"{response.status_code} {response.reason_phrase}"
            raise NeocitiesAPIError(message, ErrorKind.STATUS) from e
        raise


def _decode_envelope(
    response: httpx.Response, field: str, decode: Callable[[Any], T]
) -> T:
    try:
        data = response.json()
    except ValueError as e:
        raise NeocitiesInvalidResponseError(f"Invalid JSON response: {e}") from e

    if not isinstance(data, dict):
        raise NeocitiesInvalidResponseError("expected a JSON object")

    result = data.get("result")
    if result == "error":
        error_type = data.get("error_type")
        message = data.get("message")
        raise NeocitiesAPIError(
            message if isinstance(message, str) else "No error message provided",
            ErrorKind.from_error_type(error_type if isinstance(error_type, str) else None),
        )
    if result != "success":
        raise NeocitiesInvalidResponseError(f"unknown result `{result}`")

    if field not in data:
        raise NeocitiesInvalidResponseError(f"missing field `{field}`")
    return decode(data[field])


class NeocitiesClient:
    """Client for interacting with the Neocities API.

    Every request carries the ``Authorization`` header derived from
    ``auth`` along with JSON ``Accept`` headers and the user agent.

    Examples:
        >>> client = NeocitiesClient(Auth.from_string("username:password"))
        >>> with client:
        ...     files = client.list()
    """

    def __init__(
        self,
        auth: Auth,
        api_url: str | None = None,
        proxy: str | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        """Initialize Neocities API client.

        Args:
            auth: Credentials used for every request
            api_url: Optional API URL (defaults to $PYCITIES_API_URL or the
                public Neocities API)
            proxy: Optional HTTP proxy URL
            user_agent: Value of the User-Agent header
        """
        self.auth = auth
        self.api_url = (api_url or os.environ.get(API_URL_ENV) or DEFAULT_API_URL).rstrip(
            "/"
        )
        self.proxy = proxy
        self.user_agent = user_agent
        self._client: httpx.Client | None = None

    def _get_client(self) -> httpx.Client:
        """Get or create the httpx client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                headers={
                    "Accept": "application/json",
                    "Accept-Charset": "utf-8",
                    "Authorization": self.auth.header(),
                    "User-Agent": self.user_agent,
                },
                proxy=self.proxy,
                follow_redirects=True,
            )
        return self._client

    def close(self) -> None:
        """Close the client and release connections."""
        if self._client is not None and not self._client.is_closed:
            self._client.close()
            self._client = None

    def __enter__(self) -> NeocitiesClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _request(
        self,
        method: str,
        endpoint: str,
        field: str,
        decode: Callable[[Any], T],
        **kwargs: Any,
    ) -> T:
        """Make an API request and decode the payload held in ``field``.

        Raises:
            NeocitiesNetworkError: If the request could not be completed
            NeocitiesAPIError: If the API returned an error
            NeocitiesInvalidResponseError: If the response could not be decoded
        """
        url = f"{self.api_url}/{endpoint.lstrip('/')}"
        try:
            response = self._get_client().request(method, url, **kwargs)
        except httpx.RequestError as e:
            logger.debug("Request to %s failed: %s", url, e)
            raise NeocitiesNetworkError(f"Network error: {e}") from e

        try:
            return parse_response(response, field, decode)
        except (NeocitiesAPIError, NeocitiesInvalidResponseError) as e:
            logger.debug("%s %s: %s", method, endpoint, e)
            raise

    # =========================
    # Endpoints
    # =========================

    def list(self) -> list[ListEntry]:
        """List every file and directory on the site."""
        logger.debug("Listing files")
        files = self._request("GET", "/list", "files", parse_file_list)
        logger.debug("Got %d entries", len(files))
        return files

    def info(self) -> SiteInfo:
        """Get the site metadata."""
        logger.debug("Getting website info")
        return self._request("GET", "/info", "info", SiteInfo.from_dict)

    def key(self) -> str:
        """Get an API key for the site.

        Calling this with username/password credentials is how a key is
        issued; the key then replaces the credentials.
        """
        logger.debug("Getting API key")
        key = self._request("GET", "/key", "api_key", _as_str)
        logger.debug("Got an API key: <redacted>")
        return key

    def upload(self, path: str, data: bytes) -> str:
        """Upload a single file to the site.

        Args:
            path: Destination path on the site
            data: File contents

        Returns:
            Message returned by the server
        """
        return self.upload_files([(path, data)])

    def upload_files(self, files: list[tuple[str, bytes]]) -> str:
        """Upload several files in one multipart request.

        Each part is named after its destination path.
        """
        logger.debug("Uploading files %s", [path for path, _ in files])
        parts = [
            (
                path,
                (PurePosixPath(path).name or "file", content, "application/octet-stream"),
            )
            for path, content in files
        ]
        message = self._request("POST", "/upload", "message", _as_str, files=parts)
        logger.debug(message)
        return message

    def delete(self, paths: list[str]) -> str:
        """Delete one or more files or directories from the site.

        Deleting a directory removes everything below it.

        Returns:
            Message returned by the server
        """
        logger.debug("Deleting files %s", paths)
        message = self._request(
            "POST", "/delete", "message", _as_str, data={"filenames[]": list(paths)}
        )
        logger.debug(message)
        return message

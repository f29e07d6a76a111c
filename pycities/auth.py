"""Authentication methods for the Neocities API."""

from __future__ import annotations

import base64
from dataclasses import dataclass


@dataclass(frozen=True, repr=False)
class Auth:
    """Either a username/password pair or an API key.

    Examples:
        >>> Auth.from_string("username:password").header()
        'Basic dXNlcm5hbWU6cGFzc3dvcmQ='
        >>> Auth.from_string("api_key").header()
        'Bearer api_key'
    """

    api_key: str | None = None
    username: str | None = None
    password: str | None = None

    @classmethod
    def from_string(cls, value: str) -> Auth:
        """Parse a credential string as stored in the configuration file.

        A string containing a colon is a ``username:password`` pair (split at
        the first colon); anything else is an API key.
        """
        if ":" in value:
            username, password = value.split(":", 1)
            return cls(username=username, password=password)
        return cls(api_key=value)

    @classmethod
    def from_key(cls, api_key: str) -> Auth:
        return cls(api_key=api_key)

    @property
    def is_credentials(self) -> bool:
        """True if this is a username/password pair."""
        return self.api_key is None

    def header(self) -> str:
        """Value of the ``Authorization`` HTTP header."""
        if self.is_credentials:
            value = f"{self.username}:{self.password}".encode()
            return f"Basic {base64.b64encode(value).decode('ascii')}"
        return f"Bearer {self.api_key}"

    def __str__(self) -> str:
        if self.is_credentials:
            return f"{self.username}:{self.password}"
        return str(self.api_key)

    def __repr__(self) -> str:
        # Never leak secrets into logs
        if self.is_credentials:
            return f"Auth(username={self.username!r}, password='********')"
        key = self.api_key or ""
        return f"Auth(api_key={key[:6] + '*' * max(len(key) - 6, 0)!r})"

"""Configuration file handling for pycities.

The configuration is a YAML document mapping site names to their settings::

    site:
      lorem.com:
        auth: username:password
        path: /path/to/lorem
        free_account: true
        proxy: http://localhost:8080

Configuration values are plain objects passed to whoever needs them; nothing
here is global.
"""

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from .api import NeocitiesClient
from .auth import Auth
from .exceptions import NeocitiesConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV = "PYCITIES_CONFIG"


def get_config_dir() -> Path:
    """Get the pycities configuration directory."""
    return Path.home() / ".config" / "pycities"


def default_config_file() -> Path:
    """Get the path of the configuration file.

    ``$PYCITIES_CONFIG`` takes precedence over the default location.
    """
    env_path = os.environ.get(CONFIG_ENV)
    if env_path:
        return Path(env_path).expanduser()
    return get_config_dir() / "config.yaml"


@dataclass
class Site:
    """Configuration for a single site."""

    auth: Auth
    """Credentials or API key"""

    path: str
    """Local directory holding the site contents"""

    free_account: Optional[bool] = None
    """Whether uploads are restricted to the free-account file types"""

    proxy: Optional[str] = None
    """HTTP proxy used for API requests"""

    @classmethod
    def from_dict(cls, name: str, data: Any) -> "Site":
        if not isinstance(data, dict):
            raise NeocitiesConfigError(f"Site {name}: expected a mapping")
        auth = data.get("auth")
        path = data.get("path")
        if not isinstance(auth, str) or not auth:
            raise NeocitiesConfigError(f"Site {name}: missing `auth`")
        if not isinstance(path, str):
            raise NeocitiesConfigError(f"Site {name}: missing `path`")
        free_account = data.get("free_account")
        if free_account is not None and not isinstance(free_account, bool):
            raise NeocitiesConfigError(f"Site {name}: `free_account` must be a boolean")
        proxy = data.get("proxy")
        if proxy is not None and not isinstance(proxy, str):
            raise NeocitiesConfigError(f"Site {name}: `proxy` must be a string")
        return cls(
            auth=Auth.from_string(auth),
            path=path,
            free_account=free_account,
            proxy=proxy,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"auth": str(self.auth), "path": self.path}
        if self.free_account is not None:
            data["free_account"] = self.free_account
        if self.proxy is not None:
            data["proxy"] = self.proxy
        return data

    def build_client(self) -> NeocitiesClient:
        """Build an API client for this site."""
        return NeocitiesClient(auth=self.auth, proxy=self.proxy)


@dataclass
class Config:
    """The whole configuration file. Site order is preserved."""

    sites: dict[str, Site] = field(default_factory=dict)

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load the configuration from a file.

        Raises:
            OSError: If the file cannot be read
            NeocitiesConfigError: If the file is not a valid configuration
        """
        logger.debug("Loading configuration from %s", path)
        with open(path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except (yaml.YAMLError, UnicodeDecodeError) as e:
                raise NeocitiesConfigError(f"Invalid configuration file {path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise NeocitiesConfigError(f"Invalid configuration file {path}")
        sites = data.get("site") or {}
        if not isinstance(sites, dict):
            raise NeocitiesConfigError(f"Invalid configuration file {path}: `site`")
        return cls(
            sites={str(name): Site.from_dict(str(name), site) for name, site in sites.items()}
        )

    @classmethod
    def load_or_default(cls, path: Path) -> "Config":
        """Load the configuration, or return an empty one if the file is missing."""
        if not path.exists():
            logger.debug("No configuration file at %s", path)
            return cls()
        return cls.load(path)

    def save(self, path: Path) -> None:
        """Save the configuration to a file.

        Missing parent directories are created. The file is replaced
        atomically, but concurrent writers are not guarded against.
        """
        logger.debug("Saving configuration to %s", path)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = {"site": {name: site.to_dict() for name, site in self.sites.items()}}
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                yaml.safe_dump(
                    data, f, default_flow_style=False, sort_keys=False, allow_unicode=True
                )
            os.replace(tmp_name, path)
        except BaseException:
            os.unlink(tmp_name)
            raise
        logger.info("Configuration saved to %s", path)

    def has_site(self, name: str) -> bool:
        return name in self.sites

    def insert_site(self, name: str, site: Site) -> None:
        self.sites[name] = site

    def select_sites(self, names: Optional[list[str]] = None) -> list[tuple[str, Site]]:
        """Get the sites to work with.

        Args:
            names: Site names given on the command line; all configured
                sites (in file order) if empty

        Raises:
            NeocitiesConfigError: If a requested site is not configured
        """
        if not names:
            return list(self.sites.items())
        selected = []
        for name in names:
            if name not in self.sites:
                raise NeocitiesConfigError(f"Site not found: {name}")
            selected.append((name, self.sites[name]))
        return selected

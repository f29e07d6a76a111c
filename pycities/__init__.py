"""pycities - deploy a local directory to a Neocities site."""

__version__ = "0.1.0"

from .api import NeocitiesClient  # noqa: E402
from .auth import Auth  # noqa: E402
from .exceptions import (  # noqa: E402
    ErrorKind,
    NeocitiesAPIError,
    NeocitiesConfigError,
    NeocitiesError,
    NeocitiesInvalidResponseError,
    NeocitiesNetworkError,
    PathEncodingError,
)
from .utils import fingerprint, has_allowed_extension  # noqa: E402

__all__ = [
    "__version__",
    "NeocitiesClient",
    "Auth",
    "ErrorKind",
    "NeocitiesAPIError",
    "NeocitiesConfigError",
    "NeocitiesError",
    "NeocitiesInvalidResponseError",
    "NeocitiesNetworkError",
    "PathEncodingError",
    "fingerprint",
    "has_allowed_extension",
]

"""Route groups and controller behavior switches."""

from enum import Enum


class RouteGroup(str, Enum):
    """Route group a generated route belongs to.

    Attributes:
        API: JSON endpoints under the API prefix.
        WEB: HTML endpoints under the web prefix.
    """

    API = "api"
    WEB = "web"


class IndexMode(str, Enum):
    """How the ``index`` action chooses its response.

    Attributes:
        NEGOTIATED: JSON-preferring requests get a filtered, paginated
            envelope; everything else gets the rendered HTML listing.
        API_ONLY: Always filtered, always paginated with the configured page
            size, always an envelope.
    """

    NEGOTIATED = "negotiated"
    API_ONLY = "api_only"

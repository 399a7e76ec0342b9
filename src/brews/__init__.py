from .client import ProxyClient, ProxyClientError
from .session import BrewSession
from .view import ActiveFilters, BrewListView, FilterFacets, Page

__all__ = [
    "ActiveFilters",
    "BrewListView",
    "BrewSession",
    "FilterFacets",
    "Page",
    "ProxyClient",
    "ProxyClientError",
]

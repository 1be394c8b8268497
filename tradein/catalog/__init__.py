from tradein.catalog.browse import BrowseSession
from tradein.catalog.cache import TTLCache
from tradein.catalog.client import CatalogClient
from tradein.catalog.lanes import DebouncedSearch, RequestLane
from tradein.catalog.models import BrowsePage, CardLanguage, CardSet, CatalogCard, SearchResult
from tradein.catalog.normalize import normalize_card

__all__ = [
    "BrowsePage",
    "BrowseSession",
    "CardLanguage",
    "CardSet",
    "CatalogCard",
    "CatalogClient",
    "DebouncedSearch",
    "RequestLane",
    "SearchResult",
    "TTLCache",
    "normalize_card",
]

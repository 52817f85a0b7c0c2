"""
Webflow service caching package.

Provides the in-process TTL cache used by route handlers to avoid
redundant calls to the Webflow API. Callers check the cache before
fetching and only cache successful upstream results.
"""

from .ttl_cache import CacheEntry, CacheTTL, TTLCache

WEBFLOW_ANALYSIS_KEY = "webflow:analysis"
WEBFLOW_ARTICLE_FIELDS_KEY = "webflow:article-fields"
WEBFLOW_AUTHORS_KEY = "webflow:authors"
WEBFLOW_TOPICS_KEY = "webflow:topics"
WEBFLOW_SECTIONS_KEY = "webflow:sections"
WEBFLOW_COLLECTIONS_KEY = "webflow:collections"
WEBFLOW_FESTIVALS_KEY = "webflow:festivals"
WEBFLOW_STREAMING_SERVICES_KEY = "webflow:streaming-services"

# Every cached upstream result shares this prefix
WEBFLOW_KEY_PATTERN = r"^webflow:"

__all__ = [
    "CacheEntry",
    "CacheTTL",
    "TTLCache",
    "WEBFLOW_ANALYSIS_KEY",
    "WEBFLOW_ARTICLE_FIELDS_KEY",
    "WEBFLOW_AUTHORS_KEY",
    "WEBFLOW_TOPICS_KEY",
    "WEBFLOW_SECTIONS_KEY",
    "WEBFLOW_COLLECTIONS_KEY",
    "WEBFLOW_FESTIVALS_KEY",
    "WEBFLOW_STREAMING_SERVICES_KEY",
    "WEBFLOW_KEY_PATTERN",
]

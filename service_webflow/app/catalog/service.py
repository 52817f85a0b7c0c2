"""
Webflow catalog service: cached schema, author and taxonomy lookups plus
article publishing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from shared.config import BaseConfig
from shared.errors import ConfigurationError, ExternalServiceError, ValidationError
from shared.logging import get_logger

from service_webflow.app.adapters import WebflowClient, normalize_field, normalize_items
from service_webflow.app.caching import (
    CacheTTL,
    TTLCache,
    WEBFLOW_ANALYSIS_KEY,
    WEBFLOW_ARTICLE_FIELDS_KEY,
    WEBFLOW_AUTHORS_KEY,
    WEBFLOW_COLLECTIONS_KEY,
    WEBFLOW_FESTIVALS_KEY,
    WEBFLOW_KEY_PATTERN,
    WEBFLOW_SECTIONS_KEY,
    WEBFLOW_STREAMING_SERVICES_KEY,
    WEBFLOW_TOPICS_KEY,
)
from service_webflow.app.domain import (
    build_field_data,
    build_guidance,
    fallback_authors,
    normalize_author,
    prepare_article,
)
from service_webflow.app.stores import ConfigStore, MappingStore, WebflowCredentials, token_preview


@dataclass(frozen=True)
class TaxonomyLookup:
    """How to locate the option list for one taxonomy (topics, sections, festivals)."""

    cache_key: str
    collection_keywords: Tuple[str, ...]
    field_keywords: Tuple[str, ...]
    name_candidates: Tuple[str, ...]


TOPICS = TaxonomyLookup(
    cache_key=WEBFLOW_TOPICS_KEY,
    collection_keywords=("topic", "tag", "kategori"),
    field_keywords=("topic", "tag"),
    name_candidates=("name", "title", "navn", "label"),
)

SECTIONS = TaxonomyLookup(
    cache_key=WEBFLOW_SECTIONS_KEY,
    collection_keywords=("section", "sektion", "category", "kategor"),
    field_keywords=("section", "category"),
    name_candidates=("name", "title", "label", "section", "category"),
)

FESTIVALS = TaxonomyLookup(
    cache_key=WEBFLOW_FESTIVALS_KEY,
    collection_keywords=("festival",),
    field_keywords=("festival",),
    name_candidates=("name", "title"),
)

STREAMING_SERVICES = TaxonomyLookup(
    cache_key=WEBFLOW_STREAMING_SERVICES_KEY,
    collection_keywords=("streaming", "tjeneste"),
    field_keywords=("streaming",),
    name_candidates=("name", "title", "label", "service"),
)

SAMPLE_ARTICLES_LIMIT = 50


def _norm(value: Optional[str]) -> str:
    return (value or "").lower()


def _matches(value: Optional[str], keywords: Iterable[str]) -> bool:
    text = _norm(value)
    return any(keyword in text for keyword in keywords)


def _option_from_field_choice(choice: Dict[str, Any]) -> Dict[str, Any]:
    name = choice.get("name") or choice.get("slug") or ""
    return {
        "id": choice.get("id") or choice.get("slug") or choice.get("name"),
        "name": name,
        "slug": choice.get("slug") or "-".join(_norm(name).split()),
    }


class WebflowCatalogService:
    """Coordinates the TTL cache, the persisted stores and the Webflow API."""

    def __init__(
        self,
        client: WebflowClient,
        config_store: ConfigStore,
        mapping_store: MappingStore,
        cache: TTLCache,
        settings: BaseConfig,
    ) -> None:
        self.client = client
        self.config_store = config_store
        self.mapping_store = mapping_store
        self.cache = cache
        self.settings = settings
        self.logger = get_logger("webflow.catalog")

    def credentials(self) -> WebflowCredentials:
        return self.config_store.resolve_credentials(self.settings)

    def _require_site(self, creds: WebflowCredentials) -> None:
        if not creds.is_configured:
            raise ConfigurationError(
                "Webflow API token and site id are required",
                details={"hasToken": bool(creds.token), "hasSiteId": bool(creds.site_id)},
            )

    # Settings

    def save_config(self, partial: Dict[str, Any]) -> Dict[str, Any]:
        """Persist credentials and drop every cached upstream result."""
        saved = self.config_store.save_webflow_config(partial)
        self.cache.invalidate_pattern(WEBFLOW_KEY_PATTERN)
        return saved

    def save_mapping(self, mapping: Any) -> Dict[str, Any]:
        saved = self.mapping_store.save_mapping(mapping)
        self.cache.invalidate(WEBFLOW_ANALYSIS_KEY)
        return saved

    async def status(self) -> Dict[str, Any]:
        """Presence of each credential plus live reachability of the API."""
        creds = self.credentials()
        status: Dict[str, Any] = {
            "connected": False,
            "hasToken": bool(creds.token),
            "hasSiteId": bool(creds.site_id),
            "hasAuthorsCollectionId": bool(creds.authors_collection_id),
            "hasArticlesCollectionId": bool(creds.articles_collection_id),
            "tokenPreview": token_preview(creds.token),
            "siteId": creds.site_id,
            "authorsCollectionId": creds.authors_collection_id,
            "articlesCollectionId": creds.articles_collection_id,
            "apiReachable": False,
            "collectionsReachable": False,
            "error": None,
        }
        if not creds.is_configured:
            status["error"] = "Webflow API token and site id are required"
            return status

        try:
            await self.client.get_site(creds.token, creds.site_id)
            status["apiReachable"] = True
            collections = await self.client.list_collections(creds.token, creds.site_id)
            status["collectionsReachable"] = bool(collections)
        except ExternalServiceError as exc:
            status["error"] = exc.message

        status["connected"] = status["apiReachable"] and status["collectionsReachable"]
        return status

    # Collections

    async def collections(self) -> List[Dict[str, Any]]:
        creds = self.credentials()
        self._require_site(creds)

        cached = self.cache.get(WEBFLOW_COLLECTIONS_KEY)
        if cached is not None:
            return cached

        collections = await self.client.list_collections(creds.token, creds.site_id)
        if collections:
            self.cache.set(WEBFLOW_COLLECTIONS_KEY, collections, CacheTTL.MEDIUM)
        return collections

    async def discover_collections(self) -> Dict[str, Any]:
        """Find the articles and authors collections and save their ids."""
        creds = self.credentials()
        self._require_site(creds)

        collections = await self.client.list_collections(creds.token, creds.site_id)
        if not collections:
            raise ExternalServiceError(service="webflow", message="No collections found for site")

        articles = next(
            (c for c in collections if _norm(c.get("slug")) == "articles" or _matches(c.get("name"), ("article", "artikl"))),
            None,
        )
        authors = next(
            (c for c in collections if _norm(c.get("slug")) == "authors" or _matches(c.get("name"), ("author", "forfatter"))),
            None,
        )

        discovered = {
            "articlesCollectionId": articles.get("id") if articles else None,
            "authorsCollectionId": authors.get("id") if authors else None,
        }
        self.save_config(discovered)
        self.logger.info("Webflow collections discovered", **discovered)

        return {
            **discovered,
            "collections": [
                {"id": c.get("id"), "name": c.get("displayName") or c.get("name"), "slug": c.get("slug")}
                for c in collections
            ],
        }

    # Cached lookups

    async def article_fields(self) -> Dict[str, Any]:
        cached = self.cache.get(WEBFLOW_ARTICLE_FIELDS_KEY)
        if cached is not None:
            return cached

        creds = self.credentials()
        if not creds.token or not creds.articles_collection_id:
            raise ConfigurationError(
                "Webflow API token and articles collection id are required",
                details={"hasToken": bool(creds.token), "hasArticlesCollectionId": bool(creds.articles_collection_id)},
            )

        collection = await self.client.get_collection(creds.token, creds.articles_collection_id)
        result = {"fields": [normalize_field(f) for f in collection.get("fields") or []]}
        self.cache.set(WEBFLOW_ARTICLE_FIELDS_KEY, result, CacheTTL.LONG)
        return result

    async def authors(self) -> Dict[str, Any]:
        """Authors from Webflow, or the built-in roster when Webflow is unusable."""
        cached = self.cache.get(WEBFLOW_AUTHORS_KEY)
        if cached is not None:
            return cached

        creds = self.credentials()
        if not creds.is_configured or not creds.authors_collection_id:
            self.logger.warning("Webflow authors not configured, using fallback authors")
            return {"authors": fallback_authors(), "source": "fallback"}

        try:
            fetched = await self.client.fetch_collection_items(
                creds.token, creds.site_id, creds.authors_collection_id
            )
        except ExternalServiceError as exc:
            self.logger.warning("Using fallback authors due to error", error=exc.message)
            return {"authors": fallback_authors(), "source": "fallback"}

        if not fetched["items"]:
            self.logger.warning("Authors collection empty, using fallback authors", debug=fetched["debug"])
            return {"authors": fallback_authors(), "source": "fallback"}

        result = {"authors": [normalize_author(item) for item in fetched["items"]], "source": "webflow"}
        self.cache.set(WEBFLOW_AUTHORS_KEY, result, CacheTTL.LONG)
        return result

    async def analysis(self) -> Dict[str, Any]:
        cached = self.cache.get(WEBFLOW_ANALYSIS_KEY)
        if cached is not None:
            return cached

        fields = (await self.article_fields())["fields"]
        result = {"guidance": build_guidance(fields, self.mapping_store.read_mapping())}
        self.cache.set(WEBFLOW_ANALYSIS_KEY, result, CacheTTL.LONG)
        return result

    async def topics(self) -> Dict[str, Any]:
        return await self._taxonomy(TOPICS, self.settings.webflow_topics_collection_id)

    async def sections(self) -> Dict[str, Any]:
        return await self._taxonomy(SECTIONS, self.settings.webflow_sections_collection_id)

    async def festivals(self) -> Dict[str, Any]:
        return await self._taxonomy(FESTIVALS, self.settings.webflow_festivals_collection_id)

    async def streaming_services(self) -> Dict[str, Any]:
        return await self._taxonomy(STREAMING_SERVICES, self.settings.webflow_streaming_services_collection_id)

    async def sample_articles(self) -> Dict[str, Any]:
        """Raw ``{id, fieldData}`` of recent article items, for mapping previews."""
        creds = self.credentials()
        if not creds.is_configured or not creds.articles_collection_id:
            return {"items": []}

        items = await self.client.list_items(
            creds.token, creds.site_id, creds.articles_collection_id, limit=SAMPLE_ARTICLES_LIMIT
        )
        return {"items": [{"id": item.get("id"), "fieldData": item.get("fieldData")} for item in items]}

    async def _taxonomy(self, lookup: TaxonomyLookup, collection_id: Optional[str]) -> Dict[str, Any]:
        """
        Resolve taxonomy options, trying in turn the configured collection id,
        a collection whose name or slug looks right, and the articles field
        that references (or enumerates) the taxonomy.

        Each attempt is recorded under ``debug.tried``. Upstream errors in one
        attempt move on to the next.
        """
        cached = self.cache.get(lookup.cache_key)
        if cached is not None:
            return cached

        creds = self.credentials()
        debug: Dict[str, Any] = {
            "env": {"hasToken": bool(creds.token), "siteId": creds.site_id, "col": collection_id},
            "tried": [],
        }
        if not creds.is_configured:
            return {"items": [], "debug": debug}

        items: List[Dict[str, Any]] = []

        if collection_id:
            try:
                items = await self._collection_options(creds, collection_id, lookup, debug, "envId")
            except ExternalServiceError as exc:
                self.logger.warning("Configured taxonomy collection failed", cache_key=lookup.cache_key, error=exc.message)

        if not items:
            try:
                candidate = next(
                    (
                        c for c in await self.collections()
                        if _matches(c.get("slug"), lookup.collection_keywords)
                        or _matches(c.get("name"), lookup.collection_keywords)
                    ),
                    None,
                )
                if candidate and candidate.get("id"):
                    items = await self._collection_options(creds, candidate["id"], lookup, debug, "discovered")
            except ExternalServiceError as exc:
                self.logger.warning("Taxonomy discovery failed", cache_key=lookup.cache_key, error=exc.message)

        if not items:
            try:
                items = await self._options_from_schema(creds, lookup, debug)
            except (ExternalServiceError, ConfigurationError) as exc:
                self.logger.warning("Taxonomy inference failed", cache_key=lookup.cache_key, error=exc.message)

        result = {"items": items, "debug": debug}
        if items:
            self.cache.set(lookup.cache_key, result, CacheTTL.LONG)
        return result

    async def _collection_options(
        self,
        creds: WebflowCredentials,
        collection_id: str,
        lookup: TaxonomyLookup,
        debug: Dict[str, Any],
        kind: str,
    ) -> List[Dict[str, Any]]:
        fetched = await self.client.fetch_collection_items(creds.token, creds.site_id, collection_id)
        raw = fetched["items"]
        debug["tried"].append({
            "type": kind,
            "id": collection_id,
            **fetched["debug"],
            "sampleKeys": list((raw[0].get("fieldData") or {}).keys()) if raw else [],
            "count": len(raw),
        })
        return normalize_items({"items": raw}, lookup.name_candidates)

    async def _options_from_schema(
        self,
        creds: WebflowCredentials,
        lookup: TaxonomyLookup,
        debug: Dict[str, Any],
    ) -> List[Dict[str, Any]]:
        fields = (await self.article_fields())["fields"]
        field = next((f for f in fields if _matches(f.get("slug"), lookup.field_keywords)), None)
        if field is None:
            return []

        reference = field.get("reference") or {}
        if reference.get("collectionId"):
            return await self._collection_options(creds, reference["collectionId"], lookup, debug, "inferredRef")

        choices = field.get("options") or []
        items = [_option_from_field_choice(choice) for choice in choices if isinstance(choice, dict)]
        if items:
            debug["tried"].append({"type": "inferredOptions", "field": field.get("slug"), "count": len(items)})
        return items

    # Publishing

    async def publish(self, article: Dict[str, Any]) -> Dict[str, Any]:
        """Map an article through the saved mapping and create a Webflow item."""
        prepared = prepare_article(article)

        creds = self.credentials()
        mapping = self.mapping_store.read_mapping()
        collection_id = mapping.get("collectionId") or creds.articles_collection_id
        if not creds.token or not collection_id:
            raise ConfigurationError(
                "Webflow API token and articles collection id are required",
                details={"hasToken": bool(creds.token), "hasArticlesCollectionId": bool(collection_id)},
            )

        field_data, missing = build_field_data(prepared, mapping)
        if missing:
            raise ValidationError("Missing required Webflow fields", details={"missing": missing})

        self.logger.info(
            "Publishing article to Webflow",
            slug=prepared["slug"],
            status=prepared["status"],
            word_count=prepared["wordCount"],
            fields=sorted(field_data),
        )
        item = await self.client.create_item(
            creds.token,
            collection_id,
            field_data,
            is_draft=prepared["status"] != "published",
        )

        return {
            "success": True,
            "articleId": item.get("id"),
            "slug": prepared["slug"],
            "message": "Article published successfully to Webflow",
        }

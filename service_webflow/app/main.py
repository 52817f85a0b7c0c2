"""
Webflow integration service for the newsroom CMS.
"""

from typing import Any, Dict, Optional

from fastapi import Request

from shared.base_service import BaseService
from shared.config import ServiceConfig, get_config
from shared.errors import ValidationError

from .adapters import WebflowClient
from .caching import TTLCache
from .catalog import WebflowCatalogService
from .models import (
    CacheInvalidateRequest,
    CacheInvalidateResponse,
    CacheStatsResponse,
    OptionListResponse,
    PublishResponse,
    SaveMappingResponse,
)
from .stores import ConfigStore, MappingStore


SERVICE_NAME = "webflow"
SERVICE_PORT = 8020


async def _json_body(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        raise ValidationError("Request body must be valid JSON")


class WebflowService(BaseService):
    """Webflow service implementation."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        *,
        cache: Optional[TTLCache] = None,
        mapping_store: Optional[MappingStore] = None,
        config_store: Optional[ConfigStore] = None,
        webflow_client: Optional[WebflowClient] = None,
    ):
        super().__init__(SERVICE_NAME, SERVICE_PORT, config or get_config(SERVICE_NAME, SERVICE_PORT))

        self.cache = cache or TTLCache(metrics=self.metrics)
        self.mapping_store = mapping_store or MappingStore(self.config.data_dir)
        self.config_store = config_store or ConfigStore(self.config.data_dir)
        self.webflow_client = webflow_client or WebflowClient(
            base_url=self.config.webflow_api_url,
            timeout=self.config.webflow_timeout_seconds,
            metrics=self.metrics,
        )
        self.catalog = WebflowCatalogService(
            client=self.webflow_client,
            config_store=self.config_store,
            mapping_store=self.mapping_store,
            cache=self.cache,
            settings=self.config,
        )

        self._setup_webflow_routes()
        self._setup_cache_routes()

    def _setup_webflow_routes(self):
        """Set up Webflow settings, lookup and publishing routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": SERVICE_NAME,
                "message": "Newsroom CMS - Webflow Service",
                "version": "1.0.0",
                "capabilities": ["mapping", "config", "lookups", "publishing", "caching"],
            }

        @self.app.get("/api/webflow/mapping")
        async def get_mapping():
            """Saved field mapping, or the built-in default."""
            return self.mapping_store.read_mapping()

        @self.app.post("/api/webflow/mapping", response_model=SaveMappingResponse)
        async def save_mapping(request: Request):
            """Replace the field mapping."""
            mapping = self.catalog.save_mapping(await _json_body(request))
            self.logger.info("Webflow mapping saved", entries=len(mapping["entries"]))
            return SaveMappingResponse(entries=len(mapping["entries"]))

        @self.app.get("/api/webflow/config")
        async def get_webflow_config():
            """Saved Webflow credentials and collection ids."""
            return self.config_store.get_webflow_config()

        @self.app.post("/api/webflow/config")
        async def save_webflow_config(request: Request):
            """Merge credentials into the saved config."""
            body = await _json_body(request)
            if not isinstance(body, dict):
                raise ValidationError("Config must be an object")
            return self.catalog.save_config(body)

        @self.app.get("/api/webflow/status")
        async def get_status():
            """Credential presence and API reachability."""
            return await self.catalog.status()

        @self.app.post("/api/webflow/collections")
        async def discover_collections():
            """Discover the articles and authors collections and save their ids."""
            return await self.catalog.discover_collections()

        @self.app.get("/api/webflow/article-fields")
        async def get_article_fields():
            """Field schema of the articles collection."""
            return await self.catalog.article_fields()

        @self.app.get("/api/webflow/authors")
        async def get_authors():
            """Authors from Webflow, or the fallback roster."""
            return await self.catalog.authors()

        @self.app.get("/api/webflow/analysis")
        async def get_analysis():
            """Per-field guidance for filling articles."""
            return await self.catalog.analysis()

        @self.app.get("/api/webflow/topics", response_model=OptionListResponse)
        async def get_topics():
            """Topic options."""
            return await self.catalog.topics()

        @self.app.get("/api/webflow/sections", response_model=OptionListResponse)
        async def get_sections():
            """Section options."""
            return await self.catalog.sections()

        @self.app.get("/api/webflow/festivals", response_model=OptionListResponse)
        async def get_festivals():
            """Festival options."""
            return await self.catalog.festivals()

        @self.app.get("/api/webflow/streaming-services", response_model=OptionListResponse)
        async def get_streaming_services():
            """Streaming service options."""
            return await self.catalog.streaming_services()

        @self.app.get("/api/webflow/sample-articles")
        async def get_sample_articles():
            """Raw fieldData of up to 50 article items."""
            return await self.catalog.sample_articles()

        @self.app.post("/api/webflow/publish", response_model=PublishResponse)
        async def publish_article(request: Request):
            """Publish an article to the articles collection."""
            return await self.catalog.publish(await _json_body(request))

    def _setup_cache_routes(self):
        """Set up cache introspection and invalidation routes."""

        @self.app.get("/api/cache/stats", response_model=CacheStatsResponse)
        async def cache_stats():
            return self.cache.get_stats()

        @self.app.post("/api/cache/invalidate", response_model=CacheInvalidateResponse)
        async def invalidate_cache(request: CacheInvalidateRequest):
            """Invalidate one key or every key matching a pattern."""
            if request.key is not None:
                existed = request.key in self.cache.get_stats()["keys"]
                self.cache.invalidate(request.key)
                return CacheInvalidateResponse(invalidated=int(existed))
            if request.pattern is not None:
                return CacheInvalidateResponse(invalidated=self.cache.invalidate_pattern(request.pattern))
            raise ValidationError("Either key or pattern is required")

        @self.app.delete("/api/cache")
        async def clear_cache():
            self.cache.clear()
            return {"ok": True}

    async def _check_dependencies(self) -> Dict[str, Any]:
        """Report Webflow configuration and circuit breaker state."""
        creds = self.catalog.credentials()
        breaker = self.webflow_client.circuit_breaker.get_state()
        return {
            "webflow_config": "ok" if creds.is_configured else "missing",
            "webflow_api": "error" if breaker["state"] == "open" else "ok",
            "cache_entries": self.cache.get_stats()["size"],
        }


def create_app(**kwargs):
    """Create Webflow service application."""
    service = WebflowService(**kwargs)
    return service.app


if __name__ == "__main__":
    service = WebflowService()
    service.run()

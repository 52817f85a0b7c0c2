"""
Unit tests for the Webflow catalog service.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from service_webflow.app.caching import TTLCache
from service_webflow.app.catalog import WebflowCatalogService
from service_webflow.app.stores import ConfigStore, MappingStore
from shared.config import BaseConfig
from shared.errors import ConfigurationError, ExternalServiceError, ValidationError


ARTICLE_FIELDS = {
    "fields": [
        {"id": "f1", "slug": "name", "displayName": "Name", "type": "PlainText", "isRequired": True},
        {"id": "f2", "slug": "topic", "type": "Reference", "validations": {"collectionId": "col-topics"}},
        {"id": "f3", "slug": "section", "type": "Option", "validations": {"options": [{"name": "Film Og Serier"}]}},
    ]
}


def _items(*names):
    return {
        "items": [{"id": f"id-{n}", "fieldData": {"name": n, "slug": n.lower()}} for n in names],
        "debug": {"primaryUrl": "/v2/...", "primaryStatus": 200},
    }


class TestWebflowCatalogService:
    """Test cases for WebflowCatalogService."""

    @pytest.fixture
    def settings(self):
        return BaseConfig(
            webflow_api_token="tok",
            webflow_site_id="site-1",
            webflow_articles_collection_id="col-articles",
            webflow_authors_collection_id="col-authors",
            webflow_topics_collection_id=None,
            webflow_sections_collection_id=None,
            webflow_festivals_collection_id=None,
            webflow_streaming_services_collection_id=None,
        )

    @pytest.fixture
    def client(self):
        client = MagicMock()
        client.get_site = AsyncMock(return_value={"id": "site-1"})
        client.list_collections = AsyncMock(return_value=[])
        client.get_collection = AsyncMock(return_value=ARTICLE_FIELDS)
        client.fetch_collection_items = AsyncMock(return_value=_items())
        client.create_item = AsyncMock(return_value={"id": "item-1"})
        return client

    @pytest.fixture
    def cache(self):
        return TTLCache()

    @pytest.fixture
    def catalog(self, tmp_path, client, cache, settings):
        return WebflowCatalogService(
            client=client,
            config_store=ConfigStore(tmp_path),
            mapping_store=MappingStore(tmp_path),
            cache=cache,
            settings=settings,
        )

    @pytest.mark.asyncio
    async def test_article_fields_cached(self, catalog, client, cache):
        """Test the schema is fetched once and then served from cache."""
        first = await catalog.article_fields()
        second = await catalog.article_fields()

        assert first == second
        assert first["fields"][0]["name"] == "Name"
        assert first["fields"][1]["reference"] == {"collectionId": "col-topics"}
        client.get_collection.assert_awaited_once_with("tok", "col-articles")
        assert "webflow:article-fields" in cache.get_stats()["keys"]

    @pytest.mark.asyncio
    async def test_article_fields_requires_collection(self, catalog, settings):
        """Test a missing articles collection id is a configuration error."""
        settings.webflow_articles_collection_id = None

        with pytest.raises(ConfigurationError):
            await catalog.article_fields()

    @pytest.mark.asyncio
    async def test_upstream_failure_not_cached(self, catalog, client, cache):
        """Test failed fetches leave the cache untouched."""
        client.get_collection.side_effect = ExternalServiceError(service="webflow", message="boom")

        with pytest.raises(ExternalServiceError):
            await catalog.article_fields()

        assert cache.get_stats()["size"] == 0

    @pytest.mark.asyncio
    async def test_authors_from_webflow(self, catalog, client, cache):
        """Test authors are normalized and cached."""
        client.fetch_collection_items.return_value = _items("Ida")

        result = await catalog.authors()

        assert result["source"] == "webflow"
        assert result["authors"][0]["name"] == "Ida"
        client.fetch_collection_items.assert_awaited_once_with("tok", "site-1", "col-authors")
        assert cache.get("webflow:authors") == result

    @pytest.mark.asyncio
    async def test_authors_fallback_not_cached(self, catalog, client, cache):
        """Test upstream errors fall back to the built-in roster without caching it."""
        client.fetch_collection_items.side_effect = ExternalServiceError(service="webflow", message="down")

        result = await catalog.authors()

        assert result["source"] == "fallback"
        assert len(result["authors"]) == 3
        assert cache.get_stats()["size"] == 0

    @pytest.mark.asyncio
    async def test_authors_unconfigured(self, catalog, client, settings):
        """Test missing credentials use the fallback roster without calling Webflow."""
        settings.webflow_api_token = None

        result = await catalog.authors()

        assert result["source"] == "fallback"
        client.fetch_collection_items.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_analysis_uses_mapping(self, catalog, cache):
        """Test guidance suggests internal fields from the saved mapping."""
        result = await catalog.analysis()

        assert result["guidance"][0]["suggestedInternal"] == "title"
        assert result["guidance"][1]["suggestedInternal"] == "topic"
        assert cache.get("webflow:analysis") == result

    @pytest.mark.asyncio
    async def test_save_mapping_invalidates_analysis(self, catalog, cache):
        """Test saving the mapping drops cached guidance only."""
        await catalog.analysis()

        catalog.save_mapping({"entries": []})

        assert cache.get("webflow:analysis") is None
        assert cache.get("webflow:article-fields") is not None

    def test_save_config_invalidates_webflow_keys(self, catalog, cache):
        """Test saving credentials drops every webflow cache key."""
        cache.set("webflow:authors", [], 10000)
        cache.set("webflow:topics", [], 10000)
        cache.set("media:sources", [], 10000)

        saved = catalog.save_config({"apiToken": "new"})

        assert saved == {"apiToken": "new"}
        assert cache.get_stats()["keys"] == ["media:sources"]

    @pytest.mark.asyncio
    async def test_topics_from_configured_collection(self, catalog, client, settings):
        """Test the configured topics collection is used first."""
        settings.webflow_topics_collection_id = "col-env"
        client.fetch_collection_items.return_value = _items("Film", "Musik")

        result = await catalog.topics()

        assert [i["name"] for i in result["items"]] == ["Film", "Musik"]
        assert result["debug"]["tried"][0]["type"] == "envId"
        assert result["debug"]["tried"][0]["count"] == 2
        client.list_collections.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_topics_discovered_collection(self, catalog, client):
        """Test a collection named like the taxonomy is discovered."""
        client.list_collections.return_value = [
            {"id": "col-articles", "slug": "articles", "name": "Articles"},
            {"id": "col-tags", "slug": "tags", "name": "Tags"},
        ]
        client.fetch_collection_items.return_value = _items("Gaming")

        result = await catalog.topics()

        assert result["items"][0]["id"] == "id-Gaming"
        assert result["debug"]["tried"][0] == {
            "type": "discovered",
            "id": "col-tags",
            "primaryUrl": "/v2/...",
            "primaryStatus": 200,
            "sampleKeys": ["name", "slug"],
            "count": 1,
        }

    @pytest.mark.asyncio
    async def test_topics_inferred_from_reference_field(self, catalog, client):
        """Test the articles topic field's referenced collection is used last."""
        client.fetch_collection_items.return_value = _items("Tech")

        result = await catalog.topics()

        assert result["items"][0]["name"] == "Tech"
        assert result["debug"]["tried"][0]["type"] == "inferredRef"
        client.fetch_collection_items.assert_awaited_with("tok", "site-1", "col-topics")

    @pytest.mark.asyncio
    async def test_sections_inferred_from_options(self, catalog, cache):
        """Test option fields provide section choices."""
        result = await catalog.sections()

        assert result["items"] == [{"id": "Film Og Serier", "name": "Film Og Serier", "slug": "film-og-serier"}]
        assert result["debug"]["tried"] == [{"type": "inferredOptions", "field": "section", "count": 1}]
        assert cache.get("webflow:sections") == result

    @pytest.mark.asyncio
    async def test_empty_taxonomy_not_cached(self, catalog, client, cache):
        """Test empty option lists are not cached."""
        client.get_collection.return_value = {"fields": []}

        result = await catalog.topics()

        assert result["items"] == []
        assert cache.get("webflow:topics") is None

    @pytest.mark.asyncio
    async def test_festivals_from_configured_collection(self, catalog, client, settings, cache):
        """Test festivals come from their configured collection and are cached."""
        settings.webflow_festivals_collection_id = "col-festivals"
        client.fetch_collection_items.return_value = {
            "items": [{"id": "f-1", "fieldData": {"title": "Roskilde", "slug": "roskilde"}}],
            "debug": {},
        }

        result = await catalog.festivals()

        assert result["items"] == [{"id": "f-1", "name": "Roskilde", "slug": "roskilde"}]
        client.fetch_collection_items.assert_awaited_once_with("tok", "site-1", "col-festivals")
        assert cache.get("webflow:festivals") == result

    @pytest.mark.asyncio
    async def test_festivals_empty_not_cached(self, catalog, cache):
        """Test an empty festival list is returned but not cached."""
        result = await catalog.festivals()

        assert result["items"] == []
        assert cache.get("webflow:festivals") is None

    @pytest.mark.asyncio
    async def test_streaming_services_discovered_collection(self, catalog, client, cache):
        """Test streaming services use the service name candidate."""
        client.list_collections.return_value = [
            {"id": "col-streaming", "slug": "streaming-services", "name": "Streaming Services"},
        ]
        client.fetch_collection_items.return_value = {
            "items": [{"id": "s-1", "fieldData": {"service": "Netflix", "slug": "netflix"}}],
            "debug": {},
        }

        result = await catalog.streaming_services()

        assert result["items"] == [{"id": "s-1", "name": "Netflix", "slug": "netflix"}]
        assert result["debug"]["tried"][0]["id"] == "col-streaming"
        assert "webflow:streaming-services" in cache.get_stats()["keys"]

    @pytest.mark.asyncio
    async def test_sample_articles(self, catalog, client):
        """Test sample articles are trimmed to id and fieldData."""
        client.list_items = AsyncMock(return_value=[
            {"id": "a-1", "isDraft": False, "fieldData": {"name": "Hej", "slug": "hej"}},
        ])

        result = await catalog.sample_articles()

        assert result == {"items": [{"id": "a-1", "fieldData": {"name": "Hej", "slug": "hej"}}]}
        client.list_items.assert_awaited_once_with("tok", "site-1", "col-articles", limit=50)

    @pytest.mark.asyncio
    async def test_sample_articles_unconfigured(self, catalog, client, settings):
        """Test missing credentials yield no sample articles."""
        settings.webflow_articles_collection_id = None
        client.list_items = AsyncMock()

        assert await catalog.sample_articles() == {"items": []}
        client.list_items.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_taxonomy_unconfigured(self, catalog, settings):
        """Test missing credentials yield an empty list with debug info."""
        settings.webflow_site_id = None

        result = await catalog.sections()

        assert result == {"items": [], "debug": {"env": {"hasToken": True, "siteId": None, "col": None}, "tried": []}}

    @pytest.mark.asyncio
    async def test_status_connected(self, catalog, client):
        """Test status reports reachability and credential presence."""
        client.list_collections.return_value = [{"id": "c1"}]

        status = await catalog.status()

        assert status["connected"] is True
        assert status["tokenPreview"] == "tok"
        assert status["hasArticlesCollectionId"] is True
        assert status["error"] is None

    @pytest.mark.asyncio
    async def test_status_unreachable(self, catalog, client):
        """Test upstream failures are reported rather than raised."""
        client.get_site.side_effect = ExternalServiceError(service="webflow", message="Unexpected status 401")

        status = await catalog.status()

        assert status["connected"] is False
        assert status["apiReachable"] is False
        assert status["error"] == "webflow: Unexpected status 401"

    @pytest.mark.asyncio
    async def test_status_unconfigured(self, catalog, client, settings):
        """Test status short-circuits without credentials."""
        settings.webflow_api_token = None

        status = await catalog.status()

        assert status["hasToken"] is False
        assert status["tokenPreview"] is None
        client.get_site.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_discover_collections(self, catalog, client, cache):
        """Test discovered ids are saved and cached lookups dropped."""
        client.list_collections.return_value = [
            {"id": "a-id", "slug": "articles", "name": "Articles"},
            {"id": "w-id", "slug": "writers", "name": "Forfattere"},
        ]
        cache.set("webflow:authors", [], 10000)

        result = await catalog.discover_collections()

        assert result["articlesCollectionId"] == "a-id"
        assert result["authorsCollectionId"] == "w-id"
        assert catalog.config_store.get_webflow_config() == {
            "articlesCollectionId": "a-id",
            "authorsCollectionId": "w-id",
        }
        assert cache.get_stats()["size"] == 0

    @pytest.mark.asyncio
    async def test_discover_collections_none_found(self, catalog):
        """Test an empty site is reported as an upstream error."""
        with pytest.raises(ExternalServiceError):
            await catalog.discover_collections()

    @pytest.mark.asyncio
    async def test_publish(self, catalog, client):
        """Test an article is mapped and created as a draft."""
        result = await catalog.publish({
            "title": "Hej verden",
            "content": "Første afsnit",
            "seoDescription": "Beskrivelse",
        })

        assert result["success"] is True
        assert result["articleId"] == "item-1"
        assert result["slug"] == "hej-verden"

        token, collection_id, field_data = client.create_item.await_args.args
        assert (token, collection_id) == ("tok", "col-articles")
        assert field_data["name"] == "Hej verden"
        assert field_data["content"] == "<p>Første afsnit</p>"
        assert client.create_item.await_args.kwargs == {"is_draft": True}

    @pytest.mark.asyncio
    async def test_publish_uses_mapping_collection(self, catalog, client):
        """Test a collection id in the mapping overrides the configured one."""
        catalog.save_mapping({"collectionId": "col-mapped", "entries": [
            {"internal": "title", "webflowSlug": "name", "required": True},
        ]})

        await catalog.publish({"title": "T", "content": "C", "status": "published"})

        assert client.create_item.await_args.args[1] == "col-mapped"
        assert client.create_item.await_args.kwargs == {"is_draft": False}

    @pytest.mark.asyncio
    async def test_publish_missing_required(self, catalog, client):
        """Test unmapped required fields block publishing."""
        with pytest.raises(ValidationError) as exc_info:
            await catalog.publish({"title": "T", "content": "C"})

        assert exc_info.value.details == {"missing": ["meta-description"]}
        client.create_item.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_publish_unconfigured(self, catalog, settings):
        """Test publishing without a token is a configuration error."""
        settings.webflow_api_token = None

        with pytest.raises(ConfigurationError):
            await catalog.publish({"title": "T", "content": "C", "seoDescription": "D"})

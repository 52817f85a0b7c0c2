"""
Webflow CMS API client.
"""

from typing import Any, Dict, Iterable, List, Optional
import time

import httpx

from shared.logging import get_logger
from shared.errors import ExternalServiceError
from shared.circuit_breaker import CircuitBreaker, CircuitBreakerOpenException
from shared.retry import retry_on_exception, RetryConfig, RetryError


DEFAULT_NAME_CANDIDATES = ("name", "title", "label")
ITEMS_PAGE_LIMIT = 200


def display_name(field_data: Dict[str, Any], candidates: Iterable[str] = DEFAULT_NAME_CANDIDATES) -> str:
    """Pick a human-readable name from an item's fieldData."""
    field_data = field_data or {}
    for key in candidates:
        value = field_data.get(key)
        if isinstance(value, str) and value:
            return value
    for value in field_data.values():
        if isinstance(value, str) and value:
            return value
    return ""


def normalize_items(payload: Dict[str, Any], name_candidates: Iterable[str] = DEFAULT_NAME_CANDIDATES) -> List[Dict[str, str]]:
    """Reduce raw collection items to ``{id, name, slug}`` options."""
    items = payload.get("items") if isinstance(payload, dict) else None
    if not isinstance(items, list):
        return []

    candidates = tuple(name_candidates)
    options = []
    for item in items:
        field_data = item.get("fieldData") or {}
        options.append({
            "id": item.get("id"),
            "name": display_name(field_data, candidates),
            "slug": field_data.get("slug") or "",
        })
    return options


def normalize_field(field: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten a Webflow v2 collection field definition."""
    validations = field.get("validations") or {}
    normalized: Dict[str, Any] = {
        "id": field.get("id"),
        "slug": field.get("slug"),
        "name": field.get("displayName") or field.get("name") or field.get("slug"),
        "type": field.get("type"),
        "required": bool(field.get("isRequired", field.get("required", False))),
        "helpText": field.get("helpText"),
        "options": validations.get("options") or [],
    }
    if validations.get("collectionId"):
        normalized["reference"] = {"collectionId": validations["collectionId"]}
    return normalized


class WebflowClient:
    """Thin async wrapper over the Webflow REST API."""

    def __init__(self, base_url: str = "https://api.webflow.com", timeout: float = 10.0, metrics=None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.metrics = metrics
        self.logger = get_logger("webflow.client")

        self.circuit_breaker = CircuitBreaker(
            failure_threshold=3,
            recovery_timeout=30.0,
            expected_exception=httpx.TransportError,
            name="webflow_api"
        )

    def _headers(self, token: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Accept-Version": "1.0.0",
            "Accept": "application/json",
        }

    @retry_on_exception((httpx.TransportError,), config=RetryConfig(max_attempts=3, base_delay=0.5, max_delay=5.0))
    async def _send(
        self,
        method: str,
        path: str,
        token: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        url = f"{self.base_url}{path}"

        async def _request():
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                if method == "POST":
                    return await client.post(url, headers=self._headers(token), json=json)
                return await client.get(url, headers=self._headers(token), params=params)

        start = time.perf_counter()
        try:
            return await self.circuit_breaker.call(_request)
        finally:
            if self.metrics:
                self.metrics.observe_histogram(
                    "webflow_request_duration_seconds",
                    time.perf_counter() - start,
                    operation=method,
                )

    async def _call(self, method: str, path: str, token: str, **kwargs) -> httpx.Response:
        """Send a request, mapping transport failures to ExternalServiceError."""
        try:
            return await self._send(method, path, token, **kwargs)
        except RetryError as exc:
            self.logger.error("Webflow API unreachable", path=path, error=str(exc.last_exception))
            raise ExternalServiceError(
                service="webflow",
                message=str(exc.last_exception),
                details={"path": path, "attempts": exc.attempts},
            )
        except CircuitBreakerOpenException as exc:
            self.logger.warning("Webflow circuit open", path=path)
            raise ExternalServiceError(service="webflow", message=str(exc), details={"path": path})

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return {}

    @staticmethod
    def _items(body: Any) -> List[Dict[str, Any]]:
        items = body.get("items") if isinstance(body, dict) else None
        return items if isinstance(items, list) else []

    @staticmethod
    def _error_message(body: Any) -> Optional[str]:
        return body.get("message") if isinstance(body, dict) else None

    async def get_site(self, token: str, site_id: str) -> Dict[str, Any]:
        """Fetch site metadata; raises ExternalServiceError on non-2xx."""
        path = f"/v2/sites/{site_id}"
        response = await self._call("GET", path, token)
        if response.is_success:
            return self._json(response)
        raise ExternalServiceError(
            service="webflow",
            message=f"Unexpected status {response.status_code}",
            details={"path": path, "status_code": response.status_code},
        )

    async def list_collections(self, token: str, site_id: str) -> List[Dict[str, Any]]:
        """List CMS collections of a site; empty on non-2xx responses."""
        path = f"/v2/sites/{site_id}/collections"
        response = await self._call("GET", path, token)
        if not response.is_success:
            self.logger.warning("Listing collections failed", site_id=site_id, status_code=response.status_code)
            return []

        data = self._json(response)
        if isinstance(data, list):
            return data
        return data.get("collections") or data.get("items") or []

    async def get_collection(self, token: str, collection_id: str) -> Dict[str, Any]:
        """Fetch a collection including its field schema."""
        path = f"/v2/collections/{collection_id}"
        response = await self._call("GET", path, token)
        if response.is_success:
            return self._json(response)

        body = self._json(response)
        self.logger.error(
            "Collection request failed",
            collection_id=collection_id,
            status_code=response.status_code,
            response=response.text,
        )
        raise ExternalServiceError(
            service="webflow",
            message=self._error_message(body) or f"Unexpected status {response.status_code}",
            details={"collection_id": collection_id, "status_code": response.status_code},
        )

    async def fetch_collection_items(self, token: str, site_id: str, collection_id: str) -> Dict[str, Any]:
        """
        Fetch items of a collection, trying progressively older endpoints.

        Order: site-scoped v2, collection-scoped v2, legacy v1 (``live=false``).
        The first non-empty item list wins. The ``debug`` record lists every
        URL tried and the status it returned.
        """
        params = {"limit": ITEMS_PAGE_LIMIT}
        primary = f"/v2/sites/{site_id}/collections/{collection_id}/items"
        response = await self._call("GET", primary, token, params=params)
        data = self._json(response)
        items = self._items(data)
        debug: Dict[str, Any] = {"primaryUrl": primary, "primaryStatus": response.status_code}

        if response.is_success and items:
            return {"items": items, "debug": debug}

        secondary = f"/v2/collections/{collection_id}/items"
        response = await self._call("GET", secondary, token, params=params)
        data = self._json(response)
        items = self._items(data)
        debug.update(secondaryUrl=secondary, secondaryStatus=response.status_code)
        if items:
            return {"items": items, "debug": debug}

        legacy = f"/collections/{collection_id}/items"
        response = await self._call("GET", legacy, token, params={**params, "live": "false"})
        data = self._json(response)
        debug.update(legacyUrl=legacy, legacyStatus=response.status_code)

        self.logger.debug("Collection items fetched", collection_id=collection_id, debug=debug)
        return {"items": self._items(data), "debug": debug}

    async def list_items(self, token: str, site_id: str, collection_id: str, limit: int = 50) -> List[Dict[str, Any]]:
        """Fetch one page of items from the site-scoped endpoint; raises on non-2xx."""
        path = f"/v2/sites/{site_id}/collections/{collection_id}/items"
        response = await self._call("GET", path, token, params={"limit": limit})
        body = self._json(response)
        if response.is_success:
            return self._items(body)

        self.logger.warning("Listing items failed", collection_id=collection_id, status_code=response.status_code)
        raise ExternalServiceError(
            service="webflow",
            message=self._error_message(body) or "Failed to fetch items",
            details={"collection_id": collection_id, "status_code": response.status_code},
        )

    async def create_item(
        self,
        token: str,
        collection_id: str,
        field_data: Dict[str, Any],
        *,
        is_draft: bool = True,
    ) -> Dict[str, Any]:
        """Create a collection item; raises ExternalServiceError on non-2xx."""
        path = f"/v2/collections/{collection_id}/items"
        payload = {"isArchived": False, "isDraft": is_draft, "fieldData": field_data}
        response = await self._call("POST", path, token, json=payload)

        body = self._json(response)
        if response.is_success:
            self.logger.info("Webflow item created", collection_id=collection_id, item_id=body.get("id"))
            return body

        self.logger.error(
            "Webflow publish failed",
            collection_id=collection_id,
            status_code=response.status_code,
            response=response.text,
        )
        raise ExternalServiceError(
            service="webflow",
            message=f"Failed to publish to Webflow: {self._error_message(body) or 'Unknown error'}",
            details={"status_code": response.status_code, "body": body},
        )

"""
Adapters package for the Webflow service.

Contains the HTTP client wrapper for the Webflow CMS API. Adapters
encapsulate base URLs, request shapes, retry policies and circuit
breaking, and map failures to shared errors.

Keep adapters thin and side-effect free outside of explicit calls.
"""

from .webflow_client import WebflowClient, display_name, normalize_field, normalize_items

__all__ = [
    "WebflowClient",
    "display_name",
    "normalize_field",
    "normalize_items",
]

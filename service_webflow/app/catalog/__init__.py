"""Webflow catalog: cached upstream lookups and publishing."""

from .service import SECTIONS, TOPICS, TaxonomyLookup, WebflowCatalogService

__all__ = ["SECTIONS", "TOPICS", "TaxonomyLookup", "WebflowCatalogService"]

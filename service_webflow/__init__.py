"""
Webflow Service package for the newsroom CMS.

This package connects the editorial back end to a Webflow CMS site. It
provides:

- app.main: API surface for settings, lookups, publishing and cache control.
- app.caching: In-process TTL cache for upstream Webflow results.
- app.stores: File-backed field mapping and credential stores.
- app.adapters: Async HTTP client for the Webflow REST API.
- app.domain: Field guidance, author profiles and publishing transforms.
- app.catalog: Cache-before-fetch orchestration of the above.

Guidelines:
- Only successful upstream results are cached.
- Saving credentials invalidates every ``webflow:`` cache key.
- Stores rewrite their whole JSON file; the last writer wins.
"""

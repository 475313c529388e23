"""
Shared utilities for the document store caching layer.

This package aggregates common building blocks consumed by the engine:

- config: Data source configuration via pydantic-settings
- logging: Structured logging with trace correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- test_helpers: Fake collections and document factories for tests

Do not import from docstore_cache into shared/.
"""

"""
Adapters Layer - External System Integrations

This package contains adapters for upstream data providers, object storage,
record persistence, number formatting and the HTTP layer.
"""

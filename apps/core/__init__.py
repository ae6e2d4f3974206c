"""
Core app for PublishDesk.

Provides editorial roles, error handling, request IDs, and health checks.
"""

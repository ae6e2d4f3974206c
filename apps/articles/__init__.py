"""
Articles app for PublishDesk.

Provides article storage, versioning, and the editorial workflow.
"""

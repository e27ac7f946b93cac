"""Caching Service Implementation.

Provides the file-based response cache keyed by request fingerprint,
with time-window freshness.
Bounded Context: Cache Management
"""

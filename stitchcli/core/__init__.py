"""Core Application Layer: request orchestration use cases.

Builds request descriptors, routes them through the cache and rate limiter,
and expands paginated queries into merged result sets.
"""

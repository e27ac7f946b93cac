"""Abstract interfaces implemented by the infrastructure layer.

Keeps the core independent of HTTP, disk and cache implementations.
"""

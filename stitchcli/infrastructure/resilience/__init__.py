"""API Resilience Implementations.

Contains the admission queue that keeps outbound calls under the
configured request rate.
Bounded Context: API Resilience
"""

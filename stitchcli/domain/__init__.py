"""Domain Layer: value objects, request/cache models, events and interfaces.

Has no dependencies on the infrastructure layer.
"""

"""Service layer — domain services over the persistence backend.

Services may import from domain and infrastructure layers.
They must never import from handlers, commands, or output.
"""

"""Domain layer — identifiers, lifecycle, errors, schemas and entities.

This layer depends only on stdlib and pydantic.
It must never import from services, handlers, infrastructure, commands, or config.
"""

"""Infrastructure layer — persistence backend, database, session providers.

This layer depends on stdlib, SQLAlchemy and pydantic, and may read
constants from the domain layer (status values, id generation, condition
codes). It must never import from services, handlers, commands, or output.
"""

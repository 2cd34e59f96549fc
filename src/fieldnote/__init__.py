"""fieldnote — template-structured notes with a validated command/query core."""

__version__ = "0.1.0"

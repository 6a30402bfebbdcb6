"""Document ingestion and semantic retrieval for the tutoring knowledge base."""

__version__ = "0.1.0"

"""Infrastructure layer: PostgreSQL / in-memory adapters for the domain ports."""

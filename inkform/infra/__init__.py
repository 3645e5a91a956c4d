"""Infrastructure adapters: database."""

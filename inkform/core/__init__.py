"""Core: exceptions and logging shared by every inkform layer."""

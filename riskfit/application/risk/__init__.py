"""Risk bounded context: application layer (use cases)."""

"""Risk bounded context: wire schemas and dependency wiring."""

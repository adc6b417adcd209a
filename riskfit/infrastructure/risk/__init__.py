"""Risk bounded context: infrastructure adapters."""

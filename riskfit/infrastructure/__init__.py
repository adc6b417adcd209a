"""
Infrastructure layer package.

Adapters for reference data loading and in-process storage.
"""

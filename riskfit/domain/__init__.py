"""
Domain layer package.

Contains pure business logic: entities, reference data, domain services,
and port interfaces. No framework imports, no IO, no side effects.
"""

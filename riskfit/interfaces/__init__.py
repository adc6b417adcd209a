"""
Interfaces layer package.

Wire contracts and the composition root that wires settings,
adapters and use cases together.
"""

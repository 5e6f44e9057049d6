"""Volume registry and startup reconciliation.

This package owns the in-memory volume map, its locking discipline,
and the startup algorithm that chooses the map's initial contents.
"""

"""Registry snapshot persistence layer.

This module persists the volume registry as one JSON document per driver.
It distinguishes a first run from a corrupt snapshot for reconciliation.
"""

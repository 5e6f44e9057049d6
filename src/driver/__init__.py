"""Volume plugin lifecycle facade.

This module maps plugin lifecycle requests onto registry operations.
It also boots a driver by reconciling and seeding its registry.
"""

"""
Device Snapshot - Fault-isolated host device information collection.

Collects OS identity, hardware identifiers, display geometry, memory,
storage, and network reachability into one structured snapshot.
"""

__version__ = "0.3.0"
__author__ = "Sluggisty"

__all__ = ["__version__"]

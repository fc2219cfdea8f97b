"""
Stand-ins for calls that leave the contract.

In production these would cross-call the sibling purchase contract.
For simulation, records are registered in memory.
"""

from .purchase_record import (
    UnknownResource,
    ResourceLookup,
    PurchaseRecord,
    SimulatedPurchaseRecord,
)

__all__ = [
    "UnknownResource",
    "ResourceLookup",
    "PurchaseRecord",
    "SimulatedPurchaseRecord",
]

"""
Lookups against the sibling purchase record of a song.

In production the report contract would cross-call the purchase contract
deployed next to it. For simulation, records are registered in memory.
Nothing here takes part in bond or settlement correctness.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Set


class UnknownResource(LookupError):
    """No purchase record is registered under the reference."""


class ResourceLookup:
    """Capability a ledger may use to read its sibling purchase record."""

    def recover_image(self, resource_ref: str) -> str:
        """Return the image address stored on the purchase record."""
        raise NotImplementedError

    def is_buyer(self, resource_ref: str, identity: str) -> bool:
        """Return True if identity bought the song behind resource_ref."""
        raise NotImplementedError


@dataclass
class PurchaseRecord:
    image: str = ""
    buyers: Set[str] = field(default_factory=set)


class SimulatedPurchaseRecord(ResourceLookup):
    """
    In-memory purchase records keyed by resource reference.

    Tests and scenarios register what the sibling contract would return.
    """

    def __init__(self):
        self.records: Dict[str, PurchaseRecord] = {}

    def register(self, resource_ref: str, image: str = "", buyers: Iterable[str] = ()) -> PurchaseRecord:
        record = PurchaseRecord(image=image, buyers=set(buyers))
        self.records[resource_ref] = record
        return record

    def add_buyer(self, resource_ref: str, identity: str):
        self._record(resource_ref).buyers.add(identity)

    def _record(self, resource_ref: str) -> PurchaseRecord:
        try:
            return self.records[resource_ref]
        except KeyError:
            raise UnknownResource(resource_ref) from None

    def recover_image(self, resource_ref: str) -> str:
        return self._record(resource_ref).image

    def is_buyer(self, resource_ref: str, identity: str) -> bool:
        return identity in self._record(resource_ref).buyers

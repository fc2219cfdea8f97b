"""
Core ledger primitives: hashing, selectors, and the call journal.
"""

import hashlib
import json
from dataclasses import dataclass
from typing import List, Any
from enum import Enum


HASH_LENGTH = 16
SELECTOR_BYTES = 4


# =============================================================================
# Hashing
# =============================================================================

def hash_data(data: dict) -> str:
    """Compute deterministic hash of a dictionary."""
    canonical = json.dumps(data, sort_keys=True, separators=(',', ':'))
    return hashlib.sha256(canonical.encode()).hexdigest()[:HASH_LENGTH]


def selector_for(name: str) -> int:
    """Default message selector: first four bytes of BLAKE2b-256(name)."""
    digest = hashlib.blake2b(name.encode(), digest_size=32).digest()
    return int.from_bytes(digest[:SELECTOR_BYTES], "big")


def format_selector(selector: int) -> str:
    return f"0x{selector:08X}"


def derive_address(deployer: str, nonce: int, args: List[Any]) -> str:
    """Derive a contract address from its deployer, nonce and constructor args."""
    return "ct_" + hash_data({
        "deployer": deployer,
        "nonce": nonce,
        "args": [str(a) for a in args],
    })


# =============================================================================
# Journal Entry Types
# =============================================================================

class EntryType(Enum):
    """Kinds of entry recorded in the runtime journal."""
    GENESIS = "genesis"
    DEPLOY = "deploy"    # Contract instantiated
    CALL = "call"        # Message call committed


# =============================================================================
# Journal Entry
# =============================================================================

@dataclass
class JournalEntry:
    """
    One committed effect on the runtime.

    Entries are hash-linked: each records the hash of the one before it,
    so rewriting history breaks verification.
    """
    sequence: int
    previous_hash: str
    entry_type: EntryType
    payload: dict
    entry_hash: str = ""

    def __post_init__(self):
        if not self.entry_hash:
            self.entry_hash = self.compute_hash()

    def compute_hash(self) -> str:
        return hash_data({
            "sequence": self.sequence,
            "previous_hash": self.previous_hash,
            "entry_type": self.entry_type.value,
            "payload": self.payload,
        })


# =============================================================================
# Journal
# =============================================================================

class Journal:
    """
    Append-only record of everything the runtime committed.

    Reverted calls never reach the journal.
    """

    def __init__(self):
        self.entries: List[JournalEntry] = [
            JournalEntry(
                sequence=0,
                previous_hash="0" * HASH_LENGTH,
                entry_type=EntryType.GENESIS,
                payload={},
            )
        ]

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def head(self) -> JournalEntry:
        return self.entries[-1]

    @property
    def head_hash(self) -> str:
        return self.head.entry_hash

    def append(self, entry_type: EntryType, payload: dict) -> JournalEntry:
        entry = JournalEntry(
            sequence=len(self.entries),
            previous_hash=self.head_hash,
            entry_type=entry_type,
            payload=payload,
        )
        self.entries.append(entry)
        return entry

    def entries_by_type(self, entry_type: EntryType) -> List[JournalEntry]:
        return [e for e in self.entries if e.entry_type == entry_type]

    def verify(self) -> bool:
        """Verify the journal's hash links and sequence numbers."""
        if not self.entries:
            return False

        if self.entries[0].previous_hash != "0" * HASH_LENGTH:
            return False

        for i, entry in enumerate(self.entries):
            if entry.sequence != i:
                return False
            if entry.entry_hash != entry.compute_hash():
                return False
            if i > 0 and entry.previous_hash != self.entries[i - 1].entry_hash:
                return False

        return True

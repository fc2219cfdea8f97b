"""
Host runtime primitives.

This package provides:
- primitives: hashing, selectors and the hash-linked journal
- runtime: accounts, custody, message dispatch and atomic calls
"""

from .primitives import (
    hash_data,
    selector_for,
    format_selector,
    derive_address,
    EntryType,
    JournalEntry,
    Journal,
)

from .runtime import (
    BALANCE,
    ACCOUNT,
    HostError,
    UnknownContract,
    UnknownMessage,
    InvalidArgument,
    NonPayableMessage,
    InsufficientFunds,
    ValueRejected,
    ContractRevert,
    MessageSpec,
    CallResult,
    CallEnv,
    Runtime,
)

__all__ = [
    # Primitives
    "hash_data",
    "selector_for",
    "format_selector",
    "derive_address",
    "EntryType",
    "JournalEntry",
    "Journal",
    # Runtime
    "BALANCE",
    "ACCOUNT",
    "HostError",
    "UnknownContract",
    "UnknownMessage",
    "InvalidArgument",
    "NonPayableMessage",
    "InsufficientFunds",
    "ValueRejected",
    "ContractRevert",
    "MessageSpec",
    "CallResult",
    "CallEnv",
    "Runtime",
]

"""
Ledger contracts and their simulation harness.
"""

from .punishment import (
    DEPOSIT_MESSAGE,
    SETTLE_MESSAGE,
    Error,
    ContractError,
    Bond,
    LedgerState,
    Split,
    compute_split,
    PunishmentLedger,
)
from .simulation_harness import ReportSimulation

__all__ = [
    "DEPOSIT_MESSAGE",
    "SETTLE_MESSAGE",
    "Error",
    "ContractError",
    "Bond",
    "LedgerState",
    "Split",
    "compute_split",
    "PunishmentLedger",
    "ReportSimulation",
]

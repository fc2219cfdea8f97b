"""
Simulation harness for report contract testing.

Wires a Runtime, an optional purchase record and one PunishmentLedger so
tests and scenario replays can drive the contract by name.
"""

import functools
from typing import Any, Dict, List, Optional

from ..chain.runtime import CallResult, Runtime
from ..native.purchase_record import ResourceLookup
from .punishment import PunishmentLedger


class ReportSimulation:
    """
    Helper class to run report contract simulations.

    Owns the runtime and remembers the deployed ledger's address.
    """

    def __init__(self, runtime: Optional[Runtime] = None, lookup: Optional[ResourceLookup] = None):
        self.runtime = runtime or Runtime()
        self.lookup = lookup
        self.address: Optional[str] = None
        self.call_log: List[CallResult] = []

    def create_account(self, account: str, balance: int = 0) -> str:
        return self.runtime.create_account(account, balance)

    def deploy(self, administrator: str, resource_ref: str, label: str = "") -> str:
        """Deploy the ledger, deployed by its administrator."""
        if self.address is not None:
            raise ValueError("Ledger already deployed")
        factory = functools.partial(PunishmentLedger, lookup=self.lookup)
        self.address = self.runtime.deploy(factory, administrator, administrator, resource_ref, label)
        return self.address

    @property
    def ledger(self) -> PunishmentLedger:
        if self.address is None:
            raise ValueError("Ledger not deployed")
        return self.runtime.contract_at(self.address)

    # -------------------------------------------------------------------------
    # Calls
    # -------------------------------------------------------------------------

    def send(self, caller: str, message: str, args: Optional[Dict[str, Any]] = None,
             value: int = 0) -> CallResult:
        """Call a message with keyword-style arguments in declared order."""
        spec = self.runtime.resolve(self.ledger, message)
        args = dict(args or {})
        missing = [name for name in spec.arg_names if name not in args]
        extra = sorted(set(args) - set(spec.arg_names))
        if missing or extra:
            raise ValueError(f"Bad arguments for {message}: missing={missing} extra={extra}")
        result = self.runtime.call(
            self.address, caller, spec.name,
            *[args[name] for name in spec.arg_names],
            value=value,
        )
        self.call_log.append(result)
        return result

    def deposit(self, caller: str, value: int) -> CallResult:
        return self.send(caller, "deposit", value=value)

    def settle(self, caller: str, reward: int, settling_identity: str) -> CallResult:
        return self.send(caller, "settle", {"reward": reward, "settling_identity": settling_identity})

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def has_bond(self, identity: str) -> bool:
        return self.runtime.query(self.address, "has_bond", identity)

    def get_bond_amount(self, identity: str) -> int:
        return self.runtime.query(self.address, "get_bond_amount", identity)

    def recover_image(self) -> str:
        return self.runtime.query(self.address, "recover_image")

    def balance(self, account: str) -> int:
        return self.runtime.balance_of(account)

    def custody(self) -> int:
        """Native currency held by the ledger itself."""
        return self.runtime.balance_of(self.address)

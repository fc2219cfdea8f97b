"""
Report contract: punishment bonds for a published song.

A distributor deposits a bond against misbehaviour around the song. A
reporter later settles that bond: it is split between the song's owner
(the administrator) and the reporter, paid out, and removed.

The administrator never deposits or settles; it only receives payouts.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ..chain.runtime import ACCOUNT, BALANCE, CallEnv, ContractRevert, MessageSpec
from ..native.purchase_record import ResourceLookup, UnknownResource

logger = logging.getLogger(__name__)


# =============================================================================
# Parameters
# =============================================================================

DEPOSIT_SELECTOR = 0xA1B2C3D4  # Pinned by the deployed contract's ABI
DEPOSIT_MESSAGE = "Deposito satisfactorio"
SETTLE_MESSAGE = "Reporte verificado, gracias por tu reporte"


# =============================================================================
# Errors
# =============================================================================

class Error(Enum):
    """Tags a ledger call can fail with."""
    INSUFFICIENT_BALANCE = "InsufficientBalance"  # Deposit value not strictly positive
    ALREADY_ON_LIST = "AlreadyOnList"             # Depositor already holds a bond
    NOT_ON_LIST = "NotOnList"                     # Settlement target holds no bond
    OWNER_CANT_INTERACT = "OwnerCantInteract"     # Administrator acting as counterparty
    TRANSFER_ERROR = "TransferError"              # Payout transfer refused


class ContractError(ContractRevert):
    def __init__(self, code: Error):
        super().__init__(code.value)
        self.code = code


# =============================================================================
# State
# =============================================================================

@dataclass
class Bond:
    """One depositor's at-risk value."""
    depositor: str
    amount: int


@dataclass
class LedgerState:
    """All storage of one ledger. Configuration fields never change."""
    administrator: str
    resource_ref: str
    label: str = ""
    bonds: Dict[str, int] = field(default_factory=dict)


# =============================================================================
# Split
# =============================================================================

@dataclass(frozen=True)
class Split:
    """How a settled bond is paid out."""
    deposit: int
    to_admin: int
    to_caller: int

    @property
    def retained(self) -> int:
        """Part of the bond that stays in the ledger's custody."""
        return self.deposit - self.to_admin - self.to_caller


def compute_split(deposit: int, reward: int) -> Split:
    """
    Split a bond of ``deposit`` given the reporter's requested ``reward``.

    - reward above the deposit: halve it
    - zero reward: everything to the administrator
    - otherwise the administrator gets ``deposit - reward``, unless that
      is below half the deposit, in which case it is halved

    The reporter gets half or nothing, never ``reward`` itself. Halving
    uses floor division, so an odd deposit leaves one unit behind, and
    the non-halved branch leaves ``reward`` behind.
    """
    half = deposit // 2
    if deposit < reward:
        return Split(deposit, half, half)
    if reward == 0:
        return Split(deposit, deposit, 0)
    if deposit - reward < half:
        return Split(deposit, half, half)
    return Split(deposit, deposit - reward, 0)


# =============================================================================
# Ledger
# =============================================================================

class PunishmentLedger:
    """
    Bond ledger for one song.

    Mutating messages expect to run inside an atomic host call: settle
    pays the administrator before the reporter, and relies on the host to
    undo the first transfer if the second one fails.
    """

    MESSAGES = {spec.name: spec for spec in (
        MessageSpec("deposit", payable=True, mutates=True, selector=DEPOSIT_SELECTOR),
        MessageSpec("has_bond", args=(("identity", ACCOUNT),)),
        MessageSpec("get_bond_amount", args=(("identity", ACCOUNT),)),
        MessageSpec(
            "settle",
            args=(("reward", BALANCE), ("settling_identity", ACCOUNT)),
            mutates=True,
        ),
        MessageSpec("recover_image"),
        MessageSpec("is_recognized_buyer", args=(("identity", ACCOUNT),)),
    )}

    def __init__(self, administrator: str, resource_ref: str, label: str = "",
                 lookup: Optional[ResourceLookup] = None):
        self.state = LedgerState(
            administrator=administrator,
            resource_ref=resource_ref,
            label=label,
        )
        self.lookup = lookup

    @property
    def administrator(self) -> str:
        return self.state.administrator

    @property
    def resource_ref(self) -> str:
        return self.state.resource_ref

    @property
    def label(self) -> str:
        return self.state.label

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def has_bond(self, identity: str) -> bool:
        return identity in self.state.bonds

    def get_bond_amount(self, identity: str) -> int:
        # No bond and a zero bond both read as 0; deposits of 0 are refused.
        return self.state.bonds.get(identity, 0)

    def bond(self, identity: str) -> Optional[Bond]:
        if identity not in self.state.bonds:
            return None
        return Bond(identity, self.state.bonds[identity])

    def bonds(self) -> List[Bond]:
        return [Bond(depositor, amount) for depositor, amount in self.state.bonds.items()]

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def deposit(self, env: CallEnv) -> Tuple[str, int]:
        """Open a bond for the caller holding the value sent with the call."""
        if env.caller == self.state.administrator:
            raise ContractError(Error.OWNER_CANT_INTERACT)

        if env.transferred_value <= 0:
            raise ContractError(Error.INSUFFICIENT_BALANCE)

        if self.has_bond(env.caller):
            raise ContractError(Error.ALREADY_ON_LIST)

        self.state.bonds[env.caller] = env.transferred_value
        logger.info("bond opened: %s holds %d", env.caller, env.transferred_value)
        return DEPOSIT_MESSAGE, self.state.bonds[env.caller]

    def settle(self, env: CallEnv, reward: int, settling_identity: str) -> Tuple[str, int, int]:
        """Pay out and close the bond of settling_identity."""
        if env.caller == self.state.administrator:
            raise ContractError(Error.OWNER_CANT_INTERACT)

        if not self.has_bond(settling_identity):
            raise ContractError(Error.NOT_ON_LIST)

        split = compute_split(self.state.bonds[settling_identity], reward)
        logger.debug(
            "split for %s (reward %d): admin=%d caller=%d retained=%d",
            settling_identity, reward, split.to_admin, split.to_caller, split.retained,
        )

        if not env.transfer(self.state.administrator, split.to_admin):
            raise ContractError(Error.TRANSFER_ERROR)

        if not env.transfer(env.caller, split.to_caller):
            raise ContractError(Error.TRANSFER_ERROR)

        del self.state.bonds[settling_identity]
        logger.info(
            "bond of %s settled by %s: admin=%d caller=%d",
            settling_identity, env.caller, split.to_admin, split.to_caller,
        )
        return SETTLE_MESSAGE, split.to_admin, split.to_caller

    # -------------------------------------------------------------------------
    # Purchase record lookups (best effort)
    # -------------------------------------------------------------------------

    def recover_image(self) -> str:
        """Image address from the sibling purchase record, or "" if unavailable."""
        if self.lookup is None:
            logger.warning("no purchase record lookup configured for %s", self.state.resource_ref)
            return ""
        try:
            return self.lookup.recover_image(self.state.resource_ref)
        except UnknownResource:
            logger.warning("purchase record %s not found", self.state.resource_ref)
            return ""

    def is_recognized_buyer(self, identity: str) -> bool:
        if self.lookup is None:
            return False
        try:
            return self.lookup.is_buyer(self.state.resource_ref, identity)
        except UnknownResource:
            logger.warning("purchase record %s not found", self.state.resource_ref)
            return False

"""
Simulated host runtime for ledger contracts.

The runtime owns native-currency balances, deployed contracts and the
journal. A contract is any object exposing:

- ``MESSAGES``: mapping of message name to ``MessageSpec``
- ``state``: a deep-copyable object holding all of its storage
- one method per message; mutating messages take a ``CallEnv`` first

Every ``call`` is all-or-nothing: balances and contract state are
snapshotted before the handler runs and restored if it raises.
"""

import copy
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Set, Tuple, Union

from .primitives import EntryType, Journal, derive_address, format_selector, selector_for

logger = logging.getLogger(__name__)


# Argument types understood by the dispatcher
BALANCE = "balance"   # Non-negative integer amount of native currency
ACCOUNT = "account"   # Non-empty account identifier
ARG_TYPES = (BALANCE, ACCOUNT)


# =============================================================================
# Errors
# =============================================================================

class HostError(Exception):
    """Raised when the runtime refuses a call before or outside the contract."""


class UnknownContract(HostError):
    pass


class UnknownMessage(HostError):
    pass


class InvalidArgument(HostError):
    pass


class NonPayableMessage(HostError):
    pass


class InsufficientFunds(HostError):
    """Caller cannot cover the value attached to a call."""


class ValueRejected(HostError):
    """The contract account refused the value attached to a call."""


class ContractRevert(Exception):
    """
    Base for errors a contract raises to abort the current call.

    Subclasses set ``code`` to the tag reported in ``CallResult.error``.
    """
    code: Any = None


# =============================================================================
# Dispatch
# =============================================================================

def _is_balance(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


@dataclass(frozen=True)
class MessageSpec:
    """Declared shape of one contract message."""
    name: str
    args: Tuple[Tuple[str, str], ...] = ()
    payable: bool = False
    mutates: bool = False
    selector: Optional[int] = None

    def __post_init__(self):
        if self.selector is None:
            object.__setattr__(self, "selector", selector_for(self.name))
        for arg_name, arg_type in self.args:
            if arg_type not in ARG_TYPES:
                raise ValueError(f"Unknown type {arg_type!r} for argument {arg_name!r}")

    @property
    def arg_names(self) -> List[str]:
        return [name for name, _ in self.args]

    def validate(self, values: Tuple[Any, ...]):
        if len(values) != len(self.args):
            raise InvalidArgument(
                f"{self.name} takes {len(self.args)} argument(s), got {len(values)}"
            )
        for (arg_name, arg_type), value in zip(self.args, values):
            if arg_type == BALANCE and not _is_balance(value):
                raise InvalidArgument(f"{self.name}.{arg_name} must be a non-negative integer")
            if arg_type == ACCOUNT and (not isinstance(value, str) or not value):
                raise InvalidArgument(f"{self.name}.{arg_name} must be an account id")


@dataclass
class CallResult:
    """Outcome of a message call: a return value or a contract error."""
    message: str
    value: Any = None
    revert: Optional[ContractRevert] = None

    @property
    def ok(self) -> bool:
        return self.revert is None

    @property
    def error(self) -> Any:
        return self.revert.code if self.revert is not None else None

    def unwrap(self) -> Any:
        if self.revert is not None:
            raise self.revert
        return self.value


class CallEnv:
    """What a contract sees of the runtime during one call."""

    def __init__(self, runtime: 'Runtime', account_id: str, caller: str, transferred_value: int):
        self._runtime = runtime
        self.account_id = account_id
        self.caller = caller
        self.transferred_value = transferred_value
        self.transfers: List[Tuple[str, int]] = []

    def transfer(self, to: str, amount: int) -> bool:
        """Move amount from the contract's custody to ``to``. False on failure."""
        if self._runtime._transfer(self.account_id, to, amount):
            self.transfers.append((to, amount))
            return True
        return False


# =============================================================================
# Runtime
# =============================================================================

class Runtime:
    """
    In-process stand-in for a deterministic ledger host.

    Executes one call at a time; each call commits fully or leaves no trace.
    """

    def __init__(self):
        self.balances: Dict[str, int] = {}
        self.contracts: Dict[str, Any] = {}
        self.rejecting: Set[str] = set()
        self.journal = Journal()
        self._nonce = 0

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def create_account(self, account: str, balance: int = 0) -> str:
        if account in self.balances:
            raise ValueError(f"Account already exists: {account}")
        if not _is_balance(balance):
            raise ValueError(f"Invalid opening balance for {account}: {balance!r}")
        self.balances[account] = balance
        return account

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    def reject_transfers_to(self, account: str):
        """Make every transfer to account fail until accept_transfers_to."""
        self.rejecting.add(account)

    def accept_transfers_to(self, account: str):
        self.rejecting.discard(account)

    def _transfer(self, source: str, to: str, amount: int) -> bool:
        if not _is_balance(amount):
            return False
        if to in self.rejecting:
            logger.debug("transfer of %d to %s rejected by recipient", amount, to)
            return False
        if self.balance_of(source) < amount:
            logger.debug("transfer of %d from %s exceeds its balance", amount, source)
            return False
        self.balances[source] = self.balance_of(source) - amount
        self.balances[to] = self.balance_of(to) + amount
        return True

    # -------------------------------------------------------------------------
    # Contracts
    # -------------------------------------------------------------------------

    def deploy(self, factory: Callable[..., Any], deployer: str, *args: Any) -> str:
        """Instantiate a contract and return its address."""
        address = derive_address(deployer, self._nonce, list(args))
        self._nonce += 1
        contract = factory(*args)
        self.contracts[address] = contract
        self.balances.setdefault(address, 0)
        self.journal.append(EntryType.DEPLOY, {
            "address": address,
            "deployer": deployer,
            "contract": type(contract).__name__,
            "args": [str(a) for a in args],
        })
        logger.info("deployed %s at %s", type(contract).__name__, address)
        return address

    def contract_at(self, address: str) -> Any:
        try:
            return self.contracts[address]
        except KeyError:
            raise UnknownContract(f"No contract at {address}") from None

    def resolve(self, contract: Any, message: Union[str, int]) -> MessageSpec:
        """Find a message spec by name or by 4-byte selector."""
        messages: Dict[str, MessageSpec] = contract.MESSAGES
        if isinstance(message, str):
            spec = messages.get(message)
        else:
            spec = next((m for m in messages.values() if m.selector == message), None)
        if spec is None:
            label = message if isinstance(message, str) else format_selector(message)
            raise UnknownMessage(f"{type(contract).__name__} has no message {label}")
        return spec

    def query(self, address: str, message: Union[str, int], *args: Any) -> Any:
        """Run a read-only message. Nothing is journaled."""
        contract = self.contract_at(address)
        spec = self.resolve(contract, message)
        if spec.mutates:
            raise UnknownMessage(f"{spec.name} is not a read-only message")
        spec.validate(args)
        return getattr(contract, spec.name)(*args)

    def call(self, address: str, caller: str, message: Union[str, int],
             *args: Any, value: int = 0) -> CallResult:
        """
        Execute a message as one atomic transaction.

        Host errors (unknown contract or message, bad arguments, value on a
        non-payable message, caller short of funds, value refused by the
        contract account) raise before the handler runs. A ContractRevert
        from the handler rolls back every effect and is returned in the
        CallResult.
        """
        contract = self.contract_at(address)
        spec = self.resolve(contract, message)
        spec.validate(args)
        if not _is_balance(value):
            raise InvalidArgument(f"Transferred value must be a non-negative integer: {value!r}")
        if value and not spec.payable:
            raise NonPayableMessage(f"{spec.name} does not accept value")
        if self.balance_of(caller) < value:
            raise InsufficientFunds(f"{caller} cannot cover {value}")

        saved_balances = dict(self.balances)
        saved_state = copy.deepcopy(contract.state)
        if value and not self._transfer(caller, address, value):
            raise ValueRejected(f"{address} refused {value} from {caller}")
        env = CallEnv(self, address, caller, value)

        try:
            handler = getattr(contract, spec.name)
            result = handler(env, *args) if spec.mutates else handler(*args)
        except ContractRevert as exc:
            self.balances = saved_balances
            contract.state = saved_state
            logger.warning("%s.%s by %s reverted: %s", address, spec.name, caller, exc)
            return CallResult(spec.name, revert=exc)
        except Exception:
            self.balances = saved_balances
            contract.state = saved_state
            raise

        self.journal.append(EntryType.CALL, {
            "address": address,
            "caller": caller,
            "message": spec.name,
            "selector": format_selector(spec.selector),
            "args": list(args),
            "value": value,
            "transfers": [[to, amount] for to, amount in env.transfers],
            "result": list(result) if isinstance(result, tuple) else result,
        })
        return CallResult(spec.name, value=result)

"""
Scenario traces: a ledger setup, a list of calls, and expected outcomes.

Traces are plain dicts, written as YAML or produced by the scenario DSL.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml


ASSERTION_QUERIES = ("balance", "bond", "has_bond", "custody", "image")
OK = "ok"


class ValidationError(Exception):
    """Raised when a trace document is malformed."""


@dataclass
class TraceSetup:
    administrator: str
    resource: str
    label: str = ""
    accounts: Dict[str, int] = field(default_factory=dict)
    reject_transfers_to: List[str] = field(default_factory=list)
    image: Optional[str] = None
    buyers: List[str] = field(default_factory=list)

    @property
    def has_purchase_record(self) -> bool:
        return self.image is not None or bool(self.buyers)


@dataclass
class TraceAction:
    caller: str
    message: str
    value: int = 0
    args: Dict[str, Any] = field(default_factory=dict)
    expect: Optional[str] = None  # "ok", an error tag, or None for don't care
    returns: Optional[List[Any]] = None


@dataclass
class TraceAssertion:
    query: str
    expected: Any
    account: Optional[str] = None

    def describe(self) -> str:
        target = f" {self.account}" if self.account else ""
        return f"{self.query}{target} == {self.expected!r}"


@dataclass
class Trace:
    name: str
    setup: TraceSetup
    actions: List[TraceAction] = field(default_factory=list)
    assertions: List[TraceAssertion] = field(default_factory=list)
    description: str = ""


# =============================================================================
# Parsing
# =============================================================================

def _require(data: Dict[str, Any], key: str, where: str) -> Any:
    if key not in data:
        raise ValidationError(f"{where}: missing '{key}'")
    return data[key]


def _amount(value: Any, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f"{where}: expected a non-negative integer, got {value!r}")
    return value


def _parse_setup(data: Any) -> TraceSetup:
    if not isinstance(data, dict):
        raise ValidationError("setup: expected a mapping")

    accounts = data.get("accounts") or {}
    if not isinstance(accounts, dict):
        raise ValidationError("setup.accounts: expected a mapping of account to balance")

    record = data.get("purchase_record") or {}
    if not isinstance(record, dict):
        raise ValidationError("setup.purchase_record: expected a mapping")

    return TraceSetup(
        administrator=str(_require(data, "administrator", "setup")),
        resource=str(_require(data, "resource", "setup")),
        label=str(data.get("label", "")),
        accounts={
            str(name): _amount(balance, f"setup.accounts.{name}")
            for name, balance in accounts.items()
        },
        reject_transfers_to=[str(a) for a in data.get("reject_transfers_to") or []],
        image=record.get("image"),
        buyers=[str(b) for b in record.get("buyers") or []],
    )


def _parse_action(data: Any, index: int) -> TraceAction:
    where = f"actions[{index}]"
    if not isinstance(data, dict):
        raise ValidationError(f"{where}: expected a mapping")

    args = data.get("args") or {}
    if not isinstance(args, dict):
        raise ValidationError(f"{where}.args: expected a mapping")

    returns = data.get("returns")
    if returns is not None and not isinstance(returns, list):
        raise ValidationError(f"{where}.returns: expected a list")

    expect = data.get("expect")
    return TraceAction(
        caller=str(_require(data, "caller", where)),
        message=str(_require(data, "message", where)),
        value=_amount(data.get("value", 0), f"{where}.value"),
        args=dict(args),
        expect=str(expect) if expect is not None else None,
        returns=returns,
    )


def _parse_assertion(data: Any, index: int) -> TraceAssertion:
    where = f"assertions[{index}]"
    if not isinstance(data, dict):
        raise ValidationError(f"{where}: expected a mapping")

    query = _require(data, "query", where)
    if query not in ASSERTION_QUERIES:
        raise ValidationError(f"{where}: unknown query {query!r}")

    account = data.get("account")
    if query in ("balance", "bond", "has_bond") and account is None:
        raise ValidationError(f"{where}: query {query!r} needs an account")

    return TraceAssertion(
        query=query,
        expected=_require(data, "equals", where),
        account=str(account) if account is not None else None,
    )


def parse_trace(data: Any) -> Trace:
    """Build a Trace from its dict form, validating as we go."""
    if not isinstance(data, dict):
        raise ValidationError("trace: expected a mapping")

    actions = data.get("actions") or []
    assertions = data.get("assertions") or []
    if not isinstance(actions, list) or not isinstance(assertions, list):
        raise ValidationError("trace: actions and assertions must be lists")

    return Trace(
        name=str(data.get("name", "unnamed")),
        description=str(data.get("description", "")),
        setup=_parse_setup(_require(data, "setup", "trace")),
        actions=[_parse_action(a, i) for i, a in enumerate(actions)],
        assertions=[_parse_assertion(a, i) for i, a in enumerate(assertions)],
    )


def load_trace(path: Union[str, Path]) -> Trace:
    """Load a YAML trace file."""
    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ValidationError(f"{path}: not valid YAML: {exc}") from exc
    trace = parse_trace(data)
    if trace.name == "unnamed":
        trace.name = Path(path).stem
    return trace

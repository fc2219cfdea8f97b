"""
Replay a Trace against a fresh report contract simulation.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from ..chain.runtime import CallResult, HostError
from ..contracts.simulation_harness import ReportSimulation
from ..native.purchase_record import SimulatedPurchaseRecord
from .traces import OK, Trace, TraceAction, TraceAssertion

logger = logging.getLogger(__name__)


@dataclass
class StepOutcome:
    action: TraceAction
    result: Optional[CallResult] = None
    host_error: Optional[str] = None

    @property
    def outcome(self) -> str:
        if self.host_error is not None:
            return "host_error"
        return OK if self.result.ok else self.result.error.value


@dataclass
class ReplayResult:
    trace_name: str
    steps: List[StepOutcome] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.failures


def _plain(value: Any) -> Any:
    if isinstance(value, tuple):
        return list(value)
    return value


class TraceReplay:
    """Runs one trace: setup, every action in order, then the assertions."""

    def __init__(self, trace: Trace):
        self.trace = trace
        self.simulation = self._build(trace)

    @staticmethod
    def _build(trace: Trace) -> ReportSimulation:
        setup = trace.setup
        lookup = None
        if setup.has_purchase_record:
            lookup = SimulatedPurchaseRecord()
            lookup.register(setup.resource, image=setup.image or "", buyers=setup.buyers)

        simulation = ReportSimulation(lookup=lookup)
        for account, balance in setup.accounts.items():
            simulation.create_account(account, balance)
        if setup.administrator not in setup.accounts:
            simulation.create_account(setup.administrator, 0)
        for account in setup.reject_transfers_to:
            simulation.runtime.reject_transfers_to(account)
        simulation.deploy(setup.administrator, setup.resource, setup.label)
        return simulation

    def run(self) -> ReplayResult:
        result = ReplayResult(trace_name=self.trace.name)

        for index, action in enumerate(self.trace.actions):
            step = self._run_action(action)
            result.steps.append(step)
            failure = self._check_action(index, action, step)
            if failure:
                result.failures.append(failure)

        for assertion in self.trace.assertions:
            failure = self._check_assertion(assertion)
            if failure:
                result.failures.append(failure)

        logger.info("trace %s: %s", self.trace.name, "passed" if result.passed else "failed")
        return result

    def _run_action(self, action: TraceAction) -> StepOutcome:
        try:
            call = self.simulation.send(action.caller, action.message, action.args, value=action.value)
        except (HostError, ValueError) as exc:
            logger.warning("%s -> %s refused by host: %s", action.caller, action.message, exc)
            return StepOutcome(action, host_error=str(exc))
        return StepOutcome(action, result=call)

    @staticmethod
    def _check_action(index: int, action: TraceAction, step: StepOutcome) -> Optional[str]:
        where = f"action {index} ({action.caller} {action.message})"
        if action.expect is not None and step.outcome != action.expect:
            return f"{where}: expected {action.expect}, got {step.outcome}"
        if action.returns is not None:
            if step.outcome != OK:
                return f"{where}: expected returns {action.returns}, got {step.outcome}"
            actual = _plain(step.result.value)
            if actual != action.returns:
                return f"{where}: expected returns {action.returns}, got {actual}"
        return None

    def _query(self, assertion: TraceAssertion) -> Any:
        sim = self.simulation
        if assertion.query == "balance":
            return sim.balance(assertion.account)
        if assertion.query == "bond":
            return sim.get_bond_amount(assertion.account)
        if assertion.query == "has_bond":
            return sim.has_bond(assertion.account)
        if assertion.query == "custody":
            return sim.custody()
        return sim.recover_image()

    def _check_assertion(self, assertion: TraceAssertion) -> Optional[str]:
        actual = self._query(assertion)
        if actual != assertion.expected:
            return f"assert {assertion.describe()}: got {actual!r}"
        return None


def replay(trace: Trace) -> ReplayResult:
    return TraceReplay(trace).run()

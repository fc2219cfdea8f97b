"""
Scenario traces and replay for the report contract.
"""

from .traces import (
    Trace,
    TraceAction,
    TraceAssertion,
    TraceSetup,
    ValidationError,
    parse_trace,
    load_trace,
)
from .replay import (
    StepOutcome,
    ReplayResult,
    TraceReplay,
    replay,
)

__all__ = [
    # Traces
    "Trace",
    "TraceAction",
    "TraceAssertion",
    "TraceSetup",
    "ValidationError",
    "parse_trace",
    "load_trace",
    # Replay
    "StepOutcome",
    "ReplayResult",
    "TraceReplay",
    "replay",
]

#!/usr/bin/env python3
"""
Replay report contract scenarios.

Usage:
    python run_scenario.py scenarios/*.yaml scenarios/*.rpt
    python run_scenario.py -v scenarios/reward_exceeds_deposit.rpt
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

# Add scripts directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from scenario_parser import ScenarioSyntaxError, load_scenario
from reportsim.simulator import Trace, ValidationError, load_trace, replay

YAML_SUFFIXES = {".yaml", ".yml"}
SCENARIO_SUFFIX = ".rpt"


def load(path: Path) -> Trace:
    """Load a YAML trace or a DSL scenario, chosen by suffix."""
    if path.suffix in YAML_SUFFIXES:
        return load_trace(path)
    if path.suffix == SCENARIO_SUFFIX:
        return load_scenario(path)
    raise ValidationError(f"Unsupported scenario file type: {path.suffix or '(none)'}")


def run(paths: List[Path], out: Optional[TextIO] = None) -> int:
    """Replay every path. Returns the number of scenarios that did not pass."""
    if out is None:
        out = sys.stdout
    failed = 0
    for path in paths:
        try:
            trace = load(path)
        except (OSError, ValidationError, ScenarioSyntaxError) as exc:
            print(f"ERROR {path}: {exc}", file=out)
            failed += 1
            continue

        result = replay(trace)
        if result.passed:
            print(f"PASS  {trace.name} ({path})", file=out)
        else:
            failed += 1
            print(f"FAIL  {trace.name} ({path})", file=out)
            for failure in result.failures:
                print(f"      {failure}", file=out)

    return failed


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Replay report contract scenarios (.yaml traces or .rpt scripts)"
    )
    parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="Scenario files to replay",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log every call, split and transfer",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    failed = run(args.paths)
    print()
    print(f"Done: {len(args.paths) - failed} passed, {failed} failed")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())

"""
Parser for the report contract scenario DSL using Lark.

Uses the grammar in scenario_grammar.lark and turns the parse tree into
the same dict shape a YAML trace has, so both formats replay through
reportsim.simulator.parse_trace.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

from lark import Lark, Transformer, v_args
from lark.exceptions import UnexpectedInput, VisitError

from reportsim.simulator import Trace, ValidationError, parse_trace


GRAMMAR_PATH = Path(__file__).parent / "scenario_grammar.lark"


class ScenarioSyntaxError(Exception):
    """Raised when a scenario file does not match the grammar."""
    def __init__(self, message: str, line: int, column: int):
        self.line = line
        self.column = column
        super().__init__(f"{message} at line {line}, column {column}")


def _unquote(token) -> str:
    s = str(token)[1:-1]
    return s.replace('\\"', '"').replace('\\\\', '\\')


def _account(token) -> str:
    return str(token)[1:]


@v_args(inline=True)
class ScenarioTransformer(Transformer):
    """Transform the Lark parse tree into a trace dict."""

    # =========================================================================
    # Values
    # =========================================================================

    def int_value(self, token):
        return int(token)

    def account_value(self, token):
        return _account(token)

    def string_value(self, token):
        return _unquote(token)

    def true_value(self):
        return True

    def false_value(self):
        return False

    # =========================================================================
    # Setup
    # =========================================================================

    def scenario_decl(self, name):
        return ("scenario", _unquote(name))

    def ledger_decl(self, administrator, resource, label):
        return ("ledger", {
            "administrator": _account(administrator),
            "resource": _account(resource),
            "label": _unquote(label) if label is not None else "",
        })

    def account_decl(self, account, balance):
        return ("account", (_account(account), int(balance)))

    def reject_decl(self, account):
        return ("reject", _account(account))

    def cover_decl(self, image):
        return ("image", _unquote(image))

    def buyer_decl(self, account):
        return ("buyer", _account(account))

    # =========================================================================
    # Calls and assertions
    # =========================================================================

    def argument(self, name, value):
        return (str(name), value)

    def returns(self, *values):
        return list(values)

    def expectation(self, outcome, returns):
        return (str(outcome), returns)

    def call_stmt(self, caller, message, *rest):
        expectation = rest[-1] if rest else None
        arguments = dict(rest[:-1]) if rest else {}
        action: Dict[str, Any] = {
            "caller": _account(caller),
            "message": str(message),
        }
        if "value" in arguments:
            action["value"] = arguments.pop("value")
        if arguments:
            action["args"] = arguments
        if expectation is not None:
            outcome, returns = expectation
            action["expect"] = outcome
            if returns is not None:
                action["returns"] = returns
        return ("call", action)

    def assert_stmt(self, query, account, expected):
        assertion: Dict[str, Any] = {"query": str(query), "equals": expected}
        if account is not None:
            assertion["account"] = _account(account)
        return ("assert", assertion)

    # =========================================================================
    # Top-level
    # =========================================================================

    def start(self, *statements):
        trace: Dict[str, Any] = {"actions": [], "assertions": []}
        setup: Optional[Dict[str, Any]] = None
        accounts: Dict[str, int] = {}
        rejecting: List[str] = []
        record: Dict[str, Any] = {}

        for kind, payload in statements:
            if kind == "scenario":
                trace["name"] = payload
            elif kind == "ledger":
                if setup is not None:
                    raise ValidationError("scenario declares more than one ledger")
                setup = payload
            elif kind == "account":
                account, balance = payload
                accounts[account] = balance
            elif kind == "reject":
                rejecting.append(payload)
            elif kind == "image":
                record["image"] = payload
            elif kind == "buyer":
                record.setdefault("buyers", []).append(payload)
            elif kind == "call":
                trace["actions"].append(payload)
            elif kind == "assert":
                trace["assertions"].append(payload)

        if setup is not None:
            setup["accounts"] = accounts
            if rejecting:
                setup["reject_transfers_to"] = rejecting
            if record:
                setup["purchase_record"] = record
            trace["setup"] = setup
        return trace


_parser = None


def get_parser():
    """Get or create the Lark parser instance."""
    global _parser
    if _parser is None:
        with open(GRAMMAR_PATH) as f:
            grammar = f.read()
        _parser = Lark(
            grammar,
            parser='lalr',
            propagate_positions=True,
            maybe_placeholders=True,
        )
    return _parser


def parse(source: str) -> Dict[str, Any]:
    """Parse scenario source into a trace dict."""
    if not source.endswith("\n"):
        source += "\n"
    try:
        tree = get_parser().parse(source)
    except UnexpectedInput as exc:
        message = str(exc).strip().splitlines()[0]
        raise ScenarioSyntaxError(message, exc.line, exc.column) from exc
    try:
        return ScenarioTransformer().transform(tree)
    except VisitError as exc:
        raise exc.orig_exc from exc


def parse_file(path) -> Dict[str, Any]:
    """Parse a scenario file into a trace dict."""
    with open(path) as f:
        return parse(f.read())


def load_scenario(path) -> Trace:
    """Parse and validate a scenario file."""
    data = parse_file(path)
    data.setdefault("name", Path(path).stem)
    return parse_trace(data)

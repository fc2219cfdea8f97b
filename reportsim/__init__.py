"""
Report contract simulation.

This package provides:
- chain: the simulated host runtime, message dispatch and call journal
- contracts: the punishment bond ledger and its simulation harness
- native: stand-ins for the sibling purchase record
- simulator: scenario traces and their replay
"""

__version__ = "0.1.0"

"""
Pytest configuration for report contract tests.

Provides a runtime with funded accounts and one deployed ledger.
"""

import pytest

from reportsim.contracts import ReportSimulation
from reportsim.native import SimulatedPurchaseRecord


@pytest.fixture
def purchase_record():
    """Sibling purchase record with one known buyer."""
    record = SimulatedPurchaseRecord()
    record.register(
        "purchase_contract",
        image="QmZ2Fg6zDt8p7SLsuVAL2spGAAY2rPp7JShAY3Xk6Ndt8o",
        buyers=["alice"],
    )
    return record


@pytest.fixture
def simulation(purchase_record):
    """Ledger administered by 'admin'; alice, bob and carol hold 1000 each."""
    sim = ReportSimulation(lookup=purchase_record)
    sim.create_account("admin", 0)
    for name in ("alice", "bob", "carol"):
        sim.create_account(name, 1000)
    sim.deploy("admin", "purchase_contract", "La bebe - ringtone")
    return sim

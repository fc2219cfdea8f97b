"""
Tests for the settlement split and ledger-wide value properties.
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from reportsim.contracts import Error, ReportSimulation, Split, compute_split


amounts = st.integers(min_value=0, max_value=10**24)


class TestComputeSplit:
    """Deterministic branches of the split formula."""

    @pytest.mark.parametrize("deposit,reward,to_admin,to_caller", [
        (100, 150, 50, 50),   # reward above deposit: halve
        (100, 0, 100, 0),     # no reward: all to administrator
        (100, 40, 60, 0),     # deposit - reward >= half
        (100, 60, 50, 50),    # deposit - reward < half: halve
        (100, 50, 50, 0),     # exactly half left for the administrator
        (100, 100, 50, 50),   # reward equals deposit
        (101, 200, 50, 50),   # odd deposit loses a unit
        (7, 3, 4, 0),
        (7, 5, 3, 3),
        (1, 1, 0, 0),
        (1, 0, 1, 0),
        (0, 0, 0, 0),
        (0, 5, 0, 0),
    ])
    def test_branches(self, deposit, reward, to_admin, to_caller):
        split = compute_split(deposit, reward)
        assert (split.to_admin, split.to_caller) == (to_admin, to_caller)

    def test_retained(self):
        assert compute_split(100, 40).retained == 40
        assert compute_split(101, 200).retained == 1
        assert compute_split(100, 0).retained == 0

    def test_split_is_value_object(self):
        assert compute_split(100, 60) == Split(100, 50, 50)


class TestSplitProperties:
    """Properties that hold for every deposit and reward."""

    @given(deposit=amounts, reward=amounts)
    def test_never_pays_more_than_deposit(self, deposit, reward):
        split = compute_split(deposit, reward)
        assert split.to_admin >= 0
        assert split.to_caller >= 0
        assert split.to_admin + split.to_caller <= deposit
        assert split.retained >= 0

    @given(deposit=amounts, reward=amounts)
    def test_reporter_gets_half_or_nothing(self, deposit, reward):
        split = compute_split(deposit, reward)
        assert split.to_caller in (0, deposit // 2)
        if split.to_caller:
            assert split.to_admin == split.to_caller

    @given(deposit=amounts, reward=amounts)
    def test_halving_and_zero_reward_lose_at_most_one_unit(self, deposit, reward):
        split = compute_split(deposit, reward)
        if reward == 0 or reward > deposit:
            assert deposit - 1 <= split.to_admin + split.to_caller <= deposit

    @given(deposit=amounts, reward=amounts)
    def test_administrator_keeps_at_least_half(self, deposit, reward):
        split = compute_split(deposit, reward)
        assert split.to_admin >= deposit // 2

    @given(deposit=amounts, reward=amounts)
    def test_general_branch(self, deposit, reward):
        split = compute_split(deposit, reward)
        if 0 < reward <= deposit and deposit - reward >= deposit // 2:
            assert split == Split(deposit, deposit - reward, 0)


# =============================================================================
# Ledger-wide properties
# =============================================================================

ACTORS = ["admin", "alice", "bob", "carol"]

operations = st.lists(
    st.tuples(
        st.sampled_from(["deposit", "settle"]),
        st.sampled_from(ACTORS),
        st.sampled_from(ACTORS),
        st.integers(min_value=0, max_value=300),
    ),
    max_size=30,
)


def _fresh_simulation() -> ReportSimulation:
    sim = ReportSimulation()
    for actor in ACTORS:
        sim.create_account(actor, 100_000)
    sim.deploy("admin", "purchase_contract")
    return sim


class TestLedgerProperties:
    """Random call sequences checked against a dict model of the bonds."""

    def test_funded_administrator_deposit_is_refused_by_ledger(self):
        sim = _fresh_simulation()

        result = sim.deposit("admin", 1)

        assert result.error == Error.OWNER_CANT_INTERACT
        assert sim.balance("admin") == 100_000
        assert sim.custody() == 0

    @settings(max_examples=150, deadline=None)
    @given(ops=operations)
    def test_ledger_matches_model(self, ops):
        sim = _fresh_simulation()
        supply = sum(sim.runtime.balances.values())
        model = {}
        retained = 0

        for op, actor, target, amount in ops:
            if op == "deposit":
                result = sim.deposit(actor, amount)
                if actor == "admin":
                    assert result.error == Error.OWNER_CANT_INTERACT
                elif amount == 0:
                    assert result.error == Error.INSUFFICIENT_BALANCE
                elif actor in model:
                    assert result.error == Error.ALREADY_ON_LIST
                else:
                    assert result.ok
                    model[actor] = amount
            else:
                result = sim.settle(actor, amount, target)
                if actor == "admin":
                    assert result.error == Error.OWNER_CANT_INTERACT
                elif target not in model:
                    assert result.error == Error.NOT_ON_LIST
                else:
                    split = compute_split(model.pop(target), amount)
                    assert result.ok
                    assert result.value[1:] == (split.to_admin, split.to_caller)
                    retained += split.retained

            for identity in ACTORS:
                assert sim.has_bond(identity) == (identity in model)
                assert sim.get_bond_amount(identity) == model.get(identity, 0)
            assert sim.custody() == sum(model.values()) + retained
            assert sum(sim.runtime.balances.values()) == supply

        assert sim.runtime.journal.verify()

import random
from decimal import Decimal

import pytest

from app.models.group import Expense, Group, Member, PaidSettlement
from app.services.balance_service import compute_balances
from app.services.settlement_service import (
    compute_settlements,
    compute_settlements_for_group,
    partition_balances,
)


def _as_tuples(settlements):
    return [(s.from_id, s.to_id, s.amount) for s in settlements]


def _apply(balances, settlements):
    """Balances left after every suggested payment is made."""
    remaining = dict(balances)
    for settlement in settlements:
        remaining[settlement.from_id] = round(remaining[settlement.from_id] + settlement.amount, 2)
        remaining[settlement.to_id] = round(remaining[settlement.to_id] - settlement.amount, 2)
    return remaining


def test_simple_triangle():
    settlements = compute_settlements({"alice": 20.0, "bob": -10.0, "carol": -10.0})

    assert _as_tuples(settlements) == [("bob", "alice", 10.0), ("carol", "alice", 10.0)]


def test_already_settled_via_history(members, dinner, bob_paid_alice):
    balances = compute_balances(members, [dinner], [bob_paid_alice])

    settlements = compute_settlements(balances)

    assert _as_tuples(settlements) == [("carol", "alice", 10.0)]


def test_no_debts_returns_empty_list():
    assert compute_settlements({"alice": 0.0, "bob": 0.01, "carol": -0.01}) == []
    assert compute_settlements({}) == []


def test_creditors_only_returns_empty_list():
    assert compute_settlements({"alice": 15.0, "bob": 5.0}) == []


def test_largest_credit_and_debt_are_matched_first():
    balances = {"a": 10.0, "b": 40.0, "c": -15.0, "d": -35.0}

    settlements = compute_settlements(balances)

    assert _as_tuples(settlements) == [
        ("d", "b", 35.0),
        ("c", "b", 5.0),
        ("c", "a", 10.0),
    ]


def test_debtor_can_be_tapped_by_several_creditors():
    balances = {"a": 50.0, "b": 30.0, "c": -60.0, "d": -20.0}

    settlements = compute_settlements(balances)

    assert _as_tuples(settlements) == [
        ("c", "a", 50.0),
        ("c", "b", 10.0),
        ("d", "b", 20.0),
    ]


def test_ties_keep_balance_order():
    forward = compute_settlements({"x": 10.0, "y": 10.0, "z": -20.0})
    backward = compute_settlements({"y": 10.0, "x": 10.0, "z": -20.0})

    assert _as_tuples(forward) == [("z", "x", 10.0), ("z", "y", 10.0)]
    assert _as_tuples(backward) == [("z", "y", 10.0), ("z", "x", 10.0)]


def test_one_cent_residue_is_left_alone():
    balances = {"alice": 6.67, "bob": -3.33, "carol": -3.33}

    settlements = compute_settlements(balances)

    assert _as_tuples(settlements) == [("bob", "alice", 3.33), ("carol", "alice", 3.33)]
    assert _apply(balances, settlements)["alice"] == 0.01


def test_amounts_are_rounded_to_the_cent():
    settlements = compute_settlements({"a": 33.333, "b": -33.333})

    assert _as_tuples(settlements) == [("b", "a", 33.33)]


def test_input_balances_are_not_mutated():
    balances = {"alice": 20.0, "bob": -10.0, "carol": -10.0}
    snapshot = dict(balances)

    compute_settlements(balances)

    assert balances == snapshot


def test_partition_excludes_settled_members():
    creditors, debtors = partition_balances({"a": 5.0, "b": 0.01, "c": -0.005, "d": -4.99})

    assert creditors == [{"member_id": "a", "amount": Decimal("5")}]
    assert debtors == [{"member_id": "d", "amount": Decimal("4.99")}]


@pytest.mark.parametrize("seed", range(10))
def test_settlements_clear_every_balance(seed):
    rng = random.Random(seed)
    members = [Member(id=f"m{i}", name=f"Member {i}") for i in range(6)]
    ids = [m.id for m in members]
    expenses = []
    for n in range(25):
        participants = rng.sample(ids, rng.randint(1, len(ids)))
        # Whole-dollar shares keep the balance sum at exactly zero
        amount = float(rng.randint(1, 200) * len(participants))
        expenses.append(Expense(
            description=f"Expense {n}",
            amount=amount,
            paid_by=rng.choice(ids),
            participants=participants
        ))
    balances = compute_balances(members, expenses)

    settlements = compute_settlements(balances)

    assert all(s.amount > 0 for s in settlements)
    assert all(abs(value) <= 0.01 + 1e-9 for value in _apply(balances, settlements).values())

    creditors, debtors = partition_balances(balances)
    assert len(settlements) <= max(len(creditors) + len(debtors) - 1, 0)


def test_one_creditor_needs_one_payment_per_debtor():
    balances = {"a": 30.0, "b": -10.0, "c": -10.0, "d": -10.0}

    settlements = compute_settlements(balances)

    assert len(settlements) == 3
    assert {s.to_id for s in settlements} == {"a"}


def test_compute_settlements_for_group(trip):
    settlements = compute_settlements_for_group(trip)

    assert _as_tuples(settlements) == [("bob", "alice", 10.0), ("carol", "alice", 10.0)]


def test_group_ignores_payments_to_removed_members(members, dinner):
    group = Group(
        name="Trip",
        members=members,
        expenses=[dinner],
        paid_settlements=[PaidSettlement(from_id="bob", to_id="ghost", amount=10.0)]
    )

    settlements = compute_settlements_for_group(group)

    assert _as_tuples(settlements) == [("bob", "alice", 10.0), ("carol", "alice", 10.0)]


def test_matching_amounts_need_no_more_than_min_side():
    balances = {"a": 10.0, "b": 20.0, "c": -10.0, "d": -20.0}

    settlements = compute_settlements(balances)

    assert _as_tuples(settlements) == [("d", "b", 20.0), ("c", "a", 10.0)]
    assert len(settlements) <= min(2, 2)


def test_sub_cent_balances_above_threshold_are_settled():
    settlements = compute_settlements({"a": 0.014, "b": -0.014})

    assert _as_tuples(settlements) == [("b", "a", 0.01)]


def test_threshold_is_applied_before_rounding():
    creditors, debtors = partition_balances({"a": 0.012, "b": 0.0149, "c": -0.011, "d": -0.01})

    assert [c["member_id"] for c in creditors] == ["b", "a"]
    assert debtors == [{"member_id": "c", "amount": Decimal("0.011")}]

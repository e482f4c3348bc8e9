"""Tests for the solver frontier."""

import pytest

from quasipot.core.frontier import Frontier, NodeStatus


def test_pops_in_value_order():
    frontier = Frontier()
    frontier.push((0, 0), 3.0)
    frontier.push((1, 0), 1.0)
    frontier.push((2, 0), 2.0)

    assert [frontier.pop_min()[0] for _ in range(3)] == [(1, 0), (2, 0), (0, 0)]
    assert not frontier


def test_decrease_key():
    frontier = Frontier()
    frontier.push((0, 0), 5.0)
    frontier.push((1, 1), 2.0)
    frontier.push((0, 0), 1.0)

    assert len(frontier) == 2
    assert frontier.key((0, 0)) == 1.0
    assert frontier.pop_min() == ((0, 0), 1.0)
    assert frontier.pop_min() == ((1, 1), 2.0)
    assert len(frontier) == 0


def test_ties_pop_in_insertion_order():
    frontier = Frontier()
    for node in [(2, 2), (0, 1), (1, 0)]:
        frontier.push(node, 0.5)
    assert [frontier.pop_min()[0] for _ in range(3)] == [(2, 2), (0, 1), (1, 0)]


def test_membership():
    frontier = Frontier()
    frontier.push((3, 4), 0.0)
    assert (3, 4) in frontier
    frontier.pop_min()
    assert (3, 4) not in frontier


def test_pop_empty():
    frontier = Frontier()
    frontier.push((0, 0), 1.0)
    frontier.push((0, 0), 0.5)
    frontier.pop_min()
    with pytest.raises(KeyError):
        frontier.pop_min()


def test_status_ordering():
    assert NodeStatus.FAR < NodeStatus.CONSIDERED < NodeStatus.ACCEPTED

import itertools

import numpy as np
import pytest

from traversal import NeighborOdometer, iter_rank_vectors


def feasible_ranks(length, max_rank, caps):
    """Rank vectors whose every active coordinate lies below its cutoff at the vector's weight."""
    feasible = set()
    for ranks in itertools.product(range(max_rank + 1), repeat=length):
        weight = sum(1 for r in ranks if r)
        if all(r < caps[j][weight] for j, r in enumerate(ranks) if r):
            feasible.add(ranks)
    return feasible


def random_caps(rng, length, max_rank):
    caps = []
    for _ in range(length):
        column = sorted(rng.integers(0, max_rank + 2, size=length + 1).tolist(), reverse=True)
        caps.append([max_rank + 1] + column)
    return caps


@pytest.mark.parametrize("length,max_rank", [(1, 3), (2, 3), (3, 3), (2, 7), (4, 2)])
def test_full_traversal_is_a_gray_code(length, max_rank):
    visited = list(iter_rank_vectors(length, max_rank))
    assert visited[0] == (0,) * length
    assert sorted(visited) == list(itertools.product(range(max_rank + 1), repeat=length))
    for a, b in zip(visited, visited[1:]):
        diff = [abs(x - y) for x, y in zip(a, b)]
        assert sum(diff) == 1


def test_advance_reports_moved_coordinate():
    odometer = NeighborOdometer(3, 3)
    odometer.reset()
    previous = list(odometer.ranks)
    while True:
        j = odometer.advance()
        if j is None:
            break
        changed = [i for i in range(3) if previous[i] != odometer.ranks[i]]
        assert changed == [j]
        assert odometer.weight == sum(1 for r in odometer.ranks if r)
        previous = list(odometer.ranks)


def test_sweep_after_lower_coordinate_returns_to_zero():
    # A naive reversal at the full weight never reaches (0, 2)
    caps = [[4, 3, 2, 2], [4, 3, 2, 2]]
    visited = list(iter_rank_vectors(2, 3, caps))
    assert visited == [(0, 0), (1, 0), (2, 0), (2, 1), (1, 1), (0, 1), (0, 2), (1, 2)]
    assert feasible_ranks(2, 3, caps) <= set(visited)


@pytest.mark.parametrize("length,max_rank", [(2, 3), (3, 3), (3, 5), (4, 3), (5, 2)])
def test_cutoffs_cover_feasible_ranks_once(length, max_rank):
    rng = np.random.default_rng(length * 31 + max_rank)
    for _ in range(150):
        caps = random_caps(rng, length, max_rank)
        visited = list(iter_rank_vectors(length, max_rank, caps))
        assert len(visited) == len(set(visited))
        assert feasible_ranks(length, max_rank, caps) <= set(visited)


def test_reset_rewinds():
    odometer = NeighborOdometer(2, 3)
    odometer.reset()
    while odometer.advance() is not None:
        pass
    odometer.reset([[4, 1, 1, 1], [4, 1, 1, 1]])
    assert odometer.ranks == [0, 0]
    assert odometer.weight == 0
    steps = []
    while True:
        j = odometer.advance()
        if j is None:
            break
        steps.append(tuple(odometer.ranks))
    assert steps == [(1, 0), (1, 1), (0, 1)]
